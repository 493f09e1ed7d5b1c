# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Models for the Dockerfile Abstract Syntax Tree.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict

class Instruction(BaseModel):
    """
    Represents a single instruction in a Dockerfile.
    """
    instruction: str
    arguments: List[str]
    raw: str

class ArgDeclaration(BaseModel):
    """
    A single build argument declared by an ARG instruction.

    ``default`` is None when the argument is declared without a value
    (``ARG NAME``) and an empty string for ``ARG NAME=`` or ``ARG NAME=""``.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    default: Optional[str] = None

class StageDeclaration(BaseModel):
    """
    A build stage opened by a FROM instruction.
    """
    model_config = ConfigDict(frozen=True)

    image: str
    alias: Optional[str] = None
    platform: Optional[str] = None

class DockerfileAST(BaseModel):
    """
    Represents the complete Abstract Syntax Tree of a Dockerfile.
    """
    instructions: List[Instruction] = []
    args: List[ArgDeclaration] = []
    stages: List[StageDeclaration] = []

    def arg_defaults(self) -> Dict[str, str]:
        """
        Returns the effective default of every ARG that declares one.

        Declarations are applied in file order so a later default replaces an
        earlier one. A bare redeclaration keeps whatever default came before.
        """
        defaults = {}
        for decl in self.args:
            if decl.default is not None:
                defaults[decl.name] = decl.default
        return defaults
