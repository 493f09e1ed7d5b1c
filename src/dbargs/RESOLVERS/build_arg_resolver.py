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
Resolution of ``docker build`` command lines into effective build arguments.

Explicit ``--build-arg`` flags are merged with the defaults declared by the
Dockerfile's ARG instructions.
"""
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union
from ..MODELS.dockerfile_ast import ArgDeclaration, DockerfileAST
from ..PARSERS.command_line import split_command_line

logger = logging.getLogger(__name__)

BUILD_ARG_FLAG = "--build-arg"

Declarations = Union[DockerfileAST, Sequence[ArgDeclaration]]

class InvalidArgumentError(ValueError):
    """
    Raised when a command line carries a malformed --build-arg.
    """

class BuildArgResolver:
    """
    Builds the mapping of build argument names to their effective values.
    """
    def resolve(self, dockerfile: Optional[Declarations], command_line: str) -> Dict[str, str]:
        """
        Resolves the build arguments of a ``docker build`` invocation.

        :param dockerfile: The Dockerfile's ARG declarations, or None when no
            Dockerfile defaults are available.
        :param command_line: The raw command line, e.g.
            ``docker build -t app --build-arg TAG=1.0 .``
        :return: A fresh mapping of argument name to value.
        :raises InvalidArgumentError: If a --build-arg flag has no value.
        """
        build_args = {}
        for key, value in self._explicit_args(command_line):
            if key in build_args:
                logger.debug("Build arg %s given more than once, keeping the last value", key)
            build_args[key] = value

        for name, default in self._defaults(dockerfile).items():
            if name not in build_args:
                logger.debug("Using Dockerfile default for build arg %s", name)
                build_args[name] = default

        return build_args

    def _explicit_args(self, command_line: str) -> Iterator[Tuple[str, str]]:
        tokens = self._tokenize(command_line)
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token == BUILD_ARG_FLAG:
                if i + 1 >= len(tokens):
                    raise InvalidArgumentError(f"Malformed {BUILD_ARG_FLAG}, missing value: {command_line}")
                yield self._split_body(tokens[i + 1], command_line)
                i += 2
                continue
            if token.startswith(BUILD_ARG_FLAG + "="):
                yield self._split_body(token[len(BUILD_ARG_FLAG) + 1:], command_line)
            i += 1

    @staticmethod
    def _tokenize(command_line: str) -> List[str]:
        try:
            return split_command_line(command_line)
        except ValueError as e:
            if BUILD_ARG_FLAG not in command_line:
                logger.debug("Ignoring untokenizable command line without %s: %s", BUILD_ARG_FLAG, e)
                return []
            raise InvalidArgumentError(
                f"Cannot locate {BUILD_ARG_FLAG} values, unbalanced quotes in {command_line!r}: {e}") from e

    @staticmethod
    def _split_body(body: str, command_line: str) -> Tuple[str, str]:
        """
        Splits ``KEY=VALUE`` on the first '='.

        A body without '=' is Docker's short form: the value becomes the
        literal ``${KEY}`` placeholder, to be filled from the environment later.
        """
        if not body:
            raise InvalidArgumentError(f"Malformed {BUILD_ARG_FLAG}, empty value: {command_line}")
        if '=' in body:
            key, value = body.split('=', 1)
            return key, value
        return body, "${" + body + "}"

    @staticmethod
    def _defaults(dockerfile: Optional[Declarations]) -> Dict[str, str]:
        if dockerfile is None:
            return {}
        if isinstance(dockerfile, DockerfileAST):
            return dockerfile.arg_defaults()
        return DockerfileAST(args=list(dockerfile)).arg_defaults()

def parse_build_args(dockerfile: Optional[Declarations], command_line: str) -> Dict[str, str]:
    """
    Shortcut for ``BuildArgResolver().resolve(dockerfile, command_line)``.
    """
    return BuildArgResolver().resolve(dockerfile, command_line)
