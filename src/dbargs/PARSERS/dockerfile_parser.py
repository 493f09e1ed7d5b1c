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
Parsers for Dockerfiles, extracting instructions, ARG declarations and build stages.
"""
import json
import logging
import re
import shlex
from typing import List, Optional
from ..MODELS.dockerfile_ast import ArgDeclaration, DockerfileAST, Instruction, StageDeclaration

logger = logging.getLogger(__name__)

class DockerfileParser:
    """
    Parser for Dockerfile instructions.
    """
    def parse(self, dockerfile_path: str) -> List[Instruction]:
        """
        Parses a Dockerfile from a file path.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            List[Instruction]: List of parsed instructions.
        """
        with open(dockerfile_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_ast(self, dockerfile_path: str) -> DockerfileAST:
        """
        Parses a Dockerfile from a file path into a DockerfileAST.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            DockerfileAST: Instructions together with their ARG and FROM declarations.
        """
        with open(dockerfile_path, 'r') as f:
            content = f.read()
        return self.parse_ast_from_string(content)

    def parse_from_string(self, content: str) -> List[Instruction]:
        """
        Parses a Dockerfile from a string content.

        Args:
            content (str): Content of the Dockerfile.

        Returns:
            List[Instruction]: List of parsed instructions.
        """
        instructions = []

        # 1. Remove comments
        content = re.sub(r'^\s*#.*$', '', content, flags=re.MULTILINE)

        # 2. Handle line continuations with \
        # Only replace \ followed by optional whitespace and a newline
        content = re.sub(r'\\\s*\n', ' ', content)

        # 3. Match instructions
        # Keywords are case-insensitive and may be preceded by whitespace
        pattern = re.compile(r'^\s*([A-Za-z]+)[ \t]+(.*)$', re.MULTILINE)

        for match in pattern.finditer(content):
            inst = match.group(1).upper()
            args_str = match.group(2).strip()

            # 4. Handle JSON/Exec form vs Shell form
            if args_str.startswith('[') and args_str.endswith(']'):
                try:
                    args = json.loads(args_str)
                except json.JSONDecodeError:
                    args = None
                if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
                    # Not a JSON string array, treat as shell form
                    args = [args_str]
            elif inst == "ARG":
                args = self._split_arg_words(args_str)
            elif inst == "FROM":
                args = args_str.split()
            else:
                args = [args_str]

            instructions.append(Instruction(
                instruction=inst,
                arguments=args,
                raw=match.group(0).strip()
            ))

        return instructions

    def parse_ast_from_string(self, content: str) -> DockerfileAST:
        """
        Parses a Dockerfile from a string into a DockerfileAST.

        ARG declarations and build stages are kept in file order.
        """
        instructions = self.parse_from_string(content)
        arg_decls = []
        stages = []
        for inst in instructions:
            if inst.instruction == "ARG":
                arg_decls.extend(self._arg_declarations(inst.arguments))
            elif inst.instruction == "FROM":
                stage = self._stage_declaration(inst.arguments)
                if stage is None:
                    logger.warning("Ignoring FROM without an image: %s", inst.raw)
                else:
                    stages.append(stage)
        return DockerfileAST(instructions=instructions, args=arg_decls, stages=stages)

    @staticmethod
    def _split_arg_words(args_str: str) -> List[str]:
        """
        Splits an ARG body into NAME[=VALUE] words, removing shell quoting.
        """
        try:
            return shlex.split(args_str, posix=True)
        except ValueError:
            logger.warning("Unbalanced quotes in ARG %r, splitting on whitespace", args_str)
            words = []
            for word in args_str.split():
                if '=' in word:
                    name, value = word.split('=', 1)
                    words.append(f"{name}={_strip_quotes(value)}")
                else:
                    words.append(word)
            return words

    @staticmethod
    def _arg_declarations(words: List[str]) -> List[ArgDeclaration]:
        decls = []
        for word in words:
            if '=' in word:
                name, default = word.split('=', 1)
            else:
                name, default = word, None
            if not name:
                logger.warning("Ignoring ARG without a name: %r", word)
                continue
            decls.append(ArgDeclaration(name=name, default=default))
        return decls

    @staticmethod
    def _stage_declaration(words: List[str]) -> Optional[StageDeclaration]:
        """
        Builds a StageDeclaration from ``[--platform=P] IMAGE [AS alias]``.
        """
        platform = None
        rest = []
        for word in words:
            if word.startswith('--platform='):
                platform = word.split('=', 1)[1]
            elif word.startswith('--'):
                continue
            else:
                rest.append(word)
        if not rest:
            return None
        alias = None
        if len(rest) >= 3 and rest[1].upper() == "AS":
            alias = rest[2]
        return StageDeclaration(image=rest[0], alias=alias, platform=platform)

def _strip_quotes(value: str) -> str:
    # Strips a leading and/or trailing quote, balanced or not
    return re.sub(r'^["\']|["\']$', '', value)
