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
Tokenizer for shell-like command lines such as ``docker build -t app .``.
"""
import shlex
from typing import List

def split_command_line(command_line: str) -> List[str]:
    """
    Splits a command line into whitespace separated tokens.

    Quotes are removed but backslashes are kept as literal characters, so
    Windows paths such as ``C:\\tools\\bin`` survive unchanged. Nothing is
    expanded: ``${VAR}`` stays literal text.

    :param command_line: The raw command line.
    :return: The list of tokens, empty for a blank command line.
    :raises ValueError: If the command line has an unterminated quote.
    """
    if not command_line or not command_line.strip():
        return []
    lexer = shlex.shlex(command_line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ''
    lexer.escape = ''
    return list(lexer)
