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
Utilities for string interpolation using build arguments or environment variables.
"""
import re
from typing import Dict

# Group 1: VAR name inside braces
# Group 2: - or + modifier
# Group 3: default or alternative value
# Group 4: bare $VAR name
_PATTERN = re.compile(r'\$\{([^}:]+)(?::(-|\+)([^}]*))?\}|\$([A-Za-z_][A-Za-z0-9_]*)')

class EnvironmentInterpolator:
    """
    Utility for interpolating variables in strings.
    Supports ${VAR}, $VAR, ${VAR:-default} and ${VAR:+value}.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str], strict: bool = True) -> str:
        """
        Interpolates variables in the template string using the provided context.

        :param template: The string containing ${VAR} or $VAR placeholders.
        :param context: The variables available for substitution.
        :param strict: Raise on unknown variables instead of leaving them untouched.
        :return: The interpolated string.
        :raises KeyError: If strict and a variable is not found and no default is provided.
        """
        def replace(match):
            """
            Internal replacement function for re.sub.
            """
            var_name = match.group(1) or match.group(4)
            modifier = match.group(2)  # None, '-', or '+'
            alt_value = match.group(3) # default_val or value_if_set

            value = context.get(var_name)

            if modifier == '-':
                # ${VAR:-default} -> use default if VAR is unset or empty
                return value if value else alt_value
            elif modifier == '+':
                # ${VAR:+value} -> use alt_value if VAR is set and not empty, else empty
                return alt_value if value else ''
            elif value is not None:
                return value
            elif strict:
                raise KeyError(f"Variable {var_name} not found in context")
            return match.group(0)

        return _PATTERN.sub(replace, template)
