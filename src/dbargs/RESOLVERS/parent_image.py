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
Resolution of the parent image a Dockerfile builds on.
"""
import logging
from typing import Dict, Optional
from ..MODELS.dockerfile_ast import DockerfileAST
from ..UTILS.string_interpolation import EnvironmentInterpolator
from .build_arg_resolver import BuildArgResolver

logger = logging.getLogger(__name__)

class ParentImageResolver:
    """
    Determines the image reference of the final FROM, with build arguments substituted.
    """
    def __init__(self, build_arg_resolver: Optional[BuildArgResolver] = None):
        """
        :param build_arg_resolver: Resolver used for the command line's build args.
        """
        self.build_arg_resolver = build_arg_resolver or BuildArgResolver()

    def resolve(self, dockerfile: DockerfileAST, command_line: str) -> str:
        """
        Returns the parent image of the last build stage.

        Variables with no build arg are left as written. When the last stage
        builds on an earlier stage alias, the alias is followed to that stage's image.

        :param dockerfile: The parsed Dockerfile.
        :param command_line: The ``docker build`` command line.
        :return: The parent image reference.
        :raises ValueError: If the Dockerfile has no FROM instruction.
        :raises InvalidArgumentError: If the command line has a malformed --build-arg.
        """
        if not dockerfile.stages:
            raise ValueError("Could not find a FROM instruction in the Dockerfile")

        build_args = self.build_arg_resolver.resolve(dockerfile, command_line)
        images: Dict[str, str] = {}
        image = ""
        for stage in dockerfile.stages:
            image = EnvironmentInterpolator.interpolate(stage.image, build_args, strict=False)
            image = images.get(image.lower(), image)
            if stage.alias:
                images[stage.alias.lower()] = image

        logger.debug("Resolved parent image %s", image)
        return image
