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
Unit tests for build argument resolution.
"""
import os
import pytest
from dbargs.MODELS.dockerfile_ast import ArgDeclaration
from dbargs.PARSERS.dockerfile_parser import DockerfileParser
from dbargs.RESOLVERS.build_arg_resolver import (
    BuildArgResolver,
    InvalidArgumentError,
    parse_build_args,
)

RESOURCES = os.path.join(os.path.dirname(__file__), '..', 'resources')


def load_dockerfile(name):
    return DockerfileParser().parse_ast(os.path.join(RESOURCES, name))


class TestBuildArgResolver:
    """Tests for BuildArgResolver.resolve."""

    def test_no_build_args_and_no_dockerfile(self):
        """A command line without flags resolves to nothing."""
        assert parse_build_args(None, "docker build -t hello-world .") == {}

    def test_empty_command_line(self):
        assert parse_build_args(None, "") == {}
        assert parse_build_args(None, "   ") == {}

    def test_key_value(self):
        """Test parsing an explicit KEY=VALUE."""
        dockerfile = load_dockerfile('Dockerfile-withArgs')
        command_line = "docker build -t hello-world --build-arg IMAGE_TO_UPDATE=hello-world:latest"
        build_args = parse_build_args(dockerfile, command_line)
        assert build_args == {"IMAGE_TO_UPDATE": "hello-world:latest"}

    def test_defaults(self):
        """Dockerfile defaults fill in when no flags are given."""
        dockerfile = load_dockerfile('Dockerfile-defaultArgs')
        build_args = parse_build_args(dockerfile, "docker build -t hello-world")
        assert build_args == {"REGISTRY_URL": "", "TAG": "latest"}

    def test_overriding_defaults(self):
        """Explicit flags win over Dockerfile defaults."""
        dockerfile = load_dockerfile('Dockerfile-defaultArgs')
        command_line = ("docker build -t hello-world --build-arg TAG=1.2.3"
                        " --build-arg REGISTRY_URL=http://private.registry:5000/")
        build_args = parse_build_args(dockerfile, command_line)
        assert build_args == {
            "REGISTRY_URL": "http://private.registry:5000/",
            "TAG": "1.2.3",
        }

    def test_partial_override(self):
        dockerfile = load_dockerfile('Dockerfile-defaultArgs')
        build_args = parse_build_args(dockerfile, "docker build --build-arg TAG=edge .")
        assert build_args == {"REGISTRY_URL": "", "TAG": "edge"}

    def test_key_with_equal_and_no_value(self):
        build_args = parse_build_args(None, "docker build -t hello-world --build-arg key=")
        assert build_args == {"key": ""}

    def test_value_containing_equals(self):
        build_args = parse_build_args(None, "docker build --build-arg OPTS=a=b=c .")
        assert build_args == {"OPTS": "a=b=c"}

    def test_quoted_environment_variable_value(self):
        """A ${VAR} value is kept literally."""
        command_line = "docker build -t hello-world --build-arg ENV_VAR=${ENV_VAR}"
        assert parse_build_args(None, command_line) == {"ENV_VAR": "${ENV_VAR}"}

    def test_omitted_value(self, monkeypatch):
        """The short form yields a placeholder, never the real environment value."""
        monkeypatch.setenv("ENV_VAR", "from-environment")
        command_line = "docker build -t hello-world --build-arg ENV_VAR"
        assert parse_build_args(None, command_line) == {"ENV_VAR": "${ENV_VAR}"}

    def test_omitted_value_overrides_default(self):
        dockerfile = [ArgDeclaration(name="TAG", default="latest")]
        assert parse_build_args(dockerfile, "docker build --build-arg TAG .") == {"TAG": "${TAG}"}

    def test_quoted_value_with_spaces(self):
        command_line = 'docker build --build-arg "MSG=hello world" --build-arg NAME=\'a b\' .'
        build_args = parse_build_args(None, command_line)
        assert build_args == {"MSG": "hello world", "NAME": "a b"}

    def test_joined_flag_form(self):
        build_args = parse_build_args(None, "docker build --build-arg=TAG=1.0 --build-arg=HOME .")
        assert build_args == {"TAG": "1.0", "HOME": "${HOME}"}

    def test_duplicate_key_last_wins(self):
        command_line = "docker build --build-arg TAG=1 --build-arg TAG=2 ."
        assert parse_build_args(None, command_line) == {"TAG": "2"}

    def test_unknown_flags_ignored(self):
        command_line = "docker build --no-cache --pull -t app:1 --label a=b --build-arg X=1 ."
        assert parse_build_args(None, command_line) == {"X": "1"}

    def test_declaration_sequence(self):
        """A plain list of declarations is accepted in place of a parsed Dockerfile."""
        dockerfile = [
            ArgDeclaration(name="A", default="1"),
            ArgDeclaration(name="B"),
            ArgDeclaration(name="A", default="2"),
        ]
        assert parse_build_args(dockerfile, "docker build .") == {"A": "2"}

    def test_declaration_without_default_is_skipped(self):
        dockerfile = [ArgDeclaration(name="ONLY_DECLARED")]
        assert parse_build_args(dockerfile, "docker build .") == {}

    def test_empty_dockerfile(self):
        assert parse_build_args([], "docker build --build-arg A=1") == {"A": "1"}

    def test_result_is_fresh_each_call(self):
        resolver = BuildArgResolver()
        first = resolver.resolve(None, "docker build --build-arg A=1")
        first["B"] = "2"
        assert resolver.resolve(None, "docker build --build-arg A=1") == {"A": "1"}

    def test_invalid_build_arg(self):
        with pytest.raises(InvalidArgumentError):
            parse_build_args(None, "docker build -t hello-world --build-arg")

    def test_invalid_build_arg_is_value_error(self):
        with pytest.raises(ValueError):
            parse_build_args(None, "docker build --build-arg")

    def test_invalid_empty_body(self):
        with pytest.raises(InvalidArgumentError):
            parse_build_args(None, 'docker build --build-arg "" .')
        with pytest.raises(InvalidArgumentError):
            parse_build_args(None, "docker build --build-arg= .")

    def test_unterminated_quote(self):
        with pytest.raises(InvalidArgumentError):
            parse_build_args(None, 'docker build --build-arg "A=1 .')

    def test_backslashes_kept_verbatim(self):
        """Windows paths keep their backslashes."""
        build_args = parse_build_args(None, r"docker build --build-arg WIN_PATH=C:\tools\bin .")
        assert build_args == {"WIN_PATH": "C:\\tools\\bin"}

    def test_backslashes_kept_inside_quotes(self):
        command_line = r'docker build --build-arg "INSTALL_DIR=C:\Program Files\app" .'
        assert parse_build_args(None, command_line) == {"INSTALL_DIR": "C:\\Program Files\\app"}

    def test_unbalanced_quote_without_build_arg_tolerated(self):
        dockerfile = [ArgDeclaration(name="TAG", default="latest")]
        assert parse_build_args(dockerfile, "docker build --label msg=it's .") == {"TAG": "latest"}
