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
Command Line Interface for dbargs.
"""
import json
import logging
import os
import click
import yaml
from dotenv import dotenv_values
from ..PARSERS.dockerfile_parser import DockerfileParser
from ..RESOLVERS.build_arg_resolver import BuildArgResolver
from ..RESOLVERS.parent_image import ParentImageResolver
from ..UTILS.string_interpolation import EnvironmentInterpolator

dockerfile_option = click.option(
    '--dockerfile', '-f', default='Dockerfile', envvar='DBARGS_DOCKERFILE', show_default=True,
    help='Dockerfile whose ARG defaults apply')

@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log resolution details')
def cli(verbose):
    """
    dbargs - Docker build argument resolver.

    Works out the build arguments and parent image of a docker build command line.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

@cli.command()
@click.argument('command_line')
@dockerfile_option
@click.option('--format', 'output_format', type=click.Choice(['env', 'json', 'yaml']),
              default='env', envvar='DBARGS_FORMAT', show_default=True, help='Output format')
@click.option('--env-file', 'env_files', multiple=True, type=click.Path(exists=True, dir_okay=False),
              help='.env file used by --expand')
@click.option('--expand', is_flag=True, help='Substitute ${VAR} placeholders from the environment')
def resolve(command_line, dockerfile, output_format, env_files, expand):
    """Resolve the build args of COMMAND_LINE."""
    ast = None
    if os.path.isfile(dockerfile):
        ast = DockerfileParser().parse_ast(dockerfile)
    else:
        click.echo(f"Warning: {dockerfile} not found, no ARG defaults applied.", err=True)

    try:
        build_args = BuildArgResolver().resolve(ast, command_line)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if expand:
        context = dict(os.environ)
        for env_file in env_files:
            context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        build_args = {
            key: EnvironmentInterpolator.interpolate(value, context, strict=False)
            for key, value in build_args.items()
        }

    build_args = dict(sorted(build_args.items()))
    if output_format == 'json':
        click.echo(json.dumps(build_args, indent=2))
    elif output_format == 'yaml':
        click.echo(yaml.safe_dump(build_args, default_flow_style=False), nl=False)
    else:
        for key, value in build_args.items():
            click.echo(f"{key}={value}")

@cli.command('parent-image')
@click.argument('command_line')
@dockerfile_option
def parent_image(command_line, dockerfile):
    """Print the parent image COMMAND_LINE builds on."""
    if not os.path.isfile(dockerfile):
        click.echo(f"Error: {dockerfile} not found.", err=True)
        raise SystemExit(1)

    ast = DockerfileParser().parse_ast(dockerfile)
    try:
        click.echo(ParentImageResolver().resolve(ast, command_line))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

def main():
    """
    Main entry point for the CLI.
    """
    cli()

if __name__ == '__main__':
    main()
