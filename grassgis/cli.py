# This file is part of grassgis.
#
# grassgis is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# grassgis is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with grassgis. If not, see <https://www.gnu.org/licenses/>.

'''
grassgis.

Usage:
  grassgis [--gisbase=<path>] [--gisdbase=<path>] [--location=<name>]
           [--mapset=<name>] [--errors=<mode>] [--echo=<mode>]
           [--log=<path>] [--history=<path>] [--dry] [--nocolor]
           [--vars=<vars>] <script>

Options:
  -h --help             Show this screen.
  --gisbase=<path>      GRASS GIS installation directory.
  --gisdbase=<path>     GRASS GIS database directory.
  --location=<name>     GRASS location.
  --mapset=<name>       GRASS mapset.
  --errors=<mode>       One of raise, console, quiet or silent.
  --echo=<mode>         One of commands, output or none.
  --log=<path>          Log commands and errors to a file.
  --history=<path>      Log commands to a file.
  --dry                 Show commands without running them.
  --nocolor             Disable colorized output.
  --vars=<vars>         Script template variables.
'''

import os
import sys

import colorful
import docopt
import jinja2
import toml

from .core import ConfigurationError
from .core import Error
from .session import session


_OPTIONS = ('gisbase', 'gisdbase', 'location', 'mapset', 'errors', 'echo',
            'log', 'history')

_NO_ECHO = ('', 'none', 'false', 'no', 'off')


def _report(message):
    for line in str(message).splitlines():
        # pylint: disable=no-member
        print(colorful.format('{c.red}{}{c.reset}', line), file=sys.stderr)


def load_script(path, variables=None):
    '''Render a TOML command script with variables and parse it.

    Returns the session configuration and the list of commands.
    '''
    root = os.path.dirname(os.path.abspath(path))
    jinja_env = jinja2.Environment(loader=jinja2.FileSystemLoader(root))
    jinja_env.filters['basename'] = os.path.basename
    jinja_env.filters['dirname'] = os.path.dirname

    template = jinja_env.get_template(os.path.basename(path))
    config = toml.loads(template.render(variables or {}))

    commands = config.pop('commands', [])
    for (i, command) in enumerate(commands):
        if not command.get('module'):
            raise ConfigurationError(
                'Command {} in "{}" has no module'.format(i, path))
    return (config, commands)


def _parse_vars(text):
    variables = {}
    for var in (text or '').split():
        if '=' not in var:
            raise ConfigurationError('Malformed variable "{}"'.format(var))
        name, value = var.split('=', 1)
        variables[name] = value
    return variables


def apply_options(args, config):
    '''Apply command line options over a script configuration.'''
    config = dict(config)
    for name in _OPTIONS:
        value = args['--{}'.format(name)]
        if value is not None:
            config[name] = value
    if args['--dry']:
        config['dry'] = True
    echo = config.get('echo')
    if isinstance(echo, str) and echo.lower() in _NO_ECHO:
        config['echo'] = False
    return config


def run(config, commands):
    '''Run script commands in a session, returns the process exit code.'''
    with session(config) as grass:
        for command in commands:
            params = dict(command.get('params', {}))
            if command.get('stdin') is not None:
                params['stdin_'] = command['stdin']
            grass.run(command['module'], *command.get('flags', []), **params)
        return 1 if grass.errors else 0


def main(argv=None):
    args = docopt.docopt(__doc__, argv=argv)

    if args['--nocolor']:
        colorful.disable()  # pylint: disable=no-member

    try:
        variables = _parse_vars(args['--vars'])
        (config, commands) = load_script(args['<script>'], variables)
        code = run(apply_options(args, config), commands)
    except (Error, jinja2.TemplateError, toml.TomlDecodeError) as exc:
        _report(exc)
        code = 1

    sys.exit(code)
