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

import contextlib
import datetime
import os
import sys
import tempfile
import types

import colorful

from .core import ConfigurationError
from .core import Error
from .core import ErrorMode
from .core import Module
from .core import check
from .core import error_info
from .core import failed
from .core import is_fatal


ROOT_MODULES = ('d', 'g', 'i', 'r', 'v', 's', 'm', 'p')
REQUIRED_CONFIG = ('gisbase', 'location')


class EchoMode(object):
    COMMANDS = 'commands'
    OUTPUT = 'output'

    ALL = (COMMANDS, OUTPUT, None, False)


def _windows():
    return sys.platform.startswith('win')


def _read_version(gisbase):
    path = os.path.join(gisbase, 'etc', 'VERSIONNUMBER')
    if not os.path.isfile(path):
        return None
    with open(path) as fp:
        tokens = fp.read().split()
    return tokens[0] if tokens else None


def _bool_var(value):
    return 'TRUE' if value else 'FALSE'


def configure(config):
    '''Return a copy of a session configuration with defaults applied.'''
    config = dict(config)
    missing = [key for key in REQUIRED_CONFIG if not config.get(key)]
    if missing:
        raise ConfigurationError('Missing configuration: {}'.format(
            ', '.join(missing)))

    defaults = {
        'gisdbase': os.path.join(os.path.expanduser('~'), 'grassdata'),
        'mapset': os.environ.get('USER') or 'PERMANENT',
        'message_format': 'plain',
        'gnuplot': 'gnuplot -persist',
        'gui': 'wxpython',
        'errors': ErrorMode.RAISE,
    }
    for (key, value) in defaults.items():
        if config.get(key) is None:
            config[key] = value
    if not config.get('version'):
        config['version'] = _read_version(config['gisbase'])
    config.setdefault('true_color', True)
    config.setdefault('transparent', True)
    config.setdefault('png_auto_write', True)
    config.setdefault('echo', EchoMode.COMMANDS)
    config.setdefault('log', None)
    config.setdefault('history', None)
    config.setdefault('dry', False)
    config['locals'] = dict(config.get('locals') or {})

    if config['errors'] not in ErrorMode.ALL:
        raise ConfigurationError('Invalid error mode "{}"'.format(
            config['errors']))
    if config['echo'] not in EchoMode.ALL:
        raise ConfigurationError('Invalid echo mode "{}"'.format(
            config['echo']))
    for name in config['locals']:
        if not str(name).isidentifier() or name.startswith('_'):
            raise ConfigurationError('Invalid local name "{}"'.format(name))
        if name in ROOT_MODULES or hasattr(Context, name):
            raise ConfigurationError(
                'Local name "{}" shadows a session attribute'.format(name))
    return config


class Context(object):
    '''A GRASS session: the environment commands run in and their history.

    Commands executed in the session are kept in ``history``::

        with grassgis.session(config) as grass:
            grass.g.region(res=10)
            grass.g.region(res=20)
            print(grass.history[-2])  # g.region res=10
            print(grass.last)         # g.region res=20
    '''

    def __init__(self, config):
        self._config = configure(config)
        self._modules = {}
        self._locals = {}
        self._gisrc = None
        self._original_env = None
        self._history = []

    @property
    def history(self):
        return self._history

    @property
    def configuration(self):
        return self._config

    @property
    def dry(self):
        return bool(self._config['dry'])

    @property
    def allocated(self):
        return self._original_env is not None

    @property
    def locals(self):
        '''Read-only view of the injected locals, empty outside a session.'''
        return types.MappingProxyType(self._locals)

    @property
    def last(self):
        return self.history[-1] if self.history else None

    @property
    def errors(self):
        return [cmd for cmd in self.history if failed(cmd)]

    @property
    def failed(self):
        return failed(self.last)

    @property
    def error_info(self):
        return error_info(self.last)

    @property
    def output(self):
        return self.last.output if self.last else None

    @property
    def error_output(self):
        return self.last.error_output if self.last else None

    def __getattr__(self, name):
        if name in ROOT_MODULES:
            module = self._modules.get(name)
            if module is None:
                module = self._modules[name] = Module(name, context=self)
            return module
        if not name.startswith('_') and name in self._locals:
            return self._locals[name]
        raise AttributeError(name)

    def allocate(self):
        if self.allocated:
            raise Error('Session is already allocated')
        config = self._config

        with tempfile.NamedTemporaryFile(mode='w', prefix='gisrc',
                                         delete=False) as fp:
            self._gisrc = fp.name
            fp.write('LOCATION_NAME: {}\n'.format(config['location']))
            fp.write('GISDBASE: {}\n'.format(config['gisdbase']))
            fp.write('MAPSET: {}\n'.format(config['mapset']))
            fp.write('GUI: {}\n'.format(config['gui']))

        self._original_env = {}
        gisbase = config['gisbase']

        self._replace_var('GISRC', self._gisrc)
        self._replace_var('GISBASE', gisbase)
        self._replace_var('GRASS_VERSION', config['version'])
        self._replace_var('GRASS_MESSAGE_FORMAT', config['message_format'])
        self._replace_var('GRASS_TRUECOLOR', _bool_var(config['true_color']))
        self._replace_var('GRASS_TRANSPARENT',
                          _bool_var(config['transparent']))
        self._replace_var('GRASS_PNG_AUTO_WRITE',
                          _bool_var(config['png_auto_write']))
        self._replace_var('GRASS_GNUPLOT', config['gnuplot'])

        paths = ['bin', 'scripts']
        if _windows():
            paths.insert(0, 'lib')
        else:
            self._insert_path('LD_LIBRARY_PATH', os.path.join(gisbase, 'lib'))
            self._replace_var('GRASS_LD_LIBRARY_PATH',
                              os.environ['LD_LIBRARY_PATH'])
        paths = [os.path.join(gisbase, path) for path in paths]
        if _windows():
            osgeo4w_dir = os.environ.get('OSGEO4W_ROOT') or 'C:\\OSGeo4W'
            if os.path.isdir(osgeo4w_dir):
                paths.append(os.path.join(osgeo4w_dir, 'bin'))
        self._insert_path('PATH', *paths)
        self._insert_path('MANPATH', os.path.join(gisbase, 'man'))

        self._locals = dict(config['locals'])

    def dispose(self):
        if self._gisrc and os.path.exists(self._gisrc):
            os.remove(self._gisrc)
        self._gisrc = None
        for (var, value) in (self._original_env or {}).items():
            if value is None:
                os.environ.pop(var, None)
            else:
                os.environ[var] = value
        self._original_env = None
        self._locals = {}

    def session(self, function):
        '''Call ``function`` with this context and return its result.

        Useful to pass a GRASS context around, e.g.::

            def helper(grass):
                grass.g.region(res=10)

            with grassgis.session(config) as grass:
                grass.session(helper)
        '''
        return function(self)

    def run(self, *args, **params):
        '''Run a GRASS module given its full dotted name.

        ``grass.run('r.in.gdal', '-o', input='dem.tif', output='dem')``
        '''
        if not args:
            raise TypeError('run() requires a module name')
        (name, flags) = (args[0], args[1:])
        return Module(name, context=self)(*flags, **params)

    def execute(self, cmd):
        config = self._config
        self._history.append(cmd)
        if config['echo']:
            # pylint: disable=no-member
            print(colorful.format('{c.bold}{}{c.reset}', cmd.to_str()))
        log_file = config['log'] or config['history']
        if log_file:
            self._log(log_file, self._timestamp())
            self._log(log_file, cmd.to_str(with_input=True))
        if self.dry:
            cmd.skip()
        else:
            cmd.run()
        if cmd.output and config['echo'] == EchoMode.OUTPUT:
            print(cmd.output.rstrip('\n'))
        self._handle_errors(cmd)
        return cmd

    def _handle_errors(self, cmd):
        config = self._config
        info = error_info(cmd)
        if info:
            self._log(config['log'], info.rstrip('\n'))
            console = (config['errors'] == ErrorMode.CONSOLE or
                       config['echo'] == EchoMode.OUTPUT)
            if console and not is_fatal(cmd, config['errors']):
                for line in info.splitlines():
                    # pylint: disable=no-member
                    print(colorful.format('{c.red}{}{c.reset}', line),
                          file=sys.stderr)
        check(cmd, config['errors'])

    @staticmethod
    def _timestamp():
        return datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')

    @staticmethod
    def _log(path, message):
        if path and message:
            with open(path, 'a') as fp:
                print(message, file=fp)

    def _replace_var(self, var, value):
        self._original_env.setdefault(var, os.environ.get(var))
        if value is None:
            os.environ.pop(var, None)
        else:
            os.environ[var] = str(value)

    def _insert_path(self, var, *paths):
        self._original_env.setdefault(var, os.environ.get(var))
        if _windows():
            paths = [os.path.normpath(path) for path in paths]
        paths = list(paths)
        if os.environ.get(var):
            paths.append(os.environ[var])
        os.environ[var] = os.pathsep.join(paths)


@contextlib.contextmanager
def session(config):
    '''Evaluate a block in a GRASS session environment.

    The configuration must include at least:

    * ``gisbase``: the base GRASS installation directory
    * ``location``: the location to work with

    Example::

        config = {'gisbase': '/usr/lib/grass78', 'location': 'world'}
        with grassgis.session(config) as grass:
            grass.r.resamp.stats('-n', input='map1@mapset1', output='map2')
            cmd = grass.g.list('vect')
            print(cmd.output)

    The environment is restored when the block exits, also on errors.
    '''
    context = Context(config)
    try:
        context.allocate()
        yield context
    finally:
        context.dispose()
