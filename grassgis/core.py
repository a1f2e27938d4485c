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

import shlex
import subprocess


class Error(Exception):
    def __init__(self, message):
        super(Error, self).__init__()
        self.message = message

    def __str__(self):
        return self.message


class ConfigurationError(Error):
    pass


class CommandError(Error):
    def __init__(self, message, command=None):
        super(CommandError, self).__init__(message)
        self.command = command


class CommandLaunchError(CommandError):
    '''The command could not be started.'''


class CommandFailedError(CommandError):
    '''The command ran and exited with a non-zero status.'''


class ErrorMode(object):
    RAISE = 'raise'
    CONSOLE = 'console'
    QUIET = 'quiet'
    SILENT = 'silent'

    ALL = (RAISE, CONSOLE, QUIET, SILENT)


# Standard GRASS options given as ``--name``
LONG_FLAGS = ('overwrite', 'quiet', 'verbose', 'superquiet')


def _option_name(name):
    if len(name) > 1 and name.endswith('_'):
        return name[:-1]
    return name


def _option_value(value):
    if isinstance(value, (list, tuple)):
        return ','.join(str(item) for item in value)
    return str(value)


class Command(object):
    '''A GRASS module invocation and, once run, its results.'''

    def __init__(self, name, flags=None, params=None, stdin=None):
        self.name = name
        self.flags = tuple(str(flag) for flag in (flags or ()))
        self.params = dict(params or {})
        self.input = stdin

        self.output = None
        self.error_output = None
        self.status = None
        self.error = None

    def _arguments(self, quote):
        arguments = [quote(flag) for flag in self.flags]
        for (key, value) in self.params.items():
            key = _option_name(key)
            if value is None:
                continue
            if key in LONG_FLAGS:
                if value:
                    arguments.append('--{}'.format(key))
                continue
            arguments.append('{}={}'.format(key, quote(_option_value(value))))
        return arguments

    def args(self):
        '''Argument vector handed to the operating system.'''
        return [self.name] + self._arguments(lambda text: text)

    def to_str(self, with_input=False):
        text = ' '.join([str(self.name)] + self._arguments(shlex.quote))
        if with_input and self.input is not None:
            text = '{} <<EOF\n{}\nEOF'.format(text, self.input.rstrip('\n'))
        return text

    def __str__(self):
        return self.to_str()

    def __repr__(self):
        return '<Command {!r}>'.format(self.to_str())

    def run(self):
        '''Run the command, capturing output and error output separately.

        A command that cannot be started, because the program is missing or
        its name or arguments are malformed, keeps the exception in ``error``
        instead of raising it.
        '''
        pipe = subprocess.PIPE
        stdin = pipe if self.input is not None else subprocess.DEVNULL
        try:
            proc = subprocess.Popen(self.args(), stdin=stdin, stdout=pipe,
                                    stderr=pipe)
        except (OSError, ValueError, TypeError) as exc:
            self.error = exc
            return self
        data = self.input.encode('utf-8') if self.input is not None else None
        (out, err) = proc.communicate(data)
        self.status = proc.returncode
        self.output = out.decode('utf-8', errors='replace')
        self.error_output = err.decode('utf-8', errors='replace')
        return self

    def skip(self):
        '''Record a successful, empty result without running anything.'''
        self.output = ''
        self.error_output = ''
        self.status = 0
        return self


def failed(command):
    '''Returns true if the command could not start or exited non-zero.'''
    if command is None:
        return False
    if command.error is not None:
        return True
    return command.status is not None and command.status != 0


def error_info(command):
    '''Human readable description of a command failure, or None.'''
    if command is None:
        return None
    if command.error is not None:
        return 'Error ({}):\n{}'.format(type(command.error).__name__,
                                        command.error)
    if command.status is not None and command.status != 0:
        info = 'Exit code {}\n'.format(command.status)
        if command.error_output:
            info += command.error_output
        return info
    return None


def is_fatal(command, mode=ErrorMode.RAISE):
    '''Returns true if the failure of a command must be raised in a mode.'''
    if command is None:
        return False
    if command.error is not None:
        return mode not in (ErrorMode.QUIET, ErrorMode.SILENT)
    return mode == ErrorMode.RAISE and failed(command)


def check(command, mode=ErrorMode.RAISE):
    '''Raise the error corresponding to a command failure, if fatal.'''
    if not is_fatal(command, mode):
        return
    if command.error is not None:
        raise CommandLaunchError(error_info(command),
                                 command=command) from command.error
    raise CommandFailedError(error_info(command), command=command)


class Module(object):
    '''Dotted access to GRASS modules, ``grass.r.resamp.stats(...)``.

    Calling a module builds a ``Command`` and executes it in the context the
    module belongs to. Without a context the command is only built.
    '''

    def __init__(self, name, context=None):
        self.name = name
        self.context = context

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return Module('{}.{}'.format(self.name, _option_name(name)),
                      context=self.context)

    def __call__(self, *flags, **params):
        stdin = params.pop('stdin_', None)
        command = Command(self.name, flags=flags, params=params, stdin=stdin)
        if self.context is None:
            return command
        return self.context.execute(command)

    def __repr__(self):
        return '<Module {}>'.format(self.name)
