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

from .core import Command
from .core import CommandError
from .core import CommandFailedError
from .core import CommandLaunchError
from .core import ConfigurationError
from .core import Error
from .core import ErrorMode
from .core import Module
from .core import check
from .core import error_info
from .core import failed
from .session import Context
from .session import EchoMode
from .session import session
from .cli import main
