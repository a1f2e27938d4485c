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

import os
import shutil
import stat
import sys
import tempfile

import pytest


SCRIPTS = {
    # Prints its arguments
    'g.region': '#!/bin/sh\necho "$@"\n',
    # Prints the session gisrc file
    'g.gisenv': '#!/bin/sh\ncat "$GISRC"\n',
    # Echoes its standard input
    'v.in.ascii': '#!/bin/sh\ncat\n',
    'r.fail': '#!/bin/sh\necho "ERROR: boom" >&2\nexit 3\n',
}


class FakeGrass(object):
    '''A GRASS installation made of shell scripts.'''

    def __init__(self):
        self.root = tempfile.mkdtemp(prefix='grassgis_')
        self.gisbase = os.path.join(self.root, 'grass')
        self.gisdbase = os.path.join(self.root, 'grassdata')
        bindir = os.path.join(self.gisbase, 'bin')
        etcdir = os.path.join(self.gisbase, 'etc')
        os.makedirs(bindir)
        os.makedirs(etcdir)
        os.makedirs(self.gisdbase)
        for (name, body) in SCRIPTS.items():
            path = os.path.join(bindir, name)
            with open(path, 'w') as fp:
                fp.write(body)
            os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR)
        with open(os.path.join(etcdir, 'VERSIONNUMBER'), 'w') as fp:
            fp.write('7.8.5 2021\n')

    def config(self, **kwargs):
        config = {
            'gisbase': self.gisbase,
            'gisdbase': self.gisdbase,
            'location': 'world',
            'mapset': 'PERMANENT',
            'echo': False,
        }
        config.update(kwargs)
        return config

    def path(self, name):
        return os.path.join(self.root, name)

    def close(self):
        shutil.rmtree(self.root, ignore_errors=False)


@pytest.fixture
def grass(request):
    if sys.platform.startswith('win'):
        pytest.skip('Fake GRASS installation requires a POSIX shell')
    fake = FakeGrass()
    request.addfinalizer(fake.close)
    return fake
