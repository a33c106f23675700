# ksp-mail Mail key signing party signatures to their owners
# Copyright (C) 2014 Richard Mitchell
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import shutil
import subprocess
import tempfile

from zope.interface import implementer

from kspmail import interfaces
from kspmail.exceptions import GnuPGError


DEFAULT_COMMAND = 'gpg'


@implementer(interfaces.IPacketLister, interfaces.IEncryptor)
class GnuPG(object):
    """Runs the GnuPG executable against its own home directory.

    Unless ``homedir`` is given a temporary one is created, so that the
    user's keyrings are never touched. It is removed by :meth:`close`.
    """

    def __init__(self, command=DEFAULT_COMMAND, homedir=None,
                 # For testing
                 popen=subprocess.Popen):
        self.command = command
        self._popen = popen
        self._tempdir = None
        if homedir is None:
            self._tempdir = tempfile.mkdtemp(prefix='ksp-mail-')
            homedir = self._tempdir
        self.homedir = homedir

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        if self._tempdir is not None:
            shutil.rmtree(self._tempdir, ignore_errors=True)
            self._tempdir = None

    def run(self, args, data=b'', user_home=False):
        """Run gpg with ``args``, feeding it ``data``. With ``user_home``
        the user's own home directory is used instead of ours.
        """

        command = [self.command]
        if not user_home:
            command.extend(['--homedir', self.homedir])
        command.extend(['--batch', '--quiet'])
        command.extend(args)
        process = self._popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            )
        stdout, stderr = process.communicate(data)
        if process.returncode != 0:
            raise GnuPGError(command, process.returncode, stderr)
        return stdout

    def import_keys(self, data):
        """Import ``data`` so messages can be encrypted to its keys."""

        self.run(['--import'], data)

    def import_signer_keys(self, key_ids):
        """Copy the public keys ``key_ids`` from the user's own keyring.

        The keyring being processed usually lacks the signers' keys, which
        messages are encrypted to as well. Returns False when none of them
        could be exported.
        """

        data = self.run(['--export'] + list(key_ids), user_home=True)
        if not data:
            return False
        self.import_keys(data)
        return True

    def list_packets(self, data):
        return self.run(['--list-packets'], data).decode('utf-8', 'replace')

    def encrypt(self, data, recipients):
        args = ['--always-trust', '--armor']
        for recipient in recipients:
            args.extend(['--recipient', recipient])
        args.append('--encrypt')
        return self.run(args, data).decode('us-ascii')
