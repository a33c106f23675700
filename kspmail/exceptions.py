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


class KspMailError(ValueError):
    """The keyring could not be processed."""


class InvalidPacketDump(KspMailError):
    """The packet listing does not follow the expected structure. No
    later result can be trusted.
    """


class UnexpectedDumpLine(InvalidPacketDump):
    """A header, kind or continuation line appeared out of sequence in
    the packet listing.
    """

    def __init__(self, line_no, line, state):
        self.line_no = line_no
        self.line = line
        self.state = state

    def __str__(self):
        return 'Unexpected line {0} while {1}:\n{2}'.format(
                    self.line_no, self.state, self.line.rstrip('\n')
                    )


class MissingKeyId(InvalidPacketDump):
    """A public key packet was listed without a key id."""


class MissingSignatureClass(InvalidPacketDump):
    """A signature packet was listed without a signature class."""


class InvalidPacketRange(InvalidPacketDump):
    """A packet listed in the dump lies outside of the keyring data."""


class InvalidKeyPacketOrder(KspMailError):
    """The packets that make up this keyring are ordered in an invalid
    way, e.g. a user ID before any public key.
    """


class InvalidArmor(KspMailError):
    """ASCII-armored input is damaged: bad checksum, missing tail line or
    non-ASCII text.
    """


class InvalidTemplate(KspMailError):
    """The message template cannot be filled in."""


class GnuPGError(RuntimeError):
    """The GnuPG executable failed."""

    def __init__(self, command, returncode, stderr=b''):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self):
        stderr = self.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode('utf-8', 'replace')
        return '{0} exited with status {1}\n{2}'.format(
                    ' '.join(self.command), self.returncode, stderr
                    )


class KspMailWarning(UserWarning):
    """Something is amiss with the keyring, but processing can go on."""


class UnknownDumpLine(KspMailWarning):
    """A line of the packet listing could not be recognised and was
    skipped.
    """


class MultipleSelfSignatures(KspMailWarning):
    """An identity carries more than one self-signature. The last one
    is used.
    """


class NoRecipientAddress(KspMailWarning):
    """No email address could be found for an identity. The message
    will be written, but cannot be delivered as is.
    """


class EncryptionFailed(KspMailWarning):
    """A message could not be encrypted and is written in plain text."""


class SignerKeyUnavailable(KspMailWarning):
    """None of the designated signers' keys could be found. Messages
    cannot be encrypted to them.
    """
