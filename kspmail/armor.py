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

from base64 import b64decode
from base64 import b64encode
import binascii
import re
import warnings

from pgpdump.utils import crc24

from kspmail.exceptions import InvalidArmor


PGP_PUBLIC_KEY_BLOCK = 'PGP PUBLIC KEY BLOCK'


DASHES = '-----'
LINE_LENGTH = 64
header_line_expr = re.compile(
    '^{dashes}BEGIN (?P<data_type>[A-Z ]+){dashes}$'.format(dashes=DASHES))


def is_armor(data):
    """Tell whether ``data`` looks like ASCII-armored OpenPGP data
    rather than binary packets.
    """

    try:
        canary = data.lstrip()[:len(DASHES)]
        if isinstance(canary, bytes):
            canary = canary.decode('us-ascii')
    except UnicodeError:
        return False
    return canary == DASHES


def checksum_line(data):
    checksum_value = crc24(data)
    checksum_bytes = bytes([
            (checksum_value >> (i * 8)) & 0xff
            for i in (2, 1, 0)
            ])
    return '={0}'.format(b64encode(checksum_bytes).decode('us-ascii'))


class ASCIIArmor(object):

    @classmethod
    def iter_from_ascii(cls, text):
        """Yield every armored block found in ``text``. Text outside of
        the blocks is ignored.
        """

        if isinstance(text, bytes):
            try:
                text = text.decode('us-ascii')
            except UnicodeDecodeError as e:
                raise InvalidArmor('Armored input is not ASCII: {0}'.format(e))
        lines = text.splitlines()
        line_no = 0

        while line_no < len(lines):
            header_matches = header_line_expr.match(lines[line_no].strip())
            if header_matches is None:
                line_no += 1
                continue
            block, line_no = cls._parse_block(
                lines, line_no, header_matches.group('data_type'))
            yield block

    @classmethod
    def from_ascii(cls, text):
        for block in cls.iter_from_ascii(text):
            return block
        raise InvalidArmor('No armored data found.')

    @classmethod
    def _parse_block(cls, lines, line_no, data_type):
        header_line = lines[line_no].strip()
        tail_line = header_line.replace('BEGIN', 'END')
        line_no += 1

        headers = {}
        while line_no < len(lines) and lines[line_no].strip():
            if ': ' not in lines[line_no]:
                # No header block at all
                break
            header_key, header_value = lines[line_no].split(': ', 1)
            if header_key not in ('Version', 'Comment', 'Charset'):
                # "Unknown keys should be reported to the user, but OpenPGP
                #  should continue to process the message."
                warnings.warn('Unsupported armor header, "{0}"'.format(
                                header_key))
            headers[header_key] = header_value.strip()
            line_no += 1

        data_lines = []
        expected_checksum = None
        while True:
            if line_no >= len(lines):
                raise InvalidArmor(
                    'Missing tail line {0!r}.'.format(tail_line))
            line = lines[line_no].strip()
            line_no += 1
            if line == tail_line:
                break
            if line.startswith('=') and len(line) == 5:
                expected_checksum = line
            elif line:
                data_lines.append(line)

        try:
            data = b64decode(''.join(data_lines))
        except binascii.Error as e:
            raise InvalidArmor('Bad armored data: {0}'.format(e))
        if expected_checksum is not None:
            actual_checksum = checksum_line(data)
            if actual_checksum != expected_checksum:
                raise InvalidArmor((
                    'Checksum does not match. {0} (actual) != {1} (expected).'
                    ).format(actual_checksum, expected_checksum))

        block = cls(data_type, data,
                    version=headers.pop('Version', None),
                    comment=headers.pop('Comment', None),
                    extra_headers=headers or None)
        return block, line_no

    def __init__(self, data_type, data, version=None, comment=None,
                 extra_headers=None):
        self.data_type = data_type
        self.data = data
        self.version = version
        self.comment = comment
        self.extra_headers = extra_headers

    def __str__(self):
        result_lines = ['{dashes}BEGIN {data_type}{dashes}'.format(
                            dashes=DASHES, data_type=self.data_type)]
        if self.version is not None:
            result_lines.append('Version: {version}'.format(
                version=self.version))
        if self.comment is not None:
            result_lines.append('Comment: {comment}'.format(
                comment=self.comment))
        if self.extra_headers is not None:
            for k, v in sorted(self.extra_headers.items()):
                result_lines.append('{0}: {1}'.format(k, v))

        result_lines.append('')

        encoded_data = b64encode(self.data).decode('us-ascii')
        for i in range(0, len(encoded_data), LINE_LENGTH):
            result_lines.append(encoded_data[i:i + LINE_LENGTH])

        result_lines.append(checksum_line(self.data))
        result_lines.append(result_lines[0].replace('BEGIN', 'END'))

        return '\n'.join(result_lines) + '\n'

    def __bytes__(self):
        return self.data


def armor_public_key(data, comment=None):
    return str(ASCIIArmor(PGP_PUBLIC_KEY_BLOCK, data, comment=comment))


def dearmor(data):
    """Return the binary packets of ``data``. Armored input may hold
    several public key blocks, their packets are concatenated.
    """

    if not is_armor(data):
        return data
    return b''.join(
        block.data
        for block in ASCIIArmor.iter_from_ascii(data)
        if block.data_type == PGP_PUBLIC_KEY_BLOCK
        )
