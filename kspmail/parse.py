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

"""Reading of the packet listing produced by ``gpg --list-packets``.

The listing is line oriented. Every packet starts with a header line
giving its position in the binary keyring, followed by exactly one kind
line and any number of tab-indented lines with details::

    # off=0 ctb=99 tag=6 hlen=3 plen=269
    :public key packet:
        version 4, algo 1, created 1400000000, expires 0
        pkey[0]: [2048 bits]
        keyid: 0123456789ABCDEF

Only the position and the text are kept. The bytes of a packet are
taken from the original keyring when a key is reassembled.
"""

from collections import namedtuple
import re
import warnings

from kspmail.exceptions import InvalidPacketRange
from kspmail.exceptions import MissingKeyId
from kspmail.exceptions import MissingSignatureClass
from kspmail.exceptions import UnexpectedDumpLine
from kspmail.exceptions import UnknownDumpLine


PUBLIC_KEY = 'public key'
USER_ID = 'user id'
USER_ATTRIBUTE = 'user attribute'
SIGNATURE = 'signature'
OTHER = 'other'


AWAIT_HEADER = 'awaiting a packet header'
AWAIT_KIND = 'awaiting a packet kind'
IN_BODY = 'reading a packet body'


header_line_expr = re.compile(
    r'^# off=(?P<offset>\d+) ctb=(?P<ctb>[0-9a-fA-F]+) tag=(?P<tag>\d+) '
    r'hlen=(?P<hlen>\d+) plen=(?P<plen>\d+)'
    )
kind_line_expr = re.compile(r'^:(?P<kind>[^:]+):(?P<rest>.*)')
continuation_line_expr = re.compile(r'^\t(?P<text>.*)')

public_key_expr = re.compile(r'^:public key packet:')
user_id_expr = re.compile(r'^:user ID packet: "(?P<user_id>.*)"$')
user_attribute_expr = re.compile(r'^:attribute packet:')
signature_expr = re.compile(
    r'^:signature packet: algo [0-9a-fA-F]{1,3}, '
    r'keyid (?P<key_id>[0-9a-fA-F]+)'
    )
key_id_expr = re.compile(r'^\tkeyid: (?P<key_id>[0-9a-fA-F]+)', re.M)
signature_class_expr = re.compile(r'\bsigclass 0x(?P<sigclass>[0-9a-fA-F]{2})')
not_exportable_expr = re.compile(
    r'\bhashed subpkt 4 len 1 \(not exportable\)$', re.M)
escape_expr = re.compile(br'\\x([0-9a-fA-F]{2})')


class ByteRange(namedtuple('ByteRange', ['offset', 'length'])):
    """The position of a packet, header included, in the keyring."""

    __slots__ = ()

    @property
    def end(self):
        return self.offset + self.length

    def slice(self, data):
        return data[self.offset:self.end]


PacketRecord = namedtuple(
    'PacketRecord',
    ['byte_range', 'kind', 'raw_text', 'key_id', 'user_id',
     'signature_class', 'exportable'],
    defaults=(None, None, None, True)
    )
PacketRecord.__doc__ = """A single packet from the listing.

``key_id`` is the key's own id for public key packets and the issuer's
id for signatures. ``user_id`` is only set for user ID packets.
"""


def decode_user_id(text):
    """Undo the ``\\xHH`` escaping GnuPG applies to user IDs."""

    data = escape_expr.sub(
        lambda m: bytes([int(m.group(1), 16)]),
        text.encode('utf-8', 'surrogateescape')
        )
    return data.decode('utf-8', 'replace')


def classify_packet(byte_range, raw_text):
    """Turn the text of one listed packet into a :class:`PacketRecord`.

    ``raw_text`` starts with the header line, the kind line is the
    second one.
    """

    lines = raw_text.split('\n')
    kind_line = lines[1] if len(lines) > 1 else ''

    if public_key_expr.match(kind_line):
        match = key_id_expr.search(raw_text)
        if match is None:
            raise MissingKeyId(
                "Couldn't find a key id in public key packet:\n{0}".format(
                    raw_text))
        return PacketRecord(byte_range, PUBLIC_KEY, raw_text,
                            key_id=match.group('key_id').upper())

    match = user_id_expr.match(kind_line)
    if match is not None:
        return PacketRecord(byte_range, USER_ID, raw_text,
                            user_id=decode_user_id(match.group('user_id')))

    if user_attribute_expr.match(kind_line):
        return PacketRecord(byte_range, USER_ATTRIBUTE, raw_text)

    match = signature_expr.match(kind_line)
    if match is not None:
        class_match = signature_class_expr.search(raw_text)
        if class_match is None:
            raise MissingSignatureClass(
                "Couldn't find a signature class in signature packet:\n"
                "{0}".format(raw_text))
        return PacketRecord(
            byte_range, SIGNATURE, raw_text,
            key_id=match.group('key_id').upper(),
            signature_class=int(class_match.group('sigclass'), 16),
            exportable=not_exportable_expr.search(raw_text) is None,
            )

    return PacketRecord(byte_range, OTHER, raw_text)


def iter_packet_records(data, lines,
                        # For testing
                        classify_packet=classify_packet):
    """Yield a :class:`PacketRecord` for every packet in ``lines``, in
    listing order.

    ``data`` is the binary keyring that was listed. Lines that cannot be
    recognised are skipped with a warning; lines out of sequence raise
    :class:`UnexpectedDumpLine`.
    """

    state = AWAIT_HEADER
    byte_range = None
    packet_lines = []

    for line_no, line in enumerate(lines, 1):
        line = line.rstrip('\r\n')

        header_match = header_line_expr.match(line)
        if header_match is not None:
            if state == AWAIT_KIND:
                raise UnexpectedDumpLine(line_no, line, state)
            if byte_range is not None:
                yield classify_packet(byte_range, '\n'.join(packet_lines))

            offset = int(header_match.group('offset'))
            length = (int(header_match.group('hlen')) +
                      int(header_match.group('plen')))
            byte_range = ByteRange(offset, length)
            if byte_range.end > len(data):
                raise InvalidPacketRange(
                    'Packet at offset {0} with length {1} extends past the '
                    'end of the keyring ({2} bytes).'.format(
                        offset, length, len(data)))
            packet_lines = [line]
            state = AWAIT_KIND
        elif kind_line_expr.match(line):
            if state != AWAIT_KIND:
                raise UnexpectedDumpLine(line_no, line, state)
            packet_lines.append(line)
            state = IN_BODY
        elif continuation_line_expr.match(line):
            if state != IN_BODY:
                raise UnexpectedDumpLine(line_no, line, state)
            packet_lines.append(line)
        else:
            warnings.warn(
                'Unknown line {0} in packet listing: {1!r}'.format(
                    line_no, line),
                UnknownDumpLine)

    if state == AWAIT_KIND:
        raise UnexpectedDumpLine(line_no, '<end of listing>', state)
    if byte_range is not None:
        yield classify_packet(byte_range, '\n'.join(packet_lines))
