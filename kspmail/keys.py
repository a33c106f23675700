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

"""Reconstruction of keys from the packet records of a keyring.

OpenPGP orders the packets of a transferable public key: the public key
packet comes first, each user ID or user attribute is followed by the
signatures made on it. Walking the records in order is therefore enough
to attach every signature to its identity.
"""

import warnings

from kspmail import parse
from kspmail.exceptions import InvalidKeyPacketOrder
from kspmail.exceptions import MultipleSelfSignatures
from kspmail.models import Identity
from kspmail.models import Key
from kspmail.models import Signature


CERTIFICATION_TYPES = (0x10, 0x11, 0x12, 0x13)
CERTIFICATION_REVOCATION_TYPE = 0x30


def normalize_key_id(key_id):
    return key_id.strip().upper()


class ParserContext(object):
    """The key and identity that following packets belong to."""

    current_key = None
    current_identity = None

    def __init__(self, current_key=None, current_identity=None):
        self.current_key = current_key
        self.current_identity = current_identity


class KeyringBuilder(object):
    """Builds :class:`Key` objects from a sequence of packet records.

    Only signatures that matter for mailing are kept: self-signatures,
    self-revocations and certifications by one of
    ``signer_key_ids``.
    """

    def __init__(self, signer_key_ids, context=None):
        self.signer_key_ids = frozenset(
            normalize_key_id(k) for k in signer_key_ids)
        self.context = context or ParserContext()
        self.keys = []

    def add_record(self, record):
        if record.kind == parse.PUBLIC_KEY:
            self.add_public_key(record)
        elif record.kind in (parse.USER_ID, parse.USER_ATTRIBUTE):
            self.add_identity(record)
        elif record.kind == parse.SIGNATURE:
            self.add_signature(record)

    def add_records(self, records):
        for record in records:
            self.add_record(record)
        return self.keys

    def add_public_key(self, record):
        key = Key(record.byte_range, normalize_key_id(record.key_id))
        self.keys.append(key)
        self.context.current_key = key
        self.context.current_identity = None

    def add_identity(self, record):
        key = self.context.current_key
        if key is None:
            raise InvalidKeyPacketOrder(
                'Identity packet at offset {0} precedes any public key '
                'packet.'.format(record.byte_range.offset))
        identity = Identity(record.byte_range, user_id=record.user_id)
        key.identities.append(identity)
        self.context.current_identity = identity

    def add_signature(self, record):
        if not record.exportable:
            # Local certifications are never redistributed.
            return

        key = self.context.current_key
        if key is None:
            raise InvalidKeyPacketOrder(
                'Signature packet at offset {0} precedes any public key '
                'packet.'.format(record.byte_range.offset))

        signature_class = record.signature_class
        if (signature_class not in CERTIFICATION_TYPES and
                signature_class != CERTIFICATION_REVOCATION_TYPE):
            # Direct key, subkey binding and the like.
            return

        identity = self.context.current_identity
        if identity is None:
            raise InvalidKeyPacketOrder(
                'Certification at offset {0} precedes any identity of key '
                '{1}.'.format(record.byte_range.offset, key.key_id))

        signer_key_id = normalize_key_id(record.key_id)
        if signature_class == CERTIFICATION_REVOCATION_TYPE:
            if signer_key_id == key.key_id:
                identity.revoked = True
        elif signer_key_id == key.key_id:
            if identity.self_signature is not None:
                warnings.warn(
                    'Multiple self-signatures on {0!r} of key {1}, using '
                    'the one at offset {2}.'.format(
                        identity.display_text, key.key_id,
                        record.byte_range.offset),
                    MultipleSelfSignatures)
            identity.self_signature = record.byte_range
        elif signer_key_id in self.signer_key_ids:
            identity.signatures.append(
                Signature(record.byte_range, signer_key_id, signature_class))


def read_keyring(data, lines, signer_key_ids,
                 # For testing
                 iter_packet_records=parse.iter_packet_records):
    """Parse the listing ``lines`` of the binary keyring ``data`` into
    a list of :class:`Key` objects.
    """

    builder = KeyringBuilder(signer_key_ids)
    return builder.add_records(iter_packet_records(data, lines))
