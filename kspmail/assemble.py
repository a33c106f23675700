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

"""Reassembly of minimal keys.

A minimal key holds just enough to be imported and checked by the key's
owner: the master key, one identity, the self-signature binding that
identity to the key and one certification. The packets are copied
byte for byte from the original keyring.
"""

import warnings

from zope.interface import implementer

from kspmail import interfaces
from kspmail.exceptions import NoRecipientAddress


def make_minimal_key(data, key, identity, signature):
    return b''.join([
        key.master.slice(data),
        identity.packet.slice(data),
        identity.self_signature.slice(data),
        signature.packet.slice(data),
        ])


@implementer(interfaces.IWorkUnit)
class WorkUnit(object):
    """One signed identity to be delivered."""

    def __init__(self, key_id, identity_index, user_id, signer_key_id,
                 emails, key_data):
        self.key_id = key_id
        self.identity_index = identity_index
        self.user_id = user_id
        self.signer_key_id = signer_key_id
        self.emails = list(emails)
        self.key_data = key_data

    def filename(self, extension, prefix=''):
        """A name that is unique for each unit of a run, e.g.
        ``0123456789ABCDEF.0.signed-by-FEDCBA9876543210.msg``.
        """

        return '{prefix}{key}.{index}.signed-by-{prefix}{signer}.{ext}'.format(
            prefix=prefix,
            key=self.key_id,
            index=self.identity_index,
            signer=self.signer_key_id,
            ext=extension,
            )

    def __repr__(self):
        return '<WorkUnit {0}>'.format(self.filename('')[:-1])


def iter_work_units(data, keys):
    """Yield a :class:`WorkUnit` for every certification left on
    ``keys``, in key, identity, signature order.
    """

    for key in keys:
        for identity_index, identity in enumerate(key.identities):
            for signature in identity.signatures:
                if not identity.emails:
                    warnings.warn(
                        'No email address for {0!r} of key {1}, signed by '
                        '{2}.'.format(identity.display_text, key.key_id,
                                      signature.signer_key_id),
                        NoRecipientAddress)
                yield WorkUnit(
                    key.key_id,
                    identity_index,
                    identity.display_text,
                    signature.signer_key_id,
                    identity.emails,
                    make_minimal_key(data, key, identity, signature),
                    )
