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

from zope.interface import implementer

from kspmail import interfaces


USER_ATTRIBUTE_TEXT = u'[user attribute]'


@implementer(interfaces.ISignature)
class Signature(object):

    packet = None
    signer_key_id = None
    signature_class = None

    def __init__(self, packet, signer_key_id, signature_class):
        self.packet = packet
        self.signer_key_id = signer_key_id
        self.signature_class = signature_class

    def __repr__(self):
        return '<Signature 0x{0:02x} by {1} at {2}>'.format(
            self.signature_class, self.signer_key_id, self.packet.offset)


@implementer(interfaces.IIdentity)
class Identity(object):
    """A user ID or user attribute of a key, together with the
    signatures that matter for mailing it.
    """

    packet = None
    user_id = None
    self_signature = None
    revoked = False
    signatures = None
    emails = None

    def __init__(self, packet, user_id=None, self_signature=None,
                 revoked=False, signatures=None, emails=None):
        self.packet = packet
        self.user_id = user_id
        self.self_signature = self_signature
        self.revoked = revoked
        self.signatures = list(signatures or [])
        self.emails = list(emails or [])

    def is_attribute(self):
        return self.user_id is None

    @property
    def display_text(self):
        if self.is_attribute():
            return USER_ATTRIBUTE_TEXT
        return self.user_id

    def __repr__(self):
        return '<Identity {0!r}>'.format(self.display_text)


@implementer(interfaces.IKey)
class Key(object):

    master = None
    key_id = None
    identities = None

    def __init__(self, master, key_id, identities=None):
        self.master = master
        self.key_id = key_id
        self.identities = list(identities or [])

    def __repr__(self):
        return '<Key {0} with {1} identities>'.format(
            self.key_id, len(self.identities))
