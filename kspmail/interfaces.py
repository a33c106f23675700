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

from zope.interface import Attribute
from zope.interface import Interface


class ISignature(Interface):

    packet = Attribute("ByteRange of the signature packet")
    signer_key_id = Attribute("16 character upper case hex string")
    signature_class = Attribute("int")


class IIdentity(Interface):

    packet = Attribute("ByteRange of the user ID or attribute packet")
    user_id = Attribute("Unicode string, or None for user attributes")
    self_signature = Attribute("ByteRange or None")
    revoked = Attribute("bool")
    signatures = Attribute("List of ISignature")
    emails = Attribute("List of unicode strings")
    display_text = Attribute("Unicode string")

    def is_attribute(self):
        pass


class IKey(Interface):

    master = Attribute("ByteRange of the public key packet")
    key_id = Attribute("16 character upper case hex string")
    identities = Attribute("List of IIdentity")


class IWorkUnit(Interface):

    key_id = Attribute("Key id of the signed key")
    identity_index = Attribute("int")
    user_id = Attribute("Unicode display text of the identity")
    signer_key_id = Attribute("Key id of the designated signer")
    emails = Attribute("List of destination addresses")
    key_data = Attribute("bytes of the minimal key")

    def filename(self, extension):
        pass


class IPacketLister(Interface):

    def list_packets(self, data):
        """Return the textual packet listing of the binary keyring
        ``data`` as a unicode string.
        """


class IEncryptor(Interface):

    def encrypt(self, data, recipients):
        """Return ``data`` encrypted and ASCII-armored for all of
        ``recipients``.
        """


class INotifier(Interface):

    def notify(self, unit):
        """Deliver a single IWorkUnit."""
