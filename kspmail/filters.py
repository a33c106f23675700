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

"""Passes that drop identities, and then keys, which should not be
mailed. Each pass returns new lists and leaves its input alone.
"""

from kspmail.models import Key


def filter_identities(keys, predicate):
    """Keep the identities for which ``predicate`` is true. Keys left
    without identities are dropped.
    """

    result = []
    for key in keys:
        identities = [i for i in key.identities if predicate(i)]
        if identities:
            result.append(Key(key.master, key.key_id, identities))
    return result


def is_self_signed(identity):
    return identity.self_signature is not None and not identity.revoked


def is_signed(identity):
    return bool(identity.signatures)


def filter_self_signed(keys):
    """Drop identities that were never self-signed or have been revoked
    by their key. A designated signer's certification does not save an
    identity its owner never claimed.
    """

    return filter_identities(keys, is_self_signed)


def filter_unsigned(keys):
    """Drop identities without a certification by a designated signer."""

    return filter_identities(keys, is_signed)
