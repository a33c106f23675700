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

import re


trailing_address_expr = re.compile(r'<(?P<address>[^<]+)>$')


def get_address(user_id):
    """Return the address at the end of ``user_id``, e.g.
    ``alice@example.org`` for ``Alice <alice@example.org>``, or None.
    """

    if user_id is None:
        return None
    match = trailing_address_expr.search(user_id)
    if match is None:
        return None
    return match.group('address')


def resolve_key_recipients(key):
    pool = []
    deferred = []
    for identity in key.identities:
        address = get_address(identity.user_id)
        if address is None:
            deferred.append(identity)
        else:
            identity.emails = [address]
            pool.append(address)

    # Attributes and user IDs without an address go to every address of
    # the key.
    for identity in deferred:
        identity.emails = list(pool)


def resolve_recipients(keys):
    """Set ``emails`` on every identity of ``keys``.

    Must run before unsigned identities are filtered out, as their
    addresses are used for identities without one.
    """

    for key in keys:
        resolve_key_recipients(key)
    return keys
