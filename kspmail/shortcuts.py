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

import sys

from kspmail import armor
from kspmail.assemble import iter_work_units
from kspmail.filters import filter_self_signed
from kspmail.filters import filter_unsigned
from kspmail.keys import read_keyring
from kspmail.recipients import resolve_recipients


def process_keyring(data, signer_key_ids, lister, err_stream=sys.stderr):
    """Read the keyring ``data`` and return the keys, and identities,
    with certifications by one of ``signer_key_ids`` that should be
    mailed.

    ``lister`` provides the packet listing of the keyring, see
    :class:`kspmail.interfaces.IPacketLister`. Returns the binary
    keyring along with the keys, the byte ranges of the keys refer to
    it.
    """

    data = armor.dearmor(data)

    err_stream.write(u'Processing input keys...\n')
    listing = lister.list_packets(data)
    keys = read_keyring(data, listing.splitlines(), signer_key_ids)
    err_stream.write(u'    {0} keys done\n'.format(len(keys)))

    err_stream.write(
        u'Filtering non-self-signed and revoked UID/UATs and keys...\n')
    keys = filter_self_signed(keys)
    err_stream.write(u'    done: {0} keys remaining\n'.format(len(keys)))

    err_stream.write(u'Mapping UIDs to email addresses to use...\n')
    resolve_recipients(keys)
    err_stream.write(u'    done\n')

    err_stream.write(u'Filtering non-signed UID/UATs and keys...\n')
    keys = filter_unsigned(keys)
    err_stream.write(u'    done: {0} keys remaining\n'.format(len(keys)))

    return data, keys


def iter_status_lines(keys):
    """Yield a progress line for every certification on ``keys``, in the
    order :func:`kspmail.assemble.iter_work_units` yields units.
    """

    for key_no, key in enumerate(keys, 1):
        identities = key.identities
        for identity_no, identity in enumerate(identities, 1):
            signatures = identity.signatures
            for signature_no, signature in enumerate(signatures, 1):
                yield (
                    u'    Key {0}/{1} (0x{2}), UID {3}/{4} ({5}), '
                    u'sig {6}/{7} (0x{8})\n'
                    ).format(
                        key_no, len(keys), key.key_id,
                        identity_no, len(identities), identity.display_text,
                        signature_no, len(signatures),
                        signature.signer_key_id,
                        )


def mail_keyring(data, signer_key_ids, lister, notifier,
                 err_stream=sys.stderr):
    """Hand every signed identity of ``data`` to ``notifier``. Returns
    the number of units delivered.
    """

    data, keys = process_keyring(data, signer_key_ids, lister, err_stream)

    err_stream.write(u'Generating emails...\n')
    count = 0
    for unit, status in zip(iter_work_units(data, keys),
                            iter_status_lines(keys)):
        err_stream.write(status)
        notifier.notify(unit)
        count += 1
    err_stream.write(u'    {0} mails done\n'.format(count))
    return count
