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

"""Rendering of the messages that carry signed keys to their owners.

Messages are written to files suitable for ``sendmail -t``. Encryption
follows RFC 3156; when it fails the message is written unencrypted.
"""

from email import charset
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import os
import warnings

from zope.interface import implementer

from kspmail import interfaces
from kspmail.armor import armor_public_key
from kspmail.exceptions import EncryptionFailed
from kspmail.exceptions import GnuPGError
from kspmail.exceptions import InvalidTemplate


DEFAULT_TEMPLATE = u'''\
Hi,

please find attached the user id
    {uid}
of your key {key} signed by me ({mykey}).

If you have multiple user ids, I sent the signature for each user id
separately to that user id's associated email address. For user ids or
user attributes without an associated email address, I sent the
signatures to each email address found on the key. You can import the
signatures by running each through `gpg --import`.

Note that I did not upload your key to any keyservers. If you want this
new signature to be available to others, please upload it yourself.
With GnuPG this can be done using
    gpg --keyserver hkps://keys.openpgp.org --send-key {key}

If you have any questions, don't hesitate to ask.

Regards
'''


def read_template(filename):
    with open(filename, 'r', encoding='utf-8') as fh:
        return fh.read()


def render_body(unit, template=DEFAULT_TEMPLATE):
    return template.format(
        uid=unit.user_id,
        key=unit.key_id,
        mykey=unit.signer_key_id,
        )


def check_template(template):
    """Raise :class:`InvalidTemplate` unless ``template`` can be filled in
    with the ``{uid}``, ``{key}`` and ``{mykey}`` fields.
    """

    try:
        template.format(uid=u'', key=u'', mykey=u'')
    except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
        raise InvalidTemplate(
            u'Cannot fill in the message template: {0!r}'.format(e))
    return template


def make_attachment(unit):
    attachment = MIMEBase('application', 'pgp-keys')
    attachment.add_header(
        'Content-Disposition', 'attachment',
        filename=unit.filename('asc', prefix='0x'))
    attachment['Content-Transfer-Encoding'] = '7bit'
    attachment.set_payload(armor_public_key(unit.key_data))
    return attachment


def build_message(unit, template=DEFAULT_TEMPLATE):
    """A ``multipart/mixed`` message with the filled in template and the
    armored minimal key.
    """

    utf8_qp = charset.Charset('utf-8')
    utf8_qp.body_encoding = charset.QP
    body = MIMEText(render_body(unit, template), 'plain', utf8_qp)
    body.add_header('Content-Disposition', 'inline')

    message = MIMEMultipart('mixed')
    message.attach(body)
    message.attach(make_attachment(unit))
    return message


def encrypt_message(message, unit, encryptor):
    """Wrap ``message`` into a ``multipart/encrypted`` message readable
    by the key's owner and the signer.
    """

    recipients = [unit.key_id, unit.signer_key_id]
    try:
        encrypted = encryptor.encrypt(message.as_bytes(), recipients)
    except GnuPGError as e:
        warnings.warn(
            'Could not encrypt for keys {0}, sending unencrypted:\n{1}'.format(
                ', '.join(recipients), e),
            EncryptionFailed)
        return message

    control = MIMEBase('application', 'pgp-encrypted')
    control.add_header('Content-Disposition', 'attachment')
    control['Content-Transfer-Encoding'] = '7bit'
    control.set_payload('Version: 1\n')

    payload = MIMEBase('application', 'octet-stream')
    payload.add_header('Content-Disposition', 'inline', filename='msg.asc')
    payload['Content-Transfer-Encoding'] = '7bit'
    payload.set_payload(encrypted)

    result = MIMEMultipart('encrypted', protocol='application/pgp-encrypted')
    result.attach(control)
    result.attach(payload)
    return result


def add_headers(message, unit):
    message['Subject'] = 'Your signed PGP key 0x{0}'.format(unit.key_id)
    if unit.emails:
        message['To'] = ', '.join(unit.emails)
    return message


@implementer(interfaces.INotifier)
class MailWriter(object):
    """Writes one message file per work unit into ``output_dir``."""

    def __init__(self, output_dir='.', template=DEFAULT_TEMPLATE,
                 encryptor=None):
        self.output_dir = output_dir
        self.template = template
        self.encryptor = encryptor

    def make_message(self, unit):
        message = build_message(unit, self.template)
        if self.encryptor is not None:
            message = encrypt_message(message, unit, self.encryptor)
        return add_headers(message, unit)

    def notify(self, unit):
        message = self.make_message(unit)
        path = os.path.join(self.output_dir, unit.filename('msg'))
        with open(path, 'wb') as fh:
            fh.write(message.as_bytes())
        return path
