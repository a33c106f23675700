import email
import os
import shutil
import tempfile
import unittest
from unittest import mock
import warnings

from kspmail import armor
from kspmail import exceptions
from kspmail import interfaces
from kspmail import mail
from kspmail.assemble import WorkUnit


KEY_ID = u'AAAAAAAAAAAAAAAA'
SIGNER_ID = u'BBBBBBBBBBBBBBBB'
ENCRYPTED = (
    u'-----BEGIN PGP MESSAGE-----\n\nhQEMA0SHKJJ2SK==\n=abcd\n'
    u'-----END PGP MESSAGE-----\n'
    )


def make_unit(emails=(u'juergen@x.org',)):
    return WorkUnit(KEY_ID, 1, u'J\xfcrgen <juergen@x.org>', SIGNER_ID,
                    emails, b'\x99\x01\x0d\xb4\x00')


class TestBuildMessage(unittest.TestCase):

    def test_body(self):
        message = mail.build_message(make_unit())
        self.assertEqual(message.get_content_type(), 'multipart/mixed')
        body, attachment = message.get_payload()
        self.assertEqual(body.get_content_type(), 'text/plain')
        self.assertEqual(body['Content-Transfer-Encoding'],
                         'quoted-printable')
        text = body.get_payload(decode=True).decode('utf-8')
        self.assertIn(u'    J\xfcrgen <juergen@x.org>\n', text)
        self.assertIn(u'of your key {0} signed by me ({1}).'.format(
            KEY_ID, SIGNER_ID), text)

    def test_custom_template(self):
        message = mail.build_message(make_unit(), u'{key}/{mykey}: {uid}\n')
        body = message.get_payload(0).get_payload(decode=True)
        self.assertEqual(
            body.decode('utf-8'),
            u'{0}/{1}: J\xfcrgen <juergen@x.org>\n'.format(KEY_ID, SIGNER_ID))

    def test_attachment(self):
        attachment = mail.build_message(make_unit()).get_payload(1)
        self.assertEqual(attachment.get_content_type(), 'application/pgp-keys')
        self.assertEqual(
            attachment.get_filename(),
            u'0xAAAAAAAAAAAAAAAA.1.signed-by-0xBBBBBBBBBBBBBBBB.asc')
        self.assertEqual(attachment.get_payload(),
                         armor.armor_public_key(b'\x99\x01\x0d\xb4\x00'))


class TestCheckTemplate(unittest.TestCase):

    def test_default_template(self):
        self.assertEqual(mail.check_template(mail.DEFAULT_TEMPLATE),
                         mail.DEFAULT_TEMPLATE)

    def test_bad_templates(self):
        for template in (u'Hi {name}', u'{', u'{0}', u'{key.upper.x}'):
            self.assertRaises(exceptions.InvalidTemplate,
                              mail.check_template, template)


class TestEncryptMessage(unittest.TestCase):

    def test_encrypt(self):
        encryptor = mock.Mock()
        encryptor.encrypt.return_value = ENCRYPTED
        message = mail.build_message(make_unit())

        result = mail.encrypt_message(message, make_unit(), encryptor)

        self.assertEqual(result.get_content_type(), 'multipart/encrypted')
        self.assertEqual(result.get_param('protocol'),
                         'application/pgp-encrypted')
        control, payload = result.get_payload()
        self.assertEqual(control.get_content_type(),
                         'application/pgp-encrypted')
        self.assertEqual(control.get_payload(), u'Version: 1\n')
        self.assertEqual(payload.get_content_type(),
                         'application/octet-stream')
        self.assertEqual(payload.get_filename(), u'msg.asc')
        self.assertEqual(payload.get_payload(), ENCRYPTED)
        data, recipients = encryptor.encrypt.call_args[0]
        self.assertEqual(data, message.as_bytes())
        self.assertEqual(recipients, [KEY_ID, SIGNER_ID])

    def test_encryption_failure(self):
        encryptor = mock.Mock()
        encryptor.encrypt.side_effect = exceptions.GnuPGError(
            ['gpg', '--encrypt'], 2, b'gpg: AAAAAAAAAAAAAAAA: skipped')
        message = mail.build_message(make_unit())

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            result = mail.encrypt_message(message, make_unit(), encryptor)

        self.assertIs(result, message)
        self.assertEqual(len(caught), 1)
        self.assertTrue(issubclass(caught[0].category,
                                   exceptions.EncryptionFailed))
        self.assertIn(KEY_ID, str(caught[0].message))
        self.assertIn(SIGNER_ID, str(caught[0].message))


class TestMailWriter(unittest.TestCase):

    def setUp(self):
        self.output_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.output_dir)

    def read(self, path):
        with open(path, 'rb') as fh:
            return email.message_from_bytes(fh.read())

    def test_provides_notifier(self):
        self.assertTrue(interfaces.INotifier.providedBy(
            mail.MailWriter(self.output_dir)))

    def test_notify(self):
        writer = mail.MailWriter(self.output_dir)
        unit = make_unit([u'juergen@x.org', u'j@y.org'])

        path = writer.notify(unit)

        self.assertEqual(path, os.path.join(
            self.output_dir,
            u'AAAAAAAAAAAAAAAA.1.signed-by-BBBBBBBBBBBBBBBB.msg'))
        message = self.read(path)
        self.assertEqual(message['Subject'],
                         u'Your signed PGP key 0xAAAAAAAAAAAAAAAA')
        self.assertEqual(message['To'], u'juergen@x.org, j@y.org')
        self.assertEqual(message.get_content_type(), 'multipart/mixed')

    def test_notify_without_recipients(self):
        writer = mail.MailWriter(self.output_dir)
        message = self.read(writer.notify(make_unit(emails=[])))
        self.assertIsNone(message['To'])

    def test_notify_encrypted(self):
        encryptor = mock.Mock()
        encryptor.encrypt.return_value = ENCRYPTED
        writer = mail.MailWriter(self.output_dir, encryptor=encryptor)

        message = self.read(writer.notify(make_unit()))

        self.assertEqual(message.get_content_type(), 'multipart/encrypted')
        self.assertEqual(message['To'], u'juergen@x.org')
        self.assertEqual(encryptor.encrypt.call_count, 1)
