import unittest

from kspmail import filters
from kspmail.models import Identity
from kspmail.models import Key
from kspmail.models import Signature
from kspmail.parse import ByteRange


def make_identity(self_signed=True, revoked=False, signed=False):
    identity = Identity(ByteRange(1, 1), user_id=u'Alice')
    if self_signed:
        identity.self_signature = ByteRange(2, 1)
    identity.revoked = revoked
    if signed:
        identity.signatures.append(
            Signature(ByteRange(3, 1), u'BBBBBBBBBBBBBBBB', 0x10))
    return identity


class TestFilterSelfSigned(unittest.TestCase):

    def test_keeps_self_signed(self):
        identity = make_identity()
        key = Key(ByteRange(0, 1), u'AAAAAAAAAAAAAAAA', [identity])
        result = filters.filter_self_signed([key])
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].identities, [identity])
        self.assertEqual(result[0].key_id, key.key_id)

    def test_drops_unsigned_and_revoked(self):
        kept = make_identity()
        key = Key(ByteRange(0, 1), u'AAAAAAAAAAAAAAAA', [
            make_identity(self_signed=False, signed=True),
            kept,
            make_identity(revoked=True, signed=True),
            ])
        result = filters.filter_self_signed([key])
        self.assertEqual(result[0].identities, [kept])

    def test_drops_empty_keys(self):
        keys = [
            Key(ByteRange(0, 1), u'AAAAAAAAAAAAAAAA',
                [make_identity(revoked=True)]),
            Key(ByteRange(5, 1), u'CCCCCCCCCCCCCCCC', []),
            Key(ByteRange(9, 1), u'DDDDDDDDDDDDDDDD', [make_identity()]),
            ]
        result = filters.filter_self_signed(keys)
        self.assertEqual([k.key_id for k in result], [u'DDDDDDDDDDDDDDDD'])

    def test_input_is_left_alone(self):
        key = Key(ByteRange(0, 1), u'AAAAAAAAAAAAAAAA',
                  [make_identity(self_signed=False), make_identity()])
        filters.filter_self_signed([key])
        self.assertEqual(len(key.identities), 2)


class TestFilterUnsigned(unittest.TestCase):

    def test_drops_identities_without_certification(self):
        signed = make_identity(signed=True)
        keys = [
            Key(ByteRange(0, 1), u'AAAAAAAAAAAAAAAA',
                [make_identity(), signed]),
            Key(ByteRange(9, 1), u'DDDDDDDDDDDDDDDD', [make_identity()]),
            ]
        result = filters.filter_unsigned(keys)
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].identities, [signed])
