import unittest
import warnings

from kspmail import assemble
from kspmail import exceptions
from kspmail import interfaces
from kspmail import test_keys
from kspmail.keys import read_keyring
from kspmail.models import Identity
from kspmail.models import Key
from kspmail.models import Signature
from kspmail.parse import ByteRange


KEY_ID = u'AAAAAAAAAAAAAAAA'
SIGNER_ID = u'BBBBBBBBBBBBBBBB'
OTHER_SIGNER_ID = u'CCCCCCCCCCCCCCCC'
DATA = b'MMMMuuSSxxxyyUUTTzz'


def make_keys():
    alice = Identity(ByteRange(4, 2), user_id=u'Alice <alice@x.org>',
                     self_signature=ByteRange(6, 2),
                     emails=[u'alice@x.org'])
    alice.signatures = [
        Signature(ByteRange(8, 3), SIGNER_ID, 0x10),
        Signature(ByteRange(11, 2), OTHER_SIGNER_ID, 0x13),
        ]
    attribute = Identity(ByteRange(13, 2), self_signature=ByteRange(15, 2))
    attribute.signatures = [Signature(ByteRange(17, 2), SIGNER_ID, 0x10)]
    return [Key(ByteRange(0, 4), KEY_ID, [alice, attribute])]


class TestMakeMinimalKey(unittest.TestCase):

    def test_packet_order(self):
        key, = make_keys()
        identity = key.identities[0]
        result = assemble.make_minimal_key(
            DATA, key, identity, identity.signatures[1])
        self.assertEqual(result, b'MMMM' b'uu' b'SS' b'yy')


class TestIterWorkUnits(unittest.TestCase):

    def units(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            units = list(assemble.iter_work_units(DATA, make_keys()))
        return units, caught

    def test_one_unit_per_signature(self):
        units, _ = self.units()
        self.assertEqual(
            [(u.key_id, u.identity_index, u.signer_key_id) for u in units],
            [(KEY_ID, 0, SIGNER_ID),
             (KEY_ID, 0, OTHER_SIGNER_ID),
             (KEY_ID, 1, SIGNER_ID)])
        self.assertEqual([u.key_data for u in units],
                         [b'MMMMuuSSxxx', b'MMMMuuSSyy', b'MMMMUUTTzz'])
        for unit in units:
            self.assertTrue(interfaces.IWorkUnit.providedBy(unit))

    def test_metadata(self):
        units, _ = self.units()
        self.assertEqual(units[0].user_id, u'Alice <alice@x.org>')
        self.assertEqual(units[0].emails, [u'alice@x.org'])
        self.assertEqual(units[2].user_id, u'[user attribute]')

    def test_missing_address_warns(self):
        units, caught = self.units()
        self.assertEqual(units[2].emails, [])
        self.assertEqual(len(caught), 1)
        self.assertTrue(issubclass(caught[0].category,
                                   exceptions.NoRecipientAddress))

    def test_filenames_are_unique(self):
        units, _ = self.units()
        names = set(u.filename('msg') for u in units)
        self.assertEqual(len(names), len(units))
        self.assertEqual(
            units[1].filename('asc', prefix='0x'),
            u'0xAAAAAAAAAAAAAAAA.0.signed-by-0xCCCCCCCCCCCCCCCC.asc')

    def test_minimal_key_lists_four_packets(self):
        factory = test_keys.KeyringFactory()
        factory.public_key(KEY_ID)
        factory.user_id(u'Alice <alice@x.org>')
        factory.signature(KEY_ID, 0x13)
        factory.signature(SIGNER_ID, 0x10)
        factory.user_id(u'Alice <alice@y.org>')
        factory.signature(KEY_ID, 0x13)
        data = factory.keyring()
        keys = read_keyring(data, factory.listing().splitlines(),
                            [SIGNER_ID])
        keys[0].identities[0].emails = [u'alice@x.org']

        unit, = assemble.iter_work_units(data, keys)

        # Frame the packets of the minimal key again
        offset = 0
        tags = []
        while offset < len(unit.key_data):
            tags.append(unit.key_data[offset] & 0x3f)
            offset += 2 + unit.key_data[offset + 1]
        self.assertEqual(offset, len(unit.key_data))
        self.assertEqual(tags, [
            test_keys.PUBLIC_KEY_TAG, test_keys.USER_ID_TAG,
            test_keys.SIGNATURE_TAG, test_keys.SIGNATURE_TAG])
