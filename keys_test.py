import unittest

from eth_hash.auto import keccak
from eth_keys import keys as eth_keys

from errors import InvalidInput, SigningFailure
from keys import Keys, from_eth_v, sign_hash, to_eth_v

# First default development account of Hardhat/Anvil.
PRIVATE_KEY = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'
ADDRESS = '0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266'


class TestKeys(unittest.TestCase):
    def testAddress(self):
        self.assertEqual(Keys(PRIVATE_KEY).address, ADDRESS)
        self.assertEqual(Keys(bytes.fromhex(PRIVATE_KEY[2:])).address, ADDRESS)
        self.assertEqual(Keys(PRIVATE_KEY[2:]).address, ADDRESS)

    def testKeyNotInRepr(self):
        self.assertNotIn(PRIVATE_KEY[2:], repr(Keys(PRIVATE_KEY)))

    def testMalformedKey(self):
        with self.assertRaises(InvalidInput):
            Keys('0x1234')
        with self.assertRaises(InvalidInput):
            Keys('not a key')
        with self.assertRaises(InvalidInput):
            sign_hash(keccak(b'msg'), b'\x01' * 31)

    def testRejectedKey(self):
        for key in ('0x' + '00' * 32, '0x' + 'ff' * 32):
            with self.assertRaises(SigningFailure) as ctx:
                sign_hash(keccak(b'msg'), key)
            self.assertNotIn(key[2:], str(ctx.exception))
            with self.assertRaises(SigningFailure):
                Keys(key)

    def testRejectedHash(self):
        with self.assertRaises(SigningFailure):
            sign_hash(b'\x01' * 31, PRIVATE_KEY)


class TestSignHash(unittest.TestCase):
    def testDeterministicAndRecoverable(self):
        hashed = keccak(b'hello')
        v_raw, r, s = sign_hash(hashed, PRIVATE_KEY)
        self.assertEqual((v_raw, r, s), Keys(PRIVATE_KEY).sign_hash(hashed))
        self.assertIn(v_raw, (0, 1))
        signature = eth_keys.Signature(vrs=(v_raw, r, s))
        recovered = signature.recover_public_key_from_msg_hash(hashed).to_checksum_address()
        self.assertEqual(recovered, ADDRESS)


class TestEthV(unittest.TestCase):
    def testLegacyChainOffset(self):
        self.assertEqual(to_eth_v(0, 1), 10)
        self.assertEqual(to_eth_v(1, 1), 11)
        self.assertEqual(to_eth_v(1, 31337), 62683)

    def testNotEip155(self):
        # EIP-155 puts v at v_raw + 2 * chain_id + 35, 27 above what is produced here.
        for v_raw, chain_id in ((0, 1), (1, 5), (1, 31337)):
            eip155_v = v_raw + 2 * chain_id + 35
            self.assertEqual(to_eth_v(v_raw, chain_id), eip155_v - 27)
            # An EIP-155 v read back here yields a chain id 13 too high.
            self.assertEqual(from_eth_v(eip155_v), (v_raw, chain_id + 13))

    def testWithoutChainId(self):
        self.assertEqual(to_eth_v(0), 27)
        self.assertEqual(to_eth_v(1), 28)

    def testFromEthV(self):
        self.assertEqual(from_eth_v(62683), (1, 31337))
        self.assertEqual(from_eth_v(10), (0, 1))
        with self.assertRaises(InvalidInput):
            from_eth_v(1)


if __name__ == "__main__":
    unittest.main()
