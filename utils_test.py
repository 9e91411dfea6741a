import json
import os
import tempfile
import unittest

from errors import InvalidInput
from utils import read_contract_json, to_bytes, to_hex, to_int


class TestUtils(unittest.TestCase):
    def testToBytes(self):
        self.assertEqual(to_bytes(0), b'')
        self.assertEqual(to_bytes(None), b'')
        self.assertEqual(to_bytes(1), b'\x01')
        self.assertEqual(to_bytes(256), b'\x01\x00')
        self.assertEqual(to_bytes('0xabc'), b'\x0a\xbc')
        self.assertEqual(to_bytes('0xABCD'), b'\xab\xcd')
        self.assertEqual(to_bytes(bytearray(b'\x00\x01')), b'\x00\x01')

    def testToBytesRejects(self):
        for value in (-1, True, 'abc', 1.0, object(), '0xgg'):
            with self.assertRaises(InvalidInput):
                to_bytes(value)

    def testToInt(self):
        self.assertEqual(to_int(None), 0)
        self.assertEqual(to_int(31337), 31337)
        self.assertEqual(to_int('0x7a69'), 31337)
        self.assertEqual(to_int(b'\x7a\x69'), 31337)
        with self.assertRaises(InvalidInput):
            to_int(-3)

    def testToHex(self):
        self.assertEqual(to_hex(b''), '0x')
        self.assertEqual(to_hex(b'\xAB\x01'), '0xab01')

    def testReadContractJson(self):
        artifact = {'abi': [{'type': 'function', 'name': 'retrieve', 'inputs': []}], 'bytecode': '0x00'}
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'Storage.json')
            with open(path, 'w') as fle:
                json.dump(artifact, fle)
            self.assertEqual(read_contract_json(path), artifact)


if __name__ == "__main__":
    unittest.main()
