import unittest
from unittest import mock

from ec import Client

CONTRACT = '0x5fbdb2315678afecb367f032d93f642f64180aa3'
SENDER = '0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266'


class TestClient(unittest.TestCase):
    def setUp(self):
        self.w3 = mock.Mock()
        self.client = Client('http://localhost:8545', w3=self.w3)

    def testSendRawTransaction(self):
        self.w3.eth.send_raw_transaction.return_value = b'\xab' * 32
        self.assertEqual(self.client.send_raw_transaction('0x02f8'), '0x' + 'ab' * 32)
        self.w3.eth.send_raw_transaction.assert_called_once_with('0x02f8')
        self.w3.eth.wait_for_transaction_receipt.assert_not_called()

    def testSendAndWait(self):
        receipt = {'status': 1, 'transactionHash': b'\xab' * 32}
        self.w3.eth.send_raw_transaction.return_value = b'\xab' * 32
        self.w3.eth.wait_for_transaction_receipt.return_value = receipt
        self.assertIs(self.client.send_raw_transaction('0x02f8', wait=True), receipt)
        self.w3.eth.wait_for_transaction_receipt.assert_called_once_with(b'\xab' * 32)

    def testCall(self):
        self.w3.eth.call.return_value = (11111).to_bytes(32, 'big')
        result = self.client.call(CONTRACT, '0x2e64cec1', from_address=SENDER)
        self.assertEqual(int(result, 16), 11111)
        self.w3.eth.call.assert_called_once_with(
            {'to': '0x5FbDB2315678afecb367f032d93F642f64180aa3', 'data': '0x2e64cec1',
             'from': '0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266'},
            block_identifier='latest')

    def testCallWithoutSender(self):
        self.w3.eth.call.return_value = b''
        self.assertEqual(self.client.call(CONTRACT, b'\x2e\x64\xce\xc1', block=5), '0x')
        call_obj = self.w3.eth.call.call_args[0][0]
        self.assertNotIn('from', call_obj)
        self.assertEqual(self.w3.eth.call.call_args[1], {'block_identifier': 5})


if __name__ == "__main__":
    unittest.main()
