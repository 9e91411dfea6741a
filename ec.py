import logging
from typing import Union

from eth_typing import HexStr
from web3 import Web3

logger = logging.getLogger(__name__)


class Client:
    """
    A JSON-RPC client for an Ethereum node. It only moves already encoded
    bytes around: raw signed transactions out, eth_call results back.
    """

    def __init__(self, url: str, w3: Web3 = None):
        """
        Initializes the Ethereum client.

        Args:
            url (str): The URL of the Ethereum node (e.g., 'http://localhost:8545').
            w3 (Web3, optional): An existing Web3 instance to use instead of an HTTP provider for `url`.
        """
        self.w3 = w3 if w3 is not None else Web3(Web3.HTTPProvider(url))

    def send_raw_transaction(self, raw_tx: Union[HexStr, bytes], wait: bool = False):
        """
        Sends a signed raw transaction (eth_sendRawTransaction).

        Args:
            raw_tx (Union[HexStr, bytes]): The transaction produced by `signer.sign_tx`.
            wait (bool): If True, waits until the transaction is mined and returns its receipt.

        Returns:
            str | web3.types.TxReceipt: The `0x` transaction hash, or the receipt when `wait` is set.
        """
        tx_hash = self.w3.eth.send_raw_transaction(raw_tx)
        logger.info('sent raw transaction %s', Web3.to_hex(tx_hash))
        if not wait:
            return Web3.to_hex(tx_hash)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        logger.debug('transaction %s mined with status %s', Web3.to_hex(tx_hash), receipt['status'])
        return receipt

    def call(self, to: str, data: Union[HexStr, bytes], from_address: str = None, block='latest') -> str:
        """
        Calls a read-only contract function (eth_call). No transaction is created.

        Args:
            to (str): The contract address.
            data (Union[HexStr, bytes]): Call data, e.g. from `abi.encode_function_call`.
            from_address (str, optional): The caller address.
            block: The block identifier. Defaults to 'latest'.

        Returns:
            str: The raw ABI-encoded result as `0x` hex.
        """
        call_obj = {'to': Web3.to_checksum_address(to), 'data': data}
        if from_address is not None:
            call_obj['from'] = Web3.to_checksum_address(from_address)
        result = self.w3.eth.call(call_obj, block_identifier=block)
        logger.debug('eth_call to %s returned %d bytes', call_obj['to'], len(result))
        return Web3.to_hex(result)
