from enum import IntEnum

import rlp
from eth_hash.auto import keccak
from rlp.exceptions import RLPException
from rlp.sedes import big_endian_int

from errors import InvalidInput
from keys import from_eth_v, to_eth_v
from rlp_encoding import rlp_encode
from utils import hex_to_bytes, to_bytes, to_hex, to_int

ADDRESS_SIZE = 20
STORAGE_KEY_SIZE = 32
DEFAULT_CHAIN_ID = 1


class TxType(IntEnum):
    """The transaction envelopes. Typed envelopes are prefixed with their value on the wire."""
    LEGACY = 0
    ACCESS_LIST = 1  # EIP-2930
    DYNAMIC_FEE = 2  # EIP-1559


def is_present(fields: dict, name: str) -> bool:
    # Key membership, not truthiness: an explicit None or [] still selects the envelope.
    return name in fields


def select_tx_type(fields: dict) -> TxType:
    """
    Picks the envelope from the keys that are present, whatever their value (None included).
    There is no explicit type field: both fee caps select EIP-1559, otherwise an access list
    selects EIP-2930, otherwise legacy.
    """
    if is_present(fields, 'maxFeePerGas') and is_present(fields, 'maxPriorityFeePerGas'):
        return TxType.DYNAMIC_FEE
    if is_present(fields, 'accessList'):
        return TxType.ACCESS_LIST
    return TxType.LEGACY


def to_address(value, allow_empty=False) -> bytes:
    addr = to_bytes(value) if value else b''
    if len(addr) == ADDRESS_SIZE or (allow_empty and not addr):
        return addr
    raise InvalidInput(f'address must be {ADDRESS_SIZE} bytes, got {len(addr)}')


class TxParams:
    """
    The fields shared by every transaction envelope.
    """

    def __init__(self, chain_id: int = DEFAULT_CHAIN_ID, nonce: int = 0, gas: int = 0, to=b'', value=0, data=b''):
        """
        Args:
            chain_id (int): The EIP-155 chain ID of the network (e.g., 1 for Mainnet, 31337 for a local node).
            nonce (int): The transaction count of the sender.
            gas (int): The maximum amount of gas the transaction is allowed to consume.
            to (bytes | str): The 20-byte recipient address. Empty for contract creation.
            value (int): The amount of Ether (in Wei) to send with the transaction.
            data (bytes | str): The payload, e.g. contract call data built with `abi.encode_function_call`.
        """
        self.chain_id = DEFAULT_CHAIN_ID if chain_id is None else to_int(chain_id)
        self.nonce = to_int(nonce)
        self.gas = to_int(gas)
        self.to = to_address(to, allow_empty=True)
        self.value = to_int(value)
        self.data = to_bytes(data) if data else b''

    @classmethod
    def from_fields(cls, fields: dict) -> 'TxParams':
        # None values fall back to the defaults: 0, empty bytes, chain id 1.
        return cls(chain_id=fields.get('chainId'),
                   nonce=fields.get('nonce'), gas=fields.get('gas'),
                   to=fields.get('to'), value=fields.get('value'), data=fields.get('data'))

    def to_dict(self) -> dict:
        return {'chainId': self.chain_id, 'nonce': self.nonce, 'gas': self.gas,
                'to': to_hex(self.to) if self.to else None, 'value': self.value, 'data': to_hex(self.data)}


class AccessTuple:
    """
    An EIP-2930 access list entry: an address and the storage keys of that account
    the transaction is expected to touch.
    """

    def __init__(self, addr, storage_keys):
        self.addr = to_address(addr)
        self.storage_keys = [to_bytes(key) for key in storage_keys]
        for key in self.storage_keys:
            if len(key) != STORAGE_KEY_SIZE:
                raise InvalidInput(f'storage key must be {STORAGE_KEY_SIZE} bytes, got {len(key)}')

    @classmethod
    def from_entry(cls, entry) -> 'AccessTuple':
        """Accepts an AccessTuple, a JSON-RPC style dict ({'address', 'storageKeys'}) or an (address, keys) pair."""
        if isinstance(entry, AccessTuple):
            return entry
        if isinstance(entry, dict):
            return cls(entry.get('address'), entry.get('storageKeys') or [])
        try:
            addr, storage_keys = entry
        except (TypeError, ValueError) as err:
            raise InvalidInput(f'malformed access list entry: {entry!r}') from err
        return cls(addr, storage_keys)

    def encode(self) -> list:
        """Returns [address, [storage keys]], ready for RLP encoding."""
        return [self.addr, list(self.storage_keys)]

    def to_dict(self) -> dict:
        return {'address': to_hex(self.addr), 'storageKeys': [to_hex(key) for key in self.storage_keys]}


class Transaction:
    """
    Common behaviour of the envelopes. Subclasses provide `signing_fields` (the list
    whose RLP encoding is hashed) and `raw_fields` (the list broadcast with the signature).
    """
    tx_type = None

    def __init__(self, tx_params: TxParams):
        self.tx_params = tx_params

    def signing_fields(self) -> list:
        raise NotImplementedError

    def raw_fields(self, v: int, r, s) -> list:
        raise NotImplementedError

    def signature_v(self, v_raw: int) -> int:
        raise NotImplementedError

    def prefix(self) -> bytes:
        return b'' if self.tx_type == TxType.LEGACY else bytes([self.tx_type])

    def hash(self) -> bytes:
        """
        Calculates the signing hash: Keccak-256 of the RLP-encoded signing fields.
        For typed envelopes the type byte is prepended before hashing.

        Returns:
            bytes: The 32-byte hash to sign.
        """
        return keccak(self.prefix() + rlp_encode(self.signing_fields()))

    def encode_with_sig(self, v: int, r, s) -> bytes:
        """
        Encodes the transaction into its raw, signed form, ready for broadcasting.

        Args:
            v (int): The 'v' component, already derived with `signature_v`.
            r (int | bytes): The 'r' component of the signature.
            s (int | bytes): The 's' component of the signature.

        Returns:
            bytes: The type byte (typed envelopes only) followed by the RLP-encoded raw fields.
        """
        return self.prefix() + rlp_encode(self.raw_fields(v, r, s))

    def encode(self) -> bytes:
        """Unsigned raw encoding with v = r = s = 0, for previews only."""
        return self.encode_with_sig(0, 0, 0)

    def to_dict(self) -> dict:
        return self.tx_params.to_dict()


class LegacyTx(Transaction):
    """A pre-EIP-2930 transaction whose signature is bound to the chain id (EIP-155 style)."""
    tx_type = TxType.LEGACY

    def __init__(self, tx_params: TxParams, gas_price: int = 0):
        super().__init__(tx_params)
        self.gas_price = to_int(gas_price)

    def base_fields(self) -> list:
        p = self.tx_params
        # nonce, gasPrice, gasLimit, to, value, data: the order is fixed by the wire format.
        return [p.nonce, self.gas_price, p.gas, p.to, p.value, p.data]

    def signing_fields(self) -> list:
        # EIP-155 preimage: the chain id and two zeros take the place of v, r, s.
        return self.base_fields() + [self.tx_params.chain_id, 0, 0]

    def raw_fields(self, v: int, r, s) -> list:
        return self.base_fields() + [v, r, s]

    def signature_v(self, v_raw: int) -> int:
        return to_eth_v(v_raw, self.tx_params.chain_id)

    def to_dict(self) -> dict:
        fields = super().to_dict()
        fields['gasPrice'] = self.gas_price
        return fields


class TypedTx(Transaction):
    """
    An EIP-2718 typed envelope carrying an access list. The fee fields sit between
    the nonce and the gas limit, and 'v' is the bare recovery id.
    """

    def __init__(self, tx_params: TxParams, acc_list=None):
        super().__init__(tx_params)
        self.acc_list = [AccessTuple.from_entry(entry) for entry in acc_list or []]

    def fee_fields(self) -> list:
        raise NotImplementedError

    def signing_fields(self) -> list:
        p = self.tx_params
        # chainId and nonce lead, the fee fields (gasPrice, or tip cap then fee cap) follow,
        # the access list closes the list.
        return [p.chain_id, p.nonce, *self.fee_fields(), p.gas, p.to, p.value, p.data,
                [entry.encode() for entry in self.acc_list]]

    def raw_fields(self, v: int, r, s) -> list:
        # The signed envelope is the signing preimage with v, r, s appended.
        return self.signing_fields() + [v, r, s]

    def signature_v(self, v_raw: int) -> int:
        return v_raw  # y-parity, 0 or 1

    def to_dict(self) -> dict:
        fields = super().to_dict()
        fields['accessList'] = [entry.to_dict() for entry in self.acc_list]
        return fields


class AccessListTx(TypedTx):
    """EIP-2930 (type 1) transaction: legacy gas price plus an access list."""
    tx_type = TxType.ACCESS_LIST

    def __init__(self, tx_params: TxParams, acc_list=None, gas_price: int = 0):
        super().__init__(tx_params, acc_list)
        self.gas_price = to_int(gas_price)

    def fee_fields(self) -> list:
        return [self.gas_price]

    def to_dict(self) -> dict:
        fields = super().to_dict()
        fields['gasPrice'] = self.gas_price
        return fields


class DynamicFeeTx(TypedTx):
    """EIP-1559 (type 2) transaction with a priority fee (tip) cap and a total fee cap."""
    tx_type = TxType.DYNAMIC_FEE

    def __init__(self, tx_params: TxParams, acc_list=None, gas_tip_cap: int = 0, gas_fee_cap: int = 0):
        super().__init__(tx_params, acc_list)
        self.gas_tip = to_int(gas_tip_cap)  # maxPriorityFeePerGas
        self.gas_fee = to_int(gas_fee_cap)  # maxFeePerGas

    def fee_fields(self) -> list:
        return [self.gas_tip, self.gas_fee]

    def to_dict(self) -> dict:
        fields = super().to_dict()
        fields['maxPriorityFeePerGas'] = self.gas_tip
        fields['maxFeePerGas'] = self.gas_fee
        return fields


def build_tx(fields: dict) -> Transaction:
    """
    Builds the transaction model for a field record.

    Args:
        fields (dict): camelCase fields (nonce, gasPrice or maxPriorityFeePerGas + maxFeePerGas,
                       gas, to, value, data, chainId, accessList). Missing numbers default to 0,
                       missing to/data to empty bytes, a missing chainId to 1.

    Returns:
        Transaction: A LegacyTx, AccessListTx or DynamicFeeTx, chosen by `select_tx_type`.
    """
    tx_params = TxParams.from_fields(fields)
    tx_type = select_tx_type(fields)
    if tx_type == TxType.DYNAMIC_FEE:
        return DynamicFeeTx(tx_params, fields.get('accessList'),
                            gas_tip_cap=fields.get('maxPriorityFeePerGas'), gas_fee_cap=fields.get('maxFeePerGas'))
    if tx_type == TxType.ACCESS_LIST:
        # An access list given as None is encoded as the empty list.
        return AccessListTx(tx_params, fields.get('accessList'), gas_price=fields.get('gasPrice'))
    return LegacyTx(tx_params, gas_price=fields.get('gasPrice'))


RAW_FIELD_COUNTS = {TxType.LEGACY: 9, TxType.ACCESS_LIST: 11, TxType.DYNAMIC_FEE: 12}


def decode_tx(raw) -> tuple:
    """
    Parses a raw transaction produced by `Transaction.encode_with_sig` or `Transaction.encode`.

    Legacy chain ids are read back with `keys.from_eth_v`. A legacy transaction signed with the
    EIP-155 formula (+35) comes back with a chain id 13 too high.

    Args:
        raw (bytes | str): The raw transaction, as bytes or `0x` hex.

    Returns:
        tuple: (transaction, (v, r, s)). `transaction.encode_with_sig(v, r, s)` reproduces `raw`.

    Raises:
        InvalidInput: If the bytes are not a well-formed transaction of a known type.
    """
    raw = hex_to_bytes(raw) if isinstance(raw, str) else bytes(raw)
    if not raw:
        raise InvalidInput('empty transaction')
    if raw[0] in (TxType.ACCESS_LIST, TxType.DYNAMIC_FEE):
        tx_type, payload = TxType(raw[0]), raw[1:]
    elif raw[0] >= 0xc0:
        tx_type, payload = TxType.LEGACY, raw
    else:
        raise InvalidInput(f'unknown transaction type {raw[0]:#04x}')

    try:
        items = rlp.decode(payload)
        if not isinstance(items, list) or len(items) != RAW_FIELD_COUNTS[tx_type]:
            raise InvalidInput(f'malformed {tx_type.name} transaction')
        return _from_items(tx_type, items)
    except RLPException as err:
        raise InvalidInput(f'malformed {tx_type.name} transaction') from err


def _from_items(tx_type: TxType, items: list) -> tuple:
    def uint(item):
        return big_endian_int.deserialize(item)

    v, r, s = (uint(item) for item in items[-3:])
    if tx_type == TxType.LEGACY:
        nonce, gas_price, gas, to, value, data = items[:6]
        # Unsigned legacy transactions (v == 0) do not carry their chain id.
        chain_id = from_eth_v(v)[1] if v else DEFAULT_CHAIN_ID
        tx_params = TxParams(chain_id, uint(nonce), uint(gas), to, uint(value), data)
        return LegacyTx(tx_params, gas_price=uint(gas_price)), (v, r, s)

    acc_list = [AccessTuple.from_entry(entry) for entry in items[-4]]
    if tx_type == TxType.ACCESS_LIST:
        chain_id, nonce, gas_price, gas, to, value, data = items[:7]
        tx = AccessListTx(TxParams(uint(chain_id), uint(nonce), uint(gas), to, uint(value), data),
                          acc_list, gas_price=uint(gas_price))
    else:
        chain_id, nonce, gas_tip, gas_fee, gas, to, value, data = items[:8]
        tx = DynamicFeeTx(TxParams(uint(chain_id), uint(nonce), uint(gas), to, uint(value), data),
                          acc_list, gas_tip_cap=uint(gas_tip), gas_fee_cap=uint(gas_fee))
    return tx, (v, r, s)
