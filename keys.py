from eth_account import Account
from web3 import Web3

from errors import InvalidInput, SigningFailure
from utils import to_bytes

# Offset applied to the chain id in legacy signatures: v = v_raw + 2 * chain_id + CHAIN_ID_OFFSET,
# with v_raw the 0/1 recovery id. EIP-155 specifies 35, so nodes enforcing EIP-155 will not accept
# these legacy signatures, and legacy transactions signed with the EIP-155 formula elsewhere
# decode here with a chain id 13 too high.
CHAIN_ID_OFFSET = 8
V_OFFSET = 27  # eth_account reports v as 27/28, the recovery id is v - V_OFFSET.
PRIVATE_KEY_SIZE = 32


class Keys:
    """
    Holds a private key and the address derived from it.
    The key is never part of `repr` or of any error message.
    """

    def __init__(self, priv_key):
        """
        Args:
            priv_key (bytes | str): The 32-byte private key, raw or as a `0x` hex string.
        """
        self.priv_key_bytes = normalize_private_key(priv_key)
        try:
            account = Account.from_key(self.priv_key_bytes)
        except Exception as err:
            raise SigningFailure('private key rejected by the signing primitive') from err
        self.address = Web3.to_checksum_address(account.address)

    def __repr__(self):
        return f'Keys(address={self.address})'

    def sign_hash(self, hashed: bytes) -> tuple:
        return sign_hash(hashed, self.priv_key_bytes)


def normalize_private_key(priv_key) -> bytes:
    if isinstance(priv_key, str) and not priv_key.startswith('0x'):
        priv_key = '0x' + priv_key
    try:
        key = to_bytes(priv_key)
    except InvalidInput as err:
        raise InvalidInput('private key must be 32 bytes or a 0x-prefixed hex string') from err
    if len(key) != PRIVATE_KEY_SIZE:
        raise InvalidInput(f'private key must be {PRIVATE_KEY_SIZE} bytes, got {len(key)}')
    return key


def sign_hash(hashed: bytes, priv_key) -> tuple:
    """
    Signs a 32-byte hash with ECDSA-secp256k1 (deterministic, RFC 6979).

    Args:
        hashed (bytes): The message hash, e.g. a transaction signing hash.
        priv_key (bytes | str): The private key, raw or as hex.

    Returns:
        tuple: (v_raw, r, s) where v_raw is the recovery id (0 or 1) and r, s are ints.

    Raises:
        SigningFailure: When the key or the hash is rejected.
    """
    key = normalize_private_key(priv_key)
    try:
        # Signs the raw hash, no EIP-191 message prefix is added.
        signed = Account.unsafe_sign_hash(hashed, key)
    except Exception as err:
        raise SigningFailure('could not sign hash') from err
    return signed.v - V_OFFSET, signed.r, signed.s


def to_eth_v(v_raw: int, chain_id: int = None) -> int:
    """
    Turns a recovery id into the 'v' of a legacy transaction.

    Args:
        v_raw (int): The recovery id returned by the signing algorithm (0 or 1).
        chain_id (int, optional): The chain id. If None, the pre-EIP-155 form (27 or 28) is returned.

    Returns:
        int: v_raw + 2 * chain_id + CHAIN_ID_OFFSET, or v_raw + 27 without a chain id.
    """
    if chain_id is None:
        return v_raw + V_OFFSET
    # Two chain ids per step so the parity still carries the recovery id.
    return v_raw + CHAIN_ID_OFFSET + 2 * chain_id


def from_eth_v(v: int):
    """Inverse of `to_eth_v` for chain-bound signatures: returns (v_raw, chain_id)."""
    if v < CHAIN_ID_OFFSET:
        raise InvalidInput(f'v={v} does not carry a chain id')
    # parity is the recovery id, the rest is twice the chain id
    return (v - CHAIN_ID_OFFSET) % 2, (v - CHAIN_ID_OFFSET) // 2
