import logging
from typing import NamedTuple

from eth_hash.auto import keccak

from keys import sign_hash
from model import build_tx
from utils import to_hex

logger = logging.getLogger(__name__)


class SignedTx(NamedTuple):
    raw_transaction: bytes
    hash: bytes  # Keccak-256 of raw_transaction, the id nodes report for it
    v: int
    r: int
    s: int


def serialize_tx(fields: dict) -> str:
    """
    Serializes a transaction without a signature (v = r = s = 0).
    Only meant for previews, a node rejects it.

    Args:
        fields (dict): The transaction field record, see `model.build_tx`.

    Returns:
        str: The `0x`-prefixed raw transaction.
    """
    return to_hex(build_tx(fields).encode())


def sign_transaction(fields: dict, private_key) -> SignedTx:
    """
    Builds, hashes and signs a transaction of the envelope selected by the present fields.

    Args:
        fields (dict): The transaction field record, see `model.build_tx`.
        private_key (bytes | str): The 32-byte signing key, raw or `0x` hex. It is only read.

    Returns:
        SignedTx: The raw signed transaction, its hash and the (v, r, s) that were embedded.

    Raises:
        InvalidInput: If a field or the key cannot be normalized.
        SigningFailure: If the signing primitive rejects the key.
    """
    tx = build_tx(fields)
    signing_hash = tx.hash()
    logger.debug('signing %s transaction with hash %s', tx.tx_type.name, to_hex(signing_hash))
    v_raw, r, s = sign_hash(signing_hash, private_key)
    v = tx.signature_v(v_raw)
    raw = tx.encode_with_sig(v, r, s)
    return SignedTx(raw, keccak(raw), v, r, s)


def sign_tx(fields: dict, private_key) -> str:
    """Signs a transaction and returns the raw transaction as `0x` hex, ready for eth_sendRawTransaction."""
    return to_hex(sign_transaction(fields, private_key).raw_transaction)
