"""
Recursive Length Prefix encoding, the serialization every transaction envelope
is built on. Scalars are normalized with `utils.to_bytes` before encoding.
"""
from errors import InvalidInput
from utils import to_bytes

STRING_OFFSET = 0x80
LIST_OFFSET = 0xc0
# Payloads shorter than this carry their length in the prefix byte itself.
SHORT_LENGTH_LIMIT = 56
MAX_LENGTH_OF_LENGTH = 8


def encode_length(length: int, offset: int) -> bytes:
    """
    Builds the length prefix of a string (offset 0x80) or list (offset 0xc0) payload.

    Args:
        length (int): The payload length in bytes.
        offset (int): `STRING_OFFSET` or `LIST_OFFSET`.

    Returns:
        bytes: One prefix byte for short payloads, otherwise the prefix byte
               followed by the minimal big-endian length.
    """
    if length < SHORT_LENGTH_LIMIT:
        return bytes([offset + length])
    length_bytes = length.to_bytes((length.bit_length() + 7) // 8, 'big')
    if len(length_bytes) > MAX_LENGTH_OF_LENGTH:
        raise InvalidInput('input too long')
    return bytes([offset + SHORT_LENGTH_LIMIT - 1 + len(length_bytes)]) + length_bytes


def encode_bytes(data: bytes) -> bytes:
    if len(data) == 1 and data[0] < STRING_OFFSET:
        return data
    return encode_length(len(data), STRING_OFFSET) + data


def is_list(item) -> bool:
    return isinstance(item, (list, tuple))


def rlp_encode(item) -> bytes:
    """
    RLP-encodes a scalar or an arbitrarily nested list of scalars.

    Nested lists are walked with an explicit stack of (children iterator,
    encoded parts) frames, so the nesting depth is not bounded by the
    interpreter's recursion limit.

    Args:
        item: A scalar accepted by `utils.to_bytes`, or a list/tuple of items.

    Returns:
        bytes: The encoded item.
    """
    if not is_list(item):
        return encode_bytes(to_bytes(item))

    stack = [(iter(item), [])]
    while True:
        children, parts = stack[-1]
        for child in children:
            if is_list(child):
                stack.append((iter(child), []))
                break
            parts.append(encode_bytes(to_bytes(child)))
        else:
            stack.pop()
            payload = b''.join(parts)
            encoded = encode_length(len(payload), LIST_OFFSET) + payload
            if not stack:
                return encoded
            stack[-1][1].append(encoded)
