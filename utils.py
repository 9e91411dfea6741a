import json

from errors import InvalidInput

HEX_PREFIX = '0x'


def to_bytes(value) -> bytes:
    """
    Normalizes a scalar into the canonical byte form used by the RLP codec.

    Args:
        value: A `0x`-prefixed hex string, a non-negative int, None, or a byte buffer.
               Odd-length hex is left padded with one zero nibble.

    Returns:
        bytes: The big-endian, minimal representation. Zero and None both map to b''.

    Raises:
        InvalidInput: For negative numbers, malformed hex and any other type.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if value is None:
        return b''
    if isinstance(value, bool):
        raise InvalidInput(f'cannot convert {value!r} to bytes')
    if isinstance(value, int):
        if value < 0:
            raise InvalidInput(f'negative numbers are not supported: {value}')
        return value.to_bytes((value.bit_length() + 7) // 8, 'big')
    if isinstance(value, str) and value.startswith(HEX_PREFIX):
        return hex_to_bytes(value)
    raise InvalidInput(f'cannot convert {type(value).__name__} to bytes')


def hex_to_bytes(value: str) -> bytes:
    digits = value[2:] if value.startswith(HEX_PREFIX) else value
    if len(digits) % 2:
        digits = '0' + digits
    try:
        return bytes.fromhex(digits)
    except ValueError as err:
        raise InvalidInput(f'invalid hex string: {value!r}') from err


def to_int(value) -> int:
    """Coerces the same inputs as `to_bytes` into a non-negative int (None is 0)."""
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise InvalidInput(f'negative numbers are not supported: {value}')
        return value
    return int.from_bytes(to_bytes(value), 'big')


def to_hex(data: bytes) -> str:
    """Renders bytes as a `0x`-prefixed lowercase hex string."""
    return HEX_PREFIX + bytes(data).hex()


def read_contract_json(file_name: str) -> dict:
    """
    Reads and parses a JSON file, typically a compiled contract artifact
    holding the contract's ABI and bytecode.

    Args:
        file_name (str): The path to the JSON file to be read.

    Returns:
        dict: The parsed JSON content of the file.
    """
    with open(file_name, 'r') as fle:
        return json.load(fle)
