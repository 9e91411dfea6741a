from eth_hash.auto import keccak

from errors import ArityMismatch, InvalidBytesLength, InvalidInput, NegativeValue, UnsupportedType
from utils import HEX_PREFIX, hex_to_bytes, to_bytes, to_hex

WORD_SIZE = 32
MAX_UINT256 = 2 ** 256 - 1
ADDRESS_SIZE = 20

STATIC_TYPES = ('uint256', 'address', 'bool')  # plus bytes1..bytes32, one head word each
DYNAMIC_TYPES = ('bytes', 'string')  # plus T[], an offset word in the head and a tail block
TYPE_ALIASES = {'uint': 'uint256'}


def get_type_def_from_encode(abi_json, filter_func, mapper_func):
    """
    Extracts and flattens a type definition from an ABI JSON.

    Args:
        abi_json (list): The contract ABI, a list of function/event/constructor entries.
        filter_func (callable): Selects the ABI entry, e.g.
                                `lambda item: item['type'] == 'function' and item['name'] == 'store'`.
        mapper_func (callable): Picks the part holding the type definition, e.g.
                                `lambda item: {'components': item['inputs']}`.

    Returns:
        str: The flattened type, e.g. `(uint256,string)` for a two-field input list.
    """
    type_def = next(map(mapper_func, filter(filter_func, abi_json)))
    return flatten_type_def(type_def)


def flatten_type_def(item):
    """
    Recursively flattens a type definition into its canonical string form.
    Tuples (entries with 'components') become `(type1,type2,...)`, array suffixes
    of tuple types are kept.
    """
    if 'components' in item:
        suffix = item.get('type', 'tuple')[len('tuple'):]
        return '(' + ','.join(flatten_type_def(x) for x in item['components']) + ')' + suffix
    return item['type']


def function_signature(abi_json, function_name: str) -> str:
    """
    Builds the canonical signature (e.g. `transfer(address,uint256)`) of a function in a contract ABI.

    Args:
        abi_json (list): The contract ABI.
        function_name (str): The name of the function.

    Returns:
        str: The signature to feed into `get_function_selector`.
    """
    inputs = get_type_def_from_encode(
        abi_json,
        lambda item: item.get('type') == 'function' and item.get('name') == function_name,
        lambda item: {'components': item.get('inputs', [])})
    return function_name + inputs


def get_function_selector(function_signature: str) -> bytes:
    """
    Calculates the function selector (method ID) for a function signature.

    The selector is the first four bytes of the Keccak-256 hash of the
    canonical signature, e.g. "transfer(address,uint256)" -> a9059cbb.

    Args:
        function_signature (str): The canonical signature, no spaces, no argument names.

    Returns:
        bytes: The 4-byte function selector.
    """
    return keccak(function_signature.encode('utf-8'))[:4]


def encode_function_call(function_signature: str, types, values) -> str:
    """Builds the `data` field of a contract call: selector followed by the encoded arguments."""
    selector = get_function_selector(function_signature)
    return to_hex(selector + _encode_arguments(types, values))


def encode_arguments(types, values) -> str:
    """
    ABI-encodes an argument list into the head/tail layout used for contract call data.

    Static arguments are written straight into the head. Every dynamic argument
    gets a head word holding the offset of its tail, counted from the start of
    the head section, and its content is appended to the tail section in
    argument order.

    Args:
        types (list[str]): ABI type tags, e.g. ['address', 'uint256', 'string', 'uint256[]'].
        values (list): One value per type.

    Returns:
        str: The `0x`-prefixed encoding (heads followed by tails).

    Raises:
        ArityMismatch: When `types` and `values` differ in length.
        UnsupportedType: For a type tag outside the supported set.
        InvalidBytesLength: When a `bytesN` value is not N bytes long.
        NegativeValue: For negative numeric input.
    """
    return to_hex(_encode_arguments(types, values))


def _encode_arguments(types, values) -> bytes:
    types = list(types)
    values = list(values)
    if len(types) != len(values):
        raise ArityMismatch(f'got {len(types)} types and {len(values)} values')

    heads = []
    tails = []
    # First pass: static words go straight into the head, dynamic ones leave a None placeholder.
    for abi_type, value in zip(types, values):
        abi_type = _canonical_type(abi_type)
        if _is_dynamic(abi_type):
            heads.append(None)
            tails.append(_encode_dynamic(abi_type, value))
        else:
            heads.append(_encode_static(abi_type, value))

    # Second pass: tails start right after the head section and are placed in argument order.
    offset = len(types) * WORD_SIZE
    pending_tails = iter(tails)
    for i, head in enumerate(heads):
        if head is None:
            heads[i] = _encode_uint(offset)
            offset += len(next(pending_tails))
    return b''.join(heads) + b''.join(tails)


def _canonical_type(abi_type: str) -> str:
    if not isinstance(abi_type, str):
        raise UnsupportedType(f'type tag must be a string: {abi_type!r}')
    if abi_type.endswith('[]'):
        return _canonical_type(abi_type[:-2]) + '[]'
    return TYPE_ALIASES.get(abi_type, abi_type)


def _is_dynamic(abi_type: str) -> bool:
    return abi_type in DYNAMIC_TYPES or abi_type.endswith('[]')


def _fixed_bytes_size(abi_type: str):
    if not abi_type.startswith('bytes') or abi_type == 'bytes':
        return None
    size = abi_type[len('bytes'):]
    if not size.isdigit() or size.startswith('0') or not 1 <= int(size) <= WORD_SIZE:
        raise UnsupportedType(f'type not supported: {abi_type}')
    return int(size)


def _check_static_type(abi_type: str):
    if abi_type not in STATIC_TYPES and _fixed_bytes_size(abi_type) is None:
        raise UnsupportedType(f'type not supported: {abi_type}')


def _encode_static(abi_type: str, value) -> bytes:
    _check_static_type(abi_type)
    if abi_type == 'uint256':
        return _encode_uint(_to_uint(value))
    if abi_type == 'address':
        return _encode_address(value)
    if abi_type == 'bool':
        return _encode_uint(1 if value else 0)
    size = _fixed_bytes_size(abi_type)
    data = _to_binary(value)
    if len(data) != size:
        raise InvalidBytesLength(f'{abi_type} expects {size} bytes, got {len(data)}')
    return _pad_right(data)


def _encode_dynamic(abi_type: str, value) -> bytes:
    if abi_type == 'bytes':
        return _encode_dynamic_bytes(_to_dynamic_bytes(value))
    if abi_type == 'string':
        data = value.encode('utf-8') if isinstance(value, str) else _to_binary(value)
        return _encode_dynamic_bytes(data)

    element_type = abi_type[:-2]
    if _is_dynamic(element_type):
        raise UnsupportedType(f'array element type not supported: {element_type}')
    _check_static_type(element_type)
    if isinstance(value, (str, bytes)) or not hasattr(value, '__iter__'):
        raise InvalidInput(f'{abi_type} expects a sequence, got {type(value).__name__}')
    elements = list(value)
    # element count, then one static word per element
    return _encode_uint(len(elements)) + b''.join(_encode_static(element_type, v) for v in elements)


def _encode_uint(value: int) -> bytes:
    return value.to_bytes(WORD_SIZE, 'big')


def _encode_address(value) -> bytes:
    data = _to_binary(value)
    if len(data) != ADDRESS_SIZE:
        raise InvalidInput(f'address must be {ADDRESS_SIZE} bytes, got {len(data)}')
    return data.rjust(WORD_SIZE, b'\x00')  # right-aligned like a uint160


def _encode_dynamic_bytes(data: bytes) -> bytes:
    return _encode_uint(len(data)) + _pad_right(data)


def _pad_right(data: bytes) -> bytes:
    padded_size = -(-len(data) // WORD_SIZE) * WORD_SIZE
    return data.ljust(padded_size, b'\x00')


def _to_uint(value) -> int:
    if isinstance(value, str):
        value = _parse_uint_string(value)
    if not isinstance(value, int):
        raise InvalidInput(f'cannot convert {type(value).__name__} to uint256')
    if value < 0:
        raise NegativeValue(f'negative numbers are not supported: {value}')
    if value > MAX_UINT256:
        raise InvalidInput(f'value does not fit in uint256: {value}')
    return value


def _parse_uint_string(value: str) -> int:
    # Only plain decimal or 0x-prefixed hex, no '_' separators, no 0b/0o prefixes.
    sign, digits = ('-', value[1:]) if value.startswith('-') else ('', value)
    if digits.startswith(HEX_PREFIX):
        body, base, allowed = digits[2:], 16, '0123456789abcdefABCDEF'
    else:
        body, base, allowed = digits, 10, '0123456789'
    if not body or any(c not in allowed for c in body):
        raise InvalidInput(f'cannot convert {value!r} to uint256')
    return int(sign + body, base)


def _to_binary(value) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return hex_to_bytes(value)
    raise InvalidInput(f'expected hex string or bytes, got {type(value).__name__}')


def _to_dynamic_bytes(value) -> bytes:
    if isinstance(value, int) and not isinstance(value, bool) and value < 0:
        raise NegativeValue(f'negative numbers are not supported: {value}')
    if isinstance(value, str) and not value.startswith(HEX_PREFIX):
        return value.encode('utf-8')
    return to_bytes(value)
