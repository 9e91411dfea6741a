class CodecError(ValueError):
    """
    Base class for every error raised while encoding, serializing or signing.
    All of them are raised synchronously and leave nothing to clean up.
    """


class InvalidInput(CodecError):
    """A value cannot be normalized to bytes (unsupported type, bad hex, negative number, wrong length)."""


class NegativeValue(InvalidInput):
    """A negative number was passed where only unsigned values are allowed."""


class ArityMismatch(CodecError):
    """The ABI type list and value list differ in length."""


class UnsupportedType(CodecError):
    """An ABI type tag is unknown, or is an array of a dynamic or array type."""


class InvalidBytesLength(CodecError):
    """A fixed `bytesN` value is not exactly N bytes long."""


class SigningFailure(CodecError):
    """The elliptic curve primitive rejected the private key or the hash."""
