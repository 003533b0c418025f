"""Errors raised while parsing or encoding bencoded data."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .value import Value


def _char(b: int) -> str:
    return repr(bytes([b]))


class BencodeError(ValueError):
    """Base class of every recoverable codec failure."""


class EndOfInput(BencodeError):
    def __init__(self):
        super().__init__("unexpected end of input")


class IOFailure(BencodeError):
    def __init__(self, cause: OSError):
        self.cause = cause
        super().__init__(f"I/O error: {cause}")


class KeyNotAString(BencodeError):
    def __init__(self, value: "Value"):
        self.value = value
        super().__init__(f"keys must be strings, got {value!r}")


class KeysOutOfOrder(BencodeError):
    def __init__(self, key: bytes):
        self.key = key
        super().__init__(f"key {key!r} is not in lexicographical order")


class LeadingZeroInInteger(BencodeError):
    def __init__(self):
        super().__init__("leading '0' not permitted in integer")


class _MissingCharacter(BencodeError):
    what = "character"

    def __init__(self, found: int, expected: int):
        self.found = found
        self.expected = expected
        super().__init__(
            f"missing {self.what} character, expected {_char(expected)}, "
            f"found {_char(found)}"
        )


class MissingPrefixCharacter(_MissingCharacter):
    what = "prefix"


class MissingSeparatorCharacter(_MissingCharacter):
    what = "separator"


class MissingSuffixCharacter(_MissingCharacter):
    what = "suffix"


class DictValueMissing(BencodeError):
    def __init__(self, key: bytes):
        self.key = key
        super().__init__(f"key {key!r} is missing a value")


class NegativeZeroNotPermitted(BencodeError):
    def __init__(self):
        super().__init__("negative zero not permitted")


class NegativeLengthNotPermitted(BencodeError):
    def __init__(self, length: int):
        self.length = length
        super().__init__(f"negative string length not permitted: {length}")


class MalformedInteger(BencodeError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"malformed integer: {cause}")


class UnexpectedLeadCharacter(BencodeError):
    def __init__(self, found: int):
        self.found = found
        super().__init__(f"unexpected character: {_char(found)}")


class InvalidUtf8(BencodeError):
    def __init__(self, cause: UnicodeDecodeError):
        self.cause = cause
        super().__init__(f"invalid UTF-8: {cause}")


# Raised by the typed adapter only.


class ExpectedList(BencodeError):
    def __init__(self):
        super().__init__("expected 'l' to start a list")


class ExpectedListEnd(BencodeError):
    def __init__(self):
        super().__init__("expected 'e' to end a list")


class ExpectedMap(BencodeError):
    def __init__(self):
        super().__init__("expected 'd' to start a map")


class ExpectedMapEnd(BencodeError):
    def __init__(self):
        super().__init__("expected 'e' to end a map")


class ExpectedNumberEnd(BencodeError):
    def __init__(self):
        super().__init__("expected 'e' to end a number")


class UnexpectedPrefix(BencodeError):
    def __init__(self, found: int, expected: int):
        self.found = found
        self.expected = expected
        super().__init__(f"expected {_char(expected)}, found {_char(found)}")


class UnexpectedSignForUnsignedTarget(BencodeError):
    def __init__(self):
        super().__init__("unexpected negative sign for unsigned value")


class TrailingInputAfterValue(BencodeError):
    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(f"{remaining} trailing bytes remain after decoding")


class CustomMessage(BencodeError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
