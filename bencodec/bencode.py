import io
import logging
from typing import BinaryIO, Iterator

from .errors import (
    BencodeError,
    DictValueMissing,
    EndOfInput,
    IOFailure,
    KeyNotAString,
    KeysOutOfOrder,
    LeadingZeroInInteger,
    MalformedInteger,
    MissingPrefixCharacter,
    MissingSeparatorCharacter,
    MissingSuffixCharacter,
    NegativeLengthNotPermitted,
    NegativeZeroNotPermitted,
    UnexpectedLeadCharacter,
)
from .value import INT64_MAX, INT64_MIN, ByteString, Dict, Integer, List, Value

COLON = ord(":")
D_CHAR = ord("d")
E_CHAR = ord("e")
I_CHAR = ord("i")
L_CHAR = ord("l")
MINUS = ord("-")
ZERO = ord("0")
DIGITS = b"0123456789"

# Largest chunk requested from the source when reading string payloads.
READ_CHUNK = 64 * 1024

logger = logging.getLogger(__name__)

Source = bytes | bytearray | memoryview | BinaryIO


class Decoder:
    """Canonical bencode parser reading from bytes or a binary stream.

    Only one byte of lookahead is kept. A read failure from the source is
    wrapped once and the same IOFailure is raised again by every later
    peek or advance.
    """

    def __init__(self, source: Source):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(source)
        self.source = source
        self._peeked: int | None = None
        self._has_peeked = False
        self._error: IOFailure | None = None

    def __iter__(self) -> Iterator[Value]:
        while (value := self.next_value()) is not None:
            yield value

    def decode(self) -> Value:
        """Read exactly one value; an empty source is an error."""
        return self.decode_one()

    def next_value(self) -> Value | None:
        """Read the next top-level value, or None at a clean end of input."""
        c = self.peek()
        if c is None:
            return None

        match bytes([c]):
            case _ if c in DIGITS:
                return self.read_string()

            case b"i":
                return self.read_integer()

            case b"l":
                return self.read_list()

            case b"d":
                return self.read_dict()

            case _:
                raise UnexpectedLeadCharacter(c)

    def decode_one(self) -> Value:
        value = self.next_value()
        if value is None:
            raise EndOfInput()
        return value

    def read_string(self) -> ByteString:
        length = self.read_number()
        if length < 0:
            raise NegativeLengthNotPermitted(length)

        self.expect(COLON, MissingSeparatorCharacter)

        return ByteString(self.read_exact(length))

    def read_integer(self) -> Integer:
        self.expect(I_CHAR, MissingPrefixCharacter)

        n = self.read_number()

        self.expect(E_CHAR, MissingSuffixCharacter)

        return Integer(n)

    def read_list(self) -> List:
        self.expect(L_CHAR, MissingPrefixCharacter)

        lst = []
        while self.peek_no_eof() != E_CHAR:
            lst.append(self.decode_one())

        self.advance()

        return List(tuple(lst))

    def read_dict(self) -> Dict:
        self.expect(D_CHAR, MissingPrefixCharacter)

        entries = {}
        last_key = None

        while self.peek_no_eof() != E_CHAR:
            key = self.decode_one()
            if not isinstance(key, ByteString):
                raise KeyNotAString(key)

            if self.peek_no_eof() == E_CHAR:
                raise DictValueMissing(key.value)
            value = self.decode_one()

            if last_key is not None and key.value <= last_key:
                raise KeysOutOfOrder(key.value)

            last_key = key.value
            entries[key.value] = value

        self.advance()

        return Dict(entries)

    def read_number(self) -> int:
        """Read an optionally signed decimal, rejecting non-canonical forms."""
        negative = False
        if self.peek() == MINUS:
            self.advance()
            negative = True

        digits = bytearray()
        while self.peek_no_eof() in DIGITS:
            if digits and digits[0] == ZERO:
                raise LeadingZeroInInteger()
            digits.append(self.advance())

        try:
            n = int(digits.decode("ascii"))
        except ValueError as e:
            raise MalformedInteger(e) from e

        if negative:
            if n == 0:
                raise NegativeZeroNotPermitted()
            n = -n

        if not INT64_MIN <= n <= INT64_MAX:
            err = OverflowError(f"{n} does not fit in a signed 64-bit integer")
            raise MalformedInteger(err) from err

        return n

    def read_exact(self, n: int) -> bytes:
        buf = bytearray()
        if n and self._has_peeked:
            buf.append(self.advance())

        while len(buf) < n:
            try:
                chunk = self.source.read(min(n - len(buf), READ_CHUNK))
            except OSError as e:
                self._error = IOFailure(e)
                raise self._error from e
            if not chunk:
                raise EndOfInput()
            buf += chunk

        return bytes(buf)

    def peek(self) -> int | None:
        """Return the next byte without consuming it, None at end of input."""
        if self._error is not None:
            raise self._error

        if not self._has_peeked:
            try:
                chunk = self.source.read(1)
            except OSError as e:
                self._error = IOFailure(e)
                raise self._error from e
            self._peeked = chunk[0] if chunk else None
            self._has_peeked = True

        return self._peeked

    def peek_no_eof(self) -> int:
        c = self.peek()
        if c is None:
            raise EndOfInput()
        return c

    def advance(self) -> int:
        c = self.peek_no_eof()
        self._has_peeked = False
        self._peeked = None
        return c

    def expect(self, char: int, error: type[BencodeError]) -> int:
        c = self.advance()
        if c != char:
            raise error(c, char)

        return c

    def is_at_end(self) -> bool:
        return self.peek() is None


class Encoder:
    """Serializes a Value to canonical bencode."""

    def encode(self, obj: Value) -> bytes:
        return self.encode_one(obj)

    def encode_one(self, obj: Value) -> bytes:
        match obj:
            case Dict():
                return self.encode_dict(obj)

            case List():
                return self.encode_list(obj)

            case Integer():
                return self.encode_int(obj.value)

            case ByteString():
                return self.encode_string(obj.value)

            case _:
                raise NotImplementedError(f"cannot encode {type(obj).__name__}")

    def encode_string(self, s: bytes) -> bytes:
        return str(len(s)).encode() + b":" + s

    def encode_int(self, i: int) -> bytes:
        return f"i{i}e".encode()

    def encode_list(self, lst: List) -> bytes:
        bstr = bytearray(b"l")
        for i in lst:
            bstr += self.encode_one(i)
        bstr += b"e"
        return bytes(bstr)

    def encode_dict(self, d: Dict) -> bytes:
        bstr = bytearray(b"d")
        for k, v in sorted(d.entries.items(), key=lambda kv: kv[0]):
            bstr.extend(self.encode_string(k))
            bstr.extend(self.encode_one(v))
        bstr += b"e"
        return bytes(bstr)


def next_value(source: Source) -> Value | None:
    """Read one top-level value from a stream.

    No bytes past the value are consumed, so successive calls on the same
    file object return successive values.
    """
    value = Decoder(source).next_value()
    if value is not None:
        logger.debug(f"Read top-level {type(value).__name__}")
    return value


def decode(data: Source) -> Value:
    return Decoder(data).decode()


def encode(value: Value) -> bytes:
    return Encoder().encode(value)
