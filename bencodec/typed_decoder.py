import logging
from typing import Any, Iterator

from .bencode import COLON, D_CHAR, DIGITS, E_CHAR, I_CHAR, L_CHAR, MINUS, ZERO
from .errors import (
    CustomMessage,
    DictValueMissing,
    EndOfInput,
    ExpectedList,
    ExpectedListEnd,
    ExpectedMap,
    ExpectedNumberEnd,
    InvalidUtf8,
    KeyNotAString,
    KeysOutOfOrder,
    LeadingZeroInInteger,
    MalformedInteger,
    MissingSeparatorCharacter,
    NegativeZeroNotPermitted,
    TrailingInputAfterValue,
    UnexpectedLeadCharacter,
    UnexpectedPrefix,
    UnexpectedSignForUnsignedTarget,
)
from .shapes import (
    INT64,
    BooleanShape,
    BytesShape,
    DynamicShape,
    FieldShape,
    IntegerShape,
    MappingShape,
    OptionalShape,
    RecordShape,
    SequenceShape,
    ShapeVisitor,
    TextShape,
    TupleShape,
    ValueShape,
    shape_of,
)
from .value import ByteString, Dict, Integer, List, Value

logger = logging.getLogger(__name__)


class TypedDecoder(ShapeVisitor):
    """Reads bencode straight into Python objects described by a shape.

    Works on an in-memory buffer with a position; nothing is materialized
    as a Value tree except where the target asks for one.
    """

    def __init__(self, data: bytes | bytearray | memoryview):
        self.data = bytes(data)
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def peek_byte(self) -> int:
        if self.pos >= len(self.data):
            raise EndOfInput()
        return self.data[self.pos]

    def next_byte(self) -> int:
        b = self.peek_byte()
        self.pos += 1
        return b

    def parse_digits(self) -> int:
        """Read an unsigned decimal; does not touch the terminator."""
        start = self.pos
        while self.peek_byte() in DIGITS:
            if self.pos > start and self.data[start] == ZERO:
                raise LeadingZeroInInteger()
            self.pos += 1

        digits = self.data[start:self.pos]
        try:
            return int(digits.decode("ascii"))
        except ValueError as e:
            raise MalformedInteger(e) from e

    def parse_integer(self, signed: bool = True) -> int:
        b = self.next_byte()
        if b != I_CHAR:
            raise UnexpectedPrefix(b, I_CHAR)

        negative = self.peek_byte() == MINUS
        if negative:
            if not signed:
                raise UnexpectedSignForUnsignedTarget()
            self.pos += 1

        n = self.parse_digits()
        if negative:
            if n == 0:
                raise NegativeZeroNotPermitted()
            n = -n

        if self.next_byte() != E_CHAR:
            raise ExpectedNumberEnd()
        return n

    def parse_bytes(self) -> bytes:
        b = self.peek_byte()
        if b not in DIGITS:
            raise CustomMessage(f"invalid type: expected byte string, found {bytes([b])!r}")

        length = self.parse_digits()
        colon = self.next_byte()
        if colon != COLON:
            raise MissingSeparatorCharacter(colon, COLON)

        if length > self.remaining():
            raise EndOfInput()
        result = self.data[self.pos:self.pos + length]
        self.pos += length
        return result

    def parse_key(self) -> bytes:
        if self.peek_byte() not in DIGITS:
            raise KeyNotAString(self.parse_value())
        return self.parse_bytes()

    def dict_keys(self) -> Iterator[bytes]:
        """Yield each key of a dict; the caller consumes the value in between."""
        if self.next_byte() != D_CHAR:
            raise ExpectedMap()

        last_key = None
        while self.peek_byte() != E_CHAR:
            key = self.parse_key()
            if self.peek_byte() == E_CHAR:
                raise DictValueMissing(key)

            yield key

            if last_key is not None and key <= last_key:
                raise KeysOutOfOrder(key)
            last_key = key

        self.pos += 1

    def parse_int64(self) -> int:
        n = self.parse_integer()
        if not INT64.width.min <= n <= INT64.width.max:
            err = OverflowError(f"{n} does not fit in a signed 64-bit integer")
            raise MalformedInteger(err) from err
        return n

    def parse_value(self) -> Value:
        """Read any value as a tree, with the same rules as the parser."""
        b = self.peek_byte()
        match bytes([b]):
            case _ if b in DIGITS:
                return ByteString(self.parse_bytes())

            case b"i":
                return Integer(self.parse_int64())

            case b"l":
                self.pos += 1
                items = []
                while self.peek_byte() != E_CHAR:
                    items.append(self.parse_value())
                self.pos += 1
                return List(tuple(items))

            case b"d":
                entries = {}
                for key in self.dict_keys():
                    entries[key] = self.parse_value()
                return Dict(entries)

            case _:
                raise UnexpectedLeadCharacter(b)

    def visit_integer(self, shape: IntegerShape, _):
        n = self.parse_integer(signed=shape.width.signed)
        if not shape.width.min <= n <= shape.width.max:
            raise CustomMessage(f"invalid value: integer `{n}`, expected {shape.width}")
        return n

    def visit_boolean(self, shape: BooleanShape, _):
        return self.parse_int64() != 0

    def visit_bytes(self, shape: BytesShape, _):
        return self.parse_bytes()

    def visit_text(self, shape: TextShape, _):
        data = self.parse_bytes()
        try:
            return data.decode()
        except UnicodeDecodeError as e:
            raise InvalidUtf8(e) from e

    def visit_sequence(self, shape: SequenceShape, _):
        if self.next_byte() != L_CHAR:
            raise ExpectedList()

        items = []
        while self.peek_byte() != E_CHAR:
            items.append(shape.item.accept(self))

        self.pos += 1
        return shape.container(items)

    def visit_tuple(self, shape: TupleShape, _):
        if self.next_byte() != L_CHAR:
            raise ExpectedList()

        items = []
        for i, item_shape in enumerate(shape.items):
            if self.peek_byte() == E_CHAR:
                raise CustomMessage(
                    f"invalid length {i}, expected a tuple of size {len(shape.items)}"
                )
            items.append(item_shape.accept(self))

        if self.next_byte() != E_CHAR:
            raise ExpectedListEnd()
        return tuple(items)

    def visit_mapping(self, shape: MappingShape, _):
        result = {}
        for key in self.dict_keys():
            if shape.key_type is str:
                try:
                    key = key.decode()
                except UnicodeDecodeError as e:
                    raise InvalidUtf8(e) from e
            result[key] = shape.value.accept(self)
        return result

    def visit_optional(self, shape: OptionalShape, _):
        # A value that is present is never None.
        return shape.inner.accept(self)

    def visit_record(self, shape: RecordShape, _):
        values = {}
        fields = shape.fields_by_key
        for key in self.dict_keys():
            f = fields.get(key)
            if f is None:
                logger.debug(f"Skipping unknown key {key!r} for {shape.cls.__name__}")
                self.parse_value()
                continue
            values[f.name] = f.shape.accept(self)

        for f in shape.fields:
            if f.name not in values:
                values[f.name] = self.absent_field(f)

        return shape.cls(**values)

    def absent_field(self, f: FieldShape):
        # None is never written, so an absent nullable field is None even
        # when the dataclass declares another default.
        if isinstance(f.shape, (OptionalShape, DynamicShape)):
            return None
        if f.has_default:
            return f.default()
        raise CustomMessage(f"missing field `{f.key.decode(errors='replace')}`")

    def visit_value(self, shape: ValueShape, _):
        value = self.parse_value()
        if not isinstance(value, shape.cls):
            raise CustomMessage(
                f"invalid type: expected {shape.cls.__name__}, got {type(value).__name__}"
            )
        return value

    def visit_dynamic(self, shape: DynamicShape, _):
        return self.parse_value().to_python()


def from_bytes(type_hint: Any, data: bytes | bytearray | memoryview) -> Any:
    """Decode data as exactly one value of type_hint."""
    decoder = TypedDecoder(data)
    value = shape_of(type_hint).accept(decoder)

    remaining = decoder.remaining()
    if remaining:
        raise TrailingInputAfterValue(remaining)
    return value
