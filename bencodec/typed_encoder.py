import logging
from typing import Any

from .bencode import Encoder
from .errors import CustomMessage
from .shapes import (
    BooleanShape,
    BytesShape,
    DynamicShape,
    IntegerShape,
    MappingShape,
    OptionalShape,
    RecordShape,
    SequenceShape,
    Shape,
    ShapeVisitor,
    TextShape,
    TupleShape,
    ValueShape,
    shape_for_object,
    shape_of,
)

logger = logging.getLogger(__name__)


def _type_name(obj: Any) -> str:
    return type(obj).__name__


class TypedEncoder(ShapeVisitor):
    """Writes Python objects as bencode, driven by their shape."""

    def __init__(self):
        self.bytes = bytearray()

    def encode(self, shape: Shape, obj: Any) -> bytes:
        shape.accept(self, obj)
        return bytes(self.bytes)

    def write_int(self, i: int):
        self.bytes += f"i{i}e".encode()

    def write_bytes(self, s: bytes):
        self.bytes += str(len(s)).encode() + b":" + s

    def write_dict(self, fields: dict[bytes, bytes]):
        # Keys go out in byte order whatever order they were collected in.
        self.bytes += b"d"
        for key in sorted(fields):
            self.write_bytes(key)
            self.bytes += fields[key]
        self.bytes += b"e"

    def visit_integer(self, shape: IntegerShape, obj):
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise CustomMessage(f"invalid type: expected integer, got {_type_name(obj)}")
        if not shape.width.min <= obj <= shape.width.max:
            raise CustomMessage(
                f"invalid value: integer `{obj}`, expected {shape.width}"
            )
        self.write_int(obj)

    def visit_boolean(self, shape: BooleanShape, obj):
        if not isinstance(obj, bool):
            raise CustomMessage(f"invalid type: expected bool, got {_type_name(obj)}")
        self.write_int(1 if obj else 0)

    def visit_bytes(self, shape: BytesShape, obj):
        if not isinstance(obj, (bytes, bytearray, memoryview)):
            raise CustomMessage(f"invalid type: expected bytes, got {_type_name(obj)}")
        self.write_bytes(bytes(obj))

    def visit_text(self, shape: TextShape, obj):
        if not isinstance(obj, str):
            raise CustomMessage(f"invalid type: expected str, got {_type_name(obj)}")
        self.write_bytes(obj.encode())

    def visit_sequence(self, shape: SequenceShape, obj):
        if not isinstance(obj, (list, tuple)):
            raise CustomMessage(f"invalid type: expected sequence, got {_type_name(obj)}")
        self.bytes += b"l"
        for item in obj:
            shape.item.accept(self, item)
        self.bytes += b"e"

    def visit_tuple(self, shape: TupleShape, obj):
        if not isinstance(obj, (list, tuple)):
            raise CustomMessage(f"invalid type: expected tuple, got {_type_name(obj)}")
        if len(obj) != len(shape.items):
            raise CustomMessage(
                f"invalid length {len(obj)}, expected a tuple of size {len(shape.items)}"
            )
        self.bytes += b"l"
        for item_shape, item in zip(shape.items, obj):
            item_shape.accept(self, item)
        self.bytes += b"e"

    def visit_mapping(self, shape: MappingShape, obj):
        if not isinstance(obj, dict):
            raise CustomMessage(f"invalid type: expected dict, got {_type_name(obj)}")

        fields = {}
        for key, value in obj.items():
            if isinstance(key, str):
                key = key.encode()
            elif not isinstance(key, bytes):
                raise CustomMessage(
                    f"invalid type: dict keys must be str or bytes, got {_type_name(key)}"
                )
            if key in fields:
                raise CustomMessage(f"duplicate key {key!r}")
            if value is None and isinstance(shape.value, (OptionalShape, DynamicShape)):
                continue
            fields[key] = TypedEncoder().encode(shape.value, value)

        self.write_dict(fields)

    def visit_optional(self, shape: OptionalShape, obj):
        if obj is None:
            raise CustomMessage("None can only be encoded as an absent dict entry")
        shape.inner.accept(self, obj)

    def visit_record(self, shape: RecordShape, obj):
        if not isinstance(obj, shape.cls):
            raise CustomMessage(
                f"invalid type: expected {shape.cls.__name__}, got {_type_name(obj)}"
            )

        fields = {}
        for f in shape.fields:
            value = getattr(obj, f.name)
            if value is None and isinstance(f.shape, (OptionalShape, DynamicShape)):
                # bencode has no null: an absent value is an absent key.
                continue
            fields[f.key] = TypedEncoder().encode(f.shape, value)

        self.write_dict(fields)

    def visit_value(self, shape: ValueShape, obj):
        if not isinstance(obj, shape.cls):
            raise CustomMessage(
                f"invalid type: expected {shape.cls.__name__}, got {_type_name(obj)}"
            )
        self.bytes += Encoder().encode(obj)

    def visit_dynamic(self, shape: DynamicShape, obj):
        if obj is None:
            raise CustomMessage("None can only be encoded as an absent dict entry")
        try:
            inferred = shape_for_object(obj)
        except TypeError as e:
            raise CustomMessage(str(e)) from e
        inferred.accept(self, obj)


def to_bytes(obj: Any, type_hint: Any = None) -> bytes:
    """Encode obj as bencode.

    The shape comes from type_hint when given, otherwise from the runtime
    type of obj (containers without a hint are encoded element by element
    from their runtime types as well).
    """
    if type_hint is not None:
        shape = shape_of(type_hint)
    else:
        shape = DynamicShape()

    data = TypedEncoder().encode(shape, obj)
    logger.debug(f"Encoded {_type_name(obj)} to {len(data)} bytes")
    return data
