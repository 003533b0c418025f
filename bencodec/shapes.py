"""Shapes: how a Python type maps onto the bencode grammar.

``shape_of`` turns a type annotation into a Shape. The typed encoder and
decoder are ShapeVisitors; a shape calls back exactly one ``visit_*``
method, so neither side needs per-type glue code.

Supported annotations::

    bool                        BooleanShape   i0e / i1e
    int, I8 .. I64, U8 .. U64   IntegerShape   iNe, range checked
    bytes                       BytesShape     N:...
    str                         TextShape      N:... (UTF-8)
    list[T], tuple[T, ...]      SequenceShape  l...e
    tuple[A, B]                 TupleShape     l...e, fixed arity
    dict[str | bytes, T]        MappingShape   d...e
    T | None                    OptionalShape  absent when None
    dataclasses                 RecordShape    d...e, one key per field
    Value                       ValueShape     any value, kept as a tree
    Any, bare list/tuple/dict   DynamicShape   plain Python data
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass
from functools import cache, cached_property
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from .value import Value

# dataclass field metadata key holding the encoded key, e.g.
# field(metadata={"bencode": "piece length"})
KEY_METADATA = "bencode"


@dataclass(frozen=True)
class IntWidth:
    bits: int
    signed: bool = True

    @property
    def min(self) -> int:
        return -(2 ** (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return 2 ** (self.bits - 1) - 1 if self.signed else 2**self.bits - 1

    def __str__(self):
        return f"{'i' if self.signed else 'u'}{self.bits}"


I8 = Annotated[int, IntWidth(8)]
I16 = Annotated[int, IntWidth(16)]
I32 = Annotated[int, IntWidth(32)]
I64 = Annotated[int, IntWidth(64)]
U8 = Annotated[int, IntWidth(8, signed=False)]
U16 = Annotated[int, IntWidth(16, signed=False)]
U32 = Annotated[int, IntWidth(32, signed=False)]
U64 = Annotated[int, IntWidth(64, signed=False)]


class ShapeVisitor:
    """One method per shape kind; arg is the value being encoded, if any."""

    def visit_integer(self, shape: IntegerShape, arg):
        raise NotImplementedError

    def visit_boolean(self, shape: BooleanShape, arg):
        raise NotImplementedError

    def visit_bytes(self, shape: BytesShape, arg):
        raise NotImplementedError

    def visit_text(self, shape: TextShape, arg):
        raise NotImplementedError

    def visit_sequence(self, shape: SequenceShape, arg):
        raise NotImplementedError

    def visit_tuple(self, shape: TupleShape, arg):
        raise NotImplementedError

    def visit_mapping(self, shape: MappingShape, arg):
        raise NotImplementedError

    def visit_optional(self, shape: OptionalShape, arg):
        raise NotImplementedError

    def visit_record(self, shape: RecordShape, arg):
        raise NotImplementedError

    def visit_value(self, shape: ValueShape, arg):
        raise NotImplementedError

    def visit_dynamic(self, shape: DynamicShape, arg):
        raise NotImplementedError


class Shape:
    visit: str

    def accept(self, visitor: ShapeVisitor, arg=None):
        return getattr(visitor, self.visit)(self, arg)


@dataclass(frozen=True)
class IntegerShape(Shape):
    width: IntWidth
    visit = "visit_integer"


@dataclass(frozen=True)
class BooleanShape(Shape):
    visit = "visit_boolean"


@dataclass(frozen=True)
class BytesShape(Shape):
    visit = "visit_bytes"


@dataclass(frozen=True)
class TextShape(Shape):
    visit = "visit_text"


@dataclass(frozen=True)
class SequenceShape(Shape):
    item: Shape
    container: type = list
    visit = "visit_sequence"


@dataclass(frozen=True)
class TupleShape(Shape):
    items: tuple[Shape, ...]
    visit = "visit_tuple"


@dataclass(frozen=True)
class MappingShape(Shape):
    key_type: type  # bytes or str
    value: Shape
    visit = "visit_mapping"


@dataclass(frozen=True)
class OptionalShape(Shape):
    inner: Shape
    visit = "visit_optional"


@dataclass(frozen=True)
class ValueShape(Shape):
    cls: type = Value
    visit = "visit_value"


@dataclass(frozen=True)
class DynamicShape(Shape):
    visit = "visit_dynamic"


@dataclass(frozen=True)
class FieldShape:
    name: str
    key: bytes
    shape: Shape
    field: dataclasses.Field

    @property
    def has_default(self) -> bool:
        return (
            self.field.default is not dataclasses.MISSING
            or self.field.default_factory is not dataclasses.MISSING
        )

    def default(self):
        if self.field.default is not dataclasses.MISSING:
            return self.field.default
        return self.field.default_factory()


@dataclass(frozen=True)
class RecordShape(Shape):
    cls: type
    visit = "visit_record"

    @cached_property
    def fields(self) -> tuple[FieldShape, ...]:
        # Resolved on first use so a dataclass may refer to itself.
        hints = get_type_hints(self.cls, include_extras=True)
        result = []
        for f in dataclasses.fields(self.cls):
            if not f.init:
                continue
            key = f.metadata.get(KEY_METADATA, f.name)
            if isinstance(key, str):
                key = key.encode()
            result.append(FieldShape(f.name, key, shape_of(hints[f.name]), f))

        keys = [f.key for f in result]
        if len(set(keys)) != len(keys):
            raise TypeError(f"{self.cls.__name__} maps two fields to the same key")
        return tuple(result)

    @cached_property
    def fields_by_key(self) -> dict[bytes, FieldShape]:
        return {f.key: f for f in self.fields}


BOOLEAN = BooleanShape()
BYTES = BytesShape()
TEXT = TextShape()
DYNAMIC = DynamicShape()
INT64 = IntegerShape(IntWidth(64))


@cache
def shape_of(tp: Any) -> Shape:
    """Resolve a type annotation to its shape."""
    if tp is Any:
        return DYNAMIC

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Annotated:
        base, *extras = args
        widths = [x for x in extras if isinstance(x, IntWidth)]
        if widths and base is int:
            return IntegerShape(widths[0])
        return shape_of(base)

    if origin is Union or origin is types.UnionType:
        inner = [a for a in args if a is not type(None)]
        if len(inner) == 1 and len(args) == 2:
            return OptionalShape(shape_of(inner[0]))
        raise TypeError(f"unsupported union {tp!r}, only T | None is allowed")

    if origin is list:
        return SequenceShape(shape_of(args[0]) if args else DYNAMIC, list)

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceShape(shape_of(args[0]), tuple)
        return TupleShape(tuple(shape_of(a) for a in args))

    if origin is dict:
        key, value = args
        if key not in (str, bytes):
            raise TypeError(f"mapping keys must be str or bytes, not {key!r}")
        return MappingShape(key, shape_of(value))

    if origin is not None:
        raise TypeError(f"no bencode shape for {tp!r}")

    builtin = {
        bool: BOOLEAN,
        int: INT64,
        bytes: BYTES,
        str: TEXT,
        list: SequenceShape(DYNAMIC, list),
        tuple: SequenceShape(DYNAMIC, tuple),
        dict: MappingShape(bytes, DYNAMIC),
    }
    if tp in builtin:
        return builtin[tp]

    if isinstance(tp, type) and issubclass(tp, Value):
        return ValueShape(tp)

    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return RecordShape(tp)

    raise TypeError(f"no bencode shape for {tp!r}")


def shape_for_object(obj: Any) -> Shape:
    """Pick a shape from the runtime type of obj."""
    match obj:
        case bool():
            return BOOLEAN
        case int():
            return INT64
        case bytes() | bytearray() | memoryview():
            return BYTES
        case str():
            return TEXT
        case list():
            return SequenceShape(DYNAMIC, list)
        case tuple():
            return SequenceShape(DYNAMIC, tuple)
        case dict():
            return MappingShape(bytes, DYNAMIC)
        case Value():
            return ValueShape(type(obj))
        case _ if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return shape_of(type(obj))

    raise TypeError(f"cannot encode {type(obj).__name__}")
