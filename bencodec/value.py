"""In-memory representation of a decoded bencode value."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from .errors import InvalidUtf8

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _maybe_string(data: bytes) -> str:
    """Quote valid UTF-8, otherwise show only the length."""
    try:
        return f'"{data.decode()}"'
    except UnicodeDecodeError:
        return f"[{len(data)} bytes]"


def _as_key(key: bytes | str) -> bytes:
    if isinstance(key, str):
        return key.encode()
    return key


class Value:
    """A bencoded value: one of Integer, ByteString, List or Dict.

    Accessors for a specific variant raise TypeError when called on any
    other variant. Callers are expected to check the variant first, or to
    rely on a shape already validated while parsing.
    """

    __slots__ = ()

    def _wrong(self, accessor: str):
        return TypeError(f"{accessor}() called on {type(self).__name__}")

    def is_integer(self) -> bool:
        return False

    def is_string(self) -> bool:
        return False

    def is_list(self) -> bool:
        return False

    def is_dict(self) -> bool:
        return False

    def as_integer(self) -> int:
        raise self._wrong("as_integer")

    def as_bytes(self) -> bytes:
        raise self._wrong("as_bytes")

    def as_string(self) -> str:
        raise self._wrong("as_string")

    def as_text(self) -> str:
        raise self._wrong("as_text")

    def is_utf8(self) -> bool:
        raise self._wrong("is_utf8")

    def keys(self) -> list[bytes]:
        raise self._wrong("keys")

    def items(self) -> list[tuple[bytes, "Value"]]:
        raise self._wrong("items")

    def get(self, key: bytes | str, default: "Value | None" = None) -> "Value | None":
        raise self._wrong("get")

    def __getitem__(self, index):
        raise TypeError(f"{type(self).__name__} cannot be indexed")

    def __len__(self) -> int:
        raise NotImplementedError

    def is_empty(self) -> bool:
        return len(self) == 0

    def to_python(self) -> Any:
        raise NotImplementedError

    @staticmethod
    def from_python(obj: Any) -> "Value":
        """Build a value tree from plain Python data."""
        match obj:
            case Value():
                return obj
            case bool():
                raise TypeError("bool has no bencode representation")
            case int():
                return Integer(obj)
            case bytes() | bytearray() | memoryview():
                return ByteString(bytes(obj))
            case str():
                return ByteString(obj.encode())
            case list() | tuple():
                return List(tuple(Value.from_python(x) for x in obj))
            case dict():
                return Dict({_as_key(k): Value.from_python(v) for k, v in obj.items()})
            case _:
                raise TypeError(f"cannot convert {type(obj).__name__} to a bencode value")


@dataclass(frozen=True, eq=True, repr=False)
class Integer(Value):
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Integer expects an int, got {type(self.value).__name__}")
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise OverflowError(f"{self.value} does not fit in a signed 64-bit integer")

    def is_integer(self) -> bool:
        return True

    def as_integer(self) -> int:
        return self.value

    def __len__(self) -> int:
        # Integers count as a single element.
        return 1

    def to_python(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=True, repr=False)
class ByteString(Value):
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, bytes):
            raise TypeError(f"ByteString expects bytes, got {type(self.value).__name__}")

    def is_string(self) -> bool:
        return True

    def as_bytes(self) -> bytes:
        return self.value

    def as_string(self) -> str:
        return self.value.decode(errors="replace")

    def as_text(self) -> str:
        try:
            return self.value.decode()
        except UnicodeDecodeError as e:
            raise InvalidUtf8(e) from e

    def is_utf8(self) -> bool:
        try:
            self.value.decode()
        except UnicodeDecodeError:
            return False
        return True

    def __len__(self) -> int:
        return len(self.value)

    def to_python(self) -> bytes:
        return self.value

    def __repr__(self) -> str:
        return _maybe_string(self.value)


@dataclass(frozen=True, eq=True, repr=False)
class List(Value):
    elements: tuple[Value, ...] = ()

    def __post_init__(self):
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    def is_list(self) -> bool:
        return True

    def __getitem__(self, index: int) -> Value:
        if not isinstance(index, int):
            raise TypeError(f"List indices must be integers, not {type(index).__name__}")
        return self.elements[index]

    def __iter__(self) -> Iterator[Value]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def to_python(self) -> list:
        return [x.to_python() for x in self.elements]

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.elements) + "]"


@dataclass(frozen=True, eq=True, repr=False)
class Dict(Value):
    entries: dict[bytes, Value]

    def __post_init__(self):
        object.__setattr__(self, "entries", dict(self.entries))
        for k in self.entries:
            if not isinstance(k, bytes):
                raise TypeError(f"Dict keys must be bytes, got {type(k).__name__}")

    # dict payloads are not hashable
    __hash__ = None

    def is_dict(self) -> bool:
        return True

    def keys(self) -> list[bytes]:
        return sorted(self.entries)

    def items(self) -> list[tuple[bytes, Value]]:
        return sorted(self.entries.items(), key=lambda kv: kv[0])

    def get(self, key: bytes | str, default: Value | None = None) -> Value | None:
        return self.entries.get(_as_key(key), default)

    def __getitem__(self, key: bytes | str) -> Value:
        if not isinstance(key, (bytes, str)):
            raise TypeError(f"Dict keys must be bytes or str, not {type(key).__name__}")
        return self.entries[_as_key(key)]

    def __contains__(self, key: bytes | str) -> bool:
        return _as_key(key) in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def to_python(self) -> dict:
        return {k: v.to_python() for k, v in self.items()}

    def __repr__(self) -> str:
        body = ", ".join(f"{_maybe_string(k)}: {v!r}" for k, v in self.items())
        return "{" + body + "}"
