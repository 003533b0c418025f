"""Canonical bencode: a validating parser, an encoder and a typed adapter."""

from .bencode import Decoder, Encoder, decode, encode, next_value
from .errors import (
    BencodeError,
    CustomMessage,
    DictValueMissing,
    EndOfInput,
    ExpectedList,
    ExpectedListEnd,
    ExpectedMap,
    ExpectedMapEnd,
    ExpectedNumberEnd,
    InvalidUtf8,
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
    TrailingInputAfterValue,
    UnexpectedLeadCharacter,
    UnexpectedPrefix,
    UnexpectedSignForUnsignedTarget,
)
from .shapes import I8, I16, I32, I64, U8, U16, U32, U64, IntWidth, shape_of
from .typed_decoder import from_bytes
from .typed_encoder import to_bytes
from .value import ByteString, Dict, Integer, List, Value

__all__ = [
    "Decoder",
    "Encoder",
    "decode",
    "encode",
    "next_value",
    "from_bytes",
    "to_bytes",
    "shape_of",
    "IntWidth",
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    "Value",
    "Integer",
    "ByteString",
    "List",
    "Dict",
    "BencodeError",
    "CustomMessage",
    "DictValueMissing",
    "EndOfInput",
    "ExpectedList",
    "ExpectedListEnd",
    "ExpectedMap",
    "ExpectedMapEnd",
    "ExpectedNumberEnd",
    "InvalidUtf8",
    "IOFailure",
    "KeyNotAString",
    "KeysOutOfOrder",
    "LeadingZeroInInteger",
    "MalformedInteger",
    "MissingPrefixCharacter",
    "MissingSeparatorCharacter",
    "MissingSuffixCharacter",
    "NegativeLengthNotPermitted",
    "NegativeZeroNotPermitted",
    "TrailingInputAfterValue",
    "UnexpectedLeadCharacter",
    "UnexpectedPrefix",
    "UnexpectedSignForUnsignedTarget",
]
