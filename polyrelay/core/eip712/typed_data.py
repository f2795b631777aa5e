"""
EIP-712 structured data hashing.

Works on plain mappings: ``types`` maps a struct name to its ordered list of
``TypedField`` (or ``{"name", "type"}`` dicts). The domain struct lives under
``EIP712Domain``.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, NamedTuple, Sequence

from eth_abi import encode
from eth_hash.auto import keccak

from polyrelay.core.errors import InvalidInputError, MissingFieldError, UnsupportedTypeError
from polyrelay.utils.validators import hex_to_bytes, normalize_address, parse_uint

DOMAIN_TYPE = "EIP712Domain"

_UINT_RE = re.compile(r"^uint(\d{1,3})$")
_INT_RE = re.compile(r"^int(\d{1,3})$")
_BYTES_N_RE = re.compile(r"^bytes(\d{1,2})$")


class TypedField(NamedTuple):
    name: str
    type: str


Types = Mapping[str, Sequence[TypedField]]


def _field(entry) -> TypedField:
    if isinstance(entry, TypedField):
        return entry
    if isinstance(entry, Mapping):
        return TypedField(entry["name"], entry["type"])
    name, type_ = entry
    return TypedField(name, type_)


def _fields(types: Types, type_name: str) -> List[TypedField]:
    try:
        return [_field(f) for f in types[type_name]]
    except KeyError:
        raise UnsupportedTypeError(type_name) from None


@dataclass(frozen=True)
class TypedDataSpec:
    """Types, primary type, domain values and message values of one EIP-712 payload."""

    types: Types
    primary_type: str
    domain: Mapping[str, Any]
    message: Mapping[str, Any]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TypedDataSpec":
        """Build from the JSON layout used by eth_signTypedData (primaryType, types...)."""
        types = {
            name: [_field(f) for f in fields] for name, fields in data["types"].items()
        }
        return cls(
            types=types,
            primary_type=data["primaryType"],
            domain=dict(data.get("domain", {})),
            message=dict(data["message"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": {
                name: [{"name": f.name, "type": f.type} for f in map(_field, fields)]
                for name, fields in self.types.items()
            },
            "primaryType": self.primary_type,
            "domain": dict(self.domain),
            "message": dict(self.message),
        }


def encode_type_string(type_name: str, fields: Sequence[TypedField]) -> str:
    """``Name(type1 name1,type2 name2,...)`` in declared order."""
    members = ",".join(f"{f.type} {f.name}" for f in map(_field, fields))
    return f"{type_name}({members})"


def _referenced_structs(type_name: str, types: Types, found: set) -> None:
    for f in _fields(types, type_name):
        base = f.type
        if base in types and base not in found:
            found.add(base)
            _referenced_structs(base, types, found)


def encode_type(type_name: str, types: Types) -> str:
    """Primary type string followed by every referenced struct, sorted by name."""
    deps = set()
    _referenced_structs(type_name, types, deps)
    deps.discard(type_name)
    return "".join(
        encode_type_string(name, _fields(types, name)) for name in [type_name] + sorted(deps)
    )


def type_hash(type_name: str, types: Types) -> bytes:
    return keccak(encode_type(type_name, types).encode("utf-8"))


def _int_value(value: Any, field_type: str) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        negative = text.startswith("-")
        if negative:
            text = text[1:]
        number = parse_uint(text, field_type, bits=256)
        return -number if negative else number
    raise InvalidInputError(f"{field_type}: expected integer, got {type(value).__name__}")


def _bool_value(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidInputError(f"bool: expected true/false or 0/1, got {value!r}")


def encode_value(field_type: str, value: Any, types: Types) -> bytes:
    """
    Encode one field value into a 32-byte word.

    Dynamic ``string``/``bytes`` are hashed, nested structs are replaced by
    their struct hash, atomic types use standard ABI encoding.

    Raises:
        InvalidInputError: value does not fit ``field_type``
        UnsupportedTypeError: ``field_type`` is not a known type
    """
    if field_type == "string":
        if isinstance(value, (bytes, bytearray)):
            return keccak(bytes(value))
        if not isinstance(value, str):
            raise InvalidInputError(f"string: expected str or bytes, got {type(value).__name__}")
        return keccak(value.encode("utf-8"))

    if field_type == "bytes":
        return keccak(hex_to_bytes(value, field_type))

    if field_type in types:
        if not isinstance(value, Mapping):
            raise InvalidInputError(
                f"{field_type}: expected a mapping for struct value, got {type(value).__name__}"
            )
        return hash_struct(field_type, value, types)

    if field_type == "address":
        return encode(["address"], [normalize_address(value, field_type)])

    if field_type == "bool":
        return encode(["bool"], [_bool_value(value)])

    match = _BYTES_N_RE.match(field_type)
    if match and 1 <= int(match.group(1)) <= 32:
        return encode([field_type], [hex_to_bytes(value, field_type)])

    match = _UINT_RE.match(field_type) or _INT_RE.match(field_type)
    if match:
        bits = int(match.group(1))
        if bits % 8 == 0 and 8 <= bits <= 256:
            return encode([field_type], [_int_value(value, field_type)])

    raise UnsupportedTypeError(field_type)


def encode_struct_data(type_name: str, record: Mapping[str, Any], types: Types) -> bytes:
    words = []
    for f in _fields(types, type_name):
        if f.name not in record:
            raise MissingFieldError(type_name, f.name)
        words.append(encode_value(f.type, record[f.name], types))
    return b"".join(words)


def hash_struct(type_name: str, record: Mapping[str, Any], types: Types) -> bytes:
    """keccak256(typeHash || encodeData)."""
    return keccak(type_hash(type_name, types) + encode_struct_data(type_name, record, types))


def hash_domain(domain_value: Mapping[str, Any], domain_fields: Sequence[TypedField]) -> bytes:
    """
    Domain separator.

    Unlike ``hash_struct``, declared fields missing from ``domain_value`` are
    skipped rather than rejected. The type hash still covers every declared
    field.
    """
    fields = [_field(f) for f in domain_fields]
    types = {DOMAIN_TYPE: fields}
    words = [
        encode_value(f.type, domain_value[f.name], types)
        for f in fields
        if f.name in domain_value
    ]
    return keccak(type_hash(DOMAIN_TYPE, types) + b"".join(words))


def hash_typed_data(typed: TypedDataSpec) -> bytes:
    """keccak256(0x19 0x01 || domainSeparator || hashStruct(message))."""
    domain_separator = hash_domain(typed.domain, _fields(typed.types, DOMAIN_TYPE))
    struct_hash = hash_struct(typed.primary_type, typed.message, typed.types)
    return keccak(b"\x19\x01" + domain_separator + struct_hash)
