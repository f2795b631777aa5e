from .typed_data import (
    DOMAIN_TYPE,
    TypedDataSpec,
    TypedField,
    encode_struct_data,
    encode_type,
    encode_type_string,
    encode_value,
    hash_domain,
    hash_struct,
    hash_typed_data,
    type_hash,
)

__all__ = [
    "DOMAIN_TYPE",
    "TypedDataSpec",
    "TypedField",
    "encode_struct_data",
    "encode_type",
    "encode_type_string",
    "encode_value",
    "hash_domain",
    "hash_struct",
    "hash_typed_data",
    "type_hash",
]
