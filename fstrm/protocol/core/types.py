# fstrm/protocol/core/types.py
BYTE_ORDER_TO_STRUCT: dict[str, str] = {
    "big": ">",
    "little": "<",
    "native": "=",
}

# Every length marker, type word and field header is a 32-bit unsigned integer
U32_FORMAT = "I"
