# wrapper module around whatever encoder we are using
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import EncodingError

from tokenledger.utils import SELECTOR_SIZE, WORD_SIZE


def _types(schema: str) -> list[str]:
    # "(address,uint256)" -> ["address", "uint256"]
    inner = schema.strip()
    if inner.startswith("(") and inner.endswith(")"):
        inner = inner[1:-1]
    return [t for t in inner.split(",") if t]


def abi_encode(schema: str, data: Any) -> bytes:
    return encode(_types(schema), data)


def abi_decode(schema: str, data: bytes) -> Any:
    return decode(_types(schema), data)


def is_abi_encodable(abi_type: str, data: Any) -> bool:
    try:
        abi_encode(f"({abi_type})", (data,))
        return True
    except (EncodingError, TypeError, ValueError):
        return False


def calldata_words(calldata: bytes, n_args: int) -> tuple[int, ...]:
    """
    Read `n_args` raw argument words following the selector.

    Words are decoded as uint256 so that out-of-range addresses reach the
    guards untouched instead of being rejected or masked by the decoder.
    """
    if n_args == 0:
        return ()
    payload = calldata[SELECTOR_SIZE : SELECTOR_SIZE + WORD_SIZE * n_args]
    return tuple(abi_decode("(" + ",".join(["uint256"] * n_args) + ")", payload))


def encode_uint256(value: int) -> bytes:
    return abi_encode("(uint256)", (value,))


def encode_bool(value: bool) -> bytes:
    return abi_encode("(bool)", (value,))


def encode_string(value: str) -> bytes:
    # (offset word, length word, data padded to a word boundary)
    return abi_encode("(string)", (value,))
