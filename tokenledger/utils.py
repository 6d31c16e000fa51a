import enum

from Crypto.Hash import keccak  # type: ignore
from eth_utils import to_canonical_address, to_checksum_address

from tokenledger.exceptions import LedgerPanic

keccak256 = lambda x: keccak.new(digest_bits=256, data=x).digest()  # noqa: E731


class StringEnum(enum.Enum):
    # Must be first, or else won't work, specifies what .value is
    @staticmethod
    def _generate_next_value_(name, start, count, last_values):
        return name.lower()

    # Override ValueError with our own internal exception
    @classmethod
    def _missing_(cls, value):
        raise LedgerPanic(f"{value} is not a valid {cls.__name__}")

    def __str__(self) -> str:
        return self.value


# Converts four bytes to an integer
def fourbytes_to_int(inp):
    return (inp[0] << 24) + (inp[1] << 16) + (inp[2] << 8) + inp[3]


# converts a signature like Func(bool,uint256,address) to its 4 byte method ID
def method_id_int(method_sig: str) -> int:
    method_id_bytes = method_id(method_sig)
    return fourbytes_to_int(method_id_bytes)


def method_id(method_str: str) -> bytes:
    return keccak256(bytes(method_str, "utf-8"))[:4]


# Converts bytes to an integer
def bytes_to_int(bytez):
    return int.from_bytes(bytez, "big")


# Converts an unsigned integer to a 32-byte big-endian word
def int_to_word(n: int) -> bytes:
    if not 0 <= n <= SizeLimits.MAX_UINT256:
        raise LedgerPanic(f"{n} does not fit in a word")
    return n.to_bytes(32, "big")


def int_bounds(signed, bits):
    """
    calculate the bounds on an integer type
    ex. int_bounds(True, 8) -> (-128, 127)
        int_bounds(False, 8) -> (0, 255)
    """
    if signed:
        return -(2 ** (bits - 1)), (2 ** (bits - 1)) - 1
    return 0, (2**bits) - 1


# Sizes of different data types. Used to clamp types.
class SizeLimits:
    MAX_UINT160 = 2**160 - 1
    MAX_UINT256 = 2**256 - 1


WORD_SIZE = 32
SELECTOR_SIZE = 4


def checksum_address(account: int) -> str:
    return to_checksum_address(int_to_word(account)[12:])


def address_to_int(addr) -> int:
    """
    Convert a hex string, 20 raw bytes or an int to an account identifier.

    Ints are returned unchanged (and unchecked) so that callers can pass
    out-of-range words on purpose.
    """
    if isinstance(addr, int):
        return addr
    return bytes_to_int(to_canonical_address(addr))
