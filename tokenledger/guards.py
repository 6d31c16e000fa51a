"""
Input guards, run before an entry point touches storage.

Each guard either returns (possibly the validated value) or raises an
`Abort` subclass, which rejects the whole call.
"""
from tokenledger.exceptions import (
    AddressOutOfRange,
    AmountOutOfRange,
    CalldataSizeMismatch,
    NonPayableViolation,
)
from tokenledger.utils import SELECTOR_SIZE, WORD_SIZE, SizeLimits


def expected_calldatasize(n_args: int) -> int:
    return SELECTOR_SIZE + WORD_SIZE * n_args


def check_calldatasize(calldata: bytes, n_args: int, exact: bool = True) -> None:
    """
    Check the calldata holds the selector plus `n_args` words.

    With `exact`, any trailing or missing byte aborts. This rejects
    truncated arguments which a caller's encoder would otherwise have padded
    with zeroes (the "short address" attack). Without `exact`, trailing
    bytes are tolerated but the arguments must still be fully present.
    """
    expected = expected_calldatasize(n_args)
    actual = len(calldata)
    if actual == expected or (not exact and actual > expected):
        return

    cmp = "exactly" if exact else "at least"
    raise CalldataSizeMismatch(f"bad calldatasize: expected {cmp} {expected} bytes, got {actual}")


def clamp_address(word: int) -> int:
    if not is_address(word):
        raise AddressOutOfRange(
            f"address out of range: {hex(word)}", hint="upper 96 bits of the word must be zero"
        )
    return word


def clamp_amount(word: int, total_supply: int) -> int:
    # unsigned words are never negative, so the supply is the only bound
    if word > total_supply:
        raise AmountOutOfRange(f"amount {word} exceeds total supply {total_supply}")
    return word


def check_nonpayable(value: int) -> None:
    if value != 0:
        raise NonPayableViolation(f"nonpayable check: call carries value {value}")


def is_address(word: int) -> bool:
    return 0 <= word <= SizeLimits.MAX_UINT160
