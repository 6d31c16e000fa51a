import dataclasses
import os
from dataclasses import dataclass
from typing import Optional

from tokenledger.exceptions import SettingsException
from tokenledger.utils import int_bounds

TOKENLEDGER_TRACE = os.environ.get("TOKENLEDGER_TRACE", "0") == "1"

TOKENLEDGER_TRACEBACK_LIMIT: Optional[int]

_tb_limit_str = os.environ.get("TOKENLEDGER_TRACEBACK_LIMIT")
if _tb_limit_str is not None:
    TOKENLEDGER_TRACEBACK_LIMIT = int(_tb_limit_str)
else:
    TOKENLEDGER_TRACEBACK_LIMIT = None


DEFAULT_NAME = "Fixed Supply Token"
DEFAULT_SYMBOL = "FIXED"
DEFAULT_DECIMALS = 2
DEFAULT_TOTAL_SUPPLY = 100000


@dataclass(frozen=True)
class TokenSettings:
    """
    Constants of a token, fixed at initialization.

    Attributes:
        name: token name returned by `name()`
        symbol: ticker returned by `symbol()`
        decimals: decimal places returned by `decimals()` (uint8)
        total_supply: number of units credited to the deployer, never changed
    """

    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    decimals: int = DEFAULT_DECIMALS
    total_supply: int = DEFAULT_TOTAL_SUPPLY

    def __post_init__(self):
        for field in ("name", "symbol"):
            val = getattr(self, field)
            if not isinstance(val, str) or not val:
                raise SettingsException(f"{field} must be a non-empty string, got {val!r}")

        for field, bits in (("decimals", 8), ("total_supply", 256)):
            val = getattr(self, field)
            # bool is an int subclass, reject it explicitly
            if not isinstance(val, int) or isinstance(val, bool):
                raise SettingsException(f"{field} must be an integer, got {val!r}")
            lo, hi = int_bounds(signed=False, bits=bits)
            if not lo <= val <= hi:
                raise SettingsException(
                    f"{field} out of range: {val}", hint=f"must fit in uint{bits}"
                )

    @classmethod
    def from_dict(cls, data: dict) -> "TokenSettings":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise SettingsException(
                f"unknown settings: {', '.join(sorted(unknown))}",
                hint=f"valid settings are {', '.join(sorted(known))}",
            )
        return cls(**data)

    def as_dict(self) -> dict:
        return dataclasses.asdict(self)
