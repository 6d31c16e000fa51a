import enum
import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable

from tokenledger.abi import calldata_words, encode_bool, encode_string, encode_uint256
from tokenledger.events import LogEntry
from tokenledger.exceptions import Abort, LedgerPanic, UnknownSelector
from tokenledger.guards import check_calldatasize, check_nonpayable
from tokenledger.ledger import TokenLedger
from tokenledger.settings import TOKENLEDGER_TRACE
from tokenledger.utils import SELECTOR_SIZE, StringEnum, fourbytes_to_int, method_id_int

logger = logging.getLogger(__name__)
if TOKENLEDGER_TRACE:
    logger.setLevel(logging.DEBUG)


class StateMutability(StringEnum):
    VIEW = enum.auto()
    NONPAYABLE = enum.auto()


@dataclass(frozen=True)
class Message:
    """
    One incoming call, as supplied by the host.

    Attributes:
        sender: identity of the caller
        data: the calldata, selector first
        value: native value attached to the call
    """

    sender: int
    data: bytes
    value: int = 0


@dataclass
class CallResult:
    output: bytes
    logs: list[LogEntry] = field(default_factory=list)


# handler(ledger, msg, args) -> ABI-encoded return value
Handler = Callable[[TokenLedger, Message, tuple], bytes]


@dataclass(frozen=True)
class EntryPoint:
    name: str
    inputs: tuple[tuple[str, str], ...]
    outputs: tuple[str, ...]
    mutability: StateMutability
    handler: Handler = field(compare=False)

    @property
    def abi_sig(self) -> str:
        return f"{self.name}({','.join(typ for _, typ in self.inputs)})"

    @cached_property
    def method_id(self) -> int:
        return method_id_int(self.abi_sig)

    @property
    def n_args(self) -> int:
        return len(self.inputs)

    @property
    def is_mutable(self) -> bool:
        return self.mutability == StateMutability.NONPAYABLE

    def __repr__(self) -> str:
        return f"{hex(self.method_id)}: {self.abi_sig}"


def _name(ledger, msg, args):
    return encode_string(ledger.name())


def _symbol(ledger, msg, args):
    return encode_string(ledger.symbol())


def _decimals(ledger, msg, args):
    return encode_uint256(ledger.decimals())


def _total_supply(ledger, msg, args):
    return encode_uint256(ledger.total_supply())


def _balance_of(ledger, msg, args):
    (owner,) = args
    return encode_uint256(ledger.balance_of(owner))


def _transfer(ledger, msg, args):
    to, value = args
    return encode_bool(ledger.transfer(msg.sender, to, value))


def _transfer_from(ledger, msg, args):
    from_, to, value = args
    return encode_bool(ledger.transfer_from(msg.sender, from_, to, value))


def _approve(ledger, msg, args):
    spender, value = args
    return encode_bool(ledger.approve(msg.sender, spender, value))


def _allowance(ledger, msg, args):
    owner, spender = args
    return encode_uint256(ledger.allowance(owner, spender))


_VIEW = StateMutability.VIEW
_NONPAYABLE = StateMutability.NONPAYABLE

# checked in order; the first (and only) entry point with a matching
# selector handles the call
ENTRY_POINTS: tuple[EntryPoint, ...] = (
    EntryPoint("name", (), ("string",), _VIEW, _name),
    EntryPoint("symbol", (), ("string",), _VIEW, _symbol),
    EntryPoint("decimals", (), ("uint8",), _VIEW, _decimals),
    EntryPoint("totalSupply", (), ("uint256",), _VIEW, _total_supply),
    EntryPoint("balanceOf", (("_owner", "address"),), ("uint256",), _VIEW, _balance_of),
    EntryPoint(
        "transfer", (("_to", "address"), ("_value", "uint256")), ("bool",), _NONPAYABLE, _transfer
    ),
    EntryPoint(
        "transferFrom",
        (("_from", "address"), ("_to", "address"), ("_value", "uint256")),
        ("bool",),
        _NONPAYABLE,
        _transfer_from,
    ),
    EntryPoint(
        "approve",
        (("_spender", "address"), ("_value", "uint256")),
        ("bool",),
        _NONPAYABLE,
        _approve,
    ),
    EntryPoint(
        "allowance",
        (("_owner", "address"), ("_spender", "address")),
        ("uint256",),
        _VIEW,
        _allowance,
    ),
)


def _check_selector_table(entry_points):
    seen: dict[int, str] = {}
    for ep in entry_points:
        if ep.method_id in seen:
            raise LedgerPanic(f"selector collision: {ep.abi_sig} and {seen[ep.method_id]}")
        seen[ep.method_id] = ep.abi_sig


_check_selector_table(ENTRY_POINTS)


def find_entry_point(calldata: bytes) -> EntryPoint:
    if len(calldata) < SELECTOR_SIZE:
        raise UnknownSelector(f"calldata too short for a selector: 0x{calldata.hex()}")

    method_id = fourbytes_to_int(calldata[:SELECTOR_SIZE])
    for ep in ENTRY_POINTS:
        if ep.method_id == method_id:
            return ep

    raise UnknownSelector(f"no entry point for selector {method_id:#010x}")


def dispatch(ledger: TokenLedger, msg: Message) -> CallResult:
    """
    Route one call to its entry point and run it all-or-nothing.

    On success the ABI-encoded output and the logs of the call are returned.
    On abort (or any other error) the exception propagates and neither
    storage writes nor logs of the call survive.
    """
    try:
        ep = find_entry_point(msg.data)
        logger.debug("call %r from %s", ep, hex(msg.sender))

        check_nonpayable(msg.value)
        # mutating entry points need the exact size, read-only ones only need
        # their arguments to be present
        check_calldatasize(msg.data, ep.n_args, exact=ep.is_mutable)
        args = calldata_words(msg.data, ep.n_args)

        ledger.events.discard()
        with ledger.storage.transaction():
            output = ep.handler(ledger, msg, args)
    except Abort as e:
        ledger.events.discard()
        logger.debug("abort: %s: %s", type(e).__name__, e)
        raise
    except Exception:
        ledger.events.discard()
        raise

    return CallResult(output=output, logs=ledger.events.flush())
