from dataclasses import dataclass, field
from functools import cached_property

from tokenledger.exceptions import LedgerPanic
from tokenledger.utils import bytes_to_int, checksum_address, int_to_word, keccak256


# a very simple log representation for the raw log entries
@dataclass(frozen=True)
class LogEntry:
    address: str
    topics: tuple[bytes, ...]
    data: bytes


@dataclass(frozen=True)
class Log:
    """Represents a parsed log entry."""

    address: str
    event: str
    args: dict = field(hash=False)

    def __getattr__(self, name):
        # allow `log._value` in addition to `log.args["_value"]`
        if name == "args":
            raise AttributeError(name)
        try:
            return self.args[name]
        except KeyError:
            raise AttributeError(name) from None


class EventType:
    """
    An event with two indexed addresses and one uint256 data word.

    docs.soliditylang.org/en/v0.8.6/abi-spec.html#events
    """

    def __init__(self, name: str, indexed: tuple[str, str], data_name: str):
        self.name = name
        self.indexed = indexed
        self.data_name = data_name

    @property
    def signature(self) -> str:
        return f"{self.name}(address,address,uint256)"

    @cached_property
    def event_id(self) -> bytes:
        """The keccak256 hash of the event signature."""
        return keccak256(self.signature.encode())

    @property
    def abi(self) -> dict:
        inputs = [{"name": n, "type": "address", "indexed": True} for n in self.indexed]
        inputs.append({"name": self.data_name, "type": "uint256", "indexed": False})
        return {"type": "event", "name": self.name, "inputs": inputs, "anonymous": False}

    def encode(self, address: int, a: int, b: int, value: int) -> LogEntry:
        topics = (self.event_id, int_to_word(a), int_to_word(b))
        return LogEntry(address=checksum_address(address), topics=topics, data=int_to_word(value))

    def matches(self, log: LogEntry) -> bool:
        return len(log.topics) > 0 and log.topics[0] == self.event_id

    def parse(self, log: LogEntry) -> Log:
        if not self.matches(log):
            raise LedgerPanic(f"log is not a {self.name} event: {log}")
        if len(log.topics) != 3 or len(log.data) != 32:
            raise LedgerPanic(f"malformed {self.name} log: {log}")

        args = {
            self.indexed[0]: checksum_address(bytes_to_int(log.topics[1])),
            self.indexed[1]: checksum_address(bytes_to_int(log.topics[2])),
            self.data_name: bytes_to_int(log.data),
        }
        return Log(address=log.address, event=self.name, args=args)

    def __repr__(self) -> str:
        return f"EventType {self.signature} (0x{self.event_id.hex()})"


TRANSFER = EventType("Transfer", ("_from", "_to"), "_value")
APPROVAL = EventType("Approval", ("_owner", "_spender"), "_value")

EVENT_TYPES = (TRANSFER, APPROVAL)


def parse_log(log: LogEntry) -> Log:
    for event_type in EVENT_TYPES:
        if event_type.matches(log):
            return event_type.parse(log)
    raise KeyError(f"Could not find event for log 0x{log.topics[0].hex()}")


class EventBuffer:
    """
    Collects the logs emitted during one call.

    Logs only become visible once `flush` is called, which the dispatcher
    does only after the call returned successfully.
    """

    def __init__(self):
        self._pending: list[LogEntry] = []

    def emit(self, log: LogEntry) -> None:
        self._pending.append(log)

    def flush(self) -> list[LogEntry]:
        ret, self._pending = self._pending, []
        return ret

    def discard(self) -> None:
        self._pending = []

    def __len__(self) -> int:
        return len(self._pending)
