import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from tokenledger.contract import TokenContract
from tokenledger.dispatcher import Message, dispatch
from tokenledger.events import LogEntry
from tokenledger.exceptions import LedgerException, UnknownAccount
from tokenledger.ledger import TokenLedger
from tokenledger.settings import TOKENLEDGER_TRACE, TokenSettings
from tokenledger.utils import (
    address_to_int,
    bytes_to_int,
    checksum_address,
    int_to_word,
    keccak256,
)

logger = logging.getLogger(__name__)
if TOKENLEDGER_TRACE:
    logger.setLevel(logging.DEBUG)


# object returned by `last_result` property
@dataclass
class ExecutionResult:
    is_success: bool
    logs: list[LogEntry]
    output: bytes


def _derive_address(seed: bytes) -> int:
    return bytes_to_int(keccak256(seed)[12:])


class LedgerEnv:
    """
    In-process host for token ledgers.

    It plays the part of the chain: it owns the deployed ledgers, supplies
    caller identity and attached value, and delivers calldata. Calls run
    one at a time, each to completion.
    """

    def __init__(self, n_accounts: int = 10) -> None:
        self._accounts = [
            checksum_address(_derive_address(b"tokenledger account" + int_to_word(i)))
            for i in range(n_accounts)
        ]
        self.deployer: str = self._accounts[0]
        self._ledgers: dict[int, TokenLedger] = {}
        self._nonce = 0
        self._last_result: Optional[ExecutionResult] = None

    @property
    def accounts(self) -> list[str]:
        return list(self._accounts)

    @property
    def last_result(self) -> ExecutionResult:
        if self._last_result is None:
            raise LedgerException("no call has been made yet")
        return self._last_result

    def deploy(
        self, settings: Optional[TokenSettings] = None, sender=None, value: int = 0
    ) -> TokenContract:
        if sender is None:
            sender = self.deployer
        sender_int = address_to_int(sender)
        address = _derive_address(int_to_word(sender_int) + int_to_word(self._nonce))

        try:
            ledger = TokenLedger.initialize(address, sender_int, settings, value=value)
        except Exception:
            self._last_result = ExecutionResult(is_success=False, logs=[], output=b"")
            raise

        self._nonce += 1
        self._ledgers[address] = ledger
        self._last_result = ExecutionResult(is_success=True, logs=[], output=b"")
        logger.debug("deployed %r by %s", ledger, hex(sender_int))

        return TokenContract(self, checksum_address(address))

    def get_ledger(self, address) -> TokenLedger:
        try:
            return self._ledgers[address_to_int(address)]
        except KeyError:
            raise UnknownAccount(f"no ledger at {address}") from None

    def message_call(self, to, sender=None, data: bytes | str = b"", value: int = 0) -> bytes:
        if isinstance(data, str):
            data = bytes.fromhex(data.removeprefix("0x"))

        ledger = self.get_ledger(to)
        if sender is None:
            sender = self.deployer

        try:
            msg = Message(sender=address_to_int(sender), data=data, value=value)
            result = dispatch(ledger, msg)
        except Exception:
            self._last_result = ExecutionResult(is_success=False, logs=[], output=b"")
            raise

        self._last_result = ExecutionResult(is_success=True, logs=result.logs, output=result.output)
        return result.output

    def get_logs(self, contract: TokenContract, event_name: Optional[str] = None, raw=False):
        logs = [log for log in self.last_result.logs if contract.address == log.address]
        if raw:
            return logs

        parsed_logs = [contract.parse_log(log) for log in logs]
        if event_name:
            return [log for log in parsed_logs if log.event == event_name]

        return parsed_logs

    @contextmanager
    def anchor(self):
        """Run a block and then restore every ledger to its prior state."""
        ledgers = self._ledgers.copy()
        snapshots = {addr: ledger.storage.snapshot() for addr, ledger in ledgers.items()}
        nonce = self._nonce
        last_result = self._last_result
        try:
            yield
        finally:
            for addr, ledger in ledgers.items():
                ledger.storage.revert(snapshots[addr])
                ledger.events.discard()
            self._ledgers = ledgers
            self._nonce = nonce
            self._last_result = last_result
