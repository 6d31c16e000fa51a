"""
Accounting rules of a fixed-supply fungible token.

A `TokenLedger` owns its `Storage` and an `EventBuffer`. The read-only
accessors never write; the mutating operations validate every argument
before the first write, and run inside a storage transaction so that an
abort halfway leaves no trace.

Account identifiers and amounts are plain ints: the 256-bit words of the
call. The guards reject words which do not fit their domain.
"""
from typing import Optional

from tokenledger.events import APPROVAL, TRANSFER, EventBuffer, EventType
from tokenledger.exceptions import (
    AllowanceOverwrite,
    AmountOutOfRange,
    InsufficientAllowance,
    InsufficientBalance,
)
from tokenledger.guards import check_nonpayable, clamp_address, clamp_amount
from tokenledger.settings import TokenSettings
from tokenledger.storage import ALLOWANCES, BALANCES, Storage, allowance_key, balance_key


class TokenLedger:
    def __init__(self, address: int, settings: TokenSettings, storage: Optional[Storage] = None):
        self.address = address
        self.settings = settings
        self.storage = storage if storage is not None else Storage()
        self.events = EventBuffer()

    @classmethod
    def initialize(
        cls, address: int, deployer: int, settings: Optional[TokenSettings] = None, value: int = 0
    ) -> "TokenLedger":
        """
        Create a ledger and credit the whole supply to `deployer`.

        Initialization takes no arguments besides the constants and rejects
        any attached value. No event is emitted.
        """
        check_nonpayable(value)
        clamp_address(deployer)

        ledger = cls(address, settings or TokenSettings())
        ledger.storage.store(BALANCES, balance_key(deployer), ledger.total_supply())
        return ledger

    #
    # read-only accessors
    #

    def name(self) -> str:
        return self.settings.name

    def symbol(self) -> str:
        return self.settings.symbol

    def decimals(self) -> int:
        return self.settings.decimals

    def total_supply(self) -> int:
        return self.settings.total_supply

    def balance_of(self, owner: int) -> int:
        # no guard: a word outside the address range simply holds nothing
        return self.storage.load(BALANCES, balance_key(owner))

    def allowance(self, owner: int, spender: int) -> int:
        return self.storage.load(ALLOWANCES, allowance_key(owner, spender))

    #
    # mutating operations
    #

    def transfer(self, caller: int, to: int, value: int) -> bool:
        clamp_address(to)
        clamp_amount(value, self.total_supply())

        if value == 0:
            return True

        with self.storage.transaction():
            bal = self._load_balance(caller)
            if value > bal:
                raise InsufficientBalance(f"transfer amount {value} exceeds balance {bal}")

            self._store_balance(caller, bal - value)
            self._credit(to, value)

        self._emit(TRANSFER, caller, to, value)
        return True

    def transfer_from(self, caller: int, from_: int, to: int, value: int) -> bool:
        clamp_address(from_)
        clamp_address(to)
        clamp_amount(value, self.total_supply())

        if value == 0:
            return True

        with self.storage.transaction():
            bal = self._load_balance(from_)
            allow = self._load_allowance(from_, caller)
            if value > bal:
                raise InsufficientBalance(f"transfer amount {value} exceeds balance {bal}")
            if value > allow:
                raise InsufficientAllowance(f"transfer amount {value} exceeds allowance {allow}")

            self._store_balance(from_, bal - value)
            self._credit(to, value)
            self.storage.store(ALLOWANCES, allowance_key(from_, caller), allow - value)

        self._emit(TRANSFER, from_, to, value)
        return True

    def approve(self, caller: int, spender: int, value: int) -> bool:
        clamp_address(spender)
        clamp_amount(value, self.total_supply())

        with self.storage.transaction():
            current = self._load_allowance(caller, spender)
            if value != 0 and current != 0:
                raise AllowanceOverwrite(
                    f"allowance is already {current}",
                    hint="set the allowance to zero before changing it to a new non-zero value",
                )

            self.storage.store(ALLOWANCES, allowance_key(caller, spender), value)

        self._emit(APPROVAL, caller, spender, value)
        return True

    #
    # helpers
    #

    def _load_balance(self, account: int) -> int:
        return self._check_amount(self.storage.load(BALANCES, balance_key(account)))

    def _load_allowance(self, owner: int, spender: int) -> int:
        return self._check_amount(self.storage.load(ALLOWANCES, allowance_key(owner, spender)))

    def _store_balance(self, account: int, value: int) -> None:
        self.storage.store(BALANCES, balance_key(account), self._check_amount(value))

    def _credit(self, account: int, value: int) -> None:
        # read after any debit so that a transfer to oneself nets out
        self._store_balance(account, self._load_balance(account) + value)

    def _check_amount(self, value: int) -> int:
        if not 0 <= value <= self.total_supply():
            raise AmountOutOfRange(
                f"amount {value} outside [0, {self.total_supply()}]",
                hint="the ledger holds a value that breaks supply conservation",
            )
        return value

    def _emit(self, event_type: EventType, a: int, b: int, value: int) -> None:
        self.events.emit(event_type.encode(self.address, a, b, value))

    def balances(self) -> dict[int, int]:
        """All non-zero balances, keyed by account."""
        return dict(self.storage.items(BALANCES))

    def __repr__(self) -> str:
        return f"<TokenLedger {self.settings.symbol} at {hex(self.address)}>"
