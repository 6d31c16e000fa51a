import contextlib
from dataclasses import dataclass
from typing import Iterator

from tokenledger.exceptions import LedgerPanic
from tokenledger.utils import SizeLimits, bytes_to_int, int_to_word, keccak256


@dataclass(frozen=True)
class Partition:
    """
    A named region of ledger storage, analogous to a top-level storage
    variable of a contract.

    Attributes:
        name: human-readable name of the region
        slot: the slot number the region is rooted at; hashed into the
            keys of nested mappings so that two regions never share keys
    """

    name: str
    slot: int


BALANCES = Partition("balances", 0)
ALLOWANCES = Partition("allowances", 1)


def balance_key(account: int) -> int:
    # balances are keyed by the account identifier itself
    return account


def owner_partition(owner: int) -> int:
    return bytes_to_int(keccak256(int_to_word(ALLOWANCES.slot) + int_to_word(owner)))


def allowance_key(owner: int, spender: int) -> int:
    """
    Derive the storage key of `allowance[owner][spender]`.

    Both levels hash full 32-byte words, as a nested `HashMap` would:
    the spender is hashed together with the owner's own region, so the key
    of one (owner, spender) pair can not be reached through any other pair.
    """
    return bytes_to_int(keccak256(int_to_word(owner_partition(owner)) + int_to_word(spender)))


class Storage:
    """
    Word-addressed key-value store backing one ledger.

    Absent keys read as zero, and writing zero removes the key, so "zero" and
    "absent" are the same thing. Writes may be grouped into transactions
    which are rolled back if the enclosed block raises.
    """

    def __init__(self):
        self._words: dict[tuple[str, int], int] = {}
        # stack of {key: value before first write in this transaction}
        self._journals: list[dict[tuple[str, int], int]] = []

    def load(self, partition: Partition, key: int) -> int:
        return self._words.get((partition.name, key), 0)

    def store(self, partition: Partition, key: int, value: int) -> None:
        if not 0 <= value <= SizeLimits.MAX_UINT256:
            raise LedgerPanic(f"cannot store {value} in {partition.name}[{key}]")

        k = (partition.name, key)
        if self._journals:
            self._journals[-1].setdefault(k, self._words.get(k, 0))

        if value == 0:
            self._words.pop(k, None)
        else:
            self._words[k] = value

    def items(self, partition: Partition) -> Iterator[tuple[int, int]]:
        for (name, key), value in self._words.items():
            if name == partition.name:
                yield key, value

    @contextlib.contextmanager
    def transaction(self):
        journal: dict[tuple[str, int], int] = {}
        self._journals.append(journal)
        try:
            yield
        except BaseException:
            self._journals.pop()
            self._rollback(journal)
            raise
        else:
            self._journals.pop()
            # fold into the enclosing transaction, keeping its older values
            if self._journals:
                for k, v in journal.items():
                    self._journals[-1].setdefault(k, v)

    def _rollback(self, journal: dict[tuple[str, int], int]) -> None:
        for k, v in journal.items():
            if v == 0:
                self._words.pop(k, None)
            else:
                self._words[k] = v

    @property
    def in_transaction(self) -> bool:
        return len(self._journals) > 0

    def snapshot(self) -> dict:
        if self._journals:
            raise LedgerPanic("cannot snapshot storage inside a transaction")
        return self._words.copy()

    def revert(self, snapshot: dict) -> None:
        if self._journals:
            raise LedgerPanic("cannot revert storage inside a transaction")
        self._words = snapshot.copy()
