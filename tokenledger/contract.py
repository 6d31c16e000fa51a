from typing import TYPE_CHECKING, Any, Optional

from tokenledger.abi import abi_decode, abi_encode, is_abi_encodable
from tokenledger.events import Log, LogEntry, parse_log
from tokenledger.interface import ERC20_ABI
from tokenledger.utils import method_id

if TYPE_CHECKING:
    from tokenledger.env import LedgerEnv


class ABIFunction:
    """A single function in an ABI."""

    def __init__(self, abi: dict, contract: "TokenContract"):
        """
        :param abi: the ABI entry for this function
        :param contract: the contract this function is bound to
        """
        self._abi = abi
        self.contract = contract

    @property
    def name(self) -> str:
        return self._abi["name"]

    @property
    def argument_types(self) -> list[str]:
        return [i["type"] for i in self._abi["inputs"]]

    @property
    def argument_count(self) -> int:
        return len(self.argument_types)

    @property
    def return_type(self) -> list[str]:
        return [o["type"] for o in self._abi["outputs"]]

    @property
    def full_signature(self) -> str:
        return f"{self.name}({','.join(self.argument_types)})"

    @property
    def method_id(self) -> bytes:
        return method_id(self.full_signature)

    @property
    def is_mutable(self) -> bool:
        return self._abi["stateMutability"] not in ("view", "pure")

    def __repr__(self) -> str:
        return f"ABI {self.full_signature} -> {self.return_type}"

    def prepare_calldata(self, *args) -> bytes:
        """Prepare the call data for the function call."""
        if len(args) != self.argument_count:
            raise TypeError(
                "invocation failed due to improper number of arguments to"
                f" `{repr(self)}` (expected {self.argument_count} arguments, got {len(args)})"
            )

        # an int given for an address is encoded as a raw word, unchecked,
        # so that out-of-range identifiers can reach the ledger
        schema = [
            "uint256" if typ == "address" and isinstance(arg, int) else typ
            for typ, arg in zip(self.argument_types, args)
        ]
        for typ, arg in zip(schema, args):
            if not is_abi_encodable(typ, arg):
                raise TypeError(f"cannot encode {arg!r} as {typ} for `{repr(self)}`")

        return self.method_id + abi_encode(f"({','.join(schema)})", args)

    def __call__(self, *args, sender=None, value=0):
        """Calls the function with the given arguments through the environment."""
        output = self.contract.env.message_call(
            to=self.contract.address, sender=sender, data=self.prepare_calldata(*args), value=value
        )

        match self.contract.marshal_to_python(output, self.return_type):
            case ():
                return None
            case (single,):
                return single
            case multiple:
                return multiple


class TokenContract:
    """A deployed token ledger, called through its ABI."""

    def __init__(self, env: "LedgerEnv", address: str, abi: Optional[list[dict]] = None):
        self.env = env
        self.address = address
        self.abi = abi if abi is not None else ERC20_ABI

        self._functions = [
            ABIFunction(item, self) for item in self.abi if item.get("type") == "function"
        ]
        for f in self._functions:
            setattr(self, f.name, f)

    @property
    def functions(self) -> dict[str, ABIFunction]:
        return {f.name: f for f in self._functions}

    @property
    def ledger(self):
        return self.env.get_ledger(self.address)

    def marshal_to_python(self, result: bytes, abi_type: list[str]) -> Any:
        """
        Convert the output of a call to a Python object.
        :param result: the bytes returned by `message_call`
        :param abi_type: the ABI type of the return value.
        """
        return abi_decode(f"({','.join(abi_type)})", result)

    def parse_log(self, log: LogEntry) -> Log:
        return parse_log(log)

    def __repr__(self):
        return f"<TokenContract interface at {self.address}>"
