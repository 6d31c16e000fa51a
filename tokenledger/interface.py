from tokenledger.dispatcher import ENTRY_POINTS, EntryPoint
from tokenledger.events import EVENT_TYPES


def _function_abi(ep: EntryPoint) -> dict:
    return {
        "type": "function",
        "name": ep.name,
        "inputs": [{"name": name, "type": typ} for name, typ in ep.inputs],
        "outputs": [{"name": "", "type": typ} for typ in ep.outputs],
        "stateMutability": str(ep.mutability),
    }


def build_abi() -> list[dict]:
    ret = [_function_abi(ep) for ep in ENTRY_POINTS]
    ret.extend(event_type.abi for event_type in EVENT_TYPES)
    return ret


ERC20_ABI = build_abi()


def method_identifiers() -> dict[str, str]:
    """
    Dictionary of method signature to method identifier, e.g.
    {"transfer(address,uint256)": "0xa9059cbb"}
    """
    return {ep.abi_sig: f"{ep.method_id:#010x}" for ep in ENTRY_POINTS}
