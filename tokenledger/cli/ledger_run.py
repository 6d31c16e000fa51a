#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import tokenledger
from tokenledger.env import LedgerEnv
from tokenledger.exceptions import Abort
from tokenledger.interface import ERC20_ABI, method_identifiers
from tokenledger.settings import TOKENLEDGER_TRACE, TOKENLEDGER_TRACEBACK_LIMIT, TokenSettings
from tokenledger.utils import checksum_address

format_options_help = """Format to print, one of:
results (default)  - Run the calls of a JSON script and print one result per line
abi                - ABI of the token in JSON format
method_identifiers - Dictionary of method signature to method identifier

A script looks like:
{
  "settings": {"name": "Fixed Supply Token", "symbol": "FIXED",
               "decimals": 2, "total_supply": 100000},
  "deployer": "@0",
  "calls": [
    {"sender": "@0", "function": "transfer", "args": ["@1", 300]},
    {"sender": "@1", "data": "0x18160ddd"}
  ]
}
"@N" stands for the N-th test account of the environment.
"""

FORMAT_OPTIONS = ("results", "abi", "method_identifiers")


def _parse_cli_args():
    return _parse_args(sys.argv[1:])


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        description="Fixed-supply token ledger behind an ERC20 call interface",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("script", help="JSON call script", nargs="?")
    parser.add_argument("--version", action="version", version=tokenledger.__version__)
    parser.add_argument(
        "-f", help=format_options_help, default="results", dest="format", choices=FORMAT_OPTIONS
    )
    parser.add_argument(
        "--traceback-limit",
        help="Set the traceback limit for error messages reported by the ledger",
        type=int,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="Log every dispatched call and abort to stderr",
        action="store_true",
    )
    parser.add_argument("-o", help="Set the output path", dest="output_path")

    args = parser.parse_args(argv)

    if args.traceback_limit is not None:
        sys.tracebacklimit = args.traceback_limit
    elif TOKENLEDGER_TRACEBACK_LIMIT is not None:
        sys.tracebacklimit = TOKENLEDGER_TRACEBACK_LIMIT
    elif args.verbose:
        sys.tracebacklimit = 1000
    else:
        # only show the error message, not where in the ledger it came from
        sys.tracebacklimit = 0

    if args.verbose or TOKENLEDGER_TRACE:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    if args.format == "results" and args.script is None:
        parser.error("a script is required to print results")

    if args.format == "abi":
        lines = [json.dumps(ERC20_ABI)]
    elif args.format == "method_identifiers":
        lines = [json.dumps(method_identifiers())]
    else:
        with Path(args.script).open() as fh:
            script = json.load(fh)
        lines = [json.dumps(r) for r in run_script(script)]

    if args.output_path:
        with open(args.output_path, "w") as f:
            _cli_helper(f, lines)
    else:
        _cli_helper(sys.stdout, lines)


def _cli_helper(f, lines):
    for line in lines:
        print(line, file=f)


def _resolve(env: LedgerEnv, item: Any) -> Any:
    # "@N" -> the N-th account of the environment
    if isinstance(item, str) and item.startswith("@"):
        return env.accounts[int(item[1:])]
    return item


def run_script(script: dict, env: Optional[LedgerEnv] = None) -> list[dict]:
    """
    Deploy a fresh ledger and run the calls of `script` against it.

    Returns one record per call, followed by a record of the final non-zero
    balances. A failing call is recorded and the script carries on.
    """
    env = env or LedgerEnv()

    settings = TokenSettings.from_dict(script.get("settings", {}))
    deployer = _resolve(env, script.get("deployer", env.deployer))
    token = env.deploy(settings, sender=deployer)

    functions = token.functions
    ret = []

    for i, call in enumerate(script.get("calls", [])):
        sender = _resolve(env, call.get("sender", deployer))
        value = call.get("value", 0)

        if "data" in call:
            fn = None
            data = bytes.fromhex(call["data"].removeprefix("0x"))
        else:
            try:
                fn = functions[call["function"]]
            except KeyError:
                raise ValueError(f"call {i}: unknown function {call.get('function')!r}") from None
            args = [_resolve(env, a) for a in call.get("args", [])]
            data = fn.prepare_calldata(*args)

        record: dict[str, Any] = {"call": i, "function": fn.name if fn else None}
        try:
            output = env.message_call(token.address, sender=sender, data=data, value=value)
        except Abort as e:
            record.update(success=False, error=f"{type(e).__name__}: {e}")
            ret.append(record)
            continue

        if fn is not None:
            (result,) = token.marshal_to_python(output, fn.return_type)
        else:
            result = "0x" + output.hex()

        logs = [{"event": log.event, "args": log.args} for log in env.get_logs(token)]
        record.update(success=True, output=result, logs=logs)
        ret.append(record)

    balances = {checksum_address(k): v for k, v in token.ledger.balances().items()}
    ret.append({"balances": balances})
    return ret


if __name__ == "__main__":
    _parse_args(sys.argv[1:])
