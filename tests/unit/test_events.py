import pytest

from tokenledger.events import (
    APPROVAL,
    EVENT_TYPES,
    TRANSFER,
    EventBuffer,
    LogEntry,
    parse_log,
)
from tokenledger.exceptions import LedgerPanic
from tokenledger.utils import checksum_address, int_to_word

TOKEN = 0xC0FFEE
ALICE = 0x5AAEB6053F3E94C9B9A09F33669435E7EF1BEAED
BOB = 0xFB6916095CA1DF60BB79CE92CE3EA74C37C5D359


def test_event_ids():
    assert (
        TRANSFER.event_id.hex()
        == "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    )
    assert (
        APPROVAL.event_id.hex()
        == "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"
    )


def test_event_abi():
    assert APPROVAL.abi == {
        "type": "event",
        "name": "Approval",
        "anonymous": False,
        "inputs": [
            {"name": "_owner", "type": "address", "indexed": True},
            {"name": "_spender", "type": "address", "indexed": True},
            {"name": "_value", "type": "uint256", "indexed": False},
        ],
    }


def test_encode_transfer():
    log = TRANSFER.encode(TOKEN, ALICE, BOB, 300)
    assert log.address == checksum_address(TOKEN)
    assert log.topics == (TRANSFER.event_id, int_to_word(ALICE), int_to_word(BOB))
    assert log.data == int_to_word(300)


def test_parse_log():
    log = parse_log(TRANSFER.encode(TOKEN, ALICE, BOB, 300))
    assert log.event == "Transfer"
    assert log.address == checksum_address(TOKEN)
    assert log._from == checksum_address(ALICE)
    assert log._to == checksum_address(BOB)
    assert log._value == 300
    assert log.args == {"_from": log._from, "_to": log._to, "_value": 300}

    log = parse_log(APPROVAL.encode(TOKEN, ALICE, BOB, 0))
    assert log.event == "Approval"
    assert (log._owner, log._spender, log._value) == (
        checksum_address(ALICE),
        checksum_address(BOB),
        0,
    )


def test_missing_log_arg():
    log = parse_log(TRANSFER.encode(TOKEN, ALICE, BOB, 1))
    with pytest.raises(AttributeError):
        log._spender


def test_parse_unknown_log():
    log = LogEntry(address=checksum_address(TOKEN), topics=(b"\x01" * 32,), data=b"")
    with pytest.raises(KeyError):
        parse_log(log)


def test_parse_wrong_type():
    log = TRANSFER.encode(TOKEN, ALICE, BOB, 1)
    assert not APPROVAL.matches(log)
    with pytest.raises(LedgerPanic):
        APPROVAL.parse(log)


def test_parse_malformed():
    log = LogEntry(
        address=checksum_address(TOKEN), topics=(TRANSFER.event_id, int_to_word(ALICE)), data=b""
    )
    with pytest.raises(LedgerPanic):
        TRANSFER.parse(log)


def test_event_types_distinct():
    assert len({e.event_id for e in EVENT_TYPES}) == len(EVENT_TYPES)


def test_event_buffer():
    buf = EventBuffer()
    first = TRANSFER.encode(TOKEN, ALICE, BOB, 1)
    second = APPROVAL.encode(TOKEN, ALICE, BOB, 2)

    buf.emit(first)
    buf.emit(second)
    assert len(buf) == 2
    assert buf.flush() == [first, second]
    assert len(buf) == 0
    assert buf.flush() == []

    buf.emit(first)
    buf.discard()
    assert buf.flush() == []
