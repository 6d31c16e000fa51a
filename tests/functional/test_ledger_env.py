import pytest

from tokenledger.contract import TokenContract
from tokenledger.env import LedgerEnv
from tokenledger.exceptions import (
    AddressOutOfRange,
    LedgerException,
    LedgerPanic,
    NonPayableViolation,
    UnknownAccount,
)
from tokenledger.settings import TokenSettings
from tokenledger.utils import checksum_address, method_id


def test_accounts_are_deterministic():
    a, b = LedgerEnv(), LedgerEnv()
    assert a.accounts == b.accounts
    assert len(a.accounts) == 10
    assert len(set(a.accounts)) == 10
    assert a.deployer == a.accounts[0]
    assert len(LedgerEnv(n_accounts=3).accounts) == 3


def test_no_result_before_first_call():
    env = LedgerEnv()
    with pytest.raises(LedgerException):
        env.last_result


def test_deploy():
    env = LedgerEnv()
    settings = TokenSettings(name="Other", symbol="OTH", decimals=18, total_supply=10**24)
    token = env.deploy(settings)

    assert isinstance(token, TokenContract)
    assert token.name() == "Other"
    assert token.symbol() == "OTH"
    assert token.decimals() == 18
    assert token.totalSupply() == 10**24
    assert token.balanceOf(env.deployer) == 10**24
    assert token.ledger.balances() == {int(env.deployer, 16): 10**24}


def test_deploy_from_other_account():
    env = LedgerEnv()
    owner = env.accounts[3]
    token = env.deploy(sender=owner)
    assert token.balanceOf(owner) == 100000
    assert token.balanceOf(env.deployer) == 0


def test_deploy_emits_nothing():
    env = LedgerEnv()
    token = env.deploy()
    assert env.last_result.is_success
    assert env.get_logs(token) == []


def test_deploy_addresses_are_unique():
    env = LedgerEnv()
    t1, t2 = env.deploy(), env.deploy()
    assert t1.address != t2.address

    # the ledgers are independent
    t1.transfer(env.accounts[1], 10)
    assert t1.balanceOf(env.accounts[1]) == 10
    assert t2.balanceOf(env.accounts[1]) == 0


def test_deploy_with_value():
    env = LedgerEnv()
    with pytest.raises(NonPayableViolation):
        env.deploy(value=1)
    assert not env.last_result.is_success

    # nothing was registered, the next deployment gets the first address
    token = env.deploy()
    assert token.address == LedgerEnv().deploy().address


def test_deploy_from_out_of_range_sender():
    env = LedgerEnv()
    with pytest.raises(AddressOutOfRange):
        env.deploy(sender=2**160)


def test_internal_error_marks_call_failed():
    env = LedgerEnv()
    token = env.deploy()
    a1, a2 = env.accounts[1:3]

    token.transfer(a1, 5)
    assert env.last_result.is_success
    assert len(env.get_logs(token)) == 1

    # a sender wider than a word can not be hashed into an allowance key
    with pytest.raises(LedgerPanic):
        token.approve(a2, 1, sender=2**256)

    assert not env.last_result.is_success
    assert env.get_logs(token) == []
    assert len(token.ledger.events) == 0
    assert token.balanceOf(a1) == 5


def test_call_unknown_address():
    env = LedgerEnv()
    with pytest.raises(UnknownAccount):
        env.message_call(env.accounts[1], data=method_id("totalSupply()"))


def test_message_call_hex_data():
    env = LedgerEnv()
    token = env.deploy()
    out = env.message_call(token.address, data="0x18160ddd")
    assert int.from_bytes(out, "big") == 100000
    assert env.last_result.output == out


def test_get_logs_filters():
    env = LedgerEnv()
    token = env.deploy()
    other = env.deploy()

    token.transfer(env.accounts[1], 1)
    assert len(env.get_logs(token)) == 1
    assert len(env.get_logs(token, "Transfer")) == 1
    assert env.get_logs(token, "Approval") == []
    assert env.get_logs(other) == []

    (raw,) = env.get_logs(token, raw=True)
    assert raw.address == token.address
    assert token.parse_log(raw).event == "Transfer"


def test_anchor():
    env = LedgerEnv()
    token = env.deploy()
    a1 = env.accounts[1]

    with env.anchor():
        token.transfer(a1, 100)
        token.approve(a1, 5)
        assert token.balanceOf(a1) == 100
        env.deploy()

    assert token.balanceOf(a1) == 0
    assert token.allowance(env.deployer, a1) == 0
    # the nonce was restored along with the ledgers
    assert env.deploy().address != token.address
    assert len(env._ledgers) == 2


def test_anchor_restores_on_error():
    env = LedgerEnv()
    token = env.deploy()

    with pytest.raises(ValueError):
        with env.anchor():
            token.transfer(env.accounts[1], 100)
            raise ValueError

    assert token.balanceOf(env.accounts[1]) == 0


def test_abi_function_arguments(token, accounts):
    transfer = token.transfer
    assert transfer.full_signature == "transfer(address,uint256)"
    assert transfer.method_id == method_id("transfer(address,uint256)")
    assert transfer.is_mutable
    assert not token.balanceOf.is_mutable

    with pytest.raises(TypeError):
        transfer(accounts[1])
    with pytest.raises(TypeError):
        transfer(accounts[1], -1)
    with pytest.raises(TypeError):
        transfer("not an address", 1)


def test_contract_functions(token):
    assert set(token.functions) == {
        "name",
        "symbol",
        "decimals",
        "totalSupply",
        "balanceOf",
        "transfer",
        "transferFrom",
        "approve",
        "allowance",
    }
    assert token.ledger.address == int(token.address, 16)
    assert checksum_address(token.ledger.address) == token.address
