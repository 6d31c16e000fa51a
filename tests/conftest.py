import logging
from contextlib import contextmanager
from typing import Generator

import hypothesis
import pytest

from tokenledger.env import LedgerEnv
from tokenledger.exceptions import Abort
from tokenledger.settings import TokenSettings
from tokenledger.utils import int_to_word, keccak256, method_id

############
# PATCHING #
############


# disable hypothesis deadline globally
hypothesis.settings.register_profile("ci", deadline=None)
hypothesis.settings.load_profile("ci")


def pytest_addoption(parser):
    parser.addoption("--tracing", action="store_true", help="log every dispatched call")


def pytest_configure(config):
    config.addinivalue_line("markers", "fuzzing: hypothesis-driven property tests")


@pytest.fixture(scope="session")
def tracing(pytestconfig):
    return pytestconfig.getoption("tracing")


@pytest.fixture
def keccak():
    return keccak256


@pytest.fixture(scope="module")
def env(tracing) -> LedgerEnv:
    if tracing:
        logging.getLogger("tokenledger").setLevel(logging.DEBUG)
    return LedgerEnv()


@pytest.fixture(scope="module")
def accounts(env):
    return env.accounts


@pytest.fixture(scope="module")
def token_settings():
    return TokenSettings()


@pytest.fixture(scope="module")
def token(env, token_settings):
    return env.deploy(token_settings)


@pytest.fixture(scope="module")
def get_logs(env):
    return env.get_logs


@pytest.fixture(scope="module")
def tx_failed(env):
    @contextmanager
    def fn(exception=Abort, exc_text=None):
        with pytest.raises(exception) as excinfo:
            yield

        if exc_text:
            assert exc_text in str(excinfo.value), (exc_text, excinfo.value)

    return fn


@pytest.fixture
def calldata():
    """Build raw calldata from a signature and raw integer words."""

    def fn(sig, *words, trailing=b""):
        return method_id(sig) + b"".join(int_to_word(w) for w in words) + trailing

    return fn


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_call(item) -> Generator:
    # Isolate tests by reverting the state of the environment after each test
    env = item.funcargs.get("env")
    if env:
        with env.anchor():
            yield
    else:
        yield
