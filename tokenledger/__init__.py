from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

from tokenledger.dispatcher import Message, dispatch
from tokenledger.env import LedgerEnv
from tokenledger.ledger import TokenLedger
from tokenledger.settings import TokenSettings

__version__: str
try:
    __version__ = _version(__name__)
except PackageNotFoundError:
    from tokenledger.version import version

    __version__ = version
