from .checksum_cache import get_checksum_address
from .config import Settings, load_config_from_file, save_config_to_file
from .version import __version__

# isort: split

from .connection import get_web3_from_config
from .cooler import ChainReader, Web3ChainReader
from .database import EntityStore, SqlAlchemyEntityStore, get_scoped_sqlite_session
from .handlers import HandlerContext, HandlerOutcome, process_event
from .identifiers import get_loan_event_record_id, get_loan_record_id, get_request_record_id
from .indexer import CoolerFactoryEvent, decode_event, process_logs, sync_cooler_factory
from .logging import logger
from .oracle import ChainlinkPriceOracle, PriceOracle

__all__ = (
    "ChainReader",
    "ChainlinkPriceOracle",
    "CoolerFactoryEvent",
    "EntityStore",
    "HandlerContext",
    "HandlerOutcome",
    "PriceOracle",
    "Settings",
    "SqlAlchemyEntityStore",
    "Web3ChainReader",
    "__version__",
    "config",
    "constants",
    "cooler",
    "database",
    "decode_event",
    "exceptions",
    "functions",
    "get_checksum_address",
    "get_loan_event_record_id",
    "get_loan_record_id",
    "get_request_record_id",
    "get_scoped_sqlite_session",
    "get_web3_from_config",
    "handlers",
    "identifiers",
    "load_config_from_file",
    "logger",
    "oracle",
    "process_event",
    "process_logs",
    "save_config_to_file",
    "sync_cooler_factory",
    "types",
)
