"""Core functionality for MarketChat: configuration, logging, errors and results."""

from marketchat.core.config import Config, load_config, load_config_or_default
from marketchat.core.errors import ApiError, ErrorKind, StorageError
from marketchat.core.result import Err, Failure, Ok, Result

__all__ = [
    "Config",
    "load_config",
    "load_config_or_default",
    "ApiError",
    "ErrorKind",
    "StorageError",
    "Err",
    "Failure",
    "Ok",
    "Result",
]
