"""Utility modules"""

from .config_loader import load_config, save_config
from .errors import (
    RiskEngineError,
    InvalidStatus,
    TransactionNotFoundError,
    ConfigurationError,
    DataLoadError
)

__all__ = [
    "load_config",
    "save_config",
    "RiskEngineError",
    "InvalidStatus",
    "TransactionNotFoundError",
    "ConfigurationError",
    "DataLoadError"
]
