"""Custom exceptions for the risk analytics engine"""


class RiskEngineError(Exception):
    """Base exception for risk engine errors"""
    pass


class InvalidStatus(RiskEngineError):
    """Unrecognized case status value"""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid case status: {status!r}")


class TransactionNotFoundError(RiskEngineError):
    """No transaction registered under the requested id"""
    pass


class ConfigurationError(RiskEngineError):
    """Configuration loading errors"""
    pass


class DataLoadError(RiskEngineError):
    """Transaction feed could not be read or parsed"""
    pass
