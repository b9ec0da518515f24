# threat_rl/errors.py

"""Exception types raised by the engine and its adapters."""

from typing import Any, Dict, Optional


class ThreatRLError(Exception):
    """Base class; carries a short message plus structured details."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class CorpusLoadError(ThreatRLError):
    """A corpus snapshot could not be parsed; nothing was imported."""

    def __init__(self, message: str, record_index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record_index = record_index
        if record_index is not None:
            self.details["record_index"] = record_index


class ConfigurationError(ThreatRLError):
    """An environment setting has an unusable value."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key
