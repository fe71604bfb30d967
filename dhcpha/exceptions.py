"""
Exception hierarchy for the DHCP HA manager.

Validation problems are not exceptions: they travel as a list of
user-facing messages. The classes here cover programmer errors and
failures of the collaborators the manager talks to.
"""
from typing import Optional, Any


class DhcpHaError(Exception):
    """Base exception for all DHCP HA manager errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class UnknownDefaultKey(DhcpHaError, KeyError):
    """Raised when the default policy table is asked for a key it does not define."""

    def __init__(self, key: str):
        super().__init__("Unknown HA default key", details=key)
        self.key = key

    def __str__(self) -> str:
        return DhcpHaError.__str__(self)


class ConfigStoreError(DhcpHaError):
    """Raised when the configuration document cannot be read or written."""

    def __init__(self, path: str, reason: str):
        super().__init__("Configuration store failure", details=f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ControlSocketError(DhcpHaError):
    """Raised when the DHCP daemon control socket does not answer a command."""

    def __init__(self, socket_path: str, reason: str):
        super().__init__("Control socket query failed", details=f"{socket_path}: {reason}")
        self.socket_path = socket_path
        self.reason = reason
