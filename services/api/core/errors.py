"""
Error kinds raised by the config stores and the config service.

Routers turn every ConfigStoreError into a 500 carrying the message;
InvalidConfigKeyError becomes a 400.
"""
from typing import Optional


class InvalidConfigKeyError(ValueError):
    """Requested page key is not one of the known pages."""

    def __init__(self, key: object):
        self.key = key
        super().__init__("Invalid config key")


class ConfigStoreError(Exception):
    """Base class for local and remote store failures."""


# ========== Local store ==========

class ConfigNotFoundError(ConfigStoreError):
    pass


class ConfigParseError(ConfigStoreError):
    pass


class ConfigIOError(ConfigStoreError):
    pass


# ========== Remote store ==========

class RemoteUnavailableError(ConfigStoreError):
    """GitHub token/owner/repo are not configured."""


class RemoteReadError(ConfigStoreError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RemoteWriteError(ConfigStoreError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)
