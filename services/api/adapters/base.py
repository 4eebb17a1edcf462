"""
Config store interface for the admin API.
Defines the contract that the local and GitHub backends implement.
"""

from typing import Any, Optional, Protocol

from core.page_keys import PageKey


class ConfigStore(Protocol):
    """
    Protocol for a place where page config documents live.

    The config service talks to the local disk store and the GitHub store
    through this interface, so either can be swapped for a fake in tests.

    NOTE:
    - Documents are opaque JSON values; stores never inspect their shape.
    - Failures are reported as core.errors.ConfigStoreError subclasses.
    """

    async def read(self, page_key: PageKey) -> Any:
        """
        Load and parse the current document for a page.

        Raises:
            ConfigStoreError subclass if the document cannot be produced.
        """
        ...

    async def write(self, page_key: PageKey, document: Any, message: Optional[str] = None) -> None:
        """
        Replace the document for a page.

        Implementations create the document if it does not exist yet.
        `message` is the change description for stores that keep history;
        others ignore it.
        """
        ...


class RemoteConfigStore(ConfigStore, Protocol):
    """A ConfigStore that may be left unconfigured (e.g. no credentials)."""

    @property
    def is_configured(self) -> bool:
        ...
