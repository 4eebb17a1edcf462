# services/api/core/config_service.py
from __future__ import annotations

import logging
from typing import Any, Optional

from adapters.base import ConfigStore, RemoteConfigStore
from core.errors import ConfigStoreError, InvalidConfigKeyError
from core.page_keys import PageKey

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Read/write policy across the local disk store and GitHub.

      - reads: local first, GitHub as fallback when it is configured
      - commit writes: GitHub first, then local as a best-effort cache
      - plain writes: local only
    """

    def __init__(self, local: ConfigStore, remote: RemoteConfigStore):
        self.local = local
        self.remote = remote

    @staticmethod
    def _ensure_key(page_key: Any) -> PageKey:
        if isinstance(page_key, PageKey):
            return page_key
        try:
            return PageKey(page_key)
        except ValueError:
            raise InvalidConfigKeyError(page_key)

    async def read(self, page_key: PageKey) -> Any:
        key = self._ensure_key(page_key)
        try:
            return await self.local.read(key)
        except ConfigStoreError as local_error:
            if not self.remote.is_configured:
                raise
            logger.info(
                "Local %s config unavailable (%s); reading from GitHub",
                key.value,
                local_error,
            )
            return await self.remote.read(key)

    async def write(
        self,
        page_key: PageKey,
        content: Any,
        commit: bool = False,
        commit_message: Optional[str] = None,
    ) -> bool:
        """
        Store a new document for a page.

        Returns:
            True if the document was committed to GitHub.

        Raises:
            ConfigStoreError: GitHub commit failed (commit=True, nothing written
            locally) or the local write failed (commit=False).
        """
        key = self._ensure_key(page_key)

        if not commit:
            await self.local.write(key, content)
            return False

        await self.remote.write(key, content, message=commit_message)
        try:
            await self.local.write(key, content)
        except ConfigStoreError as e:
            # GitHub already has the document; local disk is only a cache
            logger.warning("Committed %s config but local write failed: %s", key.value, e)
        return True
