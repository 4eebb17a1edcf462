# services/api/core/page_keys.py
from __future__ import annotations

from enum import Enum
from typing import Tuple


class PageKey(str, Enum):
    """The site pages that own an editable config document."""

    HOME = "home"
    SERVICES = "services"
    PRODUCTS = "products"
    GET_STARTED = "get-started"
    CONTACT = "contact"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


PAGE_KEYS: Tuple[str, ...] = tuple(k.value for k in PageKey)
DEFAULT_PAGE_KEY = PageKey.HOME
