# services/api/schemas/config.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

from core.page_keys import DEFAULT_PAGE_KEY, PageKey
from core.validation import ensure_finite_json


class ConfigUpdate(BaseModel):
    """
    Body of PUT <admin>/config.

    `content` is stored as-is; any JSON value is accepted, including null.
    `commit` must be a real JSON boolean, so "yes" or 1 never triggers a commit.
    """
    model_config = ConfigDict(populate_by_name=True)

    content: Any = Field(..., description="New config document for the page")
    commit: StrictBool = Field(False, description="Commit to GitHub instead of only saving locally")
    commit_message: Optional[StrictStr] = Field(
        None,
        alias="commitMessage",
        description="Commit message; defaults to 'Update <file> config'",
    )
    file: PageKey = Field(DEFAULT_PAGE_KEY, description="Page whose config is replaced")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: Any) -> Any:
        return ensure_finite_json(v)


class ConfigReadResponse(BaseModel):
    config: Any


class ConfigUpdateResponse(BaseModel):
    ok: bool = True
    committed: bool
