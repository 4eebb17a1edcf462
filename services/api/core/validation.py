"""
Validation helpers for the admin config API.
Keeps page-key checks and validation error formatting in one place.
"""
import math
from typing import Any, Dict, Iterable, List, Optional

from core.errors import InvalidConfigKeyError
from core.page_keys import DEFAULT_PAGE_KEY, PageKey


def parse_page_key(raw: Optional[str]) -> PageKey:
    """
    Resolve a `file` query value to a PageKey.

    Rules:
    - None or "" means the default page (home)
    - anything else must match one of the page keys exactly

    Raises:
        InvalidConfigKeyError: if the value is not a known page key
    """
    if raw is None or raw == "":
        return DEFAULT_PAGE_KEY
    try:
        return PageKey(raw)
    except ValueError:
        raise InvalidConfigKeyError(raw)


def flatten_validation_errors(errors: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Group pydantic error dicts by top-level body field.

    Returns:
        {"formErrors": [...], "fieldErrors": {"<field>": [...]}}

    Errors that are not tied to a body field (e.g. the body itself is not
    JSON or not an object) go to formErrors.
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}

    for err in errors:
        loc = list(err.get("loc") or ())
        if loc and loc[0] == "body":
            loc = loc[1:]
        msg = str(err.get("msg", "Invalid value"))

        if loc and isinstance(loc[0], str):
            field_errors.setdefault(loc[0], []).append(msg)
        else:
            form_errors.append(msg)

    return {"formErrors": form_errors, "fieldErrors": field_errors}


def ensure_finite_json(value: Any) -> Any:
    """
    Reject NaN / Infinity anywhere inside a JSON value.

    Python's json module accepts them, but they are not JSON and the site's
    JSON.parse would fail on the stored file.

    Raises:
        ValueError: if a non-finite float is found
    """
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"content must not contain NaN or Infinity, got {value}")
    if isinstance(value, dict):
        for item in value.values():
            ensure_finite_json(item)
    elif isinstance(value, list):
        for item in value:
            ensure_finite_json(item)
    return value
