from __future__ import annotations

import re
from datetime import date
from typing import Any

_DATE_RE = re.compile(r"\b(?P<y>\d{4})(?:-(?P<m>\d{2})(?:-(?P<d>\d{2}))?)?\b")


def _compact_json(value: Any) -> Any:
    """Recursively remove null/empty fields from JSON-like structures.

    Rules:
    - Drop keys with None
    - Drop keys with blank strings (non-blank strings are kept verbatim)
    - Drop keys with empty list/dict
    - Keep 0/False
    """

    if value is None:
        return None

    if isinstance(value, str):
        return value if value.strip() else None

    if isinstance(value, list):
        out_list = []
        for item in value:
            v = _compact_json(item)
            if v is None:
                continue
            out_list.append(v)
        return out_list if out_list else None

    if isinstance(value, dict):
        out_dict: dict[str, Any] = {}
        for k, v in value.items():
            vv = _compact_json(v)
            if vv is None:
                continue
            out_dict[k] = vv
        return out_dict if out_dict else None

    return value


def _parse_date(s: str | None) -> date | None:
    """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` (missing parts default to 1)."""
    if not s:
        return None
    m = _DATE_RE.search(str(s))
    if not m:
        return None
    try:
        return date(int(m.group("y")), int(m.group("m") or 1), int(m.group("d") or 1))
    except ValueError:
        return None
