from __future__ import annotations

import json
import re
from typing import Any


def _pick(data: dict, language: str, fallback: Any) -> Any:
    return data.get(language) or data.get("en") or next(iter(data.values()), fallback)


def parse_localized(raw: Any, language: str) -> str:
    """Return the `language` text of an SDE localized field, stripped of markup.

    Falls back to English, then to any available translation.
    """

    if raw is None:
        return ""

    if isinstance(raw, dict):
        text = _pick(raw, language, "")
    elif isinstance(raw, str):
        try:
            data = json.loads(raw)
            text = _pick(data, language, raw) if isinstance(data, dict) else raw
        except json.JSONDecodeError:
            text = raw
    else:
        text = str(raw)

    return re.sub(r"<[^>]+>", "", str(text or "")).strip()
