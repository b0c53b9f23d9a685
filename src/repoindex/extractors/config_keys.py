"""Keys declared in configuration arrays and objects."""

from __future__ import annotations

import re

# 'key' => value (PHP arrays) or "key": value (JSON / JS objects)
_KEY_RE = re.compile(r"['\"](\w+)['\"]\s*(?:=>|:)")


def extract_config_keys(text: str) -> list[str]:
    """Return string-literal mapping keys, de-duplicated in first-occurrence order."""
    return list(dict.fromkeys(_KEY_RE.findall(text)))
