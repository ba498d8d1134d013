"""Helpers for canonicalizing bookmaker-specific names.

Each provider spells teams slightly differently ("Arsenal FC" vs "arsenal").
These helpers provide a central place for deterministic matching so that
quotes for the same fixture can be merged across providers.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict

_SIDE_SEPARATOR = re.compile(r"\s+(?:-|vs\.?|v)\s+", flags=re.IGNORECASE)


class NameNormalizer:
    """Maps provider-supplied names to canonical forms."""

    def __init__(self, overrides: Dict[str, str] | None = None) -> None:
        self._overrides = {k.casefold(): v for k, v in (overrides or {}).items()}

    def canonicalize(self, value: str) -> str:
        key = value.casefold().strip()
        if key in self._overrides:
            return self._overrides[key]
        normalized = _squash_whitespace(_strip_suffixes(key))
        return normalized.title()

    def canonicalize_match(self, value: str) -> str:
        """Canonicalize both sides of ``"Home - Away"`` style fixture names."""

        sides = _SIDE_SEPARATOR.split(value.strip())
        return " - ".join(self.canonicalize(side) for side in sides)


def _strip_suffixes(value: str) -> str:
    return re.sub(r"\b(f\.c\.|fc|club)(?=\s|$)", "", value, flags=re.IGNORECASE)


@lru_cache(maxsize=512)
def _squash_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip())
