"""
Read-only access to filter state carried in the page URL.

Query parameters seed widget values once, at construction time. The
fragment carries a record identifier. Nothing is ever written back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple
from urllib.parse import parse_qs, unquote, urlsplit


@dataclass(frozen=True)
class UrlState:
    params: Dict[str, str] = field(default_factory=dict)
    fragment: str = ""

    @classmethod
    def from_url(cls, href: Optional[str]) -> UrlState:
        if not href:
            return cls()
        parts = urlsplit(href)
        return cls(params=_first_values(parts.query), fragment=unquote(parts.fragment))

    @classmethod
    def from_location(cls, search: Optional[str], hash_: Optional[str] = None) -> UrlState:
        """Build from the `search` ("?a=1") and `hash` ("#id") parts of dcc.Location."""
        query = (search or "").lstrip("?")
        fragment = (hash_ or "").lstrip("#")
        return cls(params=_first_values(query), fragment=unquote(fragment))

    def param(self, key: str) -> Optional[str]:
        return self.params.get(key)


def _first_values(query: str) -> Dict[str, str]:
    parsed = parse_qs(query, keep_blank_values=False)
    return {k: v[0] for k, v in parsed.items() if v}


def get_url_param(url: Optional[UrlState], key: str) -> Optional[str]:
    if url is None:
        return None
    return url.param(key)


def get_id_from_url(url: Optional[UrlState]) -> Optional[str]:
    """The fragment portion of the URL, or None when there is none."""
    if url is None or not url.fragment:
        return None
    return url.fragment


def restore_selection(
    options: Sequence[Tuple[Any, int]],
    default_value: Optional[str],
) -> Optional[Any]:
    """
    Pick the option whose display value matches `default_value`
    case-insensitively. None means fall back to "All".
    """
    if not default_value:
        return None
    wanted = str(default_value).lower()
    for option in options:
        if str(option[0]).lower() == wanted:
            return option[0]
    return None
