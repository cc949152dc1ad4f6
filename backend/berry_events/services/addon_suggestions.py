from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..service_types import AddOn, ServiceCatalog, get_catalog


@dataclass(frozen=True)
class SuggestionPolicy:
    """How clients should throttle suggestion lookups while typing."""

    min_chars: int = 3
    debounce_ms: int = 400


DEFAULT_POLICY = SuggestionPolicy()


def suggest_add_ons(
    category: Optional[str],
    text: Optional[str],
    min_chars: int = DEFAULT_POLICY.min_chars,
    catalog: Optional[ServiceCatalog] = None,
) -> List[AddOn]:
    """Add-ons of ``category`` whose keywords appear in the free-text description."""
    text = (text or "").strip()
    if len(text) < min_chars:
        return []
    service = (catalog or get_catalog()).for_category(category)
    if service is None:
        return []
    return [a for a in service.add_ons if a.matches(text)]
