from __future__ import annotations

from typing import Any, Dict, List, Protocol, Sequence


class EnrichmentPort(Protocol):
    def enrich(self, urls: Sequence[str]) -> List[Dict[str, Any]]:
        ...
