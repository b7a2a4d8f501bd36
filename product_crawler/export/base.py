from __future__ import annotations

from typing import Dict, List, Protocol


class Exporter(Protocol):
    """Persists the domain -> product URLs mapping once, at the end of a run."""

    def export(self, data: Dict[str, List[str]], path: str) -> None:
        ...
