"""Simple span helper for recording step timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List


@contextmanager
def span(events: List[Dict[str, Any]], name: str) -> Iterator[Dict[str, Any]]:
    entry: Dict[str, Any] = {"span": name}
    start = time.perf_counter()
    try:
        yield entry
    finally:
        entry["ms"] = int((time.perf_counter() - start) * 1000)
        events.append(entry)


__all__ = ["span"]
