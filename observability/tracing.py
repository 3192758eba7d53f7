"""Span helper for timing collaborator calls."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .logger import log_event


@contextmanager
def span(kind: str, ref: str, **fields: Any) -> Iterator[None]:
    start = time.time()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((time.time() - start) * 1000)
        log_event(kind, ref, ms=elapsed_ms, outcome=outcome, **fields)


__all__ = ["span"]
