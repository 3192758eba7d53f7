"""Event logging and timing spans for rooms and interviews."""
from .logger import log_event
from .tracing import span

__all__ = ["log_event", "span"]
