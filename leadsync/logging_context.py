"""Per-message correlation ids for log records.

Each inbound message runs inside ``request_scope``, which binds a fresh
``MSG-xxxxxxxx`` id to the current async context. Every record emitted
while the scope is open, from resolver to log sink, carries it as
``record.request_id`` so one customer turn can be grepped end to end.
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_REQUEST = "-"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST)


def new_request_id() -> str:
    return f"MSG-{uuid.uuid4().hex[:8]}"


def current_request_id() -> str:
    return _request_id.get()


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block, then restore the previous one."""
    token = _request_id.set(request_id or new_request_id())
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def _has_request_filter(filterer: logging.Filterer) -> bool:
    return any(isinstance(f, RequestIdFilter) for f in filterer.filters)


def get_request_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger whose records, and the root handlers', carry ``request_id``.

    With no ``name`` only the root handlers are prepared; ``load_config``
    calls it that way right after ``basicConfig`` so third-party records
    also satisfy a ``%(request_id)s`` format.
    """
    for handler in logging.getLogger().handlers:
        if not _has_request_filter(handler):
            handler.addFilter(RequestIdFilter())
    logger = logging.getLogger(name)
    if name and not _has_request_filter(logger):
        logger.addFilter(RequestIdFilter())
    return logger
