"""Request Context Management.

Request-scoped logging context using contextvars. Every log line
emitted while serving a request carries its request and correlation
ids, plus anything bound along the way (platform, query...).
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
_extra_context_var: ContextVar[dict] = ContextVar("extra_context", default={})


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    return _request_id_var.get()


def get_correlation_id() -> str:
    return _correlation_id_var.get()


def get_context_dict() -> dict[str, Any]:
    """Current context as a flat dict for log binding."""
    ctx = {}
    req_id = _request_id_var.get()
    if req_id:
        ctx["request_id"] = req_id
    corr_id = _correlation_id_var.get()
    if corr_id and corr_id != req_id:
        ctx["correlation_id"] = corr_id
    extra = _extra_context_var.get()
    if extra:
        ctx.update(extra)
    return ctx


def bind_context(**kwargs: Any) -> None:
    """Add key-value pairs to the current context."""
    _extra_context_var.set({**_extra_context_var.get(), **kwargs})


@dataclass
class RequestContext:
    """Context manager binding request ids to all log entries within it.

    Example:
        with RequestContext(request_id="abc-123"):
            logger.info("searching")  # carries request_id=abc-123
    """

    request_id: str = ""
    correlation_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.request_id:
            self.request_id = generate_request_id()
        if not self.correlation_id:
            self.correlation_id = self.request_id

    def __enter__(self) -> "RequestContext":
        self._tokens = [
            (_request_id_var, _request_id_var.set(self.request_id)),
            (_correlation_id_var, _correlation_id_var.set(self.correlation_id)),
            (_extra_context_var, _extra_context_var.set(self.extra.copy())),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    @property
    def elapsed_ms(self) -> float:
        delta = datetime.now(timezone.utc) - self.started_at
        return delta.total_seconds() * 1000

    def bind(self, **kwargs: Any) -> None:
        bind_context(**kwargs)
        self.extra.update(kwargs)
