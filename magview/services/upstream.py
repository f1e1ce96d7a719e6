from __future__ import annotations

import enum
import socket
from typing import Iterable

import requests


class RelayErrorKind(str, enum.Enum):
    UPSTREAM_REJECTION = "upstream_rejection"
    TRANSPORT_FAILURE = "transport_failure"


class RelayError(RuntimeError):
    """A single failed relay attempt. Never retried."""

    def __init__(self, kind: RelayErrorKind, status_code: int, body: bytes) -> None:
        super().__init__(body.decode("utf-8", errors="replace"))
        self.kind = kind
        self.status_code = status_code
        self.body = body

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @classmethod
    def rejection(cls, status_code: int, body: bytes) -> "RelayError":
        return cls(RelayErrorKind.UPSTREAM_REJECTION, status_code, body)

    @classmethod
    def transport(cls, exc: BaseException) -> "RelayError":
        return cls(RelayErrorKind.TRANSPORT_FAILURE, 500, str(exc).encode("utf-8"))


def _iter_exception_chain(exc: BaseException) -> Iterable[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        next_exc = current.__cause__ or current.__context__
        current = next_exc if isinstance(next_exc, BaseException) else None


def is_timeout_error(exc: BaseException) -> bool:
    timeout_types: tuple[type[BaseException], ...] = (
        TimeoutError,
        socket.timeout,
        requests.exceptions.Timeout,
    )
    return any(isinstance(candidate, timeout_types) for candidate in _iter_exception_chain(exc))


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300
