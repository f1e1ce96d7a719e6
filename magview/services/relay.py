from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests

from magview.config import MAG_ACCEPT_HEADER, Settings, settings as default_settings

from .naming import ImageRequest, MagNaming
from .upstream import RelayError, is_success_status, is_timeout_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayResponse:
    """Relay outcome. ``body`` holds the exact bytes to hand back to the caller."""

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)
    is_base64_encoded: bool = False

    def content(self) -> bytes:
        return self.body

    @property
    def encoded_body(self) -> str:
        if self.is_base64_encoded:
            return base64.b64encode(self.body).decode("ascii")
        return self.body.decode("utf-8", errors="replace")

    def as_event_response(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"statusCode": self.status_code, "body": self.encoded_body}
        if self.headers:
            payload["headers"] = dict(self.headers)
        if self.is_base64_encoded:
            payload["isBase64Encoded"] = True
        return payload


class MagRelay:
    """Fetches one MAG image per call with the headers MAG's hotlink check expects."""

    def __init__(
        self,
        naming: MagNaming,
        settings: Settings = default_settings,
        session: requests.Session | None = None,
    ) -> None:
        self.naming = naming
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def request_headers(self) -> dict[str, str]:
        return {
            "Referer": self.naming.origin,
            "User-Agent": self.settings.USER_AGENT,
            "Accept": MAG_ACCEPT_HEADER,
        }

    @property
    def success_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "image/gif",
            "Cache-Control": self.settings.cache_control,
            "Access-Control-Allow-Origin": "*",
        }

    def fetch(self, request: ImageRequest) -> bytes:
        remote = self.naming.direct_url(request)
        try:
            resp = self.session.get(
                remote,
                headers=self.request_headers,
                timeout=self.settings.UPSTREAM_TIMEOUT_SECONDS,
            )
            if not is_success_status(resp.status_code):
                raise RelayError.rejection(resp.status_code, resp.content)
            return resp.content
        except RelayError:
            raise
        except Exception as exc:
            raise RelayError.transport(exc) from exc

    def relay(self, query: Mapping[str, str | None]) -> RelayResponse:
        request = self.naming.request_from_query(query)
        try:
            payload = self.fetch(request)
        except RelayError as exc:
            if exc.__cause__ is not None and is_timeout_error(exc.__cause__):
                logger.warning("MAG fetch timed out for %s: %s", request.filename, exc.text)
            else:
                logger.warning(
                    "MAG relay failed for %s (%s, status %s)",
                    request.filename,
                    exc.kind.value,
                    exc.status_code,
                )
            return RelayResponse(status_code=exc.status_code, body=exc.body)

        logger.debug("Relayed %s (%d bytes)", request.filename, len(payload))
        return RelayResponse(
            status_code=200,
            body=payload,
            headers=self.success_headers,
            is_base64_encoded=True,
        )


_default_relay: MagRelay | None = None


def get_relay() -> MagRelay:
    global _default_relay
    if _default_relay is None:
        _default_relay = MagRelay(MagNaming.from_settings(default_settings), default_settings)
    return _default_relay


def handler(event: Mapping[str, Any], context: object = None) -> dict[str, Any]:
    """Serverless entrypoint: ``queryStringParameters`` in, status/body envelope out."""
    del context
    query = event.get("queryStringParameters") or {}
    return get_relay().relay(query).as_event_response()
