from __future__ import annotations

import base64

import pytest
import requests

from magview.config import Settings
from magview.services import relay as relay_module
from magview.services.naming import MagNaming
from magview.services.relay import MagRelay, RelayResponse
from magview.services.upstream import RelayError, RelayErrorKind, is_timeout_error

GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04\x00;"


def _upstream_response(status_code: int, content: bytes = b"", content_type: str = "image/gif") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = content
    resp.headers["Content-Type"] = content_type
    return resp


class _FakeSession:
    def __init__(self, response: requests.Response | None = None, exc: BaseException | None = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: list[dict] = []

    def get(self, url: str, headers: dict | None = None, timeout: float | None = None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def _relay(session: _FakeSession, **naming_kwargs) -> MagRelay:
    return MagRelay(MagNaming(**naming_kwargs), Settings(), session=session)  # type: ignore[arg-type]


def test_relay_success_returns_base64_gif_with_cache_and_cors_headers() -> None:
    session = _FakeSession(_upstream_response(200, GIF_BYTES))
    result = _relay(session).relay({"cycle": "12", "fhr": "3", "param": "ceiling"})

    assert result.status_code == 200
    assert result.is_base64_encoded is True
    assert result.body == GIF_BYTES
    assert base64.b64decode(result.encoded_body) == GIF_BYTES
    assert len(result.content()) == len(GIF_BYTES)
    assert result.headers == {
        "Content-Type": "image/gif",
        "Cache-Control": "public, max-age=300",
        "Access-Control-Allow-Origin": "*",
    }


def test_relay_requests_direct_url_with_hotlink_headers() -> None:
    session = _FakeSession(_upstream_response(200, GIF_BYTES))
    _relay(session).relay({"model": "HRRR", "cycle": "6", "fhr": "12", "param": "Vis"})

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://mag.ncep.noaa.gov/data/hrrr06/hrrr_conus_01200_vis.gif"
    assert call["headers"]["Referer"] == "https://mag.ncep.noaa.gov/"
    assert call["headers"]["User-Agent"].startswith("Mozilla/5.0")
    assert call["headers"]["Accept"] == "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"
    assert call["timeout"] == 15.0


def test_relay_defaults_when_query_is_empty() -> None:
    session = _FakeSession(_upstream_response(200, GIF_BYTES))
    _relay(session).relay({})
    assert session.calls[0]["url"] == "https://mag.ncep.noaa.gov/data/hrrr00/hrrr_conus_00000_ceiling.gif"


def test_relay_passes_size_suffix_through() -> None:
    session = _FakeSession(_upstream_response(200, GIF_BYTES))
    _relay(session).relay({"cycle": "01", "fhr": "001", "param": "vis", "size": "_l"})
    assert session.calls[0]["url"].endswith("/hrrr01/hrrr_conus_00100_vis_l.gif")


def test_relay_upstream_rejection_is_passed_through_verbatim() -> None:
    session = _FakeSession(_upstream_response(404, b"not found", "text/plain"))
    result = _relay(session).relay({"cycle": "03", "fhr": "018"})

    assert result == RelayResponse(status_code=404, body=b"not found")
    assert result.headers == {}
    assert result.is_base64_encoded is False
    assert result.content() == b"not found"


def test_relay_transport_failure_is_500_with_message() -> None:
    session = _FakeSession(exc=requests.exceptions.ConnectionError("connection reset by peer"))
    result = _relay(session).relay({"cycle": "00", "fhr": "000"})

    assert result.status_code == 500
    assert result.body == b"connection reset by peer"
    assert result.headers == {}


def test_fetch_raises_typed_errors() -> None:
    naming = MagNaming()
    request = naming.request(0, 0, "ceiling")

    rejecting = _relay(_FakeSession(_upstream_response(403, b"Forbidden", "text/html")))
    with pytest.raises(RelayError) as rejected:
        rejecting.fetch(request)
    assert rejected.value.kind is RelayErrorKind.UPSTREAM_REJECTION
    assert rejected.value.status_code == 403
    assert rejected.value.body == b"Forbidden"

    timing_out = _relay(_FakeSession(exc=requests.exceptions.ReadTimeout("read timed out")))
    with pytest.raises(RelayError) as failed:
        timing_out.fetch(request)
    assert failed.value.kind is RelayErrorKind.TRANSPORT_FAILURE
    assert failed.value.status_code == 500
    assert is_timeout_error(failed.value)


def test_relay_honours_configured_host() -> None:
    session = _FakeSession(_upstream_response(200, GIF_BYTES))
    _relay(session, host="mag.example.test").relay({"cycle": "12", "fhr": "0"})
    call = session.calls[0]
    assert call["url"].startswith("https://mag.example.test/data/hrrr12/")
    assert call["headers"]["Referer"] == "https://mag.example.test/"


def test_event_handler_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    ok = _relay(_FakeSession(_upstream_response(200, GIF_BYTES)))
    monkeypatch.setattr(relay_module, "get_relay", lambda: ok)

    payload = relay_module.handler({"queryStringParameters": {"cycle": "12", "fhr": "3"}})
    assert payload["statusCode"] == 200
    assert payload["isBase64Encoded"] is True
    assert payload["headers"]["Content-Type"] == "image/gif"
    assert base64.b64decode(payload["body"]) == GIF_BYTES

    missing = _relay(_FakeSession(_upstream_response(404, b"not found", "text/plain")))
    monkeypatch.setattr(relay_module, "get_relay", lambda: missing)
    assert relay_module.handler({"queryStringParameters": None}) == {"statusCode": 404, "body": "not found"}


def test_event_handler_decodes_non_utf8_error_text_with_replacement(monkeypatch: pytest.MonkeyPatch) -> None:
    garbled = _relay(_FakeSession(_upstream_response(500, b"caf\xe9", "application/octet-stream")))
    monkeypatch.setattr(relay_module, "get_relay", lambda: garbled)

    payload = relay_module.handler({"queryStringParameters": {}})

    assert payload == {"statusCode": 500, "body": "caf\ufffd"}
    assert garbled.relay({}).body == b"caf\xe9"
