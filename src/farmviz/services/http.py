from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Mapping, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen
import uuid

from farmviz.util.errors import DataError, NetworkError


@dataclass(frozen=True)
class MultipartFile:
    field_name: str
    file_name: str
    content_type: str
    content: bytes


class JsonHttpClient:
    """Small interface to keep collaborator calls mockable and deterministic in tests."""

    def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def post_multipart(
        self,
        url: str,
        fields: Mapping[str, str],
        files: Sequence[MultipartFile],
    ) -> dict[str, Any]:
        raise NotImplementedError


class UrlLibJsonHttpClient(JsonHttpClient):
    def __init__(self, *, timeout_seconds: float = 30.0, user_agent: str = "farmviz/0.1") -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        body = json.dumps(dict(payload)).encode("utf-8")
        return self._send(url, body, "application/json")

    def post_multipart(
        self,
        url: str,
        fields: Mapping[str, str],
        files: Sequence[MultipartFile],
    ) -> dict[str, Any]:
        boundary = f"----farmviz{uuid.uuid4().hex}"
        body = encode_multipart(boundary, fields, files)
        return self._send(url, body, f"multipart/form-data; boundary={boundary}")

    def _send(self, url: str, body: bytes, content_type: str) -> dict[str, Any]:
        request = Request(
            url,
            data=body,
            method="POST",
            headers={
                "Accept": "application/json",
                "Content-Type": content_type,
                "User-Agent": self.user_agent,
            },
        )
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:
                payload = response.read()
        except HTTPError as exc:
            raise NetworkError(f"Request to {url} failed: HTTP {exc.code} {exc.reason}") from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        return parse_json_object(payload)


def parse_json_object(payload: bytes) -> dict[str, Any]:
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DataError("Service returned invalid JSON.") from exc
    if not isinstance(parsed, dict):
        raise DataError("Service returned an unexpected response shape.")
    return parsed


def encode_multipart(boundary: str, fields: Mapping[str, str], files: Sequence[MultipartFile]) -> bytes:
    lines: list[bytes] = []
    for name, value in fields.items():
        lines.append(f"--{boundary}".encode("utf-8"))
        lines.append(f'Content-Disposition: form-data; name="{name}"'.encode("utf-8"))
        lines.append(b"")
        lines.append(str(value).encode("utf-8"))
    for f in files:
        lines.append(f"--{boundary}".encode("utf-8"))
        lines.append(
            f'Content-Disposition: form-data; name="{f.field_name}"; filename="{f.file_name}"'.encode("utf-8")
        )
        lines.append(f"Content-Type: {f.content_type}".encode("utf-8"))
        lines.append(b"")
        lines.append(f.content)
    lines.append(f"--{boundary}--".encode("utf-8"))
    lines.append(b"")
    return b"\r\n".join(lines)
