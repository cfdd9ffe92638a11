from __future__ import annotations

import json
from typing import List

import httpx
import pytest
import typer

from cli.client import ApiClient
from cli.config import CLIConfig


def _client(handler) -> ApiClient:
    return ApiClient(
        CLIConfig(base_url="http://dashboard.test", timeout=5.0),
        transport=httpx.MockTransport(handler),
    )


def test_upload_posts_multipart_file(tmp_path) -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": "file-1", "name": "data.csv"})

    csv_path = tmp_path / "data.csv"
    csv_path.write_text("timestamp,temp\n2024-01-01T00:00:00Z,1\n")

    payload = _client(handler).upload_file(csv_path)

    assert payload["id"] == "file-1"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/files"
    assert b'filename="data.csv"' in request.content


def test_ask_sends_question() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/files/file-1/analysis"
        assert json.loads(request.content) == {"question": "Why?"}
        return httpx.Response(200, json={"file_id": "file-1", "answer": "Because."})

    assert _client(handler).ask("file-1", "Why?") == "Because."


def test_not_found_becomes_bad_parameter() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "File 'x' not found."})

    with pytest.raises(typer.BadParameter, match="not found"):
        _client(handler).get_dashboard("x")


def test_server_error_exits() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"detail": "An error occurred while analyzing the file."})

    with pytest.raises(typer.Exit):
        _client(handler).ask("file-1", "Why?")


def test_transport_error_exits() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(typer.Exit):
        _client(handler).list_files()
