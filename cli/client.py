from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the dashboard service."""

    def __init__(
        self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url, timeout=config.timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def list_files(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/files")

    def upload_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise typer.BadParameter(f"File {path} does not exist.")
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")

        with path.open("rb") as handle:
            payload = self._request(
                "POST",
                "/files",
                files={"file": (path.name, handle, "text/csv")},
            )
        if not isinstance(payload.get("id"), str):
            raise typer.BadParameter("Unexpected response payload when uploading file.")
        return payload

    def get_dashboard(self, file_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/files/{file_id}/dashboard")

    def refresh_insights(self, file_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/files/{file_id}/insights")

    def ask(self, file_id: str, question: str) -> str:
        payload = self._request(
            "POST", f"/files/{file_id}/analysis", json={"question": question}
        )
        return str(payload.get("answer", ""))

    def rename_file(self, file_id: str, name: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/files/{file_id}", json={"name": name})

    def delete_file(self, file_id: str) -> bool:
        payload = self._request("DELETE", f"/files/{file_id}")
        return bool(payload.get("deleted"))

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
            if response.status_code == 404:
                raise typer.BadParameter(self._detail(response) or f"{url} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _detail(response: httpx.Response) -> str | None:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or None
        if isinstance(data, dict):
            detail = data.get("detail")
            return str(detail) if detail else None
        return None

    @classmethod
    def _handle_http_error(cls, exc: httpx.HTTPStatusError) -> None:
        detail = cls._detail(exc.response)
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
