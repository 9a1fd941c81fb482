from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from addon_publisher.client import AddonsClient

API = "https://addons.mozilla.org/api/v5"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Records requests; `routes` maps (method, url) to a callable returning FakeResponse."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.file_objects: List[Any] = []
        self.routes: Dict[tuple, Callable[[Dict[str, Any]], FakeResponse]] = {}
        self.closed = False

    def on(self, method: str, url: str, handler: Callable[[Dict[str, Any]], FakeResponse]) -> None:
        self.routes[(method, url)] = handler

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        call: Dict[str, Any] = {"method": method, "url": url, **kwargs}
        # Read file parts while the caller still holds them open.
        files = kwargs.get("files") or {}
        self.file_objects.extend(part[1] for part in files.values())
        call["file_contents"] = {name: (part[0], part[1].read()) for name, part in files.items()}
        self.calls.append(call)
        handler = self.routes.get((method, url))
        if handler is None:
            raise AssertionError(f"unexpected request {method} {url}")
        return handler(call)

    def close(self) -> None:
        self.closed = True


def upload_payload(uuid: str = "test-upload-uuid", processed: bool = False, valid: bool = False,
                   validation: Any = None, channel: str = "unlisted") -> Dict[str, Any]:
    return {
        "uuid": uuid,
        "channel": channel,
        "processed": processed,
        "valid": valid,
        "validation": validation if validation is not None else {},
        "url": f"{API}/addons/upload/{uuid}/",
        "version": "1.0",
        "submitted": False,
    }


class VirtualClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> AddonsClient:
    return AddonsClient("test-jwt-token", api_url=API, session=session)


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


def write_package(path: Path, manifest: Any = None, raw_manifest: Optional[str] = None) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        if raw_manifest is not None:
            zf.writestr("manifest.json", raw_manifest)
        elif manifest is not None:
            zf.writestr("manifest.json", json.dumps(manifest))
        zf.writestr("background.js", "console.log('hi');")
    return path


@pytest.fixture
def package(tmp_path: Path) -> Path:
    return write_package(tmp_path / "addon.xpi", {"manifest_version": 2, "name": "test", "version": "1.2.3"})


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "source.tar.gz"
    path.write_bytes(b"test-source-content")
    return path
