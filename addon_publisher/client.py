"""
Thin wrapper over the add-on API endpoints this tool needs.

Every call is a single request: errors are converted to UpstreamHttpError and
never retried here.
"""
from __future__ import annotations

import logging
from typing import Any, BinaryIO, Dict, Optional

import requests

from .api_types import Channel, UploadResponse
from .credentials import authorization_header
from .errors import UpstreamHttpError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://addons.mozilla.org/api/v5"
REQUEST_TIMEOUT = 60
UPLOAD_TIMEOUT = 300


class AddonsClient:
    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.headers = authorization_header(token)
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, timeout: int = REQUEST_TIMEOUT, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, headers=self.headers, timeout=timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamHttpError.from_requests(exc) from exc
        return resp

    @staticmethod
    def _upload_response(resp: requests.Response) -> UploadResponse:
        try:
            return UploadResponse.model_validate(resp.json())
        except ValueError as exc:
            raise UpstreamHttpError(
                "Unexpected upload response from add-on API server",
                status=resp.status_code,
                body=resp.text,
            ) from exc

    # https://addons-server.readthedocs.io/en/latest/topics/api/addons.html#upload-create
    def create_upload(self, package: BinaryIO, filename: str, channel: Channel) -> UploadResponse:
        files = {"upload": (filename, package)}
        data = {"channel": channel.value}
        resp = self._request("POST", "addons/upload/", timeout=UPLOAD_TIMEOUT, files=files, data=data)
        return self._upload_response(resp)

    # https://addons-server.readthedocs.io/en/latest/topics/api/addons.html#upload-detail
    def get_upload(self, upload_uuid: str) -> UploadResponse:
        resp = self._request("GET", f"addons/upload/{upload_uuid}/")
        return self._upload_response(resp)

    # https://addons-server.readthedocs.io/en/latest/topics/api/addons.html#version-create
    def create_version(self, addon_guid: str, body: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._request("POST", f"addons/addon/{addon_guid}/versions/", json=body)
        return _json_or_empty(resp)

    # https://addons-server.readthedocs.io/en/latest/topics/api/addons.html#version-sources
    def create_version_with_source(
        self,
        addon_guid: str,
        fields: Dict[str, str],
        source: BinaryIO,
        filename: str,
    ) -> Dict[str, Any]:
        files = {"source": (filename, source)}
        resp = self._request(
            "POST", f"addons/addon/{addon_guid}/versions/", timeout=UPLOAD_TIMEOUT, data=fields, files=files
        )
        return _json_or_empty(resp)

    def patch_version_source(
        self,
        addon_guid: str,
        version_number: str,
        fields: Dict[str, str],
        source: BinaryIO,
        filename: str,
    ) -> Dict[str, Any]:
        files = {"source": (filename, source)}
        resp = self._request(
            "PATCH",
            f"addons/addon/{addon_guid}/versions/{version_number}/",
            timeout=UPLOAD_TIMEOUT,
            data=fields,
            files=files,
        )
        return _json_or_empty(resp)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "AddonsClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _json_or_empty(resp: requests.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
