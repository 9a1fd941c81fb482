"""
Attach a validated upload to the add-on's version history.

The version-create endpoint takes either structured metadata (notes) or a
source attachment in one call, never both. When both are wanted the version
is created first and its source patched afterwards, addressed by the version
number declared in the package manifest.
"""
from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .client import AddonsClient
from .errors import ManifestVersionError, stringify

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True)
class VersionUpdateRequest:
    addon_guid: str
    package_path: Path
    license: Optional[str] = None
    approval_notes: Optional[str] = None
    release_notes: Optional[Dict[str, str]] = None
    compatibility: Union[List[str], Dict[str, Dict[str, str]], None] = None
    source_file_path: Optional[Path] = None

    @property
    def has_metadata(self) -> bool:
        """True when the JSON version-create body carries more than upload and license."""
        return (
            self.approval_notes is not None
            or self.release_notes is not None
            or self.compatibility is not None
        )

    def metadata_body(self, upload_uuid: str) -> Dict[str, Any]:
        body: Dict[str, Any] = {"upload": upload_uuid}
        if self.license:
            body["license"] = self.license
        if self.approval_notes is not None:
            body["approval_notes"] = self.approval_notes
        if self.release_notes is not None:
            body["release_notes"] = self.release_notes
        if self.compatibility is not None:
            body["compatibility"] = self.compatibility
        return body

    def source_fields(self) -> Dict[str, str]:
        return {"license": self.license} if self.license else {}


@dataclass(frozen=True)
class CreateVersion:
    """No source file: one JSON version-create call."""

    request: VersionUpdateRequest


@dataclass(frozen=True)
class CreateVersionWithSource:
    """Source file without metadata: one multipart call carrying upload and source."""

    request: VersionUpdateRequest
    source_file_path: Path


@dataclass(frozen=True)
class CreateThenPatchSource:
    """Source file and metadata: create with metadata, then patch the source in."""

    request: VersionUpdateRequest
    source_file_path: Path
    version_number: str


VersionUpdatePlan = Union[CreateVersion, CreateVersionWithSource, CreateThenPatchSource]


def read_manifest_version(package_path: Path) -> str:
    """Return the manifest version of a package, prefixed with "v"."""
    try:
        with zipfile.ZipFile(package_path) as zf:
            content = zf.read(MANIFEST_NAME).decode("utf-8")
    except (OSError, KeyError, zipfile.BadZipFile, UnicodeDecodeError) as exc:
        raise ManifestVersionError(
            f"Error getting addon version because failed to read {MANIFEST_NAME}.",
            detail=str(exc),
        ) from exc

    try:
        manifest = json.loads(content)
    except ValueError as exc:
        raise ManifestVersionError(
            f"Error getting addon version because failed to parse {MANIFEST_NAME}. Is it a valid JSON file?",
            detail=content,
        ) from exc
    if not isinstance(manifest, dict):
        raise ManifestVersionError(
            f"Error getting addon version because failed to parse {MANIFEST_NAME}. Is it a valid JSON file?",
            detail=content,
        )

    version = manifest.get("version")
    if not isinstance(version, str) or not version:
        raise ManifestVersionError(
            f"Error getting addon version. Does {MANIFEST_NAME} have a valid version field?",
            detail=stringify(manifest),
        )
    return version if version.startswith("v") else f"v{version}"


def plan_version_update(request: VersionUpdateRequest) -> VersionUpdatePlan:
    """Pick the submission shape. Reads the manifest when a patch will be needed."""
    source = request.source_file_path
    if source is None:
        return CreateVersion(request)
    if not request.has_metadata:
        return CreateVersionWithSource(request, source)
    return CreateThenPatchSource(request, source, read_manifest_version(request.package_path))


def _create_version(client: AddonsClient, plan: CreateVersion, upload_uuid: str) -> None:
    req = plan.request
    logger.info("Start to create a version.")
    client.create_version(req.addon_guid, req.metadata_body(upload_uuid))
    logger.info("Version created.")


def _create_version_with_source(client: AddonsClient, plan: CreateVersionWithSource, upload_uuid: str) -> None:
    req = plan.request
    logger.info("Start to create a version with source.")
    fields = {"upload": upload_uuid, **req.source_fields()}
    with plan.source_file_path.open("rb") as f:
        client.create_version_with_source(req.addon_guid, fields, f, plan.source_file_path.name)
    logger.info("Version with source created.")


def _create_then_patch_source(client: AddonsClient, plan: CreateThenPatchSource, upload_uuid: str) -> None:
    req = plan.request
    _create_version(client, CreateVersion(req), upload_uuid)
    logger.info("Start to patch the source of version %s.", plan.version_number)
    with plan.source_file_path.open("rb") as f:
        client.patch_version_source(
            req.addon_guid, plan.version_number, req.source_fields(), f, plan.source_file_path.name
        )
    logger.info("Version source patched.")


_HANDLERS: Dict[type, Callable[[AddonsClient, Any, str], None]] = {
    CreateVersion: _create_version,
    CreateVersionWithSource: _create_version_with_source,
    CreateThenPatchSource: _create_then_patch_source,
}


def execute_plan(client: AddonsClient, plan: VersionUpdatePlan, upload_uuid: str) -> None:
    _HANDLERS[type(plan)](client, plan, upload_uuid)


def publish_version(client: AddonsClient, request: VersionUpdateRequest, upload_uuid: str) -> VersionUpdatePlan:
    plan = plan_version_update(request)
    execute_plan(client, plan, upload_uuid)
    return plan
