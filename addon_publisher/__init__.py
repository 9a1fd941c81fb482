"""
Publish browser extension packages to addons.mozilla.org from CI.
"""
from .credentials import issue_credential
from .errors import (
    InputError,
    ManifestVersionError,
    PackageFileError,
    PublishError,
    UpstreamHttpError,
    ValidationFailed,
    ValidationTimeout,
)
from .upload import PollPolicy, submit_and_validate, wait_until_validated
from .versions import VersionUpdateRequest, publish_version, read_manifest_version

__version__ = "1.0.0"

__all__ = [
    "InputError",
    "ManifestVersionError",
    "PackageFileError",
    "PollPolicy",
    "PublishError",
    "UpstreamHttpError",
    "ValidationFailed",
    "ValidationTimeout",
    "VersionUpdateRequest",
    "issue_credential",
    "publish_version",
    "read_manifest_version",
    "submit_and_validate",
    "wait_until_validated",
]
