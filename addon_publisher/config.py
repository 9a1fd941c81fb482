"""
Run configuration for the publisher.

Values come from CLI flags first, then from the environment. A `.env` file in
the working directory is loaded without overriding variables already set.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from .client import DEFAULT_API_URL
from .errors import InputError
from .inputs import (
    parse_compatibility,
    parse_release_notes,
    require_package_extension,
    require_source_extension,
    resolve_file,
)
from .upload import POLL_INTERVAL_SECONDS, POLL_TIMEOUT_SECONDS, PollPolicy
from .versions import VersionUpdateRequest

# setting name -> environment variable
ENV_VARS: Dict[str, str] = {
    "addon_guid": "AMO_ADDON_GUID",
    "jwt_issuer": "AMO_JWT_ISSUER",
    "jwt_secret": "AMO_JWT_SECRET",
    "package_path": "AMO_PACKAGE_PATH",
    "source_file_path": "AMO_SOURCE_FILE_PATH",
    "license": "AMO_LICENSE",
    "approval_notes": "AMO_APPROVAL_NOTES",
    "release_notes": "AMO_RELEASE_NOTES",
    "compatibility": "AMO_COMPATIBILITY",
    "self_hosted": "AMO_SELF_HOSTED",
    "api_url": "AMO_API_URL",
    "poll_interval": "AMO_POLL_INTERVAL",
    "poll_timeout": "AMO_POLL_TIMEOUT",
}

REQUIRED = ("addon_guid", "jwt_issuer", "jwt_secret", "package_path")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def load_env_file(path: Optional[Path] = None) -> None:
    env_path = path or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise InputError(f"{name} must be a boolean (true/false), got {value!r}")


def _parse_seconds(name: str, value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{name} must be a number of seconds, got {value!r}") from exc
    if seconds <= 0:
        raise InputError(f"{name} must be > 0, got {value!r}")
    return seconds


class PublisherSettings(BaseModel):
    """Fully validated inputs of one publishing run."""

    model_config = ConfigDict(frozen=True)

    addon_guid: str
    jwt_issuer: str
    jwt_secret: str
    package_path: Path
    source_file_path: Optional[Path] = None
    license: Optional[str] = None
    approval_notes: Optional[str] = None
    release_notes: Optional[Dict[str, str]] = None
    compatibility: Union[List[str], Dict[str, Dict[str, str]], None] = None
    self_hosted: bool = False
    api_url: str = DEFAULT_API_URL
    poll_interval: float = POLL_INTERVAL_SECONDS
    poll_timeout: float = POLL_TIMEOUT_SECONDS

    def poll_policy(self) -> PollPolicy:
        return PollPolicy(interval=self.poll_interval, timeout=self.poll_timeout)

    def version_request(self) -> VersionUpdateRequest:
        return VersionUpdateRequest(
            addon_guid=self.addon_guid,
            package_path=self.package_path,
            license=self.license,
            approval_notes=self.approval_notes,
            release_notes=self.release_notes,
            compatibility=self.compatibility,
            source_file_path=self.source_file_path,
        )


def collect_raw(overrides: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Merge CLI overrides over environment values; blank strings count as unset."""
    env = os.environ if environ is None else environ
    raw: Dict[str, Any] = {}
    for name, var in ENV_VARS.items():
        value = overrides.get(name)
        if value is None:
            value = env.get(var)
        if isinstance(value, str) and not value.strip():
            value = None
        if value is not None:
            raw[name] = value
    return raw


def build_settings(raw: Mapping[str, Any]) -> PublisherSettings:
    """Validate raw inputs. Raises InputError before anything touches the network."""
    missing = [ENV_VARS[name] for name in REQUIRED if not raw.get(name)]
    if missing:
        raise InputError("Missing required inputs: " + ", ".join(missing))

    release_notes = parse_release_notes(raw.get("release_notes"))
    compatibility = parse_compatibility(raw.get("compatibility"))

    source_file_path = None
    if raw.get("source_file_path"):
        source = resolve_file(str(raw["source_file_path"]))
        require_source_extension(source)
        source_file_path = Path(source)

    package = resolve_file(str(raw["package_path"]))
    require_package_extension(package)

    return PublisherSettings(
        addon_guid=str(raw["addon_guid"]),
        jwt_issuer=str(raw["jwt_issuer"]),
        jwt_secret=str(raw["jwt_secret"]),
        package_path=Path(package),
        source_file_path=source_file_path,
        license=raw.get("license"),
        approval_notes=raw.get("approval_notes"),
        release_notes=release_notes,
        compatibility=compatibility,
        self_hosted=_parse_bool("self_hosted", raw.get("self_hosted", False)),
        api_url=str(raw.get("api_url") or DEFAULT_API_URL),
        poll_interval=_parse_seconds("poll_interval", raw.get("poll_interval", POLL_INTERVAL_SECONDS)),
        poll_timeout=_parse_seconds("poll_timeout", raw.get("poll_timeout", POLL_TIMEOUT_SECONDS)),
    )
