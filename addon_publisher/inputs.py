"""
Validation of user-supplied inputs.
Everything here runs before the first network call.
"""
from __future__ import annotations

import glob
import json
import os
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .api_types import Compatibility
from .errors import InputError

PACKAGE_EXTENSIONS = (".zip", ".xpi", ".crx")
SOURCE_EXTENSIONS = (".zip", ".tar.gz", ".tgz", ".tar.bz2")

_compatibility_adapter = TypeAdapter(Compatibility)


def resolve_file(pattern: str) -> str:
    """Resolve a path or a (non-recursive) glob to exactly one regular file."""
    matches = sorted(glob.glob(pattern))
    if not matches:
        raise InputError(f"File not found: {pattern}")
    if len(matches) > 1:
        raise InputError(f"Multiple files found for {pattern}: {', '.join(matches)}")
    path = matches[0]
    if not os.path.isfile(path):
        raise InputError(f"Not a regular file: {path}")
    return path


def _require_extension(path: str, allowed: tuple, kind: str) -> None:
    if not path.lower().endswith(allowed):
        raise InputError(f"{kind} file must end with one of {', '.join(allowed)}: {path}")


def require_package_extension(path: str) -> None:
    _require_extension(path, PACKAGE_EXTENSIONS, "Package")


def require_source_extension(path: str) -> None:
    _require_extension(path, SOURCE_EXTENSIONS, "Source")


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise InputError(f"{what} is not valid JSON", detail=str(exc)) from exc


def parse_release_notes(text: Optional[str]) -> Optional[Dict[str, str]]:
    """Parse `{"<locale>": "<notes>", ...}`; empty input means no notes."""
    if text is None or not text.strip():
        return None
    notes = _load_json(text, "release notes")
    if not isinstance(notes, dict):
        raise InputError('release notes must be a JSON object such as {"en-US": "..."}')
    for locale, value in notes.items():
        if not isinstance(value, str):
            raise InputError(f"release notes for {locale!r} must be a string")
    return notes or None


def parse_compatibility(text: Optional[str]) -> Union[List[str], Dict[str, Dict[str, str]], None]:
    """Parse a list of application names or a mapping of application to {min, max}."""
    if text is None or not text.strip():
        return None
    raw = _load_json(text, "compatibility")
    if isinstance(raw, (dict, list)) and not raw:
        return None
    try:
        parsed = _compatibility_adapter.validate_python(raw)
    except ValidationError as exc:
        raise InputError("compatibility must be a list of application names or a mapping of "
                         "application to {\"min\": ..., \"max\": ...}", detail=str(exc)) from exc
    if isinstance(parsed, list):
        return parsed
    return {app: bound.model_dump(exclude_none=True) for app, bound in parsed.items()}
