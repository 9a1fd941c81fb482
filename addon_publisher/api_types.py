"""
Response shapes of the add-on API.
https://addons-server.readthedocs.io/en/latest/topics/api/addons.html#upload-detail
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class Channel(str, Enum):
    LISTED = "listed"
    UNLISTED = "unlisted"

    @classmethod
    def for_self_hosted(cls, self_hosted: bool) -> "Channel":
        return cls.UNLISTED if self_hosted else cls.LISTED


class UploadResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uuid: str
    # Visibility on the site.
    channel: Channel = Channel.LISTED
    # Set once the validator has run; never reverts.
    processed: bool = False
    # Only meaningful once processed.
    valid: bool = False
    # Validator findings, service-defined.
    validation: Any = None
    url: Optional[str] = None
    # Version number parsed from the manifest by the server.
    version: Optional[str] = None
    # An upload can only be submitted once.
    submitted: bool = False


class VersionBound(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min: Optional[str] = None
    max: Optional[str] = None


# https://mozilla.github.io/addons-server/topics/api/addons.html#version-compatibility-examples
Compatibility = Union[List[str], Dict[str, VersionBound]]
