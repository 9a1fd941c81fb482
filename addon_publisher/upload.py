"""
Upload a package and wait for the remote validator to finish with it.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable

from .api_types import Channel
from .client import AddonsClient
from .errors import PackageFileError, ValidationFailed, ValidationTimeout

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 5.0
POLL_TIMEOUT_SECONDS = 10 * 60.0


@dataclass(frozen=True)
class PollPolicy:
    interval: float = POLL_INTERVAL_SECONDS
    timeout: float = POLL_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("poll interval must be > 0")
        if self.timeout <= 0:
            raise ValueError("poll timeout must be > 0")


def create_upload(client: AddonsClient, package_path: Path, self_hosted: bool) -> str:
    channel = Channel.for_self_hosted(self_hosted)
    logger.info("Start to upload %s to the add-on server (channel: %s).", package_path.name, channel.value)
    try:
        f = package_path.open("rb")
    except OSError as exc:
        raise PackageFileError(f"Cannot read package file: {package_path}", detail=str(exc)) from exc
    with f:
        upload = client.create_upload(f, package_path.name, channel)
    logger.info("Package uploaded as %s.", upload.uuid)
    return upload.uuid


async def wait_until_validated(
    client: AddonsClient,
    upload_uuid: str,
    policy: PollPolicy = PollPolicy(),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Poll the upload until it is processed.

    The first check happens only after one full interval. Raises
    ValidationFailed when the validator rejects the package and
    ValidationTimeout once `policy.timeout` seconds have passed.
    """
    end_time = clock() + policy.timeout
    while clock() < end_time:
        logger.info("Package not yet validated. Wait %g seconds.", policy.interval)
        await sleep(policy.interval)

        logger.info("Checking if package is validated.")
        # Blocking call on purpose: this coroutine is the only task on the loop.
        upload = client.get_upload(upload_uuid)
        if not upload.processed:
            continue
        if upload.valid:
            return
        raise ValidationFailed(upload.validation)

    raise ValidationTimeout(f"Timeout waiting for package validation after {policy.timeout:g} seconds.")


async def submit_and_validate(
    client: AddonsClient,
    package_path: Path,
    self_hosted: bool,
    policy: PollPolicy = PollPolicy(),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> str:
    upload_uuid = create_upload(client, package_path, self_hosted)
    await wait_until_validated(client, upload_uuid, policy, sleep=sleep, clock=clock)
    logger.info("Package processed.")
    return upload_uuid
