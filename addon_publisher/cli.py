#!/usr/bin/env python3
"""
Publish a browser extension package to addons.mozilla.org.

Usage:
  addon-publish --addon-guid <GUID> --package dist/extension.xpi \
      [--source-file dist/source.tar.gz] [--release-notes '{"en-US": "..."}'] [--dry-run]

Environment variables (used when the matching flag is omitted):
  AMO_JWT_ISSUER      API key (JWT issuer)
  AMO_JWT_SECRET      API secret (JWT signing secret)
  AMO_ADDON_GUID, AMO_PACKAGE_PATH, AMO_SOURCE_FILE_PATH, AMO_LICENSE,
  AMO_APPROVAL_NOTES, AMO_RELEASE_NOTES, AMO_COMPATIBILITY, AMO_SELF_HOSTED,
  AMO_API_URL, AMO_POLL_INTERVAL, AMO_POLL_TIMEOUT

Notes:
  - A .env file in the working directory is loaded first; it never overrides
    variables that are already set.
  - Package and source paths may be glob patterns that match exactly one file.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import List, Optional

from .client import AddonsClient
from .config import PublisherSettings, build_settings, collect_raw, load_env_file
from .credentials import issue_credential
from .errors import handle_error
from .logging_utils import configure_logging
from .upload import submit_and_validate
from .versions import plan_version_update, publish_version

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="addon-publish", description="Publish an add-on version to addons.mozilla.org")
    ap.add_argument("--addon-guid", help="Add-on GUID or slug")
    ap.add_argument("--jwt-issuer", help="API key (prefer AMO_JWT_ISSUER)")
    ap.add_argument("--jwt-secret", help="API secret (prefer AMO_JWT_SECRET)")
    ap.add_argument("--package", dest="package_path", help="Path or glob of the .zip/.xpi/.crx package")
    ap.add_argument("--source-file", dest="source_file_path", help="Path or glob of the source archive for review")
    ap.add_argument("--license", help="License slug, e.g. MPL-2.0")
    ap.add_argument("--approval-notes", help="Notes for the reviewers")
    ap.add_argument("--release-notes", help='JSON object of locale to notes, e.g. {"en-US": "Bug fixes"}')
    ap.add_argument("--compatibility", help='JSON list of applications or mapping to {"min", "max"}')
    ap.add_argument("--self-hosted", action="store_const", const=True, default=None,
                    help="Upload to the unlisted (self-distributed) channel")
    ap.add_argument("--api-url", help="Add-on API root")
    ap.add_argument("--poll-interval", type=float, help="Seconds between validation checks (default 5)")
    ap.add_argument("--poll-timeout", type=float, help="Seconds to wait for validation (default 600)")
    ap.add_argument("--dry-run", action="store_true", help="Validate inputs and print the plan without calling the API")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return ap


async def run(settings: PublisherSettings) -> str:
    logger.info("Start to publish add-on %s.", settings.addon_guid)
    token = issue_credential(settings.jwt_issuer, settings.jwt_secret)
    with AddonsClient(token, api_url=settings.api_url) as client:
        upload_uuid = await submit_and_validate(
            client, settings.package_path, settings.self_hosted, settings.poll_policy()
        )
        publish_version(client, settings.version_request(), upload_uuid)
    logger.info("Add-on published.")
    return upload_uuid


def describe_plan(settings: PublisherSettings) -> dict:
    plan = plan_version_update(settings.version_request())
    out = {
        "addon_guid": settings.addon_guid,
        "package": str(settings.package_path),
        "channel": "unlisted" if settings.self_hosted else "listed",
        "api_url": settings.api_url,
        "plan": type(plan).__name__,
        "source_file": str(settings.source_file_path) if settings.source_file_path else None,
    }
    version_number = getattr(plan, "version_number", None)
    if version_number:
        out["version_number"] = version_number
    return out


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    load_env_file()

    overrides = {k: v for k, v in vars(args).items() if k not in ("dry_run", "verbose")}
    try:
        settings = build_settings(collect_raw(overrides))
        if args.dry_run:
            print("[DRY RUN] Would upload and publish:")
            print(json.dumps(describe_plan(settings), indent=2))
            return 0
        asyncio.run(run(settings))
    except Exception as exc:
        return handle_error(exc)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
