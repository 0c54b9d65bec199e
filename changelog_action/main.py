from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Dict, Optional

from .changelog import LATEST_SENTINEL, find_version_entry, is_latest, parse_changelog
from .config import Config
from .errors import ChangelogActionError, ConfigError, NotFound, VersionNotFound
from .fetcher import ContentFetcher
from .outputs import ActionResult, set_failed, write_outputs
from .path_handler import resolve_location
from .validation import validate_changelog


async def extract_changelog_entry(cfg: Config, fetcher: ContentFetcher) -> ActionResult:
    location = resolve_location(cfg.path, cfg.repo_url, cfg.ref)
    logging.info(f"Changelog location: {location.value} ({location.kind.value})")

    try:
        markdown = await fetcher.fetch(location, cfg.token or None)
    except NotFound as e:
        logging.warning(f"{e}, reporting status nofound")
        return ActionResult.not_found()

    doc = parse_changelog(markdown)
    logging.info(f"Parsed {len(doc)} changelog entries")
    logging.debug(f"Versions in document order: {', '.join(doc.versions()) or 'none'}")
    validate_changelog(doc, cfg.validation_level, cfg.validation_depth)

    entry = find_version_entry(doc, cfg.version)
    if entry is None:
        raise VersionNotFound(LATEST_SENTINEL if is_latest(cfg.version) else cfg.version)
    logging.info(f"Selected version {entry.version} ({entry.status.value}, {entry.date or 'no date'})")
    return ActionResult.from_entry(entry)


def setup_logging(environ: Optional[Dict[str, str]] = None) -> None:
    environ = os.environ if environ is None else environ
    debug = environ.get("RUNNER_DEBUG") == "1" or environ.get("LOG_LEVEL", "").upper() == "DEBUG"
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Reduce httpx logging noise
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)


async def async_main(
    environ: Optional[Dict[str, str]] = None,
    fetcher: Optional[ContentFetcher] = None,
) -> int:
    setup_logging(environ)
    logging.info("Starting changelog extraction...")

    try:
        cfg = Config(environ)
        cfg.validate()
    except ConfigError as e:
        set_failed(f"Configuration error: {e}")
        return 2

    if fetcher is None:
        fetcher = ContentFetcher()

    try:
        result = await extract_changelog_entry(cfg, fetcher)
    except VersionNotFound as e:
        logging.warning(str(e))
        result = ActionResult()
    except ChangelogActionError as e:
        set_failed(str(e))
        return 1

    write_outputs(result, cfg.github_output)
    logging.info(f"Done (status: {result.status or 'version not found'})")
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(async_main()))
