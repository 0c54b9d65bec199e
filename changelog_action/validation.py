from __future__ import annotations

import logging
import re
from datetime import date
from typing import List

from .changelog import ChangelogDocument, EntryStatus
from .errors import ValidationError


LEVEL_NONE = "none"
LEVEL_WARN = "warn"
LEVEL_ERROR = "error"
VALIDATION_LEVELS = (LEVEL_NONE, LEVEL_WARN, LEVEL_ERROR)

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_semver(version: str) -> bool:
    if version[:1] in ("v", "V"):
        version = version[1:]
    return SEMVER_RE.match(version) is not None


def is_iso_date(value: str) -> bool:
    if not ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def find_problems(doc: ChangelogDocument, depth: int = 10) -> List[str]:
    entries = doc.entries if depth == 0 else doc.entries[:depth]
    problems = []
    for entry in entries:
        if entry.status is EntryStatus.UNRELEASED:
            continue
        if not is_semver(entry.version):
            problems.append(f"{entry.version}: not a semantic version")
        if not entry.date:
            problems.append(f"{entry.version}: missing release date")
        elif not is_iso_date(entry.date):
            problems.append(f"{entry.version}: invalid release date {entry.date!r}")
    return problems


def validate_changelog(doc: ChangelogDocument, level: str = LEVEL_NONE, depth: int = 10) -> List[str]:
    """Check version numbers and dates of the first ``depth`` entries (0 = all).

    ``warn`` logs what it finds, ``error`` raises ``ValidationError``.
    """
    if level == LEVEL_NONE:
        return []
    if level not in VALIDATION_LEVELS:
        raise ValueError(f"Unknown validation level: {level}")

    problems = find_problems(doc, depth)
    if not problems:
        logging.info(f"Changelog validation passed ({level}, depth {depth})")
        return problems
    if level == LEVEL_ERROR:
        for problem in problems:
            logging.error(f"Changelog validation: {problem}")
        raise ValidationError(problems)
    for problem in problems:
        logging.warning(f"Changelog validation: {problem}")
    return problems
