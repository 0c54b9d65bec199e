from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional


UNRELEASED = "Unreleased"
LATEST_SENTINEL = "latest"

# "## [1.2.3] - 2024-01-01", "## [Unreleased]", "## [v2.0.0-rc.1](https://...) – 2024-05-01"
VERSION_HEADER_RE = re.compile(
    r"^##\s+\[(?P<version>[vV]?\d[^\]\s]*|(?i:unreleased))\]"
    r"(?:\([^)]*\))?"
    r"\s*(?:[-–—]\s*)?(?P<date>.*?)\s*$"
)


class EntryStatus(str, Enum):
    RELEASED = "released"
    UNRELEASED = "unreleased"


@dataclass(frozen=True)
class ChangelogEntry:
    version: str
    date: str
    status: EntryStatus
    changes: str


@dataclass
class ChangelogDocument:
    """Entries in the order their headings appear (newest first by convention).

    Versions are not required to be unique: a repeated heading yields a second
    entry and lookups return the first one.
    """

    entries: List[ChangelogEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ChangelogEntry]:
        return iter(self.entries)

    def versions(self) -> List[str]:
        return [e.version for e in self.entries]


class _State(Enum):
    EXPECT_HEADING = "expect_heading"
    IN_ENTRY = "in_entry"


def _trim_blank_lines(lines: List[str]) -> str:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def _make_entry(version: str, date: Optional[str], body: List[str]) -> ChangelogEntry:
    if version.lower() == UNRELEASED.lower():
        return ChangelogEntry(
            version=version,
            date=UNRELEASED,
            status=EntryStatus.UNRELEASED,
            changes=_trim_blank_lines(body),
        )
    return ChangelogEntry(
        version=version,
        date=(date or "").strip(),
        status=EntryStatus.RELEASED,
        changes=_trim_blank_lines(body),
    )


def parse_changelog(markdown: str) -> ChangelogDocument:
    """Split a Keep-a-Changelog document into version entries.

    Anything before the first version heading (title, intro) is skipped. Text
    without version headings gives an empty document; this never raises.
    """
    entries: List[ChangelogEntry] = []
    state = _State.EXPECT_HEADING
    current_version: Optional[str] = None
    current_date: Optional[str] = None
    current_body: List[str] = []

    for line in markdown.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        m = VERSION_HEADER_RE.match(line)
        if m:
            if state is _State.IN_ENTRY:
                entries.append(_make_entry(current_version, current_date, current_body))
            state = _State.IN_ENTRY
            current_version = m.group("version")
            current_date = m.group("date")
            current_body = []
        elif state is _State.IN_ENTRY:
            current_body.append(line)

    if state is _State.IN_ENTRY:
        entries.append(_make_entry(current_version, current_date, current_body))

    return ChangelogDocument(entries=entries)


def is_latest(version: Optional[str]) -> bool:
    return version is None or version.strip().lower() in ("", LATEST_SENTINEL)


def find_version_entry(
    doc: ChangelogDocument, version: Optional[str] = None
) -> Optional[ChangelogEntry]:
    """Look up ``version`` exactly as written, or the latest release.

    "Latest" is the first released entry in document order, falling back to
    the first entry when nothing has been released yet.
    """
    if is_latest(version):
        for entry in doc.entries:
            if entry.status is EntryStatus.RELEASED:
                return entry
        return doc.entries[0] if doc.entries else None

    for entry in doc.entries:
        if entry.version == version:
            return entry
    return None
