from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .errors import InvalidRepoUrl


CHANGELOG_FILENAME = "CHANGELOG.md"
DEFAULT_REF = "main"
DEFAULT_LOCAL_PATH = "./CHANGELOG.md"

GITHUB_HOST = "github.com"
GITHUB_RAW_HOST = "raw.githubusercontent.com"

# scheme://host/owner/repo with nothing after the repo segment
REPO_ROOT_RE = re.compile(r"^https?://(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+)$")
BLOB_RE = re.compile(
    r"^https?://(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+)/blob/(?P<rest>.+)$"
)
FILE_EXTENSION_RE = re.compile(r"\.(md|txt|json|yml|yaml|js|ts|py|java|cpp|h|hpp)$", re.IGNORECASE)
NON_ROOT_MARKERS = ("/blob/", "/-/blob/", "/raw/", "/-/raw/", "/src/")
# raw marker directly after owner/repo
RAW_PATH_RE = re.compile(r"^https?://[^/]+/[^/]+/[^/]+/(-/)?raw/")


class LocationKind(Enum):
    LOCAL = "local"
    REMOTE_FILE = "remote_file"
    REMOTE_ROOT = "remote_root"


@dataclass(frozen=True)
class RepoLocation:
    kind: LocationKind
    value: str


def is_url(path_or_url: str) -> bool:
    return path_or_url.startswith("http://") or path_or_url.startswith("https://")


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


def is_repo_root_url(url: str) -> bool:
    """Return True when ``url`` names a repository (``scheme://host/owner/repo``)
    rather than a file or a ref inside it."""
    if not is_url(url):
        return False
    normalized = _strip_trailing_slash(url)
    if any(marker in normalized for marker in NON_ROOT_MARKERS):
        return False
    if FILE_EXTENSION_RE.search(normalized):
        return False
    return REPO_ROOT_RE.match(normalized) is not None


def _github_blob_to_raw(url: str) -> str:
    m = BLOB_RE.match(url)
    if m is None:
        return url
    if m.group("host") == GITHUB_HOST:
        return f"https://{GITHUB_RAW_HOST}/{m.group('owner')}/{m.group('repo')}/{m.group('rest')}"
    # GitHub Enterprise serves raw files from the same host
    return url.replace("/blob/", "/raw/", 1)


def _already_raw(url: str) -> bool:
    return f"://{GITHUB_RAW_HOST}/" in url or RAW_PATH_RE.match(url) is not None


# Evaluated in order, first matching predicate wins. "/src/branch/" must be
# tried before the plain "/src/" rule.
BLOB_TO_RAW_RULES: List[Tuple[Callable[[str], bool], Callable[[str], str]]] = [
    (lambda u: BLOB_RE.match(u) is not None, _github_blob_to_raw),
    (lambda u: "/-/blob/" in u, lambda u: u.replace("/-/blob/", "/-/raw/", 1)),
    (
        lambda u: "/src/branch/" in u and not _already_raw(u),
        lambda u: u.replace("/src/branch/", "/raw/branch/", 1),
    ),
    (
        lambda u: "/src/" in u and "/src/branch/" not in u and not _already_raw(u),
        lambda u: u.replace("/src/", "/raw/", 1),
    ),
]


def convert_blob_to_raw(url: str) -> str:
    """Rewrite a "view" URL from GitHub, GitLab, Gitea or Bitbucket into the
    URL serving the raw file. Unrecognized URLs are returned unchanged."""
    for matches, transform in BLOB_TO_RAW_RULES:
        if matches(url):
            raw = transform(url)
            logging.debug(f"Converted {url} to raw URL {raw}")
            return raw
    return url


# Host dispatch for constructed changelog URLs. This is a best-effort table of
# the usual conventions; self-hosted instances may be configured differently.
HOST_URL_TEMPLATES: List[Tuple[Callable[[str], bool], str]] = [
    (lambda host: host == GITHUB_HOST, "https://" + GITHUB_RAW_HOST + "/{owner}/{repo}/{ref}/{filename}"),
    (lambda host: "github" in host, "https://{host}/{owner}/{repo}/raw/{ref}/{filename}"),
    (lambda host: "gitlab" in host, "https://{host}/{owner}/{repo}/-/raw/{ref}/{filename}"),
    (lambda host: "bitbucket" in host, "https://{host}/{owner}/{repo}/raw/{ref}/{filename}"),
    (lambda host: "gitea" in host, "https://{host}/{owner}/{repo}/raw/branch/{ref}/{filename}"),
]
FALLBACK_URL_TEMPLATE = "https://{host}/{owner}/{repo}/raw/{ref}/{filename}"


def construct_changelog_url(repo_url: str, ref: str, filename: str = CHANGELOG_FILENAME) -> str:
    m = REPO_ROOT_RE.match(_strip_trailing_slash(repo_url))
    if not m:
        raise InvalidRepoUrl(repo_url)

    host = m.group("host")
    for matches, template in HOST_URL_TEMPLATES:
        if matches(host):
            break
    else:
        logging.warning(
            f"Unrecognized git host {host}, guessing the raw file URL layout "
            f"(/raw/<ref>/); pass the changelog URL via 'path' if this is wrong"
        )
        template = FALLBACK_URL_TEMPLATE

    return template.format(
        host=host, owner=m.group("owner"), repo=m.group("repo"), ref=ref, filename=filename
    )


def classify_location(path_or_url: str) -> RepoLocation:
    if not is_url(path_or_url):
        return RepoLocation(LocationKind.LOCAL, path_or_url)
    if is_repo_root_url(path_or_url):
        return RepoLocation(LocationKind.REMOTE_ROOT, path_or_url)
    return RepoLocation(LocationKind.REMOTE_FILE, path_or_url)


def resolve_location(
    path: Optional[str] = None,
    repo_url: Optional[str] = None,
    ref: Optional[str] = None,
) -> RepoLocation:
    """Decide where the changelog lives.

    An explicit ``path`` wins over ``repo_url``. Repository root URLs (given
    either way) are turned into a changelog URL at ``ref``; file URLs are
    converted to raw URLs; local paths pass through untouched.
    """
    path = (path or "").strip()
    repo_url = (repo_url or "").strip()
    ref = (ref or "").strip() or DEFAULT_REF

    if not path and repo_url:
        url = construct_changelog_url(repo_url, ref)
        logging.info(f"Using changelog from repository {repo_url} at {ref}: {url}")
        return RepoLocation(LocationKind.REMOTE_FILE, url)

    location = classify_location(path or DEFAULT_LOCAL_PATH)
    if location.kind is LocationKind.REMOTE_ROOT:
        url = construct_changelog_url(location.value, ref)
        logging.info(f"Path {path} is a repository root, using {url}")
        return RepoLocation(LocationKind.REMOTE_FILE, url)
    if location.kind is LocationKind.REMOTE_FILE:
        return RepoLocation(LocationKind.REMOTE_FILE, convert_blob_to_raw(location.value))
    return location
