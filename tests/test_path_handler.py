"""Tests for URL classification and raw URL construction."""

import logging

import pytest

from changelog_action.errors import InvalidRepoUrl
from changelog_action.path_handler import (
    LocationKind,
    classify_location,
    construct_changelog_url,
    convert_blob_to_raw,
    is_repo_root_url,
    is_url,
    resolve_location,
)

VIEW_URLS = {
    "https://github.com/o/r/blob/main/CHANGELOG.md": "https://raw.githubusercontent.com/o/r/main/CHANGELOG.md",
    "https://github.example.com/o/r/blob/v1.0.0/docs/CHANGELOG.md": "https://github.example.com/o/r/raw/v1.0.0/docs/CHANGELOG.md",
    "https://gitlab.com/o/r/-/blob/main/CHANGELOG.md": "https://gitlab.com/o/r/-/raw/main/CHANGELOG.md",
    "https://gitlab.example.com/group/sub/r/-/blob/dev/CHANGELOG.md": "https://gitlab.example.com/group/sub/r/-/raw/dev/CHANGELOG.md",
    "https://gitea.com/o/r/src/branch/main/CHANGELOG.md": "https://gitea.com/o/r/raw/branch/main/CHANGELOG.md",
    "https://bitbucket.org/o/r/src/main/CHANGELOG.md": "https://bitbucket.org/o/r/raw/main/CHANGELOG.md",
}


class TestIsUrl:
    def test_http_and_https(self) -> None:
        assert is_url("https://github.com/o/r")
        assert is_url("http://localhost/o/r")

    def test_paths_are_not_urls(self) -> None:
        assert not is_url("./CHANGELOG.md")
        assert not is_url("/abs/CHANGELOG.md")
        assert not is_url("ftp://example.com/CHANGELOG.md")
        assert not is_url("github.com/o/r")


class TestIsRepoRootUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/o/r",
            "https://github.com/o/r/",
            "http://gitea.example.com/o/r",
            "https://gitlab.com/group/project",
        ],
    )
    def test_repo_roots(self, url: str) -> None:
        assert is_repo_root_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/o/r/blob/main/CHANGELOG.md",
            "https://gitlab.com/o/r/-/blob/main/CHANGELOG.md",
            "https://gitlab.com/o/r/-/raw/main/CHANGELOG.md",
            "https://bitbucket.org/o/r/src/main/CHANGELOG.md",
            "https://raw.githubusercontent.com/o/r/main/CHANGELOG.md",
            "https://example.com/o/CHANGELOG.md",
            "https://example.com/o/notes.TXT",
            "https://github.com/o",
            "https://github.com/o/r/tree/main",
            "./CHANGELOG.md",
        ],
    )
    def test_not_repo_roots(self, url: str) -> None:
        assert not is_repo_root_url(url)


class TestConvertBlobToRaw:
    @pytest.mark.parametrize("url,expected", sorted(VIEW_URLS.items()))
    def test_converts_view_urls(self, url: str, expected: str) -> None:
        assert convert_blob_to_raw(url) == expected

    @pytest.mark.parametrize("url", sorted(VIEW_URLS))
    def test_idempotent(self, url: str) -> None:
        raw = convert_blob_to_raw(url)
        assert convert_blob_to_raw(raw) == raw

    def test_nested_src_directory_not_rewritten_twice(self) -> None:
        raw = convert_blob_to_raw("https://bitbucket.org/o/r/src/main/src/CHANGELOG.md")
        assert raw == "https://bitbucket.org/o/r/raw/main/src/CHANGELOG.md"
        assert convert_blob_to_raw(raw) == raw

    @pytest.mark.parametrize(
        "url,expected",
        [
            (
                "https://bitbucket.org/o/r/src/main/raw/CHANGELOG.md",
                "https://bitbucket.org/o/r/raw/main/raw/CHANGELOG.md",
            ),
            (
                "https://gitea.com/raw/r/src/branch/main/CHANGELOG.md",
                "https://gitea.com/raw/r/raw/branch/main/CHANGELOG.md",
            ),
        ],
    )
    def test_raw_named_segments_still_converted(self, url: str, expected: str) -> None:
        assert convert_blob_to_raw(url) == expected
        assert convert_blob_to_raw(expected) == expected

    def test_branch_marker_takes_precedence(self) -> None:
        url = "https://git.example.com/o/r/src/branch/main/CHANGELOG.md"
        assert convert_blob_to_raw(url) == "https://git.example.com/o/r/raw/branch/main/CHANGELOG.md"

    def test_unrecognized_url_unchanged(self) -> None:
        url = "https://example.com/files/CHANGELOG.md"
        assert convert_blob_to_raw(url) == url


class TestConstructChangelogUrl:
    @pytest.mark.parametrize(
        "repo_url,expected",
        [
            ("https://github.com/o/r", "https://raw.githubusercontent.com/o/r/main/CHANGELOG.md"),
            ("https://github.com/o/r/", "https://raw.githubusercontent.com/o/r/main/CHANGELOG.md"),
            ("https://github.acme.com/o/r", "https://github.acme.com/o/r/raw/main/CHANGELOG.md"),
            ("https://gitlab.com/o/r", "https://gitlab.com/o/r/-/raw/main/CHANGELOG.md"),
            ("https://bitbucket.org/o/r", "https://bitbucket.org/o/r/raw/main/CHANGELOG.md"),
            ("https://gitea.com/o/r", "https://gitea.com/o/r/raw/branch/main/CHANGELOG.md"),
        ],
    )
    def test_known_hosts(self, repo_url: str, expected: str) -> None:
        assert construct_changelog_url(repo_url, "main") == expected

    def test_ref_is_used(self) -> None:
        assert (
            construct_changelog_url("https://github.com/o/r", "v2.0.0")
            == "https://raw.githubusercontent.com/o/r/v2.0.0/CHANGELOG.md"
        )

    def test_unknown_host_falls_back_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            url = construct_changelog_url("https://code.example.org/o/r", "main")
        assert url == "https://code.example.org/o/r/raw/main/CHANGELOG.md"
        assert "code.example.org" in caplog.text

    @pytest.mark.parametrize(
        "repo_url",
        ["https://github.com/o", "https://github.com/o/r/tree/main", "github.com/o/r", ""],
    )
    def test_invalid_repo_url(self, repo_url: str) -> None:
        with pytest.raises(InvalidRepoUrl):
            construct_changelog_url(repo_url, "main")


class TestResolveLocation:
    def test_repo_url_when_path_empty(self) -> None:
        location = resolve_location("", "https://github.com/o/r", "develop")
        assert location.kind is LocationKind.REMOTE_FILE
        assert location.value == "https://raw.githubusercontent.com/o/r/develop/CHANGELOG.md"

    def test_ref_defaults_to_main(self) -> None:
        location = resolve_location(None, "https://github.com/o/r", "")
        assert location.value == "https://raw.githubusercontent.com/o/r/main/CHANGELOG.md"

    def test_repo_root_in_path(self) -> None:
        location = resolve_location("https://gitlab.com/o/r", None, "main")
        assert location.value == "https://gitlab.com/o/r/-/raw/main/CHANGELOG.md"

    def test_path_wins_over_repo_url(self) -> None:
        location = resolve_location("docs/CHANGELOG.md", "https://github.com/o/r", "main")
        assert location.kind is LocationKind.LOCAL
        assert location.value == "docs/CHANGELOG.md"

    def test_file_url_converted_to_raw(self) -> None:
        location = resolve_location("https://github.com/o/r/blob/main/CHANGELOG.md")
        assert location.kind is LocationKind.REMOTE_FILE
        assert location.value == "https://raw.githubusercontent.com/o/r/main/CHANGELOG.md"

    def test_defaults_to_local_changelog(self) -> None:
        location = resolve_location()
        assert location.kind is LocationKind.LOCAL
        assert location.value == "./CHANGELOG.md"

    def test_invalid_repo_url_raises(self) -> None:
        with pytest.raises(InvalidRepoUrl):
            resolve_location("", "https://github.com/only-owner", "main")

    def test_classify(self) -> None:
        assert classify_location("CHANGELOG.md").kind is LocationKind.LOCAL
        assert classify_location("https://github.com/o/r").kind is LocationKind.REMOTE_ROOT
        assert classify_location("https://github.com/o/r/blob/main/x.md").kind is LocationKind.REMOTE_FILE
