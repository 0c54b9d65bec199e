from __future__ import annotations


class ChangelogActionError(Exception):
    """Base class for every error raised by the action."""


class ConfigError(ChangelogActionError, RuntimeError):
    pass


class InvalidRepoUrl(ChangelogActionError, ValueError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid repository URL format: {url}")
        self.url = url


class NotFound(ChangelogActionError):
    """The changelog does not exist at the resolved location."""

    def __init__(self, location: str) -> None:
        super().__init__(f"Changelog not found: {location}")
        self.location = location


class TransportError(ChangelogActionError):
    pass


class VersionNotFound(ChangelogActionError):
    def __init__(self, version: str) -> None:
        super().__init__(f"Version {version} not found in changelog")
        self.version = version


class ValidationError(ChangelogActionError):
    def __init__(self, problems: list[str]) -> None:
        super().__init__(
            f"Changelog validation failed with {len(problems)} problem(s): "
            + "; ".join(problems)
        )
        self.problems = problems
