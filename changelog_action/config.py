import logging
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values, find_dotenv, load_dotenv

from .errors import ConfigError
from .validation import VALIDATION_LEVELS


DEFAULTS = {
    "path": "",
    "repo_url": "",
    "ref": "main",
    "token": "",
    "version": "",
    "validation_level": "none",
    "validation_depth": "10",
    "config_file": "",
}


def _input_env_name(name: str) -> str:
    # Same mangling as the Actions runner: upper case, spaces to underscores
    return "INPUT_" + name.replace(" ", "_").upper()


def _read_config_file(path: str) -> Dict[str, str]:
    if not Path(path).is_file():
        raise ConfigError(f"Config file not found: {path}")
    values = {}
    for key, value in dotenv_values(path).items():
        key = key.strip().lower()
        if key.startswith("input_"):
            key = key[len("input_"):]
        if key in DEFAULTS and value is not None:
            values[key] = value
    logging.debug(f"Loaded {len(values)} input(s) from config file {path}")
    return values


class Config:
    def __init__(self, environ: Optional[Dict[str, str]] = None) -> None:
        logging.debug("Loading configuration...")
        if environ is None:
            load_dotenv(find_dotenv(usecwd=True))
            environ = dict(os.environ)
        self._environ = environ

        config_file = self._get_env("config_file")
        file_values = _read_config_file(config_file) if config_file else {}

        def get(name: str) -> str:
            value = self._get_env(name)
            if value:
                return value
            return (file_values.get(name) or DEFAULTS[name]).strip()

        self.config_file = config_file
        self.path = get("path")
        self.repo_url = get("repo_url")
        self.ref = get("ref")
        self.token = get("token")
        self.version = get("version")
        self.validation_level = get("validation_level").lower()
        self._validation_depth = get("validation_depth")
        self.validation_depth = 0
        self.github_output = environ.get("GITHUB_OUTPUT", "")

        logging.debug(
            f"Loaded config: path={self.path or '-'}, repo_url={self.repo_url or '-'}, "
            f"ref={self.ref}, version={self.version or 'latest'}, "
            f"token={'***' if self.token else 'none'}, "
            f"validation={self.validation_level}/{self._validation_depth}"
        )

    def _get_env(self, name: str) -> str:
        return self._environ.get(_input_env_name(name), "").strip()

    def validate(self) -> None:
        problems = []
        if self.validation_level not in VALIDATION_LEVELS:
            problems.append(
                f"validation_level must be one of {', '.join(VALIDATION_LEVELS)}, "
                f"got {self.validation_level!r}"
            )
        try:
            self.validation_depth = int(self._validation_depth)
            if self.validation_depth < 0:
                raise ValueError(self._validation_depth)
        except ValueError:
            problems.append(
                f"validation_depth must be a non-negative integer, got {self._validation_depth!r}"
            )
        if problems:
            logging.error(f"Invalid inputs: {'; '.join(problems)}")
            raise ConfigError("Invalid inputs: " + "; ".join(problems))
        logging.debug("Configuration validation passed")
