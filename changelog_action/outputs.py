from __future__ import annotations

import logging
import sys
import uuid
from dataclasses import asdict, dataclass
from typing import Dict, Optional, TextIO

from .changelog import ChangelogEntry


STATUS_NOFOUND = "nofound"


@dataclass(frozen=True)
class ActionResult:
    version: str = ""
    date: str = ""
    status: str = ""
    changes: str = ""

    @classmethod
    def from_entry(cls, entry: ChangelogEntry) -> "ActionResult":
        return cls(
            version=entry.version,
            date=entry.date,
            status=entry.status.value,
            changes=entry.changes,
        )

    @classmethod
    def not_found(cls) -> "ActionResult":
        return cls(status=STATUS_NOFOUND)

    def as_outputs(self) -> Dict[str, str]:
        return asdict(self)


def _format_output(name: str, value: str) -> str:
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(result: ActionResult, github_output: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Publish the result as step outputs.

    With ``github_output`` set the values are appended to that file using the
    multi-line delimiter syntax, otherwise the same blocks go to stdout.
    """
    outputs = result.as_outputs()
    if github_output:
        with open(github_output, "a", encoding="utf-8") as fh:
            for name, value in outputs.items():
                fh.write(_format_output(name, value))
        logging.debug(f"Wrote {len(outputs)} outputs to {github_output}")
        return

    stream = stream or sys.stdout
    for name, value in outputs.items():
        stream.write(_format_output(name, value))
    stream.flush()


def escape_command_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_failed(message: str, stream: Optional[TextIO] = None) -> None:
    logging.error(message)
    stream = stream or sys.stdout
    stream.write(f"::error::{escape_command_data(message)}\n")
    stream.flush()
