from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import List, Protocol, Tuple


class Notifier(Protocol):
    """Advisory, user-facing notices. Never affects control flow."""

    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class StderrNotifier:
    prefix = "[AutoSearchPro]"

    def info(self, message: str) -> None:
        print(f"{self.prefix} {message}", file=sys.stderr)

    def warning(self, message: str) -> None:
        print(f"{self.prefix} WARNING: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"{self.prefix} ERROR: {message}", file=sys.stderr)


@dataclass
class RecordingNotifier:
    """Collects notices in memory (tests, --json output)."""
    messages: List[Tuple[str, str]] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def levels(self) -> List[str]:
        return [level for level, _ in self.messages]
