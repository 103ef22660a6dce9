from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


Severity = Literal["success", "error", "info"]

SEVERITIES: tuple[str, ...] = ("success", "error", "info")


@dataclass(frozen=True, slots=True)
class Notification:
    """One user-facing toast. Immutable once emitted."""

    id: str
    severity: Severity
    title: str
    description: Optional[str] = None

    @property
    def fingerprint(self) -> str:
        return fingerprint_of(self.title, self.description)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
        }


def fingerprint_of(title: str, description: Optional[str] = None) -> str:
    return f"{title}|{description or ''}"
