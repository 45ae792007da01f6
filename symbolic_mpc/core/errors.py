from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlanError(Exception):
    """Base error envelope. Prefer returning/printing these rather than raising raw exceptions."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<plan>"
        return f"{loc}: {self.code}: {self.message}"


class PlanLoadError(PlanError):
    """Input could not be read or parsed; the document is unavailable."""


class PlanValidationError(PlanError):
    pass


class MalformedDocumentError(PlanValidationError):
    """The node list cannot be turned into a graph. Fatal for one document only."""


class SchemaConfigError(ValueError):
    pass
