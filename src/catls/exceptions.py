from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CatlsError(Exception):
    """Base exception for errors in the catls package."""

    def __str__(self) -> str:
        message = getattr(self, "message", "")
        path = getattr(self, "path", None)
        if path is None:
            return message or self.__class__.__name__
        return f"{message}: {path}"


@dataclass(frozen=True)
class RootNotFoundError(CatlsError):
    """Raised when the traversal root does not exist."""

    path: Path
    message: str = "Root path does not exist"


@dataclass(frozen=True)
class RootNotADirectoryError(CatlsError):
    """Raised when the traversal root is not a directory."""

    path: Path
    message: str = "Root path is not a directory"


@dataclass(frozen=True)
class RootNotReadableError(CatlsError):
    """Raised when the children of the traversal root cannot be listed."""

    path: Path
    reason: str = ""
    message: str = "Root path is not readable"

    def __str__(self) -> str:
        base = f"{self.message}: {self.path}"
        return f"{base} ({self.reason})" if self.reason else base


@dataclass(frozen=True)
class OutputSinkError(CatlsError):
    """Raised when the output file cannot be opened or created."""

    path: Path
    reason: str = ""
    message: str = "Cannot open output"

    def __str__(self) -> str:
        base = f"{self.message}: {self.path}"
        return f"{base} ({self.reason})" if self.reason else base


@dataclass(frozen=True)
class ContentReadError(CatlsError):
    """Raised when a file passed the binary sniff but could not be read."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return self.reason
