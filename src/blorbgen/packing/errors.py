"""Error definitions for blorbgen."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

E_UNRECOGNIZED_USAGE = "E_UNRECOGNIZED_USAGE"
E_DISALLOWED_TYPE = "E_DISALLOWED_TYPE"
E_DUP_METADATA = "E_DUP_METADATA"
E_DUP_COVER = "E_DUP_COVER"
E_MALFORMED_PATH = "E_MALFORMED_PATH"
E_UNREADABLE_RESOURCE = "E_UNREADABLE_RESOURCE"
E_UNRECOGNIZED_EXT = "E_UNRECOGNIZED_EXT"
E_CHUNK_CAPACITY = "E_CHUNK_CAPACITY"
E_UNREADABLE_CONTROL = "E_UNREADABLE_CONTROL"
E_CONFIG = "E_CONFIG"
E_BINARY_FORMAT = "E_BINARY_FORMAT"
E_INTERNAL = "E_INTERNAL"


@dataclass(eq=False)
class BlorbError(Exception):
    message: str
    context: Optional[Dict[str, Any]] = None

    code: ClassVar[str] = E_INTERNAL

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    @property
    def line(self) -> Optional[int]:
        return (self.context or {}).get("line")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class UnrecognizedUsage(BlorbError):
    code = E_UNRECOGNIZED_USAGE


class DisallowedTypeForUsage(BlorbError):
    code = E_DISALLOWED_TYPE


class DuplicateMetadata(BlorbError):
    code = E_DUP_METADATA


class DuplicateCover(BlorbError):
    code = E_DUP_COVER


class MalformedFilePath(BlorbError):
    code = E_MALFORMED_PATH


class UnreadableResourceFile(BlorbError):
    code = E_UNREADABLE_RESOURCE


class UnrecognizedExtension(BlorbError):
    code = E_UNRECOGNIZED_EXT


class ChunkCapacityExceeded(BlorbError):
    code = E_CHUNK_CAPACITY


class UnreadableControlFile(BlorbError):
    code = E_UNREADABLE_CONTROL


class ConfigurationError(BlorbError):
    code = E_CONFIG


class BinaryFormatError(BlorbError):
    code = E_BINARY_FORMAT


def line_error(
    kind: type[BlorbError], line: int | None, message: str, **context: Any
) -> BlorbError:
    """Build ``kind`` with the control-list line prefixed to ``message``."""
    if line is not None:
        context["line"] = line
        message = f"{line}: {message}"
    return kind(message=message, context=context or None)


__all__ = [
    "BlorbError",
    "UnrecognizedUsage",
    "DisallowedTypeForUsage",
    "DuplicateMetadata",
    "DuplicateCover",
    "MalformedFilePath",
    "UnreadableResourceFile",
    "UnrecognizedExtension",
    "ChunkCapacityExceeded",
    "UnreadableControlFile",
    "ConfigurationError",
    "BinaryFormatError",
    "line_error",
    "E_UNRECOGNIZED_USAGE",
    "E_DISALLOWED_TYPE",
    "E_DUP_METADATA",
    "E_DUP_COVER",
    "E_MALFORMED_PATH",
    "E_UNREADABLE_RESOURCE",
    "E_UNRECOGNIZED_EXT",
    "E_CHUNK_CAPACITY",
    "E_UNREADABLE_CONTROL",
    "E_CONFIG",
    "E_BINARY_FORMAT",
    "E_INTERNAL",
]
