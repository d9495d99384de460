"""Error definitions for wadkit."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_READ = "E_READ"
E_TYPE = "E_TYPE"
E_LOAD = "E_LOAD"
E_INVALID_LUMP = "E_INVALID_LUMP"
E_INVALID_REGEX = "E_INVALID_REGEX"
E_INVALID_OPERATION = "E_INVALID_OPERATION"
E_LUMP_NOT_FOUND = "E_LUMP_NOT_FOUND"
E_REBUILD = "E_REBUILD"
E_UNSUPPORTED = "E_UNSUPPORTED"
E_SCRIPT = "E_SCRIPT"
E_UNKNOWN = "E_UNKNOWN"


@dataclass
class WadError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class WadReadError(WadError):
    pass


class WadTypeError(WadError):
    pass


class WadLoadError(WadError):
    pass


class InvalidLumpError(WadError):
    pass


class InvalidRegexError(WadError):
    pass


class InvalidOperationError(WadError):
    pass


class LumpNotFoundError(WadError):
    pass


class RebuildError(WadError):
    pass


class UnsupportedOperationError(WadError):
    pass


class ScriptError(WadError):
    pass


def read_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> WadReadError:
    return WadReadError(code=E_READ, message=message, context=context)


def invalid_lump(
    message: str, context: Optional[Dict[str, Any]] = None
) -> InvalidLumpError:
    return InvalidLumpError(code=E_INVALID_LUMP, message=message, context=context)


def rebuild_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> RebuildError:
    return RebuildError(code=E_REBUILD, message=message, context=context)


def script_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> ScriptError:
    return ScriptError(code=E_SCRIPT, message=message, context=context)


__all__ = [
    "WadError",
    "WadReadError",
    "WadTypeError",
    "WadLoadError",
    "InvalidLumpError",
    "InvalidRegexError",
    "InvalidOperationError",
    "LumpNotFoundError",
    "RebuildError",
    "UnsupportedOperationError",
    "ScriptError",
    "read_error",
    "invalid_lump",
    "rebuild_error",
    "script_error",
    "E_READ",
    "E_TYPE",
    "E_LOAD",
    "E_INVALID_LUMP",
    "E_INVALID_REGEX",
    "E_INVALID_OPERATION",
    "E_LUMP_NOT_FOUND",
    "E_REBUILD",
    "E_UNSUPPORTED",
    "E_SCRIPT",
    "E_UNKNOWN",
]
