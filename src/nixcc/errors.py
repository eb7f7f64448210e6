"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across resolution surfaces."""

    VALIDATION = "E_VALIDATION"
    CATALOG = "E_CATALOG"
    UNSUPPORTED_TARGET = "E_UNSUPPORTED_TARGET"
    LIBRARY_NOT_FOUND = "E_LIBRARY_NOT_FOUND"
    MISSING_DESCRIPTOR = "E_MISSING_DESCRIPTOR"
    TOOLCHAIN_UNAVAILABLE = "E_TOOLCHAIN_UNAVAILABLE"
    RESOLUTION = "E_RESOLUTION"


class NixccError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(NixccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class CatalogError(NixccError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CATALOG, hint=hint, context=context)


class UnsupportedTargetError(NixccError):
    """A cpu or os value outside the closed set of supported platforms."""

    field: str
    value: str
    supported: tuple[str, ...]

    def __init__(self, *, field: str, value: str, supported: Iterable[str]) -> None:
        self.field = field
        self.value = value
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported {field} '{value}'. Supported: {', '.join(self.supported)}",
            code=ErrorCode.UNSUPPORTED_TARGET,
            hint=f"Set target.{field} to one of the supported values.",
            context={"field": field, "value": value, "supported": ", ".join(self.supported)},
        )


class LibraryNotFoundError(NixccError):
    """No artifact directory exists for a (library, toolchain) pair."""

    library: str
    toolchain: str

    def __init__(self, *, library: str, toolchain: str, libs_dir: str = "") -> None:
        self.library = library
        self.toolchain = toolchain
        super().__init__(
            f"Library '{library}' not found for toolchain '{toolchain}'",
            code=ErrorCode.LIBRARY_NOT_FOUND,
            hint="Add the library to the toolchain's library set and regenerate the deps tree.",
            context={
                "operation": "resolve_library",
                "library": library,
                "toolchain": toolchain,
                "libs_dir": libs_dir,
            },
        )


class MissingDescriptorFileError(NixccError):
    def __init__(self, *, path: str, operation: str) -> None:
        self.path = path
        super().__init__(
            f"Required descriptor file not found at {path}",
            code=ErrorCode.MISSING_DESCRIPTOR,
            hint="Regenerate the deps tree; the artifact directory is incomplete.",
            context={"operation": operation, "path": path},
        )


class ToolchainUnavailableError(NixccError):
    def __init__(self, *, toolchain: str, switch_hint: str) -> None:
        self.toolchain = toolchain
        super().__init__(
            f"Toolchain '{toolchain}' not available. "
            f"Use '{switch_hint}' for cross-compilation.",
            code=ErrorCode.TOOLCHAIN_UNAVAILABLE,
            hint=f"Enter an environment that provides it, e.g. '{switch_hint}'.",
            context={"toolchain": toolchain},
        )


class ResolutionError(NixccError):
    """Aggregate of the per-unit failures of one resolution pass.

    ``partial`` holds what the pass produced for the units that succeeded, so
    callers can still write the healthy toolchains.
    """

    failures: Mapping[str, NixccError]
    partial: object | None

    def __init__(
        self,
        failures: Mapping[str, NixccError],
        *,
        operation: str,
        partial: object | None = None,
    ) -> None:
        self.failures = dict(failures)
        self.partial = partial
        units = sorted(self.failures)
        super().__init__(
            f"Resolution failed for {len(units)} unit(s): {', '.join(units)}",
            code=ErrorCode.RESOLUTION,
            hint="Fix the declared configuration for each failing unit.",
            context={
                "operation": operation,
                **{unit: self.failures[unit].code for unit in units},
            },
        )


__all__ = [
    "CatalogError",
    "ErrorCode",
    "LibraryNotFoundError",
    "MissingDescriptorFileError",
    "NixccError",
    "ResolutionError",
    "ToolchainUnavailableError",
    "UnsupportedTargetError",
    "ValidationError",
]
