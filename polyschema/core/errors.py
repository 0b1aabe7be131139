from __future__ import annotations
from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    INTROSPECTION_FAILURE = "introspection_failure"
    SUBTYPE_LOOKUP_FAILURE = "subtype_lookup_failure"
    SCHEMA_BUILD_FAILURE = "schema_build_failure"
    OUTPUT_WRITE_FAILURE = "output_write_failure"
    INVALID_ARGUMENTS = "invalid_arguments"
    UNKNOWN_ERROR = "unknown_error"


class CoreError(Exception):
    """Structured error used across the generator.

    Attributes:
        message: Human-readable message
        error_code: ErrorCode enum value
        context: Optional structured context payload safe to log/serialize
        original_error: Optional wrapped exception
    """

    def __init__(
        self,
        message: str = "",
        error_code: Optional[ErrorCode] = None,
        *,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code if error_code is not None else ErrorCode.UNKNOWN_ERROR
        self.context = context or {}
        self.original_error = original_error

    @property
    def type_name(self) -> Optional[str]:
        return self.context.get("type_name")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "error_code": self.error_code.name,
            "message": self.message,
            "context": self.context,
        }
        if self.original_error is not None:
            data["original_error"] = type(self.original_error).__name__
        return data

    def __str__(self) -> str:
        base = f"[{self.error_code.name}] {self.message}"
        if self.original_error is not None:
            return f"{base} (Original: {self.original_error})"
        return base


def _type_context(type_name: str, context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    ctx = context.copy() if context else {}
    ctx["type_name"] = type_name
    return ctx


class IntrospectionError(CoreError):
    """Raised when a type's shape can not be determined."""

    def __init__(
        self,
        type_name: str,
        message: Optional[str] = None,
        *,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=message or f"Failed to introspect {type_name}",
            error_code=ErrorCode.INTROSPECTION_FAILURE,
            context=_type_context(type_name, context),
            original_error=original_error,
        )


class SubtypeLookupError(CoreError):
    """Raised when scanning for the subtypes of a polymorphic type fails."""

    def __init__(
        self,
        type_name: str,
        message: Optional[str] = None,
        *,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=message or f"Failed to find subtypes of {type_name}",
            error_code=ErrorCode.SUBTYPE_LOOKUP_FAILURE,
            context=_type_context(type_name, context),
            original_error=original_error,
        )


class SchemaBuildError(CoreError):
    def __init__(
        self,
        type_name: str,
        *,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=f"Failed to generate schema for {type_name}",
            error_code=ErrorCode.SCHEMA_BUILD_FAILURE,
            context=_type_context(type_name, context),
            original_error=original_error,
        )


class OutputWriteError(CoreError):
    def __init__(
        self,
        type_name: str,
        *,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        ctx = _type_context(type_name, context)
        if path is not None:
            ctx["path"] = path
        super().__init__(
            message=f"Failed to write schema for {type_name}",
            error_code=ErrorCode.OUTPUT_WRITE_FAILURE,
            context=ctx,
            original_error=original_error,
        )


class InvalidArgumentsError(CoreError):
    """Raised when command line arguments can not be turned into options."""

    def __init__(self, message: str, usage: str = "") -> None:
        super().__init__(
            message=f"{message}\n{usage}" if usage else message,
            error_code=ErrorCode.INVALID_ARGUMENTS,
            context={"usage": usage} if usage else {},
        )


def wrap_exception(
    exception: BaseException,
    message: str,
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    context: Optional[Dict[str, Any]] = None,
) -> CoreError:
    """Wrap an external exception in a CoreError with additional context."""
    return CoreError(
        message,
        error_code,
        context=context,
        original_error=exception,
    )
