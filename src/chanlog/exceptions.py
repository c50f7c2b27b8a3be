"""
Exception normalization.

An exception placed in a record's context under the "exception" key is
replaced by a plain, JSON-friendly description before processors and
formatters see the record.
"""

import builtins
import traceback
from typing import Any

EXCEPTION_KEY = "exception"
MAX_TRACE_FRAMES = 16


def describe_exception(exc: BaseException) -> dict[str, Any]:
    """
    Structured description of an exception and its causes.

    Returns:
        {class, message, code, file, trace, previous?}

    The chain is followed through __cause__, then __context__ unless the
    context was suppressed with "raise ... from None".
    """
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []

    if frames:
        origin = frames[-1]
        file = f"{origin.filename}:{origin.lineno}"
    else:
        file = "unknown"

    description: dict[str, Any] = {
        "class": _class_name(exc),
        "message": str(exc),
        "code": _error_code(exc),
        "file": file,
        "trace": _trace(frames),
    }

    previous = _previous(exc)
    if previous is not None:
        description["previous"] = describe_exception(previous)

    return description


def normalize_context(context: dict[str, Any]) -> dict[str, Any]:
    """Replace an exception in the "exception" slot; other values untouched."""
    value = context.get(EXCEPTION_KEY)
    if not isinstance(value, BaseException):
        return context
    return {**context, EXCEPTION_KEY: describe_exception(value)}


def _class_name(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == "builtins" and getattr(builtins, cls.__name__, None) is cls:
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _error_code(exc: BaseException) -> int:
    if isinstance(exc, OSError) and isinstance(exc.errno, int):
        return exc.errno
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return 0


def _trace(frames: list[traceback.FrameSummary]) -> list[str]:
    """Frame descriptions, innermost first, never more than MAX_TRACE_FRAMES."""
    lines = [f"{f.filename}:{f.lineno} in {f.name}" for f in reversed(frames)]
    if len(lines) <= MAX_TRACE_FRAMES:
        return lines
    kept = lines[: MAX_TRACE_FRAMES - 1]
    kept.append(f"... {len(lines) - len(kept)} more frames")
    return kept


def _previous(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__context__ is not None and not exc.__suppress_context__:
        return exc.__context__
    return None
