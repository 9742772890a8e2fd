from typing import Any, Iterable, Mapping, Optional, TypeVar, Union

from loguru import logger

T = TypeVar("T")

Scalar = Union[int, float, str]


def is_present(value: Any) -> bool:
    """True unless the value is None, a blank string, or an empty collection.

    ``0`` and ``False`` count as present.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


def extract_field(
    raw: Any, aliases: Iterable[str], default: Optional[T] = None
) -> Union[Any, Optional[T]]:
    """Returns the value of the first alias present on ``raw``, else ``default``."""
    if not isinstance(raw, Mapping):
        return default
    for key in aliases:
        value = raw.get(key)
        if is_present(value):
            return value
    return default


def extract_text(
    raw: Any, aliases: Iterable[str], default: Optional[str] = None
) -> Optional[str]:
    """Like extract_field, but always yields a string (or the default).

    Numbers and booleans are stringified; nested objects and lists cannot be
    represented as text and fall back to the default.
    """
    aliases = tuple(aliases)
    value = extract_field(raw, aliases)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (bool, int, float)):
        return str(value)
    logger.debug(
        f"Ignoring non-text value of type {type(value).__name__} for aliases {aliases}"
    )
    return default


def extract_scalar(
    raw: Any, aliases: Iterable[str], default: Optional[Scalar] = None
) -> Optional[Scalar]:
    """Like extract_text, but keeps numbers as numbers (jersey 12 stays 12)."""
    aliases = tuple(aliases)
    value = extract_field(raw, aliases)
    if value is None:
        return default
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return value.strip()
    logger.debug(
        f"Ignoring non-scalar value of type {type(value).__name__} for aliases {aliases}"
    )
    return default


def first_present(*values: Optional[T]) -> Optional[T]:
    """Returns the first of ``values`` that is present, or None."""
    for value in values:
        if is_present(value):
            return value
    return None
