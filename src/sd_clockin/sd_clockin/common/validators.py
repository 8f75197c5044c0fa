from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from ..core.exceptions import ValidationError


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_fields(data: Optional[Mapping[str, Any]], fields: Iterable[str]) -> dict:
    """Check a JSON body for required keys.

    Raises a single error naming every missing field, in the order given.
    """

    data = dict(data or {})
    missing = [f for f in fields if _is_missing(data.get(f))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    return data


def require_query_params(args: Mapping[str, Any], names: Iterable[str]) -> dict:
    missing = [n for n in names if _is_missing(args.get(n))]
    if missing:
        raise ValidationError(f"Missing required query parameters: {', '.join(missing)}")
    return {n: args.get(n) for n in names}


def parse_id(value: Any, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {field_name}")
    return parsed


def parse_optional_id(value: Any, field_name: str) -> Optional[int]:
    if _is_missing(value):
        return None
    return parse_id(value, field_name)


def parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
