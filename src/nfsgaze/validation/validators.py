"""
Scalar validators shared by the configuration file and the command line.

Each validator returns the converted value or raises ValidationError naming
the offending field, e.g. ``monitor.collection.count`` or ``--interval``.
"""

from typing import Any, List, Optional, TypeVar, Union

from .exceptions import ValidationError

Number = TypeVar("Number", int, float)


def _check_range(value: Number, original: Any, min_value: Number,
                 max_value: Optional[Number], field_name: str) -> Number:
    if value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {value}",
            field_name=field_name,
            value=original,
        )
    if max_value is not None and value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {value}",
            field_name=field_name,
            value=original,
        )
    return value


def _convert(value: Any, kind: type, kind_name: str, field_name: str) -> Union[int, float]:
    # bool is an int subclass, and int(2.5) would silently truncate.
    fractional = kind is int and isinstance(value, float) and not value.is_integer()
    if isinstance(value, bool) or fractional:
        raise ValidationError(
            f"{field_name} must be a valid {kind_name}, got {value}",
            field_name=field_name,
            value=value,
        )
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"{field_name} must be a valid {kind_name}, got {value!r}",
            field_name=field_name,
            value=value,
        ) from e


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value",
) -> int:
    """
    Convert ``value`` to an int within ``[min_value, max_value]``.

    Strings such as ``"5"`` are accepted, which is what argparse delivers.

    Raises:
        ValidationError: If the value is not an integer or is out of range
    """
    int_value = _convert(value, int, "integer", field_name)
    return _check_range(int_value, value, min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value",
) -> float:
    """
    Convert ``value`` to a float within ``[min_value, max_value]``.

    Raises:
        ValidationError: If the value is not a number or is out of range
    """
    float_value = _convert(value, float, "number", field_name)
    return _check_range(float_value, value, min_value, max_value, field_name)


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """Require a real TOML boolean; 0/1 and "yes" are rejected."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be true or false, got {value!r}",
            field_name=field_name,
            value=value,
        )
    return value


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True,
) -> str:
    """
    Check that ``value`` is one of ``valid_choices``.

    Returns:
        The matching choice as spelled in ``valid_choices``, so
        ``"debug"`` becomes ``"DEBUG"`` in case-insensitive mode

    Raises:
        ValidationError: If nothing matches
    """
    text = str(value)
    for choice in valid_choices:
        if choice == text or (not case_sensitive and choice.lower() == text.lower()):
            return choice
    raise ValidationError(
        f"{field_name} must be one of {', '.join(valid_choices)}, got {value!r}",
        field_name=field_name,
        value=value,
    )
