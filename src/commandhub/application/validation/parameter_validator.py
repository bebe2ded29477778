"""
Declarative parameter validation.

Checks a loosely typed parameter bag against a command's schema and returns
every violation found, so a client can fix all problems in one round trip.
Never raises: a malformed schema degrades to "no check performed".
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from commandhub.domain.command import ParameterSchema, ParamType, ValidationResult, ValidationRules

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    # bool is an int subclass; it is not a number on the wire.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _fmt(bound: Any) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def check_type(value: Any, expected: str) -> bool:
    """Return True when `value` matches `expected`; unknown types always pass."""
    if expected == ParamType.string.value:
        return isinstance(value, str)
    if expected == ParamType.number.value:
        return _is_number(value) and not (isinstance(value, float) and math.isnan(value))
    if expected == ParamType.boolean.value:
        return isinstance(value, bool)
    if expected == ParamType.object.value:
        return isinstance(value, Mapping)
    if expected == ParamType.array.value:
        return _is_array(value)
    return True


def _bound(name: str, rule: str, bound: Any) -> Any:
    if bound is None or _is_number(bound):
        return bound
    logger.warning("Ignoring non-numeric %s rule for parameter '%s': %r", rule, name, bound)
    return None


def _enum_values(name: str, enum: Any) -> Optional[List[Any]]:
    if enum is None:
        return None
    if isinstance(enum, (str, bytes, Mapping)) or not isinstance(enum, Iterable):
        logger.warning("Ignoring non-list enum rule for parameter '%s': %r", name, enum)
        return None
    return list(enum)


def _check_rules(name: str, value: Any, rules: ValidationRules) -> List[str]:
    errors: List[str] = []

    lower = _bound(name, "min", rules.min)
    if lower is not None:
        if _is_number(value) and value < lower:
            errors.append(f"Parameter '{name}' must be at least {_fmt(lower)}")
        elif isinstance(value, str) and len(value) < lower:
            errors.append(f"Parameter '{name}' must be at least {_fmt(lower)} characters")
        elif _is_array(value) and len(value) < lower:
            errors.append(f"Parameter '{name}' must have at least {_fmt(lower)} items")

    upper = _bound(name, "max", rules.max)
    if upper is not None:
        if _is_number(value) and value > upper:
            errors.append(f"Parameter '{name}' must be at most {_fmt(upper)}")
        elif isinstance(value, str) and len(value) > upper:
            errors.append(f"Parameter '{name}' must be at most {_fmt(upper)} characters")
        elif _is_array(value) and len(value) > upper:
            errors.append(f"Parameter '{name}' must have at most {_fmt(upper)} items")

    if rules.pattern and isinstance(value, str):
        try:
            matched = re.search(rules.pattern, value) is not None
        except (re.error, TypeError) as exc:
            logger.warning("Ignoring invalid pattern for parameter '%s': %s", name, exc)
            matched = True
        if not matched:
            errors.append(f"Parameter '{name}' does not match required pattern")

    allowed_values = _enum_values(name, rules.enum)
    if allowed_values is not None and value not in allowed_values:
        allowed = ", ".join(str(v) for v in allowed_values)
        errors.append(f"Parameter '{name}' must be one of: {allowed}")

    return errors


def validate_parameters(schema: Sequence[ParameterSchema], params: Mapping[str, Any]) -> ValidationResult:
    errors: List[str] = []
    params = params or {}

    for param in schema:
        if param.name not in params:
            if param.required:
                errors.append(f"Missing required parameter: {param.name}")
            continue

        value = params[param.name]
        if value is None:
            # optional-and-empty is accepted
            continue

        if not check_type(value, param.type):
            errors.append(f"Parameter '{param.name}' must be of type {param.type}")
            continue

        if param.validation is not None:
            errors.extend(_check_rules(param.name, value, param.validation))

    return ValidationResult.from_errors(errors)

