"""
Policy condition decoding and matching.

A condition set maps an attribute key to an expected value. Expected values
are decoded into a closed variant:

  - Literal: a string, integer, float or boolean compared by type-matched equality
  - ListValue: passes if the actual value equals any element
  - VariableRef: ``${path}`` resolved against the context before comparing

Supported variable paths:
  - ``${resource.<key>}``: the value of <key> in the resource attributes
  - ``${user.id}``: the subject's user id

Any other path is undefined and never matches. All keys must pass (AND); a key
missing from the lookup table fails the whole set. An empty set always passes.

Float literals use exact equality with no tolerance, and 1 never equals 1.0 or True.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from authz.core.errors import ConditionDecodeError
from authz.domain.evaluation import EvaluationContext


_VARIABLE_PATTERN = re.compile(r"^\$\{([^{}]+)\}$")

Scalar = Union[str, int, float, bool]


@dataclass(frozen=True)
class Literal:
    value: Scalar


@dataclass(frozen=True)
class ListValue:
    items: Tuple["ConditionValue", ...]


@dataclass(frozen=True)
class VariableRef:
    path: str


ConditionValue = Union[Literal, ListValue, VariableRef]
Conditions = Dict[str, ConditionValue]


class _Undefined:
    """Marker for a variable that resolves to nothing."""

    def __repr__(self):
        return "<undefined>"


UNDEFINED = _Undefined()


# ==================== DECODING ====================

def parse_condition_value(raw: Any) -> ConditionValue:
    """
    Decode one expected value.

    Raises:
        ConditionDecodeError: If the value is not a scalar, a list or a variable reference
    """
    if isinstance(raw, (Literal, ListValue, VariableRef)):
        return raw
    if isinstance(raw, str):
        match = _VARIABLE_PATTERN.match(raw)
        if match:
            return VariableRef(match.group(1).strip())
        return Literal(raw)
    if isinstance(raw, (bool, int, float)):
        return Literal(raw)
    if isinstance(raw, (list, tuple)):
        return ListValue(tuple(parse_condition_value(item) for item in raw))
    raise ConditionDecodeError(f"unsupported condition value {raw!r} ({type(raw).__name__})")


def parse_conditions(raw: Any) -> Conditions:
    """
    Decode a stored condition set (a mapping or its JSON text).

    Raises:
        ConditionDecodeError: If the set cannot be decoded
    """
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except ValueError as e:
            raise ConditionDecodeError(f"conditions are not valid JSON: {e}") from e
        if raw is None:
            return {}
    if not isinstance(raw, Mapping):
        raise ConditionDecodeError(f"conditions must be a mapping, got {type(raw).__name__}")

    conditions: Conditions = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not key:
            raise ConditionDecodeError(f"condition key must be a non-empty string, got {key!r}")
        try:
            conditions[key] = parse_condition_value(value)
        except ConditionDecodeError as e:
            raise ConditionDecodeError(f"condition {key!r}: {e}") from e
    return conditions


# ==================== MATCHING ====================

@dataclass(frozen=True)
class ConditionCheck:
    passed: bool
    failed_key: Optional[str] = None
    reason: str = ""


def _scalar_kind(value: Any) -> Optional[type]:
    # bool before int: bool is an int subclass but must never equal one
    if isinstance(value, bool):
        return bool
    if isinstance(value, int):
        return int
    if isinstance(value, float):
        return float
    if isinstance(value, str):
        return str
    return None


def values_equal(actual: Any, expected: Any) -> bool:
    """Type-matched equality."""
    if actual is None or expected is None:
        return False
    actual_kind = _scalar_kind(actual)
    expected_kind = _scalar_kind(expected)
    if actual_kind is not None or expected_kind is not None:
        return actual_kind is expected_kind and actual == expected
    return type(actual) is type(expected) and actual == expected


class ConditionEvaluator:
    """Matches decoded condition sets against an evaluation context."""

    @staticmethod
    def build_lookup(ctx: EvaluationContext) -> Dict[str, Any]:
        """
        Merge the attribute table. Later sources overwrite earlier ones:
        fixed subject keys, then resource attributes, then environment.
        """
        table: Dict[str, Any] = {
            "user_id": ctx.user_id,
            "user_roles": list(ctx.user_roles),
            "resource": ctx.resource,
            "action": ctx.action,
        }
        table.update(ctx.resource_ctx or {})
        table.update(ctx.environment or {})
        return table

    @staticmethod
    def resolve_variable(path: str, ctx: EvaluationContext) -> Any:
        """Resolve a ``${...}`` path, returning UNDEFINED when it names nothing."""
        parts = path.split(".")
        if len(parts) != 2:
            return UNDEFINED
        root, name = parts
        if root == "resource":
            return (ctx.resource_ctx or {}).get(name, UNDEFINED)
        if root == "user" and name == "id":
            return ctx.user_id
        return UNDEFINED

    @classmethod
    def compare(cls, actual: Any, expected: ConditionValue, ctx: EvaluationContext) -> bool:
        if isinstance(expected, Literal):
            return values_equal(actual, expected.value)
        if isinstance(expected, ListValue):
            return any(cls.compare(actual, item, ctx) for item in expected.items)
        if isinstance(expected, VariableRef):
            resolved = cls.resolve_variable(expected.path, ctx)
            if resolved is UNDEFINED:
                return False
            return values_equal(actual, resolved)
        raise TypeError(f"unknown condition value {expected!r}")

    @classmethod
    def check(cls, conditions: Conditions, ctx: EvaluationContext) -> ConditionCheck:
        """Evaluate every condition; stops at the first failing key."""
        if not conditions:
            return ConditionCheck(passed=True, reason="no conditions")

        table = cls.build_lookup(ctx)
        for key, expected in conditions.items():
            if key not in table:
                return ConditionCheck(False, key, f"attribute '{key}' missing from context")
            if not cls.compare(table[key], expected, ctx):
                return ConditionCheck(False, key, f"attribute '{key}' did not match")
        return ConditionCheck(passed=True, reason="all conditions matched")

    @classmethod
    def matches(cls, conditions: Conditions, ctx: EvaluationContext) -> bool:
        return cls.check(conditions, ctx).passed


# ==================== ENCODING ====================

def dump_condition_value(value: Any) -> Any:
    """Inverse of parse_condition_value; raw values pass through unchanged."""
    if isinstance(value, Literal):
        return value.value
    if isinstance(value, ListValue):
        return [dump_condition_value(item) for item in value.items]
    if isinstance(value, VariableRef):
        return "${" + value.path + "}"
    return value


def dump_conditions(conditions: Any) -> Any:
    """JSON-ready form of a condition set; non-mappings are returned as-is."""
    if not isinstance(conditions, Mapping):
        return conditions
    return {key: dump_condition_value(value) for key, value in conditions.items()}
