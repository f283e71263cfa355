"""Coerce untyped caller arguments into declared parameter types."""

import numbers
from collections.abc import Iterable, Mapping
from typing import Any

import click

from ..errors import CoercionError
from .schema import ParameterMetadata, SemanticType


def _to_integer(param: ParameterMetadata, value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 10)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise CoercionError(param.name, param.semantic_type.value, value) from None
    if isinstance(value, numbers.Real):
        # Integral values only; a fractional part would be lost
        try:
            as_int = int(value)
        except (ValueError, OverflowError):
            raise CoercionError(param.name, param.semantic_type.value, value) from None
        if as_int != value:
            raise CoercionError(param.name, param.semantic_type.value, value)
        return as_int
    raise CoercionError(param.name, param.semantic_type.value, value)


def _to_number(param: ParameterMetadata, value: Any) -> float:
    if isinstance(value, float):
        return value
    if isinstance(value, (numbers.Real, str)):
        try:
            return float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError):
            raise CoercionError(param.name, param.semantic_type.value, value) from None
    raise CoercionError(param.name, param.semantic_type.value, value)


def _to_boolean(param: ParameterMetadata, value: Any) -> bool:
    if isinstance(value, str):
        try:
            return click.BOOL.convert(value, None, None)
        except click.BadParameter:
            raise CoercionError(param.name, param.semantic_type.value, value) from None
    return bool(value)


def coerce_argument(param: ParameterMetadata, value: Any) -> Any:
    """Convert ``value`` to the semantic type ``param`` declares.

    ``value`` must not be None; absent arguments are dropped before coercion.
    Strings and untyped parameters pass through unchanged, as do list and
    mapping parameters whose value is not a collection of the right shape.

    Raises:
        CoercionError: A numeric or boolean value cannot be converted.
    """
    semantic_type = param.semantic_type
    if semantic_type is SemanticType.INTEGER:
        return _to_integer(param, value)
    if semantic_type is SemanticType.NUMBER:
        return _to_number(param, value)
    if semantic_type is SemanticType.BOOLEAN:
        return _to_boolean(param, value)
    if semantic_type is SemanticType.STRING_LIST:
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping)):
            return list(value)
        return value
    # MAPPING values are passed through as-is, like STRING and ANY
    return value
