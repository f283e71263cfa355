"""Tool adaptation: schema conversion, argument coercion, and callable functions."""

from .adapter import CallableFunction, extract_text, tool_to_function
from .coercion import coerce_argument
from .registry import FunctionRegistry, qualified_name
from .schema import (
    ParameterMetadata,
    SemanticType,
    parameters_to_schema,
    schema_to_parameters,
)

__all__ = [
    "CallableFunction",
    "FunctionRegistry",
    "ParameterMetadata",
    "SemanticType",
    "coerce_argument",
    "extract_text",
    "parameters_to_schema",
    "qualified_name",
    "schema_to_parameters",
    "tool_to_function",
]
