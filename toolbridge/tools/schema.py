"""Convert tool input schemas into parameter metadata.

Reads the JSON Schema a provider advertises for each tool and derives the
semantic type, description and required flag of every parameter, so the
function registry and argument coercion never inspect raw schemas.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ..errors import SchemaConversionError


class SemanticType(str, Enum):
    """Parameter types understood by the function registry."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING_LIST = "list-of-string"
    MAPPING = "map-string-to-any"
    ANY = "any"


_TYPE_MAP = {
    "string": SemanticType.STRING,
    "integer": SemanticType.INTEGER,
    "number": SemanticType.NUMBER,
    "boolean": SemanticType.BOOLEAN,
    "array": SemanticType.STRING_LIST,
    "object": SemanticType.MAPPING,
}

# Types that cannot hold "no value" unless explicitly marked nullable
_VALUE_TYPES = frozenset({SemanticType.INTEGER, SemanticType.NUMBER, SemanticType.BOOLEAN})

_SCHEMA_MAP = {
    SemanticType.STRING: {"type": "string"},
    SemanticType.INTEGER: {"type": "integer"},
    SemanticType.NUMBER: {"type": "number"},
    SemanticType.BOOLEAN: {"type": "boolean"},
    SemanticType.STRING_LIST: {"type": "array", "items": {"type": "string"}},
    SemanticType.MAPPING: {"type": "object"},
    SemanticType.ANY: {},
}


@dataclass(frozen=True)
class ParameterMetadata:
    """A single tool parameter as seen by the function registry."""

    name: str
    description: str
    semantic_type: SemanticType
    required: bool
    nullable: bool = False


def _schema_type_to_semantic(schema_type: Any) -> SemanticType:
    """Map a JSON Schema ``type`` to a SemanticType. Unknown types degrade to ANY."""
    if isinstance(schema_type, list):
        # ["integer", "null"] style unions
        concrete = [t for t in schema_type if t != "null"]
        if len(concrete) != 1:
            return SemanticType.ANY
        schema_type = concrete[0]
    if not isinstance(schema_type, str):
        return SemanticType.ANY
    return _TYPE_MAP.get(schema_type, SemanticType.ANY)


def schema_to_parameters(
    tool_name: str,
    input_schema: Optional[Mapping[str, Any]],
) -> Optional[tuple[ParameterMetadata, ...]]:
    """Derive parameter metadata from a tool's input schema.

    Args:
        tool_name: Tool name, used in error messages.
        input_schema: The tool's ``inputSchema`` object, or None.

    Returns:
        One ParameterMetadata per declared property in schema order, or
        None if the schema declares no ``properties`` at all.

    Raises:
        SchemaConversionError: The schema is structurally unusable.
    """
    if input_schema is None:
        return None
    if not isinstance(input_schema, Mapping):
        raise SchemaConversionError(tool_name, "input schema is not an object")

    properties = input_schema.get("properties")
    if properties is None:
        return None
    if not isinstance(properties, Mapping):
        raise SchemaConversionError(tool_name, "'properties' is not an object")

    required_raw = input_schema.get("required") or []
    if not isinstance(required_raw, (list, tuple)):
        raise SchemaConversionError(tool_name, "'required' is not an array")
    required = {str(r) for r in required_raw}

    parameters = []
    for name, prop in properties.items():
        if not isinstance(prop, Mapping):
            raise SchemaConversionError(tool_name, f"property '{name}' is not an object")
        semantic_type = _schema_type_to_semantic(prop.get("type"))
        is_required = name in required
        parameters.append(ParameterMetadata(
            name=str(name),
            description=str(prop.get("description") or ""),
            semantic_type=semantic_type,
            required=is_required,
            nullable=not is_required and semantic_type in _VALUE_TYPES,
        ))
    return tuple(parameters)


def parameters_to_schema(parameters: Optional[tuple[ParameterMetadata, ...]]) -> dict:
    """Rebuild a JSON Schema object from parameter metadata."""
    properties = {}
    required = []
    for param in parameters or ():
        prop_schema = dict(_SCHEMA_MAP[param.semantic_type])
        if param.description:
            prop_schema["description"] = param.description
        properties[param.name] = prop_schema
        if param.required:
            required.append(param.name)

    schema = {
        "type": "object",
        "properties": properties,
    }
    if required:
        schema["required"] = required
    return schema
