"""JSON Schema generation for GraphQL operation variables."""
from typing import Any, Dict, List, Set, Tuple

from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLSchema,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    OperationDefinitionNode,
    TypeNode,
)
from graphql.pyutils import Undefined

from .errors import CodegenError

SCALAR_SCHEMAS = {
    "ID": {"type": "string"},
    "String": {"type": "string"},
    "Int": {"type": "integer"},
    "Float": {"type": "number"},
    "Boolean": {"type": "boolean"},
}


class OperationInputSchemaGenerator:
    def __init__(self, operation: OperationDefinitionNode, schema: GraphQLSchema):
        self.operation = operation
        self.schema = schema
        self.type_definitions: Dict[str, Any] = {}
        self.undefined_types: Set[str] = set()

    def generate_schema(self) -> dict:
        properties: Dict[str, dict] = dict()
        required: List[str] = []

        for variable in self.operation.variable_definitions or ():
            variable_name = variable.variable.name.value
            type_schema, is_required = self._split_required(
                self._type_to_json_schema_object(variable.type)
            )
            # a default lets the caller leave a non-null variable out
            if is_required and variable.default_value is None:
                required.append(variable_name)
            properties[variable_name] = type_schema

        schema = {
            "$schema": "http://json-schema.org/draft-04/schema#",
            "type": "object",
            "properties": properties,
            "definitions": self._get_type_definitions(),
        }
        # draft 4 rejects an empty required list
        if required:
            schema["required"] = required
        return schema

    def _get_type_definitions(self) -> dict:
        pending = sorted(self.undefined_types)
        while pending:
            type_name = pending.pop()
            if type_name in self.type_definitions:
                continue
            self.type_definitions[type_name] = self._named_type_definition(type_name)
            pending.extend(
                t for t in sorted(self.undefined_types) if t not in self.type_definitions
            )

        return self.type_definitions

    def _type_to_json_schema_object(self, node: TypeNode) -> dict:
        match node:
            case NamedTypeNode():
                return self._object_to_json_schema(node.name.value)
            case NonNullTypeNode():
                schema = self._type_to_json_schema_object(node.type)
                return {**schema, "required": True}
            case ListTypeNode():
                return {
                    "type": "array",
                    "items": self._split_required(
                        self._type_to_json_schema_object(node.type)
                    )[0],
                }
        raise CodegenError(f"Unsupported type node: {node}")

    def _object_to_json_schema(self, type_name: str) -> dict:
        if type_name in SCALAR_SCHEMAS:
            return dict(SCALAR_SCHEMAS[type_name])

        named_type = self.schema.get_type(type_name)
        if isinstance(named_type, (GraphQLInputObjectType, GraphQLEnumType)):
            self.undefined_types.add(type_name)
            return {"$ref": f"#/definitions/{type_name}"}

        # custom scalars are left unconstrained
        return {}

    def _named_type_definition(self, type_name: str) -> dict:
        named_type = self.schema.get_type(type_name)

        if isinstance(named_type, GraphQLEnumType):
            return {"type": "string", "enum": list(named_type.values)}

        properties = {}
        required = []
        for field_name, input_field in named_type.fields.items():
            field_schema, is_required = self._split_required(
                self._schema_type_to_json_schema(input_field.type)
            )
            if is_required and input_field.default_value is Undefined:
                required.append(field_name)
            properties[field_name] = field_schema

        definition = {"type": "object", "properties": properties}
        if required:
            definition["required"] = required
        return definition

    def _schema_type_to_json_schema(self, graphql_type) -> dict:
        if isinstance(graphql_type, GraphQLNonNull):
            schema = self._schema_type_to_json_schema(graphql_type.of_type)
            return {**schema, "required": True}
        if isinstance(graphql_type, GraphQLList):
            return {
                "type": "array",
                "items": self._split_required(
                    self._schema_type_to_json_schema(graphql_type.of_type)
                )[0],
            }
        return self._object_to_json_schema(graphql_type.name)

    @staticmethod
    def _split_required(schema: dict) -> Tuple[dict, bool]:
        """Strip the non-null marker, letting nullable schemas accept null."""
        schema = dict(schema)
        if schema.pop("required", False):
            return schema, True
        if "type" in schema:
            return {**schema, "type": [schema["type"], "null"]}, False
        if "$ref" in schema:
            return {"anyOf": [schema, {"type": "null"}]}, False
        return schema, False
