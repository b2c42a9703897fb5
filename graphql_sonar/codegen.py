"""Generate Python client functions from GraphQL operation documents."""
import glob
import keyword
import logging
import os
from pprint import pformat
from typing import Dict, List, Optional, Tuple

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLSchema,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    OperationDefinitionNode,
    TypeNode,
    build_schema,
    parse,
    print_ast,
    separate_operations,
    validate,
)
from graphql.error import GraphQLSyntaxError

from .errors import CodegenError
from .schema_generator import OperationInputSchemaGenerator

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = (".graphql", ".gql")

SCALAR_ANNOTATIONS = {
    "ID": "str",
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
}

MODULE_HEADER = '''"""Generated by graphql-sonar. Do not edit."""
from typing import Any, Dict, List, NotRequired, Optional, TypedDict

from graphql_sonar import (
    GraphQLRequest,
    SonarConfig,
    SonarResult,
    perform_graphql_request_async,
)
'''

HEADER_NAMES = (
    "Any",
    "Dict",
    "List",
    "NotRequired",
    "Optional",
    "TypedDict",
    "GraphQLRequest",
    "SonarConfig",
    "SonarResult",
    "perform_graphql_request_async",
)


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def find_documents(operations: str) -> List[str]:
    """
    Resolve an operations argument to a sorted list of document paths.

    Args:
        operations: A document file, a directory searched recursively, or a glob

    Returns:
        List of document file paths
    """
    if os.path.isdir(operations):
        paths = glob.glob(os.path.join(operations, "**", "*"), recursive=True)
    else:
        paths = glob.glob(operations, recursive=True)

    return sorted(
        path
        for path in paths
        if os.path.isfile(path) and path.endswith(DOCUMENT_EXTENSIONS)
    )


def load_schema(schema_path: str) -> GraphQLSchema:
    with open(schema_path, "r") as file:
        return build_schema(file.read())


class ClientGenerator:
    def __init__(self, schema: GraphQLSchema):
        self.schema = schema

    def collect(self, sources: Dict[str, str]) -> DocumentNode:
        """Parse documents and merge their executable definitions into one."""
        definitions = []
        for path, source in sources.items():
            try:
                document = parse(source)
            except GraphQLSyntaxError as e:
                raise CodegenError(f"Failed to parse {path}: {e.message}")

            for definition in document.definitions:
                if isinstance(definition, OperationDefinitionNode):
                    if definition.name is None:
                        raise CodegenError(
                            f"Found unnamed operation: {print_ast(definition)}"
                        )
                elif not isinstance(definition, FragmentDefinitionNode):
                    logger.warning(
                        "Filtering out definition of kind %s in %s",
                        definition.kind,
                        path,
                    )
                    continue
                definitions.append(definition)

        return DocumentNode(definitions=tuple(definitions))

    def generate(self, sources: Dict[str, str]) -> str:
        document = self.collect(sources)

        errors = validate(self.schema, document)
        if errors:
            raise CodegenError(
                "Operations do not match the schema:\n"
                + "\n".join(error.message for error in errors)
            )

        generated = [MODULE_HEADER]
        owners = {name: "the module imports" for name in HEADER_NAMES}
        for operation_name, operation_document in separate_operations(document).items():
            operation = next(
                definition
                for definition in operation_document.definitions
                if isinstance(definition, OperationDefinitionNode)
            )
            for name in self.generated_names(operation):
                if name in owners:
                    raise CodegenError(
                        f"Operation {operation_name} generates {name}, "
                        f"which is already defined by {owners[name]}"
                    )
                owners[name] = f"operation {operation_name}"
            generated.append(self.generate_operation(operation, operation_document))
            logger.debug("Generated client function for %s", operation_name)

        return "\n".join(generated)

    def _prefixes(self, operation: OperationDefinitionNode) -> Tuple[str, str, str]:
        operation_name = operation.name.value
        function_name = operation_name
        if keyword.iskeyword(function_name):
            function_name += "_"
        type_prefix = f"{capitalize(operation_name)}{capitalize(operation.operation.value)}"
        return function_name, type_prefix, _constant_name(operation_name)

    def generated_names(self, operation: OperationDefinitionNode) -> List[str]:
        """Module-level names the client code for an operation defines."""
        function_name, type_prefix, constant_prefix = self._prefixes(operation)
        return [
            function_name,
            f"{type_prefix}Variables",
            f"{constant_prefix}_QUERY",
            f"{constant_prefix}_VARIABLES_SCHEMA",
        ]

    def generate_operation(
        self, operation: OperationDefinitionNode, document: DocumentNode
    ) -> str:
        operation_name = operation.name.value
        kind = operation.operation.value
        function_name, type_prefix, constant_prefix = self._prefixes(operation)

        variables_schema = OperationInputSchemaGenerator(
            operation, self.schema
        ).generate_schema()

        return f'''
{type_prefix}Variables = TypedDict(
    "{type_prefix}Variables",
    {self._variables_fields(operation)},
)

{constant_prefix}_QUERY = {_string_literal(print_ast(document))}

{constant_prefix}_VARIABLES_SCHEMA = {pformat(variables_schema, indent=4, sort_dicts=False)}


async def {function_name}(
    config: SonarConfig, variables: Optional[{type_prefix}Variables] = None
) -> SonarResult:
    """
    Run the `{operation_name}` {kind} against a configured endpoint.

    Args:
        config: Sonar config containing endpoint, headers and other request options
        variables: {capitalize(kind)} operation variables

    Returns:
        Sonar result
    """
    return await perform_graphql_request_async(
        config,
        GraphQLRequest(
            operation_name="{operation_name}",
            query={constant_prefix}_QUERY,
            variables=dict(variables or {{}}),
        ),
        variables_schema={constant_prefix}_VARIABLES_SCHEMA,
    )
'''

    def _variables_fields(self, operation: OperationDefinitionNode) -> str:
        fields = []
        for variable in operation.variable_definitions or ():
            annotation = self.type_annotation(variable.type)
            if (
                not isinstance(variable.type, NonNullTypeNode)
                or variable.default_value is not None
            ):
                annotation = f"NotRequired[{annotation}]"
            fields.append(f'"{variable.variable.name.value}": {annotation}')
        return "{" + ", ".join(fields) + "}"

    def type_annotation(self, node: TypeNode, nullable: bool = True) -> str:
        match node:
            case NonNullTypeNode():
                return self.type_annotation(node.type, nullable=False)
            case ListTypeNode():
                annotation = f"List[{self.type_annotation(node.type)}]"
            case NamedTypeNode():
                annotation = self._named_annotation(node.name.value)
            case _:
                raise CodegenError(f"Unsupported type node: {node}")

        if nullable:
            return f"Optional[{annotation}]"
        return annotation

    def _named_annotation(self, type_name: str) -> str:
        if type_name in SCALAR_ANNOTATIONS:
            return SCALAR_ANNOTATIONS[type_name]

        named_type = self.schema.get_type(type_name)
        if isinstance(named_type, GraphQLEnumType):
            return "str"
        if isinstance(named_type, GraphQLInputObjectType):
            return "Dict[str, Any]"
        return "Any"


def _constant_name(operation_name: str) -> str:
    chars = []
    for index, char in enumerate(operation_name):
        if char.isupper() and index and not operation_name[index - 1].isupper():
            chars.append("_")
        chars.append(char.upper())
    return "".join(chars)


def _string_literal(value: str) -> str:
    if '"""' in value or "\\" in value or value.endswith('"'):
        return repr(value)
    return f'"""{value}"""'


def generate(
    schema_path: str, operations: str, output_path: Optional[str] = None
) -> str:
    """
    Generate a client module for every operation found in the documents.

    Args:
        schema_path: Path to the schema SDL file
        operations: Document file, directory or glob pattern
        output_path: Where to write the module, defaults to sonar_client.py

    Returns:
        The generated module source

    Raises:
        CodegenError: If no documents are found or they do not match the schema
    """
    paths = find_documents(operations)
    if not paths:
        raise CodegenError(f"No GraphQL documents found in {operations}")

    sources = {}
    for path in paths:
        with open(path, "r") as file:
            sources[path] = file.read()

    source = ClientGenerator(load_schema(schema_path)).generate(sources)

    output_path = os.path.abspath(output_path or "sonar_client.py")
    with open(output_path, "w") as file:
        file.write(source)
    logger.info("Wrote %d document(s) to %s", len(paths), output_path)

    return source


def list_operations(operations: str) -> List[Tuple[str, str]]:
    """Name and kind of every named operation in the documents."""
    found = []
    for path in find_documents(operations):
        with open(path, "r") as file:
            try:
                document = parse(file.read())
            except GraphQLSyntaxError as e:
                raise CodegenError(f"Failed to parse {path}: {e.message}")
        for definition in document.definitions:
            if isinstance(definition, OperationDefinitionNode) and definition.name:
                found.append((definition.name.value, definition.operation.value))
    return found
