# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Tree-sitter query tables and node-type sets per language family."""

from typing import Any

# Definition sites only; usages are matched later by text identity.
DEFINITION_QUERIES: dict[str, str] = {
    "python": """
        (function_definition name: (identifier) @def.func)
        (class_definition name: (identifier) @def.class)

        (parameters (identifier) @def.var)
        (lambda_parameters (identifier) @def.var)
        (typed_parameter (identifier) @def.var)
        (default_parameter name: (identifier) @def.var)
        (typed_default_parameter name: (identifier) @def.var)
        (list_splat_pattern (identifier) @def.var)
        (dictionary_splat_pattern (identifier) @def.var)

        (assignment left: (identifier) @def.var)
        (assignment left: (pattern_list (identifier) @def.var))
        (assignment left: (tuple_pattern (identifier) @def.var))
        (assignment left: (list_pattern (identifier) @def.var))
        (named_expression name: (identifier) @def.var)
        (for_statement left: (identifier) @def.var)
        (for_statement left: (pattern_list (identifier) @def.var))
        (for_in_clause left: (identifier) @def.var)
        (for_in_clause left: (pattern_list (identifier) @def.var))
        ((as_pattern_target) @def.var
            (#match? @def.var "^[A-Za-z_][A-Za-z0-9_]*$"))
    """,
    "typescript": """
        (function_declaration name: (identifier) @def.func)
        (generator_function_declaration name: (identifier) @def.func)
        (class_declaration name: (type_identifier) @def.class)
        (abstract_class_declaration name: (type_identifier) @def.class)
        (method_definition name: (property_identifier) @def.func)

        (interface_declaration name: (type_identifier) @def.type)
        (type_alias_declaration name: (type_identifier) @def.type)
        (enum_declaration name: (identifier) @def.type)

        (variable_declarator name: (identifier) @def.var)
        (public_field_definition name: (property_identifier) @def.var)

        (required_parameter pattern: (identifier) @def.var)
        (optional_parameter pattern: (identifier) @def.var)
        (arrow_function parameter: (identifier) @def.var)
        (catch_clause parameter: (identifier) @def.var)
    """,
}

# Names bound by imports are external and never masked.
IMPORT_QUERIES: dict[str, str] = {
    "python": """
        (import_statement (dotted_name (identifier) @import))
        (aliased_import (dotted_name (identifier) @import))
        (aliased_import alias: (identifier) @import)
        (import_from_statement name: (dotted_name (identifier) @import))
        (import_from_statement module_name: (dotted_name (identifier) @import))
    """,
    "typescript": """
        (import_specifier name: (identifier) @import)
        (import_specifier alias: (identifier) @import)
        (import_clause (identifier) @import)
        (namespace_import (identifier) @import)
        (import_require_clause (identifier) @import)
        (variable_declarator
            name: (identifier) @import
            value: (call_expression
                function: (identifier) @_callee
                (#eq? @_callee "require")))
    """,
}

IDENTIFIER_NODE_TYPES: frozenset[str] = frozenset(
    {
        "identifier",
        "type_identifier",
        "property_identifier",
        "shorthand_property_identifier_pattern",
        "shorthand_property_identifier",
        "statement_identifier",
    }
)

# Grammar aliases that are plain names when they have no children.
ALIASED_NAME_TYPES: frozenset[str] = frozenset({"as_pattern_target"})


def is_identifier_node(node: Any) -> bool:
    """Check whether a node is a name token that may carry a mapped name."""
    if node.type in IDENTIFIER_NODE_TYPES:
        return True
    return node.type in ALIASED_NAME_TYPES and node.child_count == 0


STRING_NODE_TYPES: dict[str, frozenset[str]] = {
    "python": frozenset({"string"}),
    "typescript": frozenset({"string", "template_string"}),
}

INTERPOLATION_NODE_TYPES: frozenset[str] = frozenset(
    {"interpolation", "template_substitution"}
)

COMMENT_NODE_TYPES: frozenset[str] = frozenset({"comment"})

# (member node type, object field, property field)
MEMBER_ACCESS_FIELDS: dict[str, tuple[str, str, str]] = {
    "python": ("attribute", "object", "attribute"),
    "typescript": ("member_expression", "object", "property"),
}

MODULE_LOADER_CALLS: frozenset[str] = frozenset(
    {"require", "import", "import_module", "__import__"}
)

# Statements whose `source` field names a module.
IMPORT_STATEMENT_TYPES: frozenset[str] = frozenset(
    {"import_statement", "export_statement"}
)

# `import fs = require("fs")`: every string child is the module path.
IMPORT_REQUIRE_TYPE = "import_require_clause"

KEYWORD_ARGUMENT_TYPE = "keyword_argument"
