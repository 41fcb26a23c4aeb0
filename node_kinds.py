from enum import Enum


class NodeKind(Enum):
    PROGRAM = "Program"
    BLOCK_STATEMENT = "BlockStatement"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    VARIABLE_DECLARATION = "VariableDeclaration"
    RETURN_STATEMENT = "ReturnStatement"
    THROW_STATEMENT = "ThrowStatement"
    BREAK_STATEMENT = "BreakStatement"
    CONTINUE_STATEMENT = "ContinueStatement"
    IMPORT_DECLARATION = "ImportDeclaration"
    EXPORT_NAMED_DECLARATION = "ExportNamedDeclaration"
    EXPORT_DEFAULT_DECLARATION = "ExportDefaultDeclaration"
    EXPORT_ALL_DECLARATION = "ExportAllDeclaration"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    CLASS_DECLARATION = "ClassDeclaration"
    IF_STATEMENT = "IfStatement"
    WHILE_STATEMENT = "WhileStatement"
    FOR_STATEMENT = "ForStatement"
    FOR_IN_STATEMENT = "ForInStatement"
    FOR_OF_STATEMENT = "ForOfStatement"
    DO_WHILE_STATEMENT = "DoWhileStatement"
    TRY_STATEMENT = "TryStatement"
    SWITCH_STATEMENT = "SwitchStatement"
    EMPTY_STATEMENT = "EmptyStatement"
    LABELED_STATEMENT = "LabeledStatement"
    DEBUGGER_STATEMENT = "DebuggerStatement"
    WITH_STATEMENT = "WithStatement"
    OTHER = "Other"


_TS_KINDS = {
    "program": NodeKind.PROGRAM,
    "statement_block": NodeKind.BLOCK_STATEMENT,
    "expression_statement": NodeKind.EXPRESSION_STATEMENT,
    "variable_declaration": NodeKind.VARIABLE_DECLARATION,
    "lexical_declaration": NodeKind.VARIABLE_DECLARATION,
    "return_statement": NodeKind.RETURN_STATEMENT,
    "throw_statement": NodeKind.THROW_STATEMENT,
    "break_statement": NodeKind.BREAK_STATEMENT,
    "continue_statement": NodeKind.CONTINUE_STATEMENT,
    "import_statement": NodeKind.IMPORT_DECLARATION,
    "function_declaration": NodeKind.FUNCTION_DECLARATION,
    "generator_function_declaration": NodeKind.FUNCTION_DECLARATION,
    "class_declaration": NodeKind.CLASS_DECLARATION,
    "if_statement": NodeKind.IF_STATEMENT,
    "while_statement": NodeKind.WHILE_STATEMENT,
    "for_statement": NodeKind.FOR_STATEMENT,
    "do_statement": NodeKind.DO_WHILE_STATEMENT,
    "try_statement": NodeKind.TRY_STATEMENT,
    "switch_statement": NodeKind.SWITCH_STATEMENT,
    "empty_statement": NodeKind.EMPTY_STATEMENT,
    "labeled_statement": NodeKind.LABELED_STATEMENT,
    "debugger_statement": NodeKind.DEBUGGER_STATEMENT,
    "with_statement": NodeKind.WITH_STATEMENT,
}

# `export default function () {}` and `export default class {}` parse as
# expressions but are declarations as far as semicolons go.
_DECLARATION_LIKE_VALUES = {
    "function",
    "function_expression",
    "generator_function",
    "class",
}


def _anonymous_types(ts_node):
    return {child.type for child in ts_node.children if not child.is_named}


def export_body(ts_node):
    """
    Returns "declaration" when an export statement carries a declaration,
    "expression" for `export default <expr>`, None for re-exports.
    """
    if ts_node.child_by_field_name("declaration") is not None:
        return "declaration"

    value = ts_node.child_by_field_name("value")
    if value is not None:
        if value.type in _DECLARATION_LIKE_VALUES:
            return "declaration"
        return "expression"

    return None


def kind_for(ts_node):
    ts_type = ts_node.type

    if ts_type == "export_statement":
        tokens = _anonymous_types(ts_node)
        if "default" in tokens:
            return NodeKind.EXPORT_DEFAULT_DECLARATION
        if "*" in tokens or any(c.type == "namespace_export" for c in ts_node.named_children):
            return NodeKind.EXPORT_ALL_DECLARATION
        return NodeKind.EXPORT_NAMED_DECLARATION

    if ts_type == "for_in_statement":
        operator = ts_node.child_by_field_name("operator")
        if operator is not None:
            is_of = operator.type == "of"
        else:
            is_of = "of" in _anonymous_types(ts_node)
        return NodeKind.FOR_OF_STATEMENT if is_of else NodeKind.FOR_IN_STATEMENT

    return _TS_KINDS.get(ts_type, NodeKind.OTHER)
