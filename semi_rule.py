from enum import Enum

from base_rule import BaseRule
from node_kinds import NodeKind
from source_text import Span


# Largest byte offset a span can hold.
MAX_OFFSET = 0xFFFFFFFF

# A statement starting with one of these can continue the previous line.
ASI_HAZARD_STARTS = ("(", "[", "`", "+", "-", "/", "*", "%")
CONTINUABLE_ENDS = (")", "]", "}", "_", "$")

_CONTAINER_KINDS = {NodeKind.PROGRAM, NodeKind.BLOCK_STATEMENT}

_SIMPLE_STATEMENT_KINDS = {
    NodeKind.VARIABLE_DECLARATION,
    NodeKind.RETURN_STATEMENT,
    NodeKind.THROW_STATEMENT,
    NodeKind.BREAK_STATEMENT,
    NodeKind.CONTINUE_STATEMENT,
    NodeKind.IMPORT_DECLARATION,
    NodeKind.EXPORT_ALL_DECLARATION,
}

_BLOCK_BODIED_KINDS = {
    NodeKind.BLOCK_STATEMENT,
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.CLASS_DECLARATION,
    NodeKind.IF_STATEMENT,
    NodeKind.WHILE_STATEMENT,
    NodeKind.FOR_STATEMENT,
    NodeKind.FOR_IN_STATEMENT,
    NodeKind.FOR_OF_STATEMENT,
    NodeKind.DO_WHILE_STATEMENT,
    NodeKind.TRY_STATEMENT,
    NodeKind.SWITCH_STATEMENT,
}

UNNECESSARY_MESSAGE = "Unnecessary semicolon"
UNNECESSARY_HELP = "JavaScript Standard Style: avoid unnecessary semicolons"
MISSING_ASI_MESSAGE = "Missing semicolon to avoid ASI issues"
MISSING_ASI_HELP = "Add semicolon to prevent automatic semicolon insertion problems"
MISSING_MESSAGE = "Missing semicolon"
MISSING_HELP = "Add a semicolon to terminate this statement"


class SemiMode(Enum):
    NEVER = "never"
    ALWAYS = "always"


def resolve_mode(options=None):
    """
    Resolves the mode from the rule options: `["always"]`, `"always"`,
    or anything else (including nothing) for "never".
    """
    if isinstance(options, (list, tuple)):
        options = options[0] if options else None
    if options == "always":
        return SemiMode.ALWAYS
    return SemiMode.NEVER


def resolve_omit_last_in_one_line_block(options=None):
    if isinstance(options, (list, tuple)):
        for option in options[1:]:
            if isinstance(option, dict) and "omitLastInOneLineBlock" in option:
                return bool(option["omitLastInOneLineBlock"])
    return True


def _in_for_header(node):
    parent = node.get("parent")
    return (
        parent is not None
        and parent.get("kind") == NodeKind.FOR_STATEMENT
        and node.get("field") in ("initializer", "condition")
    )


def classify(node):
    """
    Returns None when the node is not a checkable statement, otherwise
    whether it is expression-like.
    """
    kind = node.get("kind")

    if kind == NodeKind.EXPRESSION_STATEMENT:
        return None if _in_for_header(node) else True

    if kind in _SIMPLE_STATEMENT_KINDS:
        if kind == NodeKind.VARIABLE_DECLARATION and _in_for_header(node):
            return None
        return False

    if kind == NodeKind.EXPORT_NAMED_DECLARATION:
        return False if node.get("export_body") != "declaration" else None

    if kind == NodeKind.EXPORT_DEFAULT_DECLARATION:
        return False if node.get("export_body") == "expression" else None

    return None


def next_statement(node):
    """
    Finds the statement following the one that holds `node` in the
    nearest program or block body. Returns None when there is none.
    """
    target = node["span"]
    current = node
    parent = node.get("parent")

    while parent is not None:
        if parent.get("kind") in _CONTAINER_KINDS:
            body = parent.get("children", [])
            index = current.get("index")
            if index is None or index >= len(body) or body[index] is not current:
                return None

            element = current["span"]
            if not (element.start <= target.start and target.end <= element.end):
                return None

            if index + 1 < len(body):
                return body[index + 1]
            return None

        current = parent
        parent = parent.get("parent")

    return None


def is_semicolon_required(node, source, expression_like):
    """
    A semicolon is required when the next statement could be parsed as a
    continuation of this one.
    """
    following = next_statement(node)
    if following is None:
        return False

    next_text = source.text(following["span"]).lstrip()
    if not next_text.startswith(ASI_HAZARD_STARTS):
        return False

    if expression_like:
        return True

    current_text = source.text(node["span"]).rstrip()
    # The statement's own terminator is not a continuable token, so
    # `var a = b;` before `(function(){})()` keeps its semicolon.
    if current_text.endswith(";"):
        current_text = current_text[:-1].rstrip()
    if not current_text:
        return False
    last = current_text[-1]
    return last.isalnum() or last in CONTINUABLE_ENDS


def should_have_semicolon(node):
    return node.get("kind") not in _BLOCK_BODIED_KINDS


def is_last_in_one_line_block(node, source):
    """
    True for the final statement of a block whose braces share a line,
    as in `function foo() { return 'bar' }`. Only direct children of the
    block qualify; `{ if (x) a() }` still needs its semicolon.
    """
    parent = node.get("parent")
    if parent is None or parent.get("kind") != NodeKind.BLOCK_STATEMENT:
        return False

    body = parent.get("children", [])
    if not body or body[-1] is not node:
        return False
    return b"\n" not in source.raw(parent["span"])


def find_semicolon_span(source, span):
    pos = source.raw(span).rfind(b";")
    if pos < 0:
        return None

    semi_start = span.start + pos
    if semi_start + 1 > MAX_OFFSET:
        return None
    return Span(semi_start, semi_start + 1)


class SemiRule(BaseRule):
    """
    Enforces semicolon placement: "never" (Standard Style, only where ASI
    would change meaning) or "always".
    """

    name = "semi"

    def __init__(self, mode=SemiMode.NEVER, severity="warning", omit_last_in_one_line_block=True):
        self.mode = mode
        self.severity = severity
        self.omit_last_in_one_line_block = omit_last_in_one_line_block

    @classmethod
    def from_configuration(cls, options=None, severity="warning"):
        return cls(
            resolve_mode(options),
            severity,
            resolve_omit_last_in_one_line_block(options),
        )

    def matches(self, node):
        return classify(node) is not None

    def _diagnostic(self, message, help_text, span, fix):
        return {
            "rule": self.name,
            "severity": self.severity,
            "message": message,
            "help": help_text,
            "span": span,
            "fix": fix,
        }

    def _unnecessary(self, semi_span):
        return self._diagnostic(
            UNNECESSARY_MESSAGE,
            UNNECESSARY_HELP,
            semi_span,
            {"kind": "delete", "span": semi_span, "text": ""},
        )

    def _missing(self, span, message, help_text):
        return self._diagnostic(
            message,
            help_text,
            Span(span.end, span.end),
            {"kind": "insert_after", "span": span, "text": ";"},
        )

    def apply(self, node, source):
        expression_like = classify(node)
        if expression_like is None:
            return None

        span = node["span"]
        has_semicolon = source.text(span).rstrip().endswith(";")

        if self.mode == SemiMode.ALWAYS:
            if has_semicolon or not should_have_semicolon(node):
                return None
            if self.omit_last_in_one_line_block and is_last_in_one_line_block(node, source):
                return None
            return self._missing(span, MISSING_MESSAGE, MISSING_HELP)

        if has_semicolon:
            if is_semicolon_required(node, source, expression_like):
                return None
            semi_span = find_semicolon_span(source, span)
            if semi_span is None:
                return None
            return self._unnecessary(semi_span)

        if is_semicolon_required(node, source, expression_like):
            return self._missing(span, MISSING_ASI_MESSAGE, MISSING_ASI_HELP)
        return None
