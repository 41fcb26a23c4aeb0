import os

import tree_sitter_javascript as tsjs
from tree_sitter import Language, Parser


JS_LANGUAGE = Language(tsjs.language())
_parser = Parser(JS_LANGUAGE)


class ParseJsError(RuntimeError):
    pass


def _decode_failure_hint(filename, exc):
    base = os.path.basename(filename)
    return (
        f"Could not read '{base}' as UTF-8 text ({exc.reason} at byte {exc.start}). "
        "Re-save the file with UTF-8 encoding and try again."
    )


def parse_js_source(data):
    if isinstance(data, str):
        data = data.encode("utf-8")
    return _parser.parse(data)


def parse_js_file(filename):
    if not os.path.exists(filename):
        raise ParseJsError(f"Input file does not exist: {filename}")
    if not os.path.isfile(filename):
        raise ParseJsError(f"Input path is not a file: {filename}")

    with open(filename, "rb") as fh:
        data = fh.read()

    try:
        data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseJsError(_decode_failure_hint(filename, exc)) from exc

    return parse_js_source(data), data


def syntax_errors(tree):
    """
    Collects (line, column, message) for every ERROR or MISSING node.
    """
    errors = []
    if not tree.root_node.has_error:
        return errors

    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        line = node.start_point[0] + 1
        column = node.start_point[1] + 1
        if node.is_missing:
            errors.append((line, column, f"Syntax error: missing '{node.type}'"))
        elif node.type == "ERROR":
            errors.append((line, column, "Syntax error: unexpected input"))
            continue
        if node.has_error:
            stack.extend(reversed(node.children))

    errors.sort()
    return errors
