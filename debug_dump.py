import sys

from ast_parser import parse_js_file
from ast_walker import walk_ast
from semi_rule import classify, next_statement
from source_text import SourceText


def _parent_chain(node, limit=3):
    chain = []
    cur = node.get("parent")
    while cur is not None and len(chain) < limit:
        chain.append(cur.get("kind").value)
        cur = cur.get("parent")
    return " -> ".join(chain)


def _snippet(source, node, width=40):
    text = source.text(node["span"]).replace("\n", "\\n")
    if len(text) > width:
        return text[: width - 3] + "..."
    return text


def main():
    if len(sys.argv) < 2:
        print("Usage: python3 debug_dump.py <file> [line_start] [line_end]")
        sys.exit(1)

    filename = sys.argv[1]
    line_start = int(sys.argv[2]) if len(sys.argv) > 2 else None
    line_end = int(sys.argv[3]) if len(sys.argv) > 3 else None

    tree, data = parse_js_file(filename)
    source = SourceText(data, filename)
    nodes = []
    walk_ast(tree.root_node, nodes)

    for n in nodes:
        line = n.get("line")
        if line_start is not None and line_end is not None:
            if line is None or line < line_start or line > line_end:
                continue

        expression_like = classify(n)
        # Without a line range only the statements the semicolon rule checks are shown.
        if line_start is None and line_end is None and expression_like is None:
            continue

        following = next_statement(n) if expression_like is not None else None
        print(
            f"line={line} kind={n['kind'].value} span={tuple(n['span'])} "
            f"checkable={expression_like is not None} expression_like={bool(expression_like)} "
            f"next_line={following['line'] if following else None} "
            f"text={_snippet(source, n)!r} parents={_parent_chain(n)}"
        )


if __name__ == "__main__":
    main()
