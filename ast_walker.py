import sys

from node_kinds import NodeKind, export_body, kind_for
from source_text import Span


_SKIPPED_TYPES = {"comment", "html_comment"}


def walk_ast(ts_node, nodes, *, debug=False, parent=None, field=None, index=0):
    """
    Recursively walks a tree-sitter node and collects all named nodes
    into a flat list for the rule engine.

    Each node also keeps its children for rules that need structure.
    Comments are dropped, so a block's children are exactly its statements.
    """

    kind = kind_for(ts_node)
    node = {
        "kind": kind,
        "type": ts_node.type,
        "span": Span(ts_node.start_byte, ts_node.end_byte),
        "line": ts_node.start_point[0] + 1,
        "column": ts_node.start_point[1] + 1,
        "children": [],
        "parent": parent,
        "field": field,
        "index": index,
        "ts_node": ts_node,
    }
    if kind in (
        NodeKind.EXPORT_NAMED_DECLARATION,
        NodeKind.EXPORT_DEFAULT_DECLARATION,
        NodeKind.EXPORT_ALL_DECLARATION,
    ):
        node["export_body"] = export_body(ts_node)

    nodes.append(node)

    if debug:
        print("VISITING:", kind.value, ts_node.type, tuple(node["span"]), file=sys.stderr)

    for i, child in enumerate(ts_node.children):
        if not child.is_named or child.type in _SKIPPED_TYPES:
            continue
        child_node = walk_ast(
            child,
            nodes,
            debug=debug,
            parent=node,
            field=ts_node.field_name_for_child(i),
            index=len(node["children"]),
        )
        node["children"].append(child_node)

    return node
