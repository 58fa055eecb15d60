from typing import Iterator, Optional

import tree_sitter as ts
import tree_sitter_typescript as tsts

TS_LANGUAGE = ts.Language(tsts.language_typescript())
_parser: Optional[ts.Parser] = None

# Statement wrappers that may surround a declaration at module level.
WRAPPER_TYPES = ("export_statement", "ambient_declaration", "expression_statement")

CLASS_TYPES = ("class_declaration", "abstract_class_declaration", "class")
VARIABLE_TYPES = ("lexical_declaration", "variable_declaration")
NAMESPACE_TYPES = ("internal_module", "module")


def get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(TS_LANGUAGE)
    return _parser


def get_node_text(node) -> str:
    """
    Get text of the tree sitter node
    """
    if not node or not node.text:
        return ""

    return node.text.decode("utf-8")


def get_node_name(node: Optional[ts.Node]) -> Optional[str]:
    if node is None:
        return None
    name_node = node.child_by_field_name("name")
    return get_node_text(name_node) or None


def unwrap_declaration(node: ts.Node) -> ts.Node:
    """
    Descend through `export`, `declare` and expression statement wrappers to the
    declaration they hold. Returns the node itself when it is not a wrapper.
    """
    while node.type in WRAPPER_TYPES:
        inner = node.child_by_field_name("declaration") or next(
            (c for c in node.named_children if c.type != "comment"), None
        )
        if inner is None:
            break
        node = inner
    return node


def is_default_export(node: ts.Node) -> bool:
    return node.type == "export_statement" and any(
        c.type == "default" for c in node.children
    )


def iter_named(node: Optional[ts.Node], *types: str) -> Iterator[ts.Node]:
    """Yield named, non-comment children, optionally filtered by type."""
    if node is None:
        return
    for child in node.named_children:
        if child.type == "comment":
            continue
        if types and child.type not in types:
            continue
        yield child


def type_of_annotation(node: Optional[ts.Node]) -> Optional[ts.Node]:
    """
    Return the type node held by a `type_annotation` (`: T`), or the node itself
    when it is already a type.
    """
    if node is None:
        return None
    if node.type == "type_annotation":
        return next(iter_named(node), None)
    return node


def describe_node(node: Optional[ts.Node], limit: int = 80) -> Optional[str]:
    """Short single-line description of a node for diagnostics."""
    if node is None:
        return None
    first_line = get_node_text(node).strip().splitlines()
    head = first_line[0] if first_line else ""
    if len(head) > limit:
        head = head[: limit - 3] + "..."
    return f"{node.type} at line {node.start_point[0] + 1}: {head}"


def strip_quotes(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] and name[0] in ("'", '"'):
        return name[1:-1]
    return name
