"""
Structural resolution of the helper variable's declared type.

There is no type checker here: members are read off object type literals,
following parentheses, intersections and references to top-level `type`
aliases or interfaces declared in the same module.
"""

from typing import Dict, Optional, Set

import tree_sitter as ts

from sveltedts.parsers import (
    get_node_text,
    iter_named,
    strip_quotes,
    type_of_annotation,
)
from sveltedts.source_file import SourceFile

MEMBERED_TYPES = ("object_type", "interface_body")


def member_name(signature: ts.Node) -> str:
    return strip_quotes(get_node_text(signature.child_by_field_name("name")))


def member_type_text(signature: ts.Node) -> str:
    """Literal source text of a property signature's type (`any` when untyped)."""
    type_node = type_of_annotation(signature.child_by_field_name("type"))
    return get_node_text(type_node).strip() or "any"


def _reference_name(type_node: ts.Node) -> Optional[str]:
    if type_node.type == "type_identifier":
        return get_node_text(type_node)
    if type_node.type == "generic_type":
        return get_node_text(type_node.child_by_field_name("name")) or None
    return None


def resolve_members(
    sf: SourceFile,
    type_node: Optional[ts.Node],
    _seen: Optional[Set[str]] = None,
) -> Dict[str, ts.Node]:
    """
    Map property name to `property_signature` node for the structural type
    *type_node*. Unknown shapes resolve to an empty map.
    """
    seen: Set[str] = set() if _seen is None else _seen
    if type_node is None:
        return {}

    if type_node.type in MEMBERED_TYPES:
        return {
            member_name(sig): sig
            for sig in iter_named(type_node, "property_signature")
        }

    if type_node.type == "parenthesized_type":
        return resolve_members(sf, next(iter_named(type_node), None), seen)

    if type_node.type == "intersection_type":
        members: Dict[str, ts.Node] = {}
        for part in iter_named(type_node):
            members.update(resolve_members(sf, part, seen))
        return members

    name = _reference_name(type_node)
    if name is None or name in seen:
        return {}
    seen.add(name)
    decl = sf.get_type_declaration(name)
    if decl is None:
        return {}
    if decl.type == "interface_declaration":
        return resolve_members(sf, decl.child_by_field_name("body"), seen)
    return resolve_members(sf, decl.child_by_field_name("value"), seen)
