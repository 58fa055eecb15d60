from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import tree_sitter as ts

from sveltedts.parsers import (
    CLASS_TYPES,
    NAMESPACE_TYPES,
    VARIABLE_TYPES,
    get_node_name,
    get_node_text,
    get_parser,
    is_default_export,
    iter_named,
    unwrap_declaration,
)


@dataclass(frozen=True)
class TextEdit:
    """Replace bytes ``[start, end)`` of the module with ``text``."""

    start: int
    end: int
    text: str


@dataclass
class DefaultExport:
    statement: ts.Node  # the `export default ...` statement
    declaration: Optional[ts.Node]  # what is exported (class, function, identifier...)
    declaration_statement: Optional[ts.Node]  # top-level statement holding `declaration`


@dataclass
class VariableDeclaration:
    statement: ts.Node
    declaration: ts.Node  # lexical_declaration / variable_declaration
    declarator: ts.Node

    @property
    def name(self) -> Optional[str]:
        return get_node_name(self.declarator)


class SourceFile:
    """
    Mutable handle to one parsed declaration module.

    The module text is kept as UTF-8 bytes together with its tree-sitter parse.
    Every mutation is a batch of byte-range `TextEdit`s followed by a reparse,
    so nodes obtained before an edit must not be used after it.
    """

    def __init__(self, text: str, path: Optional[str] = None) -> None:
        self.path = path
        self._source: bytes = text.encode("utf-8")
        self._tree: ts.Tree = get_parser().parse(self._source)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        p = Path(path)
        return cls(p.read_text(encoding="utf-8"), path=str(p))

    def save(self, path: Union[str, Path, None] = None) -> None:
        target = path or self.path
        if target is None:
            raise ValueError("SourceFile has no path; pass one to save()")
        Path(target).write_text(self.text, encoding="utf-8")

    # --- state ------------------------------------------------------
    @property
    def text(self) -> str:
        return self._source.decode("utf-8")

    @property
    def root(self) -> ts.Node:
        return self._tree.root_node

    @property
    def has_errors(self) -> bool:
        return self.root.has_error

    def snapshot(self) -> bytes:
        return self._source

    def restore(self, snapshot: bytes) -> None:
        self._source = snapshot
        self._reparse()

    def slice(self, start: int, end: int) -> str:
        return self._source[start:end].decode("utf-8")

    def _reparse(self) -> None:
        self._tree = get_parser().parse(self._source)

    # --- queries ----------------------------------------------------
    def statements(self) -> List[ts.Node]:
        return list(iter_named(self.root))

    def top_level_statement(self, node: ts.Node) -> ts.Node:
        cur = node
        while cur.parent is not None and cur.parent.parent is not None:
            cur = cur.parent
        return cur

    def get_default_export(self) -> Optional[DefaultExport]:
        for stmt in self.statements():
            if not is_default_export(stmt):
                continue
            exported = stmt.child_by_field_name(
                "declaration"
            ) or stmt.child_by_field_name("value")
            if exported is not None and exported.type == "identifier":
                # `export default Name;` refers to a declaration elsewhere in the
                # module; a class wins over merged interfaces / namespaces.
                name = get_node_text(exported)
                class_node = self.get_class(name)
                found = (
                    (self.top_level_statement(class_node), class_node)
                    if class_node is not None
                    else self.find_declaration(name)
                )
                if found is not None:
                    return DefaultExport(
                        statement=stmt,
                        declaration=found[1],
                        declaration_statement=found[0],
                    )
            return DefaultExport(
                statement=stmt,
                declaration=exported,
                declaration_statement=stmt if exported is not None else None,
            )
        return None

    def find_declaration(self, name: str) -> Optional[Tuple[ts.Node, ts.Node]]:
        """
        Find the top-level declaration called *name*. Returns the statement and
        the declaration node (the declarator for variables).
        """
        for stmt in self.statements():
            if is_default_export(stmt) and stmt.child_by_field_name("value"):
                continue
            inner = unwrap_declaration(stmt)
            if inner.type in VARIABLE_TYPES:
                for declarator in iter_named(inner, "variable_declarator"):
                    if get_node_name(declarator) == name:
                        return stmt, declarator
            elif get_node_name(inner) == name:
                return stmt, inner
        return None

    def get_class(self, name: str) -> Optional[ts.Node]:
        for stmt in self.statements():
            inner = unwrap_declaration(stmt)
            if inner.type in CLASS_TYPES and get_node_name(inner) == name:
                return inner
        return None

    def get_variable_declaration(self, name: str) -> Optional[VariableDeclaration]:
        for stmt in self.statements():
            inner = unwrap_declaration(stmt)
            if inner.type not in VARIABLE_TYPES:
                continue
            for declarator in iter_named(inner, "variable_declarator"):
                if get_node_name(declarator) == name:
                    return VariableDeclaration(
                        statement=stmt, declaration=inner, declarator=declarator
                    )
        return None

    def get_type_aliases(self) -> List[ts.Node]:
        """Top-level statements declaring a type alias (exported, declared or plain)."""
        return [
            stmt
            for stmt in self.statements()
            if unwrap_declaration(stmt).type == "type_alias_declaration"
        ]

    def get_type_declaration(self, name: str) -> Optional[ts.Node]:
        """Top-level `type` alias or `interface` called *name*."""
        for stmt in self.statements():
            inner = unwrap_declaration(stmt)
            if inner.type in (
                "type_alias_declaration",
                "interface_declaration",
            ) and get_node_name(inner) == name:
                return inner
        return None

    def get_namespace(self, name: str) -> Optional[ts.Node]:
        for stmt in self.statements():
            inner = unwrap_declaration(stmt)
            if inner.type in NAMESPACE_TYPES and get_node_name(inner) == name:
                return inner
        return None

    def get_namespace_type_alias(
        self, namespace: ts.Node, name: str
    ) -> Optional[ts.Node]:
        body = namespace.child_by_field_name("body")
        for stmt in iter_named(body):
            inner = unwrap_declaration(stmt)
            if inner.type == "type_alias_declaration" and get_node_name(inner) == name:
                return inner
        return None

    def full_start(self, node: ts.Node) -> int:
        """
        Start of *node* including its leading trivia: whitespace and comments back
        to the end of the previous token.
        """
        prev = node.prev_sibling
        while prev is not None and prev.type == "comment":
            prev = prev.prev_sibling
        if prev is not None:
            return prev.end_byte
        parent = node.parent
        if parent is None or parent.parent is None:
            return 0
        return parent.start_byte

    def full_text(self, node: ts.Node) -> str:
        return self.slice(self.full_start(node), node.end_byte)

    # --- edit builders ----------------------------------------------
    def replace_edit(self, node: ts.Node, text: str) -> TextEdit:
        return TextEdit(node.start_byte, node.end_byte, text)

    def statement_span(self, stmt: ts.Node) -> Tuple[int, int]:
        """
        Byte span removed together with a statement: attached doc comments above
        it, its indentation and the rest of its line.
        """
        src = self._source
        start = stmt.start_byte
        prev = stmt.prev_sibling
        while (
            prev is not None
            and prev.type == "comment"
            and get_node_text(prev).startswith("/**")
            and src[prev.end_byte : start].strip() == b""
            and src[prev.end_byte : start].count(b"\n") <= 1
        ):
            start = prev.start_byte
            prev = prev.prev_sibling

        line_start = src.rfind(b"\n", 0, start) + 1
        if src[line_start:start].strip() == b"":
            start = line_start

        end = stmt.end_byte
        while src[end : end + 1] in (b" ", b"\t"):
            end += 1
        if src[end : end + 2] == b"\r\n":
            end += 2
        elif src[end : end + 1] == b"\n":
            end += 1
        return start, end

    def remove_statement_edit(self, stmt: ts.Node) -> TextEdit:
        start, end = self.statement_span(stmt)
        return TextEdit(start, end, "")

    def remove_variable_edit(self, var: VariableDeclaration) -> TextEdit:
        declarators = list(iter_named(var.declaration, "variable_declarator"))
        if len(declarators) <= 1:
            return self.remove_statement_edit(var.statement)
        idx = next(
            i
            for i, d in enumerate(declarators)
            if d.start_byte == var.declarator.start_byte
        )
        if idx + 1 < len(declarators):
            return TextEdit(var.declarator.start_byte, declarators[idx + 1].start_byte, "")
        return TextEdit(declarators[idx - 1].end_byte, var.declarator.end_byte, "")

    def insert_after_edit(self, stmt: ts.Node, text: str) -> TextEdit:
        return TextEdit(stmt.end_byte, stmt.end_byte, "\n" + text)

    def append_edit(self, text: str) -> TextEdit:
        end = len(self._source)
        prefix = "\n" if self._source and not self._source.endswith(b"\n") else ""
        return TextEdit(end, end, f"{prefix}{text}\n")

    # --- mutations --------------------------------------------------
    def apply_edits(self, edits: Iterable[TextEdit]) -> int:
        """
        Apply a batch of non-overlapping edits computed against the current tree
        and reparse once. Returns the number of edits applied.
        """
        ordered = sorted(edits, key=lambda e: (e.start, e.end), reverse=True)
        if not ordered:
            return 0
        src = self._source
        bound = len(src)
        for edit in ordered:
            if not 0 <= edit.start <= edit.end <= bound:
                raise ValueError(
                    f"Overlapping or out of range text edit: {edit.start}-{edit.end}"
                )
            src = src[: edit.start] + edit.text.encode("utf-8") + src[edit.end :]
            bound = edit.start
        self._source = src
        self._reparse()
        return len(ordered)

    def replace_node_text(self, node: ts.Node, text: str) -> None:
        self.apply_edits([self.replace_edit(node, text)])

    def remove_statement(self, stmt: ts.Node) -> None:
        self.apply_edits([self.remove_statement_edit(stmt)])

    def remove_variable_declaration(self, var: VariableDeclaration) -> None:
        self.apply_edits([self.remove_variable_edit(var)])

    def insert_after_statement(self, stmt: ts.Node, text: str) -> None:
        self.apply_edits([self.insert_after_edit(stmt, text)])

    def append_statement(self, text: str) -> None:
        self.apply_edits([self.append_edit(text)])
