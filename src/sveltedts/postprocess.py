"""
Post-processing of component declaration modules.

The upstream compiler emits a default exported class plus loose type aliases
and a synthetic helper variable carrying the props / events / slots types.
`process` restructures that into an ambient class and a namespace of the same
name holding `Props`, `Events` and `Slots` aliases, then splices the recovered
doc comments back in. The work is done by five stages that must run in order;
each stage returns the value the next one needs.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

import tree_sitter as ts

from sveltedts.jsdoc import alias_description, namespace_description, render_jsdoc
from sveltedts.logger import logger as default_logger
from sveltedts.models import (
    AliasKind,
    FailureKind,
    JSDocResults,
    PostprocessError,
    PostprocessResult,
    PostprocessSuccess,
)
from sveltedts.parsers import (
    CLASS_TYPES,
    describe_node,
    get_node_name,
    get_node_text,
    iter_named,
    type_of_annotation,
)
from sveltedts.settings import PostprocessSettings, TypeArgumentPolicy
from sveltedts.source_file import SourceFile, TextEdit
from sveltedts.type_members import member_name, member_type_text, resolve_members


@dataclass(frozen=True)
class ComponentClass:
    name: str


@dataclass(frozen=True)
class CapturedTypes:
    props: str
    events: str
    slots: str

    def text_for(self, kind: AliasKind) -> str:
        return getattr(self, kind.member)


@dataclass(frozen=True)
class ComponentNamespace:
    name: str


# --- stage 1 ---------------------------------------------------------
def _find_extends_clause(class_node: ts.Node) -> Optional[ts.Node]:
    heritage = next((c for c in class_node.children if c.type == "class_heritage"), None)
    if heritage is None:
        return None
    return next((c for c in heritage.children if c.type == "extends_clause"), None)


def _base_type_arguments(extends_clause: ts.Node) -> List[ts.Node]:
    type_args = extends_clause.child_by_field_name("type_arguments")
    if type_args is None:
        value = extends_clause.child_by_field_name("value")
        if value is not None and value.type == "instantiation_expression":
            type_args = next(
                (c for c in value.children if c.type == "type_arguments"), None
            )
    return list(iter_named(type_args))


def normalize_default_export(
    sf: SourceFile,
    comments: Optional[JSDocResults],
    log: Any,
    settings: PostprocessSettings,
) -> ComponentClass:
    """
    Turn the default exported class into a non-exported ambient class, attach the
    component description and point its base type arguments at the namespace.
    """
    default_export = sf.get_default_export()
    if default_export is None:
        raise PostprocessError(
            FailureKind.MISSING_DEFAULT_EXPORT, "Module has no default export"
        )

    class_node = default_export.declaration
    if class_node is None or class_node.type not in CLASS_TYPES:
        raise PostprocessError(
            FailureKind.DEFAULT_EXPORT_NOT_CLASS,
            "Default export is not a class declaration",
            node=describe_node(class_node or default_export.statement),
        )
    class_name = get_node_name(class_node)
    if not class_name:
        raise PostprocessError(
            FailureKind.DEFAULT_EXPORT_NOT_CLASS,
            "Default exported class has no name",
            node=describe_node(class_node),
        )

    extends_clause = _find_extends_clause(class_node)
    if extends_clause is None:
        raise PostprocessError(
            FailureKind.MISSING_HERITAGE_CLAUSE,
            f"Class `{class_name}` has no extends clause",
            node=describe_node(class_node),
        )

    edits: List[TextEdit] = []

    # Everything between the statement start and the class keyword is
    # `export`, `default` and `declare` modifiers.
    statement = default_export.declaration_statement or default_export.statement
    prefix = "declare "
    if comments is not None and comments.component_description:
        prefix = render_jsdoc(comments.component_description) + "\n" + prefix
    edits.append(TextEdit(statement.start_byte, class_node.start_byte, prefix))

    if default_export.statement.start_byte != statement.start_byte:
        edits.append(sf.remove_statement_edit(default_export.statement))

    type_args = _base_type_arguments(extends_clause)
    if len(type_args) == len(AliasKind):
        for kind, arg in zip(AliasKind, type_args):
            edits.append(sf.replace_edit(arg, f"{class_name}.{kind.value}"))
    elif settings.type_argument_policy == TypeArgumentPolicy.ERROR:
        raise PostprocessError(
            FailureKind.TYPE_ARGUMENT_MISMATCH,
            f"Base type of `{class_name}` has {len(type_args)} type arguments, expected 3",
            node=describe_node(extends_clause),
        )
    elif settings.type_argument_policy == TypeArgumentPolicy.WARN:
        log.warning(
            "Base type arguments left untouched",
            class_name=class_name,
            count=len(type_args),
            base=get_node_text(extends_clause),
        )

    sf.apply_edits(edits)
    log.debug("Normalized default export", class_name=class_name)
    return ComponentClass(name=class_name)


# --- stage 2 ---------------------------------------------------------
def extract_structural_types(
    sf: SourceFile, log: Any, settings: PostprocessSettings
) -> CapturedTypes:
    """
    Capture the props / events / slots type text from the helper variable, then
    remove the variable.
    """
    helper = settings.helper_variable
    var = sf.get_variable_declaration(helper)
    if var is None:
        raise PostprocessError(
            FailureKind.MISSING_HELPER_VARIABLE,
            f"Helper variable `{helper}` not found",
        )

    members = resolve_members(
        sf, type_of_annotation(var.declarator.child_by_field_name("type"))
    )
    captured: Dict[str, str] = {}
    for kind in AliasKind:
        signature = members.get(kind.member)
        if signature is None:
            raise PostprocessError(
                FailureKind.MISSING_HELPER_MEMBER,
                f"Helper variable `{helper}` has no `{kind.member}` member",
                node=describe_node(var.declarator),
            )
        captured[kind.member] = member_type_text(signature)

    # Text is captured as plain strings above, so the node can go now.
    sf.remove_variable_declaration(var)
    log.debug("Extracted structural types", helper=helper)
    return CapturedTypes(**captured)


# --- stage 3 ---------------------------------------------------------
def namespace_text(class_name: str, types: CapturedTypes, indent: str) -> str:
    lines = [
        render_jsdoc(namespace_description(class_name)),
        f"declare namespace {class_name} {{",
    ]
    for kind in AliasKind:
        lines.append(render_jsdoc(alias_description(kind, class_name), indent=indent))
        lines.append(f"{indent}export type {kind.value} = {types.text_for(kind)};")
    lines.append("}")
    return "\n".join(lines)


def build_namespace(
    sf: SourceFile,
    component: ComponentClass,
    types: CapturedTypes,
    log: Any,
    settings: PostprocessSettings,
) -> ComponentNamespace:
    """Add `declare namespace <Class>` with the three aliases right after the class."""
    class_node = sf.get_class(component.name)
    text = namespace_text(component.name, types, " " * settings.indent_width)
    if class_node is not None:
        sf.insert_after_statement(sf.top_level_statement(class_node), text)
    else:
        sf.append_statement(text)
    log.debug("Built namespace", namespace=component.name)
    return ComponentNamespace(name=component.name)


# --- stage 4 ---------------------------------------------------------
def reattach_comments(
    sf: SourceFile,
    namespace: ComponentNamespace,
    comments: Optional[JSDocResults],
    log: Any,
) -> int:
    """
    Splice prop doc comments above the matching members of the `Props` alias.
    Returns the number of members documented.

    The comment is joined to the member's full text rather than attached as a
    doc node: formatters run over the output reflow detached doc nodes.
    """
    props = comments.props if comments is not None else {}
    if not props:
        return 0

    ns_node = sf.get_namespace(namespace.name)
    alias = (
        sf.get_namespace_type_alias(ns_node, AliasKind.PROPS.value)
        if ns_node is not None
        else None
    )
    type_node = alias.child_by_field_name("value") if alias is not None else None
    if type_node is None or type_node.type != "object_type":
        log.debug(
            "Props type is not an object type literal; skipping doc comments",
            namespace=namespace.name,
            type=type_node.type if type_node is not None else None,
        )
        return 0

    edits: List[TextEdit] = []
    for signature in iter_named(type_node, "property_signature"):
        doc = props.get(member_name(signature))
        if doc is None:
            continue
        start = sf.full_start(signature)
        full_text = sf.slice(start, signature.end_byte)
        edits.append(TextEdit(start, signature.end_byte, f"\n{doc}\n{full_text}"))

    count = sf.apply_edits(edits)
    log.debug("Reattached prop comments", namespace=namespace.name, count=count)
    return count


# --- stage 5 ---------------------------------------------------------
def rewrite_exports(sf: SourceFile, namespace: ComponentNamespace, log: Any) -> None:
    """Drop the generated top-level type aliases and default export the class."""
    aliases = sf.get_type_aliases()
    sf.apply_edits(sf.remove_statement_edit(stmt) for stmt in aliases)
    sf.append_statement(f"export default {namespace.name};")
    log.debug("Rewrote exports", removed_aliases=len(aliases))


# --- entry point -----------------------------------------------------
def process(
    comments: Union[JSDocResults, Mapping[str, Any], None],
    logger: Any,
    source_file: SourceFile,
    settings: Optional[PostprocessSettings] = None,
) -> PostprocessResult:
    """
    Run the whole pass over *source_file* in place.

    Returns `PostprocessSuccess`, or `PostprocessFailure` naming the terminal
    condition hit. With `settings.rollback_on_failure` a failed pass leaves the
    source file with its original text.
    """
    log = logger if logger is not None else default_logger
    settings = settings or PostprocessSettings()
    if comments is not None and not isinstance(comments, JSDocResults):
        comments = JSDocResults.model_validate(comments)

    snapshot = source_file.snapshot()
    try:
        component = normalize_default_export(source_file, comments, log, settings)
        types = extract_structural_types(source_file, log, settings)
        namespace = build_namespace(source_file, component, types, log, settings)
        documented = reattach_comments(source_file, namespace, comments, log)
        rewrite_exports(source_file, namespace, log)
    except PostprocessError as ex:
        rolled_back = False
        if settings.rollback_on_failure:
            source_file.restore(snapshot)
            rolled_back = True
        log.warning(
            "Declaration post-processing failed",
            path=source_file.path,
            kind=ex.kind.value,
            node=ex.node,
            error=ex.message,
            rolled_back=rolled_back,
        )
        return ex.to_failure(rolled_back=rolled_back)

    log.info(
        "Post-processed component declaration",
        path=source_file.path,
        class_name=component.name,
        documented_props=documented,
    )
    return PostprocessSuccess(class_name=component.name, documented_props=documented)
