from sveltedts.parsers import type_of_annotation
from sveltedts.source_file import SourceFile
from sveltedts.type_members import member_type_text, resolve_members


def _helper_members(text: str, name: str = "__propDef"):
    sf = SourceFile(text)
    var = sf.get_variable_declaration(name)
    assert var is not None
    members = resolve_members(
        sf, type_of_annotation(var.declarator.child_by_field_name("type"))
    )
    return {k: member_type_text(v) for k, v in members.items()}


def test_object_type_literal():
    members = _helper_members(
        "declare const __propDef: {\n"
        "    props: { x: number };\n"
        "    events: { [evt: string]: CustomEvent<any> };\n"
        "    slots: {};\n"
        "};\n"
    )
    assert members == {
        "props": "{ x: number }",
        "events": "{ [evt: string]: CustomEvent<any> }",
        "slots": "{}",
    }


def test_intersection_and_parentheses():
    members = _helper_members(
        "declare const __propDef: ({ props: { a: string } }) & {\n"
        "    events: {};\n"
        "    slots: {};\n"
        "};\n"
    )
    assert set(members) == {"props", "events", "slots"}
    assert members["props"] == "{ a: string }"


def test_intersection_later_member_wins():
    members = _helper_members(
        "declare const __propDef: { props: { a: string } } & { props: { b: number } };\n"
    )
    assert members == {"props": "{ b: number }"}


def test_reference_to_alias_and_interface():
    members = _helper_members(
        "interface Defs { props: Record<string, never>; events: Events; }\n"
        "type Events = {};\n"
        "type Wrapper = Defs & { slots: {} };\n"
        "declare const __propDef: Wrapper;\n"
    )
    assert members == {
        "props": "Record<string, never>",
        "events": "Events",
        "slots": "{}",
    }


def test_cyclic_reference_terminates():
    members = _helper_members(
        "type A = B;\n"
        "type B = A & { props: {} };\n"
        "declare const __propDef: A;\n"
    )
    assert members == {"props": "{}"}


def test_unresolvable_types_have_no_members():
    assert _helper_members("declare const __propDef: Unknown;\n") == {}
    assert _helper_members("declare const __propDef: string;\n") == {}
    assert _helper_members("declare let __propDef;\n") == {}


def test_quoted_and_untyped_members():
    members = _helper_members(
        "declare const __propDef: { 'props': { a: string }; events; };\n"
    )
    assert members == {"props": "{ a: string }", "events": "any"}
