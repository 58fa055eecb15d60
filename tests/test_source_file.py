from pathlib import Path

import pytest

from sveltedts.parsers import get_node_name, get_node_text, is_default_export
from sveltedts.source_file import SourceFile, TextEdit


SAMPLES_DIR = Path(__file__).parent / "samples"


def test_source_file_queries_on_generated_declaration():
    sf = SourceFile.from_path(SAMPLES_DIR / "button.d.ts")

    assert sf.path.endswith("button.d.ts")
    assert not sf.has_errors

    default_export = sf.get_default_export()
    assert default_export is not None
    assert get_node_name(default_export.declaration) == "Button"
    assert (
        default_export.declaration_statement.start_byte
        == default_export.statement.start_byte
    )

    var = sf.get_variable_declaration("__propDef")
    assert var is not None
    assert var.name == "__propDef"
    assert sf.get_variable_declaration("missing") is None

    aliases = sf.get_type_aliases()
    assert [get_node_text(a).split("=")[0].strip() for a in aliases] == [
        "export type ButtonProps",
        "export type ButtonEvents",
        "export type ButtonSlots",
    ]

    assert sf.get_class("Button") is not None
    assert sf.get_class("Other") is None
    assert sf.get_namespace("Button") is None


def test_default_export_identifier_resolves_to_class():
    sf = SourceFile.from_path(SAMPLES_DIR / "widget.d.ts")

    default_export = sf.get_default_export()
    assert default_export is not None
    assert default_export.declaration.type in ("class_declaration", "class")
    assert get_node_name(default_export.declaration) == "Widget"
    # the class lives in its own `declare class` statement
    assert get_node_text(default_export.declaration_statement).startswith(
        "declare class Widget"
    )
    assert get_node_text(default_export.statement) == "export default Widget;"


def test_module_without_default_export():
    sf = SourceFile("declare const a: number;\nexport type A = string;\n")
    assert sf.get_default_export() is None


def test_type_declaration_lookup():
    sf = SourceFile(
        "interface Shape { a: string; }\n"
        "type Alias = { b: number };\n"
        "declare type Hidden = string;\n"
    )
    assert sf.get_type_declaration("Shape").type == "interface_declaration"
    assert sf.get_type_declaration("Alias").type == "type_alias_declaration"
    assert sf.get_type_declaration("Nope") is None
    # plain, exported and declared aliases all count as top-level aliases
    assert len(sf.get_type_aliases()) == 2


def test_namespace_lookup_and_member_alias():
    sf = SourceFile(
        "declare namespace Foo {\n"
        "    export type Props = { x: number };\n"
        "    type Local = string;\n"
        "}\n"
    )
    ns = sf.get_namespace("Foo")
    assert ns is not None
    props = sf.get_namespace_type_alias(ns, "Props")
    assert get_node_text(props.child_by_field_name("value")) == "{ x: number }"
    assert sf.get_namespace_type_alias(ns, "Local") is not None
    assert sf.get_namespace_type_alias(ns, "Events") is None
    # namespace members are not top-level aliases
    assert sf.get_type_aliases() == []


def test_remove_statement_takes_attached_doc_comment_and_line():
    sf = SourceFile(
        "// header\n"
        "\n"
        "/** Doc for A. */\n"
        "export type A = string;\n"
        "export type B = number;\n"
    )
    sf.remove_statement(sf.get_type_aliases()[0])
    assert sf.text == "// header\n\nexport type B = number;\n"


def test_remove_statement_keeps_detached_comment():
    sf = SourceFile("/** File doc. */\n\nexport type A = string;\nexport {};\n")
    sf.remove_statement(sf.get_type_aliases()[0])
    assert sf.text == "/** File doc. */\n\nexport {};\n"


def test_remove_variable_with_several_declarators():
    sf = SourceFile("declare const a: number, __propDef: { props: {} };\n")
    sf.remove_variable_declaration(sf.get_variable_declaration("__propDef"))
    assert sf.text == "declare const a: number;\n"
    assert sf.get_variable_declaration("a") is not None

    sf = SourceFile("declare const __propDef: { props: {} }, b: string;\n")
    sf.remove_variable_declaration(sf.get_variable_declaration("__propDef"))
    assert sf.text == "declare const b: string;\n"


def test_remove_only_declarator_removes_statement():
    sf = SourceFile("declare const __propDef: {};\nexport {};\n")
    sf.remove_variable_declaration(sf.get_variable_declaration("__propDef"))
    assert sf.text == "export {};\n"


def test_apply_edits_batch_and_reparse():
    sf = SourceFile("type A = string;\ntype B = number;\n")
    a, b = sf.get_type_aliases()
    count = sf.apply_edits(
        [
            sf.replace_edit(a, "type A = boolean;"),
            sf.replace_edit(b, "type B = bigint;"),
        ]
    )
    assert count == 2
    assert sf.text == "type A = boolean;\ntype B = bigint;\n"
    # tree reflects the new text
    assert get_node_text(sf.get_type_aliases()[1]) == "type B = bigint;"


def test_apply_edits_rejects_overlap():
    sf = SourceFile("type A = string;\n")
    with pytest.raises(ValueError):
        sf.apply_edits([TextEdit(0, 10, "x"), TextEdit(5, 12, "y")])
    assert sf.text == "type A = string;\n"


def test_apply_edits_empty_is_noop():
    sf = SourceFile("type A = string;\n")
    assert sf.apply_edits([]) == 0
    assert sf.text == "type A = string;\n"


def test_append_statement_adds_missing_newline():
    sf = SourceFile("declare class A {}")
    sf.append_statement("export default A;")
    assert sf.text == "declare class A {}\nexport default A;\n"
    assert sum(1 for s in sf.statements() if is_default_export(s)) == 1


def test_insert_after_statement():
    sf = SourceFile("declare class A {}\nexport {};\n")
    sf.insert_after_statement(
        sf.top_level_statement(sf.get_class("A")), "declare namespace A {}"
    )
    assert sf.text == "declare class A {}\ndeclare namespace A {}\nexport {};\n"


def test_full_text_includes_leading_trivia():
    sf = SourceFile("type P = {\n    /** a */\n    a: string;\n    b: number;\n};\n")
    value = sf.get_type_declaration("P").child_by_field_name("value")
    first, second = [c for c in value.named_children if c.type == "property_signature"]
    assert sf.full_text(first) == "\n    /** a */\n    a: string"
    assert sf.full_text(second) == "\n    b: number"


def test_snapshot_restore(tmp_path: Path):
    target = tmp_path / "a.d.ts"
    target.write_text("type A = string;\n", encoding="utf-8")
    sf = SourceFile.from_path(target)
    snap = sf.snapshot()

    sf.remove_statement(sf.get_type_aliases()[0])
    assert sf.text == ""
    sf.restore(snap)
    assert sf.text == "type A = string;\n"
    assert len(sf.get_type_aliases()) == 1

    sf.append_statement("export {};")
    sf.save()
    assert target.read_text(encoding="utf-8") == "type A = string;\nexport {};\n"


def test_save_without_path_fails():
    with pytest.raises(ValueError):
        SourceFile("export {};\n").save()


def test_replace_node_text():
    sf = SourceFile("declare const __propDef: { props: {} };\n")
    declarator = sf.get_variable_declaration("__propDef").declarator
    sf.replace_node_text(declarator.child_by_field_name("name"), "__renamed")
    assert sf.text == "declare const __renamed: { props: {} };\n"
    assert sf.get_variable_declaration("__renamed") is not None
