"""
Doc comment templates used by the post-processor and the helpers that turn a
description into a JSDoc block.
"""

from typing import List

from sveltedts.models import AliasKind


def alias_description(kind: AliasKind, class_name: str) -> str:
    return f"{kind.value} type alias for {{@link {class_name}}}."


def namespace_description(class_name: str) -> str:
    return f"Event / Prop / Slot type aliases for {{@link {class_name}}}."


def is_jsdoc_block(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith("/**") and stripped.endswith("*/")


def render_jsdoc(description: str, indent: str = "") -> str:
    """
    Render *description* as a JSDoc block, one ` * ` line per description line.
    Text that already is a `/** ... */` block is kept, only re-indented.
    Returned text has no trailing newline.
    """
    out: List[str] = []
    if is_jsdoc_block(description):
        for i, ln in enumerate(description.strip().splitlines()):
            ln = ln.strip()
            if i and ln.startswith("*"):
                ln = " " + ln
            out.append(f"{indent}{ln}")
        return "\n".join(out)

    out.append(f"{indent}/**")
    for ln in description.strip("\n").splitlines() or [""]:
        ln = ln.rstrip()
        out.append(f"{indent} * {ln}" if ln else f"{indent} *")
    out.append(f"{indent} */")
    return "\n".join(out)
