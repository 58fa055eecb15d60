import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from sveltedts.logger import logger
from sveltedts.models import JSDocResults, PostprocessFailure
from sveltedts.postprocess import process
from sveltedts.settings import TypeArgumentPolicy, load_settings
from sveltedts.source_file import SourceFile

COMMENTS_SUFFIX = ".comments.json"


def _setup_logging(debug: bool) -> None:
    # Ensure stdlib logger emits records so structlog output is visible
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        # structlog renders the final message; keep stdlib formatter simple.
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    else:
        for handler in root.handlers:
            handler.setLevel(level)


def load_comments(
    path: Path, explicit: Optional[Path] = None
) -> Optional[JSDocResults]:
    """
    Load the doc comments for the declaration file *path*: *explicit* when given,
    otherwise a sibling `<file>.comments.json` if one exists.
    """
    source = explicit or path.with_name(path.name + COMMENTS_SUFFIX)
    if explicit is None and not source.is_file():
        return None
    try:
        return JSDocResults.model_validate_json(source.read_text(encoding="utf-8"))
    except ValidationError as ex:
        raise click.ClickException(f"Invalid comments file {source}: {ex}") from ex


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option(
    "--comments",
    "comments_path",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
    default=None,
    help="JSON file with `componentDescription` and `props` doc comments (single file only).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the result here instead of stdout (single file only).",
)
@click.option(
    "--in-place", is_flag=True, default=False, help="Overwrite the input files."
)
@click.option(
    "--helper-variable",
    type=str,
    default=None,
    help="Name of the synthetic helper variable (default: __propDef).",
)
@click.option(
    "--type-argument-policy",
    type=click.Choice([p.value for p in TypeArgumentPolicy]),
    default=None,
    help="What to do when the base type does not have exactly 3 type arguments.",
)
@click.option(
    "--rollback/--no-rollback",
    default=None,
    help="Restore a file's original text when processing fails.",
)
@click.option(
    "--fail-fast", is_flag=True, default=False, help="Stop at the first failed file."
)
@click.option("--debug/--no-debug", default=False, help="Enable debug logging.")
def main(
    files: Tuple[Path, ...],
    comments_path: Optional[Path],
    output: Optional[Path],
    in_place: bool,
    helper_variable: Optional[str],
    type_argument_policy: Optional[str],
    rollback: Optional[bool],
    fail_fast: bool,
    debug: bool,
) -> None:
    """
    Restructure component declaration files into a class plus a namespace of
    Props / Events / Slots type aliases.
    """
    _setup_logging(debug)

    if output is not None and in_place:
        raise click.UsageError("--output and --in-place are mutually exclusive")
    if len(files) > 1:
        if not in_place:
            raise click.UsageError("Multiple files require --in-place")
        if comments_path is not None:
            raise click.UsageError("--comments can only be used with a single file")

    overrides = {
        "helper_variable": helper_variable,
        "type_argument_policy": type_argument_policy,
        "rollback_on_failure": rollback,
    }
    settings = load_settings(**{k: v for k, v in overrides.items() if v is not None})

    failed = 0
    for path in files:
        comments = load_comments(path, comments_path)
        sf = SourceFile.from_path(path)
        result = process(comments, logger, sf, settings)

        if isinstance(result, PostprocessFailure):
            failed += 1
            click.echo(f"{path}: {result.kind.value}: {result.message}", err=True)
            if fail_fast:
                break
            continue

        if in_place:
            sf.save()
        elif output is not None:
            sf.save(output)
        else:
            click.echo(sf.text, nl=False)

    raise SystemExit(1 if failed else 0)


if __name__ == "__main__":
    main()
