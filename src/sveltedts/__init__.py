from sveltedts.models import (
    AliasKind,
    FailureKind,
    JSDocResults,
    PostprocessError,
    PostprocessFailure,
    PostprocessResult,
    PostprocessSuccess,
)
from sveltedts.postprocess import process
from sveltedts.settings import PostprocessSettings, TypeArgumentPolicy, load_settings
from sveltedts.source_file import SourceFile, TextEdit

__all__ = [
    "AliasKind",
    "FailureKind",
    "JSDocResults",
    "PostprocessError",
    "PostprocessFailure",
    "PostprocessResult",
    "PostprocessSettings",
    "PostprocessSuccess",
    "SourceFile",
    "TextEdit",
    "TypeArgumentPolicy",
    "load_settings",
    "process",
]
