from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class FailureKind(str, Enum):
    MISSING_DEFAULT_EXPORT = "missing_default_export"
    DEFAULT_EXPORT_NOT_CLASS = "default_export_not_class"
    MISSING_HERITAGE_CLAUSE = "missing_heritage_clause"
    TYPE_ARGUMENT_MISMATCH = "type_argument_mismatch"
    MISSING_HELPER_VARIABLE = "missing_helper_variable"
    MISSING_HELPER_MEMBER = "missing_helper_member"


class AliasKind(str, Enum):
    # Order matters: positional type arguments of the component base type.
    PROPS = "Props"
    EVENTS = "Events"
    SLOTS = "Slots"

    @property
    def member(self) -> str:
        """Name of the matching member on the helper variable's type."""
        return self.value.lower()


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class JSDocResults(BaseModel):
    """
    Documentation recovered from the original component source. `props` maps a
    prop name to the literal comment text to place above it.
    """

    model_config = ConfigDict(populate_by_name=True)

    component_description: Optional[str] = Field(
        default=None, alias="componentDescription"
    )
    props: Dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class PostprocessSuccess(BaseModel):
    status: Literal["success"] = "success"
    class_name: str
    documented_props: int = 0  # props that received a doc comment


class PostprocessFailure(BaseModel):
    status: Literal["failure"] = "failure"
    kind: FailureKind
    node: Optional[str] = None  # short description of the offending node
    message: str
    rolled_back: bool = False


PostprocessResult = Annotated[
    Union[PostprocessSuccess, PostprocessFailure], Field(discriminator="status")
]


class PostprocessError(Exception):
    """Raised by a pipeline stage when the module does not have the expected shape."""

    def __init__(
        self, kind: FailureKind, message: str, node: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.node = node

    def to_failure(self, rolled_back: bool = False) -> PostprocessFailure:
        return PostprocessFailure(
            kind=self.kind,
            node=self.node,
            message=self.message,
            rolled_back=rolled_back,
        )
