"""Data models for extracted Rust code elements."""

from __future__ import annotations

import hashlib
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOCATION_SEPARATOR = " :: "
ROOT_LOCATION = "crate"


class ItemKind(str, Enum):
    """Kinds of Rust items.

    Declaration order matters: it is the kind component of the
    ``CodeElementID`` total order.
    """

    ALL = "all"
    CONST = "const"
    ENUM = "enum"
    EXTERN_CRATE = "extern_crate"
    FN = "fn"
    FOREIGN_MOD = "foreign_mod"
    IMPL = "impl"
    MACRO = "macro"
    MOD = "mod"
    STATIC = "static"
    STRUCT = "struct"
    TRAIT = "trait"
    TRAIT_ALIAS = "trait_alias"
    TYPE = "type"
    UNION = "union"
    USE = "use"
    VERBATIM = "verbatim"

    def __str__(self) -> str:
        return self.value

    @property
    def order(self) -> int:
        return _KIND_ORDER[self]

    @classmethod
    def parse(cls, text: str) -> ItemKind:
        """Parse a kind name, tolerating case and missing underscores."""
        key = text.strip().lower().replace("_", "")
        for kind in cls:
            if kind.value.replace("_", "") == key:
                return kind
        raise ValueError(f"Unknown item kind: '{text}'")


_KIND_ORDER = {kind: i for i, kind in enumerate(ItemKind)}

# Pure containers: never recorded as implementors of anything
CONTAINER_KINDS = frozenset({ItemKind.IMPL, ItemKind.MOD, ItemKind.VERBATIM})


def join_location(*parts: str) -> str:
    """Join location segments, ignoring empty ones."""
    return LOCATION_SEPARATOR.join(p for p in parts if p)


class CodeElementID(BaseModel):
    """Identity of a code element: (ident, kind, location)."""

    model_config = ConfigDict(frozen=True)

    ident: str
    kind: ItemKind
    location: str

    @property
    def sort_key(self) -> tuple[str, int, str]:
        return (self.ident, self.kind.order, self.location)

    def __lt__(self, other: CodeElementID) -> bool:
        return self.sort_key < other.sort_key

    @property
    def qualified_path(self) -> str:
        return join_location(self.location, self.ident)

    def get_hash(self) -> int:
        """Stable unsigned 64-bit key of the identity triple."""
        raw = "\x1f".join((self.ident, self.kind.value, self.location))
        digest = hashlib.sha256(raw.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big")

    def __str__(self) -> str:
        return f"{self.kind.value} {self.qualified_path}"


class CodeElement(BaseModel):
    """One extracted declaration with its source text and graph edges."""

    code_element_id: CodeElementID
    code: str
    line_start: list[int] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    children: list[CodeElementID] = Field(default_factory=list)
    dependencies: list[CodeElementID] = Field(default_factory=list)
    implementors: list[CodeElementID] = Field(default_factory=list)

    @property
    def ident(self) -> str:
        return self.code_element_id.ident

    @property
    def kind(self) -> ItemKind:
        return self.code_element_id.kind

    @property
    def location(self) -> str:
        return self.code_element_id.location


class CodeFile(BaseModel):
    """All elements extracted from a single Rust file.

    The last element is the synthetic module element standing for the file.
    """

    path: str
    elements: list[CodeElement] = Field(default_factory=list)


class DocumentedCodeElement(BaseModel):
    """Documentation generated by the language model for one element."""

    ident: str
    kind: str
    location: str
    general_description: str = ""
    panic_possible: bool = False
    panic_section: str = ""
    error_possible: bool = False
    error_section: str = ""
    example_section: str = ""
    has_fields_or_variants: bool = False
    fields_or_variants_descriptions: list[str] | None = None

    @field_validator(
        "panic_possible", "error_possible", "has_fields_or_variants", mode="before"
    )
    @classmethod
    def _bool_from_str(cls, value: object) -> object:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
            raise ValueError(f"expected true or false, got '{value}'")
        return value

    @field_validator("kind", mode="after")
    @classmethod
    def _lower_kind(cls, value: str) -> str:
        try:
            return ItemKind.parse(value).value
        except ValueError:
            return value.lower()

    @field_validator("location", mode="after")
    @classmethod
    def _normalize_location(cls, value: str) -> str:
        compact = "".join(value.split())
        return compact.replace("::", LOCATION_SEPARATOR)

    @field_validator("fields_or_variants_descriptions", mode="before")
    @classmethod
    def _descriptions_list(cls, value: object) -> object:
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value

    def matches(self, element_id: CodeElementID) -> bool:
        return (
            self.ident == element_id.ident
            and self.kind == element_id.kind.value
            and self.location == element_id.location
        )


class UserQuestionResponse(BaseModel):
    """Answer to a question about the repository."""

    response: str
    suggested_questions: list[str] = Field(default_factory=list)


# Language detection by file extension
EXTENSION_LANGUAGE_MAP: dict[str, str] = {
    ".rs": "rust",
}


def detect_language(file_path: str) -> str | None:
    """Detect programming language from file extension."""
    from pathlib import Path

    ext = Path(file_path).suffix.lower()
    return EXTENSION_LANGUAGE_MAP.get(ext)
