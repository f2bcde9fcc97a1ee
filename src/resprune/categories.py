"""Table-driven resource categories and reference token construction."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

INLINE = "inline"
FILE = "file"

MARKUP_ID_PREFIX = "@id/"
CODE_ID_PREFIX = "R.id."
VIEW_BINDING_SUFFIX = "Binding"


class Dialect(enum.Enum):
    """File dialect that decides how reference tokens are spelled."""

    MARKUP = "markup"
    CODE = "code"


def code_name(name: str) -> str:
    """Return the identifier form of a dotted resource name (`A.B` -> `A_B`)."""
    return name.replace(".", "_")


def view_binding_name(layout: str) -> str:
    """Return the generated binding type name (`fragment_main` -> `FragmentMainBinding`)."""
    segments = [segment for segment in layout.split("_") if segment]
    joined = "".join(segment[:1].upper() + segment[1:] for segment in segments)
    return f"{joined}{VIEW_BINDING_SUFFIX}"


def _layout_code_tokens(name: str) -> tuple[str, ...]:
    return (view_binding_name(name),)


def style_parent_reference(line: str, name: str) -> bool:
    """Return True when a markup line inherits from style `name`."""
    if f'parent="@style/{name}"' in line:
        return True
    if f'parent="{name}"' in line:
        return True
    return f'"{name}.' in line


@dataclass(slots=True, frozen=True)
class ResourceCategory:
    """Declaration and reference conventions for one resource kind."""

    key: str
    reference_type: str
    directory_prefix: str
    kind: str
    extra_code_tokens: Callable[[str], tuple[str, ...]] | None = None
    markup_alias: Callable[[str, str], bool] | None = None
    markup_alias_anchor: str | None = None

    @property
    def is_inline(self) -> bool:
        return self.kind == INLINE

    @property
    def opening_tag(self) -> str:
        return f'<{self.key} name="'

    @property
    def closing_tag(self) -> str:
        return f"</{self.key}>"

    def tokens(self, name: str, dialect: Dialect) -> tuple[str, ...]:
        """Return every boundary-checked token that references `name` in `dialect`."""
        if dialect is Dialect.MARKUP:
            return (f"@{self.reference_type}/{name}", f"{MARKUP_ID_PREFIX}{name}")
        converted = code_name(name)
        tokens = (f"R.{self.reference_type}.{converted}", f"{CODE_ID_PREFIX}{converted}")
        if self.extra_code_tokens is not None:
            tokens += self.extra_code_tokens(name)
        return tokens

    def anchors(self, dialect: Dialect) -> tuple[str, ...]:
        """Return substrings that any reference of this category must contain.

        A line containing none of them cannot reference the category, which lets the
        scanner skip the per-name loop.
        """
        if dialect is Dialect.MARKUP:
            anchors = (f"@{self.reference_type}/", MARKUP_ID_PREFIX)
            if self.markup_alias_anchor is not None:
                anchors += (self.markup_alias_anchor,)
            return anchors
        anchors = (f"R.{self.reference_type}.", CODE_ID_PREFIX)
        if self.extra_code_tokens is not None:
            anchors += (VIEW_BINDING_SUFFIX,)
        return anchors


STRING = ResourceCategory("string", "string", "values", INLINE)
DIMEN = ResourceCategory("dimen", "dimen", "values", INLINE)
COLOR = ResourceCategory("color", "color", "values", INLINE)
STRING_ARRAY = ResourceCategory("string-array", "array", "values", INLINE)
STYLE = ResourceCategory(
    "style",
    "style",
    "values",
    INLINE,
    markup_alias=style_parent_reference,
    markup_alias_anchor='"',
)
LAYOUT = ResourceCategory(
    "layout", "layout", "layout", FILE, extra_code_tokens=_layout_code_tokens
)
DRAWABLE = ResourceCategory("drawable", "drawable", "drawable", FILE)

CATEGORIES: tuple[ResourceCategory, ...] = (
    STRING,
    DIMEN,
    COLOR,
    STRING_ARRAY,
    STYLE,
    LAYOUT,
    DRAWABLE,
)
INLINE_CATEGORIES = tuple(category for category in CATEGORIES if category.is_inline)
_BY_KEY = {category.key: category for category in CATEGORIES}


def category_by_key(key: str) -> ResourceCategory:
    """Return the category registered under `key`."""
    try:
        return _BY_KEY[key]
    except KeyError:
        raise LookupError(f"Unknown resource category: {key}") from None
