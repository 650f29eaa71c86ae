# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Data model shared by the sanitizer pipeline."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

logger = logging.getLogger(__name__)

WhitelistMode = Literal["append", "overwrite"]

_OPTION_KEYS: dict[str, str] = {
    "maskVars": "mask_vars",
    "maskFuncs": "mask_funcs",
    "maskClasses": "mask_classes",
    "maskStrings": "mask_strings",
    "removeComments": "remove_comments",
    "whitelist": "whitelist",
    "whitelistMode": "whitelist_mode",
    "minNameLength": "min_name_length",
}
_BOOL_FIELDS: tuple[str, ...] = (
    "mask_vars",
    "mask_funcs",
    "mask_classes",
    "mask_strings",
    "remove_comments",
)


class Category(str, Enum):
    """Kind of definition driving the base masking prefix."""

    VARIABLE = "var"
    FUNCTION = "func"
    CLASS = "class"
    TYPE = "type"

    @classmethod
    def from_capture(cls, capture_name: str) -> "Category":
        """Resolve a category from a definition query capture name.

        Args:
            capture_name: Capture name such as ``def.func``.

        Returns:
            Matching category.

        Raises:
            ValueError: If the capture name carries no known category.
        """
        suffix = capture_name.rsplit(".", 1)[-1]
        for category in cls:
            if category.value == suffix:
                return category
        raise ValueError(f"Unknown definition capture: {capture_name}")


@dataclass(frozen=True)
class SourceUnit:
    """Immutable input to one sanitize call."""

    text: str
    language_id: str


@dataclass(frozen=True)
class DefinitionOccurrence:
    """Represent one defining occurrence of a name.

    Args:
        text: Defined name as spelled in source.
        category: Definition category.
        span: UTF-8 byte span of the name in source.
    """

    text: str
    category: Category
    span: tuple[int, int]


@dataclass(frozen=True)
class MappingEntry:
    """Represent one original/masked pair of a mapping table."""

    original: str
    masked: str
    category: Category | None


@dataclass(frozen=True)
class SanitizeOptions:
    """Control which definitions and literals a sanitize call masks.

    Args:
        mask_vars: Mask variable definitions.
        mask_funcs: Mask function definitions.
        mask_classes: Mask class and type definitions.
        mask_strings: Replace string literals with tags.
        remove_comments: Replace comment contents with tags.
        whitelist: Extra names exempt from masking.
        whitelist_mode: Append the whitelist to the defaults or replace them.
        min_name_length: Shortest name eligible for masking.
    """

    mask_vars: bool = True
    mask_funcs: bool = True
    mask_classes: bool = True
    mask_strings: bool = False
    remove_comments: bool = False
    whitelist: tuple[str, ...] = ()
    whitelist_mode: WhitelistMode = "append"
    min_name_length: int = 2

    def __post_init__(self) -> None:
        if self.whitelist_mode not in ("append", "overwrite"):
            raise ValueError(f"Unsupported whitelist mode: {self.whitelist_mode}")
        if self.min_name_length < 1:
            raise ValueError("min_name_length must be > 0")
        if not isinstance(self.whitelist, tuple):
            object.__setattr__(self, "whitelist", tuple(self.whitelist))

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "SanitizeOptions":
        """Build options from wire-format or snake_case keys.

        Args:
            values: Option values keyed by ``maskVars`` style or field names.

        Returns:
            Parsed options.

        Raises:
            ValueError: If a value has an invalid type or whitelist mode.
        """
        field_names = set(_OPTION_KEYS.values())
        kwargs: dict[str, object] = {}
        for key, value in values.items():
            name = _OPTION_KEYS.get(key, key)
            if name not in field_names:
                logger.warning(f"Ignoring unknown sanitize option (key={key})")
                continue
            kwargs[name] = value

        whitelist = kwargs.get("whitelist") or []
        if not isinstance(whitelist, (list, tuple)) or not all(
            isinstance(item, str) for item in whitelist
        ):
            raise ValueError("whitelist must be a list of names")
        kwargs["whitelist"] = tuple(whitelist)
        for name in _BOOL_FIELDS:
            if name in kwargs and not isinstance(kwargs[name], bool):
                raise ValueError(f"{name} must be a boolean")
        min_length = kwargs.get("min_name_length", 2)
        if isinstance(min_length, bool) or not isinstance(min_length, int):
            raise ValueError("min_name_length must be an integer")
        return cls(**kwargs)  # type: ignore[arg-type]

    def masks(self, category: Category) -> bool:
        """Check whether definitions of a category are masked."""
        if category is Category.VARIABLE:
            return self.mask_vars
        if category is Category.FUNCTION:
            return self.mask_funcs
        return self.mask_classes


@dataclass(frozen=True)
class SanitizeResult:
    """Store sanitized text, its mapping and pass counters.

    Args:
        sanitized: Rewritten source text.
        mapping: Masked token or tag to original text.
        language_id: Language the source was parsed as.
        identifiers_renamed: Count of identifier occurrences replaced.
        strings_masked: Count of string literals replaced by tags.
        comments_masked: Count of comments replaced by tags.
        skipped_reason: Reason the call returned the input unchanged, if it did.
    """

    sanitized: str
    mapping: dict[str, str] = field(default_factory=dict)
    language_id: str = ""
    identifiers_renamed: int = 0
    strings_masked: int = 0
    comments_masked: int = 0
    skipped_reason: str | None = None
