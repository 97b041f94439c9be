"""Normalization helpers for policy matching."""

import re

_ABSOLUTE_PATH = re.compile(r"^([a-zA-Z]:[\\/]|/)")


def fold(value: str) -> str:
    """Lowercase and unify separators without trimming.

    Catalog entries go through this so that significant whitespace
    (``"rm "``) survives while ``"\\.ssh\\"`` and ``"/.ssh/"`` compare equal.
    """
    return value.replace("\\", "/").lower()


def normalize(value: str) -> str:
    """Trim, unify separators and lowercase.

    Used identically for commands and paths, so neither separator style
    nor case can be used to step around a rule.
    """
    return fold(value.strip())


def is_absolute_path(path: str) -> bool:
    """True for ``/...``, ``C:\\...`` and ``C:/...`` (after trimming)."""
    return _ABSOLUTE_PATH.match(path.strip()) is not None


def has_traversal_segment(normalized_path: str) -> bool:
    """Detect ``..`` segments in an already-normalized path."""
    return (
        "/../" in normalized_path
        or normalized_path.endswith("/..")
        or normalized_path.startswith("../")
    )
