#!/usr/bin/env python3
"""
Mapping between resource bundle files on disk and (bundle basename, language).

A bundle file is named `<basename>[_<lang>].properties`, where `<basename>`
may contain directories relative to the properties root and `<lang>` is a
Java style locale suffix such as `de`, `en_US` or `es_419`.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from .errors import PreconditionError
from .model import Language

logger = logging.getLogger(__name__)

PROPERTIES_EXTENSION = ".properties"
DEFAULT_INCLUDES = ("**/*.properties",)

# language[_Script][_COUNTRY|_region[_variant]], e.g. de, fil, zh_Hant_TW, es_419
LANGUAGE_PATTERN = (
    r"[a-z]{2,3}(?:_[A-Z][a-z]{3})?(?:_(?:[A-Z]{2}|\d{3})(?:_[A-Za-z0-9]+)?)?"
)
_LANGUAGE_RE = re.compile(rf"^{LANGUAGE_PATTERN}$")
_BUNDLE_STEM_RE = re.compile(rf"^(?P<basename>.+?)_(?P<lang>{LANGUAGE_PATTERN})$")


def is_language_code(value: str) -> bool:
    return bool(_LANGUAGE_RE.match(value))


def file_for_bundle(
    root: Union[str, Path],
    bundle_basename: str,
    language: Language,
) -> Path:
    """
    Return `<root>/<basename>[_<lang>].properties`.

    No suffix is appended for the default language. Basenames that already
    end in a locale suffix are rejected, otherwise `messages_de` (default)
    and `messages` (de) would resolve to the same file. The result always
    lies below `root`: absolute basenames and `..` segments are rejected.
    """
    if root is None:
        raise PreconditionError("root directory is required")
    if not bundle_basename:
        raise PreconditionError("bundle basename must not be empty")
    if _BUNDLE_STEM_RE.match(Path(bundle_basename).name):
        raise PreconditionError(
            f"bundle basename '{bundle_basename}' ends in a locale suffix"
        )
    if not language.is_default and not is_language_code(language.lang):
        raise PreconditionError(f"invalid language code: '{language.lang}'")

    if Path(bundle_basename).is_absolute() or ".." in Path(bundle_basename).parts:
        raise PreconditionError(
            f"bundle basename '{bundle_basename}' must be a path relative to the root"
        )

    name = bundle_basename
    if not language.is_default:
        name += f"_{language.lang}"
    path = Path(root) / f"{name}{PROPERTIES_EXTENSION}"
    try:
        path.resolve().relative_to(Path(root).resolve())
    except ValueError:
        raise PreconditionError(
            f"bundle basename '{bundle_basename}' resolves outside of {root}"
        ) from None
    return path


def split_bundle_file(root: Union[str, Path], path: Union[str, Path]) -> tuple[str, Language]:
    """
    Derive (bundle basename, language) from a file below `root`.

    The basename is the posix path relative to root, without the extension
    and the locale suffix.
    """
    root = Path(root)
    path = Path(path)
    try:
        relative = path.resolve().relative_to(root.resolve())
    except ValueError:
        raise PreconditionError(f"{path} is not located below {root}") from None

    stem = relative.stem
    match = _BUNDLE_STEM_RE.match(stem)
    if match:
        stem, lang = match.group("basename"), match.group("lang")
    else:
        lang = ""

    basename = (relative.parent / stem).as_posix()
    return basename, Language(lang)


def to_bundle_files_map(
    root: Union[str, Path],
    files: Iterable[Union[str, Path]],
) -> dict[str, dict[Language, Path]]:
    """Group files by bundle basename and language, sorted by both."""
    grouped: dict[str, dict[Language, Path]] = {}
    for file in files:
        basename, language = split_bundle_file(root, file)
        languages = grouped.setdefault(basename, {})
        if language in languages:
            raise PreconditionError(
                f"Duplicate file for bundle '{basename}' and language '{language}': "
                f"{languages[language]} and {file}"
            )
        languages[language] = Path(file)

    return {
        basename: dict(sorted(grouped[basename].items()))
        for basename in sorted(grouped)
    }


def find_property_files(
    root: Union[str, Path],
    includes: Optional[Sequence[str]] = None,
    excludes: Optional[Sequence[str]] = None,
) -> list[Path]:
    """
    Find the files below `root` matching any include glob and no exclude glob.

    Patterns are relative to root. Returns a sorted list.
    """
    root = Path(root)
    if not root.is_dir():
        raise PreconditionError(f"properties root is not a directory: {root}")

    includes = list(includes) if includes else list(DEFAULT_INCLUDES)
    excludes = list(excludes or [])

    excluded = set()
    for pattern in excludes:
        excluded.update(p for p in root.glob(pattern) if p.is_file())

    found = set()
    for pattern in includes:
        found.update(p for p in root.glob(pattern) if p.is_file())

    result = sorted(found - excluded)
    logger.debug("Found %d files below %s (%d excluded)", len(result), root, len(found & excluded))
    return result
