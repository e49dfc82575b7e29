#!/usr/bin/env python3
"""
Import of a tabular file into resource bundle files.

The rows are distributed into one buffer per target file, grouped by
bundle basename and language. Only after every row has been processed are
the buffers written, and only those that received at least one entry.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .errors import FormatError, PreconditionError
from .format_handlers import (
    MissingKeyAction,
    PropertyFile,
    TabularRegistry,
    WriteOptions,
    resolve_encoding,
)
from .model import Language, Translation
from .resource_bundles import file_for_bundle

logger = logging.getLogger(__name__)


@dataclass
class BundleFileBuffer:
    """
    Entries collected for one bundle file before they are written.

    Attributes:
        path: Target .properties file
        existing: Current content of the file on disk (empty if it does not exist)
        content: Entries taken from the tabular source
    """
    path: Path
    existing: PropertyFile
    content: PropertyFile = field(default_factory=PropertyFile)

    @classmethod
    def open(cls, path: Path, encoding: str) -> "BundleFileBuffer":
        if path.exists():
            existing = PropertyFile.from_file(path, encoding)
        else:
            existing = PropertyFile()
        return cls(path=path, existing=existing)

    def contains_key(self, key: str) -> bool:
        return self.existing.contains_key(key) or self.content.contains_key(key)

    def set_value(self, key: str, translation: Translation) -> bool:
        """
        Take over the value of a translation.

        Empty values are only set for keys that already exist. A key that
        never existed is not created just to hold an empty value.

        Returns:
            True if the value was set
        """
        if not translation.is_empty or self.contains_key(key):
            self.content.set_value(key, translation.value)
            return True
        return False

    def is_empty(self) -> bool:
        return self.content.properties_size() == 0

    def save(self, options: WriteOptions) -> None:
        self.existing.update(self.content, options.missing_key_action)
        self.existing.write_to(self.path, options.encoding)


def import_xls(
    root: Union[str, Path],
    source_path: Union[str, Path],
    encoding: Optional[str] = None,
    missing_key_action: Union[str, MissingKeyAction, None] = MissingKeyAction.NOTHING,
) -> dict:
    """
    Import a tabular file into resource bundle files below `root`.

    Args:
        root: Properties root directory to write the files to
        source_path: Tabular file to read (.xlsx or .csv)
        encoding: Encoding of the .properties files (UTF-8 if None)
        missing_key_action: What to do with keys that are in a file but
            not in the tabular source

    Returns:
        Summary dict with written and skipped files
    """
    if root is None:
        raise PreconditionError("root directory is required")
    if source_path is None:
        raise PreconditionError("source file is required")

    encoding = resolve_encoding(encoding)
    options = WriteOptions(
        encoding=encoding,
        missing_key_action=MissingKeyAction.from_string(missing_key_action or MissingKeyAction.NOTHING),
    )
    root = Path(root)
    source_path = Path(source_path)
    handler = TabularRegistry.detect_format(str(source_path))

    # read everything before any file is touched
    rows = handler.read(source_path)
    logger.info("Importing %d keys from %s into %s", len(rows), source_path, root)

    buffers: dict[str, dict[Language, BundleFileBuffer]] = {}
    for bundle_key, translations in rows.items():
        languages = buffers.setdefault(bundle_key.bundle_basename, {})
        for translation in translations:
            if translation.lang not in languages:
                try:
                    path = file_for_bundle(root, bundle_key.bundle_basename, translation.lang)
                except PreconditionError as e:
                    raise FormatError(f"Invalid row '{bundle_key}': {e}", path=source_path) from e
                languages[translation.lang] = BundleFileBuffer.open(path, encoding)
            languages[translation.lang].set_value(bundle_key.key, translation)

    written = []
    skipped = []
    for languages in buffers.values():
        for buffer in languages.values():
            # no file for bundle/language combinations without any entries
            if buffer.is_empty():
                logger.debug("Skipping %s, no entries to write", buffer.path)
                skipped.append(str(buffer.path))
                continue
            buffer.save(options)
            written.append(str(buffer.path))

    logger.info("Wrote %d files, skipped %d without entries", len(written), len(skipped))
    return {
        "source": str(source_path),
        "keys": len(rows),
        "written": written,
        "skipped": skipped,
        "missing_key_action": options.missing_key_action.value,
    }
