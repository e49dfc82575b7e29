#!/usr/bin/env python3
"""
Base classes for tabular format handlers.

TabularHandler is the abstract base class that all spreadsheet-like handlers
must implement. The layout is shared by every format:

    Bundle | Key | <default> | de | en_US | ...

One row per BundleKey, one column per language.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from ..errors import FormatError, PreconditionError
from ..model import BundleContent, BundleKey, Language, Translation

logger = logging.getLogger(__name__)

BUNDLE_HEADER = "Bundle"
KEY_HEADER = "Key"
FIXED_COLUMNS = 2


def _cell_text(value: Any) -> Optional[str]:
    """Normalize a cell value to text. Blank cells are None."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class TabularHandler(ABC):
    """
    Abstract base class for tabular file handlers.

    Each handler reads and writes one file format (XLSX, CSV, ...). Converting
    between rows and the BundleKey model happens here, so handlers only deal
    with cells.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """List of file extensions this handler supports (without dot)."""
        pass

    @abstractmethod
    def read_rows(self, path: Path) -> Iterable[Sequence[Any]]:
        """
        Read all rows of the file, header included.

        Args:
            path: File to read

        Returns:
            Rows as sequences of cell values (None for blank cells)
        """
        pass

    @abstractmethod
    def write_rows(
        self,
        path: Path,
        rows: list[list[Optional[str]]],
        timestamp: Optional[datetime] = None,
    ) -> None:
        """
        Write rows (header first) to the file, replacing it.

        Args:
            path: Target file
            rows: Header row followed by data rows
            timestamp: Modification time to record, if the format stores one
        """
        pass

    def read(self, path: Path) -> dict[BundleKey, list[Translation]]:
        """
        Read a tabular file into BundleKey -> translations.

        Every language column yields a Translation, with value None for a
        blank cell, so that the caller can tell "cleared" from "absent".
        """
        path = Path(path)
        rows = iter(self.read_rows(path))

        header = next(rows, None)
        if header is None:
            raise FormatError("File is empty, expected a header row", path=path, row=1)
        languages = self._parse_header(header, path)

        content: dict[BundleKey, list[Translation]] = {}
        first_row: dict[BundleKey, int] = {}
        for row_num, row in enumerate(rows, start=2):
            cells = [_cell_text(v) for v in row]
            if all(c is None or not c.strip() for c in cells):
                continue

            cells += [None] * (FIXED_COLUMNS - len(cells))
            bundle, key = cells[0], cells[1]
            if bundle is None or not bundle.strip():
                raise FormatError("Missing bundle name", path=path, row=row_num)
            if key is None or not key.strip():
                raise FormatError("Missing key", path=path, row=row_num)

            bundle_key = BundleKey(bundle.strip(), key)
            if bundle_key in content:
                raise FormatError(
                    f"Duplicate key '{bundle_key}' (first defined in row {first_row[bundle_key]})",
                    path=path,
                    row=row_num,
                )
            first_row[bundle_key] = row_num

            translations = []
            for index, language in languages.items():
                value = cells[index] if index < len(cells) else None
                translations.append(Translation(language, value))
            content[bundle_key] = translations

        logger.debug("Read %d keys in %d languages from %s", len(content), len(languages), path)
        return content

    def write(
        self,
        path: Path,
        content: BundleContent,
        languages: Sequence[Language],
        timestamp: Optional[datetime] = None,
    ) -> None:
        """Write BundleContent as one row per key and one column per language."""
        rows: list[list[Optional[str]]] = [
            [BUNDLE_HEADER, KEY_HEADER] + [lang.header for lang in languages]
        ]
        for bundle_key, translations in content.items():
            values = {t.lang: t.value for t in translations}
            rows.append(
                [bundle_key.bundle_basename, bundle_key.key]
                + [values.get(lang) for lang in languages]
            )
        self.write_rows(Path(path), rows, timestamp)

    def _parse_header(self, header: Sequence[Any], path: Path) -> dict[int, Language]:
        """Map column index -> Language. Columns with a blank header are ignored."""
        cells = [_cell_text(v) for v in header]
        fixed = [(c or "").strip().lower() for c in cells[:FIXED_COLUMNS]]
        if fixed != [BUNDLE_HEADER.lower(), KEY_HEADER.lower()]:
            raise FormatError(
                f"Header must start with '{BUNDLE_HEADER}' and '{KEY_HEADER}' columns",
                path=path,
                row=1,
            )

        languages: dict[int, Language] = {}
        for index, label in enumerate(cells[FIXED_COLUMNS:], start=FIXED_COLUMNS):
            if label is None or not label.strip():
                logger.debug("Ignoring column %d without header in %s", index + 1, path)
                continue
            language = Language.from_header(label)
            if language in languages.values():
                raise FormatError(f"Duplicate language column '{label}'", path=path, row=1)
            languages[index] = language
        return languages


class TabularRegistry:
    """Registry of available tabular handlers."""

    _handlers: list[type[TabularHandler]] = []
    _extension_map: dict[str, type[TabularHandler]] = {}

    @classmethod
    def register(cls, handler_class: type[TabularHandler]) -> None:
        """Register a tabular handler class."""
        cls._handlers.append(handler_class)
        for ext in handler_class().file_extensions:
            cls._extension_map[ext.lower()] = handler_class

    @classmethod
    def get_handler_for_extension(cls, extension: str) -> TabularHandler:
        """Get handler instance by file extension."""
        ext = extension.lower().lstrip('.')
        if ext not in cls._extension_map:
            available = ', '.join(cls._extension_map.keys())
            raise PreconditionError(f"Unknown extension: .{ext}. Supported: {available}")
        return cls._extension_map[ext]()

    @classmethod
    def detect_format(cls, filepath: str) -> TabularHandler:
        """Pick the handler for a file from its extension."""
        return cls.get_handler_for_extension(Path(filepath).suffix)

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats with their extensions."""
        result = []
        for handler_class in cls._handlers:
            handler = handler_class()
            result.append({
                'name': handler.name,
                'extensions': handler.file_extensions,
            })
        return result
