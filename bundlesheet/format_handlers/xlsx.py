#!/usr/bin/env python3
"""
XLSX format handler.

Reads and writes the consolidated translation sheet as an Excel workbook
using openpyxl. Written workbooks are byte-for-byte reproducible: the
document properties and the zip member timestamps are taken from the
timestamp passed by the caller instead of the wall clock.
"""

import io
import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.writer.excel import ExcelWriter

from ..errors import FormatError
from .base import FIXED_COLUMNS, TabularHandler

logger = logging.getLogger(__name__)

SHEET_TITLE = "i18n"
KEY_COLUMN_WIDTH = 40
LANGUAGE_COLUMN_WIDTH = 50

# earliest date a zip archive can represent
ZIP_EPOCH = datetime(1980, 1, 1)


class XlsxHandler(TabularHandler):
    """
    Handler for Excel .xlsx workbooks.

    Uses the sheet named "i18n" if present, the active sheet otherwise.
    """

    @property
    def name(self) -> str:
        return "xlsx"

    @property
    def file_extensions(self) -> list[str]:
        return ["xlsx"]

    def read_rows(self, path: Path) -> Iterable[Sequence[Any]]:
        try:
            workbook = load_workbook(str(path), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
            raise FormatError(f"Not a valid XLSX workbook: {e}", path=path) from e

        try:
            if SHEET_TITLE in workbook.sheetnames:
                sheet = workbook[SHEET_TITLE]
            else:
                sheet = workbook.active
            rows = [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()
        return rows

    def write_rows(
        self,
        path: Path,
        rows: list[list[Optional[str]]],
        timestamp: Optional[datetime] = None,
    ) -> None:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE

        for row in rows:
            sheet.append(row)

        for cell in sheet[1]:
            cell.font = Font(bold=True)
        sheet.freeze_panes = f"{get_column_letter(FIXED_COLUMNS + 1)}2"

        for row in sheet.iter_rows(min_row=2):
            for cell in row:
                # text like "=total" must stay text, not become a formula
                if cell.data_type == "f":
                    cell.data_type = "s"
                if cell.column > FIXED_COLUMNS:
                    cell.alignment = Alignment(wrap_text=True, vertical="top")

        width = len(rows[0]) if rows else 0
        for column in range(1, width + 1):
            letter = get_column_letter(column)
            if column <= FIXED_COLUMNS:
                sheet.column_dimensions[letter].width = KEY_COLUMN_WIDTH
            else:
                sheet.column_dimensions[letter].width = LANGUAGE_COLUMN_WIDTH

        self._save(workbook, path, timestamp or datetime.now().replace(microsecond=0))
        logger.debug("Wrote %d rows to %s", max(len(rows) - 1, 0), path)

    def _save(self, workbook: Workbook, path: Path, timestamp: datetime) -> None:
        """
        Save the workbook with fixed timestamps.

        The workbook is rendered completely in memory before the target
        file is opened.
        """
        timestamp = max(timestamp, ZIP_EPOCH)
        workbook.properties.created = timestamp
        workbook.properties.modified = timestamp

        rendered = io.BytesIO()
        ExcelWriter(workbook, zipfile.ZipFile(rendered, "w", zipfile.ZIP_DEFLATED, allowZip64=True)).save()

        normalized = io.BytesIO()
        date_time = timestamp.timetuple()[:6]
        with zipfile.ZipFile(rendered) as source, \
                zipfile.ZipFile(normalized, "w", zipfile.ZIP_DEFLATED, allowZip64=True) as target:
            for info in source.infolist():
                member = zipfile.ZipInfo(info.filename, date_time=date_time)
                member.compress_type = zipfile.ZIP_DEFLATED
                member.external_attr = 0o600 << 16
                target.writestr(member, source.read(info.filename))

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(normalized.getvalue())
