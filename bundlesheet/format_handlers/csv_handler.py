#!/usr/bin/env python3
"""
CSV format handler.

Plain text alternative to the XLSX workbook with the same column layout,
convenient for review in pull requests. CSV cannot distinguish a blank cell
from an empty string, both read back as "no value".
"""

import csv
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from ..errors import FormatError
from .base import TabularHandler

logger = logging.getLogger(__name__)

CSV_ENCODING = "utf-8-sig"


class CsvHandler(TabularHandler):
    """Handler for comma separated .csv files (UTF-8, RFC 4180 quoting)."""

    @property
    def name(self) -> str:
        return "csv"

    @property
    def file_extensions(self) -> list[str]:
        return ["csv"]

    def read_rows(self, path: Path) -> Iterable[Sequence[Any]]:
        try:
            with open(path, encoding=CSV_ENCODING, newline="") as f:
                return [
                    [cell if cell != "" else None for cell in row]
                    for row in csv.reader(f)
                ]
        except (UnicodeDecodeError, csv.Error) as e:
            raise FormatError(f"Invalid CSV: {e}", path=path) from e

    def write_rows(
        self,
        path: Path,
        rows: list[list[Optional[str]]],
        timestamp: Optional[datetime] = None,
    ) -> None:
        # rendered completely before the target is opened
        buffer = io.StringIO(newline="")
        writer = csv.writer(buffer, lineterminator="\n")
        for row in rows:
            writer.writerow(["" if cell is None else cell for cell in row])
        try:
            data = buffer.getvalue().encode(CSV_ENCODING)
        except UnicodeEncodeError as e:
            raise FormatError(f"Cannot encode CSV as {CSV_ENCODING}: {e}", path=path) from e

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Wrote %d rows to %s", max(len(rows) - 1, 0), path)
