#!/usr/bin/env python3
"""
Error types raised by bundlesheet.

File system failures are not wrapped: they surface as the builtin OSError
(IOError) raised by the failing call.
"""

from pathlib import Path
from typing import Optional, Union


class BundleSheetError(Exception):
    """Base class for all bundlesheet specific errors."""


class PreconditionError(BundleSheetError, ValueError):
    """A required argument is missing or invalid. Raised before any I/O."""


class FormatError(BundleSheetError, ValueError):
    """
    Malformed key/value file or tabular content.

    Attributes:
        path: File the problem was found in
        line: 1-based line number in a .properties file, if known
        row: 1-based row number in a tabular file, if known
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        line: Optional[int] = None,
        row: Optional[int] = None,
    ):
        self.path = str(path) if path is not None else None
        self.line = line
        self.row = row

        location = ""
        if self.path:
            location = self.path
            if line is not None:
                location += f":{line}"
            elif row is not None:
                location += f" (row {row})"
            location += ": "
        super().__init__(f"{location}{message}")
