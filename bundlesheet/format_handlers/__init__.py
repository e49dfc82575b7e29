#!/usr/bin/env python3
"""
Format handlers for resource bundle and tabular files.

Key/value files:
- properties: Java .properties resource bundle files

Tabular formats:
- xlsx: Excel workbooks
- csv: comma separated values
"""

from .base import (
    TabularHandler,
    TabularRegistry,
    BUNDLE_HEADER,
    KEY_HEADER,
)
from .properties import (
    MissingKeyAction,
    PropertyFile,
    WriteOptions,
    resolve_encoding,
)
from .csv_handler import CsvHandler
from .xlsx import XlsxHandler

# Register handlers (order matters for extension conflicts)
TabularRegistry.register(XlsxHandler)
TabularRegistry.register(CsvHandler)

__all__ = [
    'TabularHandler',
    'TabularRegistry',
    'BUNDLE_HEADER',
    'KEY_HEADER',
    'MissingKeyAction',
    'PropertyFile',
    'WriteOptions',
    'resolve_encoding',
    'CsvHandler',
    'XlsxHandler',
]
