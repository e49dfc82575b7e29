"""
bundlesheet - Resource bundle <-> spreadsheet converter

Exports the translations of Java style .properties resource bundles into a
single spreadsheet (one row per key, one column per language) and imports
the edited spreadsheet back into the bundle files.

Quick start:
    bundlesheet export-xls --root src/main/resources --xls-file i18n.xlsx
    # translators edit i18n.xlsx
    bundlesheet import-xls --root src/main/resources --xls-file i18n.xlsx
"""

__version__ = "1.0.0"

from .errors import BundleSheetError, FormatError, PreconditionError
from .exporter import export_xls
from .importer import import_xls
from .model import BundleContent, BundleKey, Language, Translation

__all__ = [
    "BundleContent",
    "BundleKey",
    "BundleSheetError",
    "FormatError",
    "Language",
    "PreconditionError",
    "Translation",
    "export_xls",
    "import_xls",
]
