#!/usr/bin/env python3
"""
Export of resource bundle files into one tabular file.

All files are parsed into a BundleContent first. The tabular target is only
written once the complete model has been built, so a parse error never
leaves a partially written target behind.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import PreconditionError
from .format_handlers import PropertyFile, TabularRegistry, resolve_encoding
from .model import BundleContent, BundleKey, Language, Translation
from .resource_bundles import to_bundle_files_map

logger = logging.getLogger(__name__)


def _newest_mtime(files: Iterable[Path]) -> Optional[datetime]:
    """Modification time of the most recently changed file, in UTC."""
    mtimes = [f.stat().st_mtime for f in files]
    if not mtimes:
        return None
    return datetime.fromtimestamp(int(max(mtimes)), tz=timezone.utc).replace(tzinfo=None)


def read_bundle_content(
    bundle_files: dict[str, dict[Language, Path]],
    encoding: str,
) -> BundleContent:
    """
    Parse every bundle file into one BundleContent.

    Keys are added in the order they are first seen, bundles and languages
    are visited in the (sorted) order of `bundle_files`.
    """
    content = BundleContent()
    for bundle_basename, files in bundle_files.items():
        for language, path in files.items():
            property_file = PropertyFile.from_file(path, encoding)
            logger.debug("Read %d keys from %s", property_file.properties_size(), path)
            for key, value in property_file.to_dict().items():
                content.add(BundleKey(bundle_basename, key), Translation(language, value))
    return content


def export_xls(
    root: Union[str, Path],
    files: Iterable[Union[str, Path]],
    encoding: Optional[str],
    target_path: Union[str, Path],
) -> dict:
    """
    Export resource bundle files to a tabular file.

    Args:
        root: Properties root directory; bundle names are relative to it
        files: The files to export, already filtered by the caller
        encoding: Encoding of the files (UTF-8 if None)
        target_path: Tabular file to create or overwrite (.xlsx or .csv)

    Returns:
        Summary dict with the number of bundles, keys and languages
    """
    if root is None:
        raise PreconditionError("root directory is required")
    if files is None:
        raise PreconditionError("files to export are required")
    if target_path is None:
        raise PreconditionError("target path is required")

    encoding = resolve_encoding(encoding)
    target_path = Path(target_path)
    handler = TabularRegistry.detect_format(str(target_path))

    bundle_files = to_bundle_files_map(root, files)
    all_files = [path for langs in bundle_files.values() for path in langs.values()]
    logger.info("Exporting %d files to %s", len(all_files), target_path)

    content = read_bundle_content(bundle_files, encoding)

    # every language seen anywhere becomes a column for all bundles
    languages = sorted({lang for langs in bundle_files.values() for lang in langs})

    handler.write(target_path, content, languages, timestamp=_newest_mtime(all_files))
    logger.info("Wrote %d keys in %d languages to %s", len(content), len(languages), target_path)

    return {
        "target": str(target_path),
        "bundles": len(bundle_files),
        "files": len(all_files),
        "keys": len(content),
        "languages": [lang.header for lang in languages],
    }
