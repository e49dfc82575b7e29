#!/usr/bin/env python3
"""
Tests for importing a tabular file into resource bundle files:
1. Empty values never create keys, but clear existing ones
2. No empty files for languages without entries
3. Existing files keep their layout; missing key actions apply
4. Import followed by export shows the imported values
5. Errors in the tabular source abort before any file is written
6. Bundles never resolve outside the root
"""

import pytest
from openpyxl import Workbook

from bundlesheet.errors import FormatError, PreconditionError
from bundlesheet.exporter import read_bundle_content
from bundlesheet.format_handlers import MissingKeyAction
from bundlesheet.importer import BundleFileBuffer, import_xls
from bundlesheet.model import BundleKey, Language, Translation
from bundlesheet.resource_bundles import find_property_files, to_bundle_files_map


HEADER = ["Bundle", "Key", "<default>", "de"]


def write_sheet(path, rows, header=HEADER):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(header)
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


@pytest.mark.parametrize("value,pre_exists,expected", [
    ("Hallo", True, "Hallo"),
    ("Hallo", False, "Hallo"),
    ("", True, ""),
    ("", False, None),
    (None, True, ""),
    (None, False, None),
])
def test_buffer_set_value_matrix(tmp_path, value, pre_exists, expected):
    """Test 1: Empty values are only taken over for keys that already exist."""
    path = tmp_path / "messages_de.properties"
    if pre_exists:
        path.write_text("greeting=Alt\n", encoding="utf-8")

    buffer = BundleFileBuffer.open(path, "utf-8")
    applied = buffer.set_value("greeting", Translation(Language("de"), value))

    assert applied == (expected is not None)
    assert buffer.content.get_value("greeting") == expected


def test_import_creates_only_files_with_entries(tmp_path):
    """Test 2: messages.farewell with empty default creates only messages_de."""
    source = write_sheet(tmp_path / "i18n.xlsx", [["messages", "farewell", "", "Tschüss"]])
    root = tmp_path / "res"

    result = import_xls(root, source, None, "nothing")

    assert (root / "messages_de.properties").read_text(encoding="utf-8") == "farewell = Tschüss\n"
    assert not (root / "messages.properties").exists()
    assert result["written"] == [str(root / "messages_de.properties")]
    assert result["skipped"] == [str(root / "messages.properties")]


def test_import_clears_existing_key(tmp_path):
    """Test 3: An empty cell clears a key that exists in the file."""
    root = tmp_path / "res"
    root.mkdir()
    (root / "messages.properties").write_text("farewell=Bye\nother=x\n", encoding="utf-8")
    source = write_sheet(tmp_path / "i18n.xlsx", [["messages", "farewell", None, "Tschüss"]])

    import_xls(root, source)

    assert (root / "messages.properties").read_text(encoding="utf-8") == "farewell=\nother=x\n"


def test_import_empty_value_not_fabricated(tmp_path):
    """Test 4: An empty cell does not add the key to an existing file."""
    root = tmp_path / "res"
    root.mkdir()
    (root / "messages_de.properties").write_text("greeting=Hallo\n", encoding="utf-8")
    source = write_sheet(tmp_path / "i18n.xlsx", [
        ["messages", "greeting", "Hi", "Hallo!"],
        ["messages", "farewell", "Bye", None],
    ])

    import_xls(root, source)

    assert (root / "messages_de.properties").read_text(encoding="utf-8") == "greeting=Hallo!\n"
    assert (root / "messages.properties").read_text(encoding="utf-8") == \
        "greeting = Hi\nfarewell = Bye\n"


def test_import_keeps_layout(tmp_path):
    """Test 5: Comments, order and untouched entries survive an import."""
    root = tmp_path / "res"
    root.mkdir()
    original = "# Greetings\ngreeting: Hello\n\n! farewell\nfarewell = Bye\n"
    (root / "messages.properties").write_text(original, encoding="utf-8")
    source = write_sheet(tmp_path / "i18n.xlsx", [
        ["messages", "greeting", "Hi"],
        ["messages", "farewell", "Bye"],
        ["messages", "new", "New"],
    ], header=["Bundle", "Key", "<default>"])

    import_xls(root, source)

    assert (root / "messages.properties").read_text(encoding="utf-8") == \
        "# Greetings\ngreeting: Hi\n\n! farewell\nfarewell = Bye\nnew = New\n"


@pytest.mark.parametrize("action,expected", [
    ("nothing", "greeting=Hallo!\nobsolete=Alt\n"),
    ("removeKey", "greeting=Hallo!\n"),
    (MissingKeyAction.COMMENT, "greeting=Hallo!\n#obsolete=Alt\n"),
])
def test_import_missing_key_action(tmp_path, action, expected):
    """Test 6: Keys missing in the sheet are kept, removed or commented out."""
    root = tmp_path / "res"
    root.mkdir()
    (root / "messages_de.properties").write_text("greeting=Hallo\nobsolete=Alt\n", encoding="utf-8")
    source = write_sheet(tmp_path / "i18n.xlsx", [["messages", "greeting", None, "Hallo!"]])

    import_xls(root, source, "utf-8", action)

    assert (root / "messages_de.properties").read_text(encoding="utf-8") == expected


def test_import_nested_bundle_creates_directories(tmp_path):
    """Test 7: Bundles in subdirectories are written below root."""
    source = write_sheet(tmp_path / "i18n.xlsx", [["i18n/app/labels", "ok", "OK", "Okay"]])
    root = tmp_path / "res"

    import_xls(root, source)

    assert (root / "i18n" / "app" / "labels.properties").read_text(encoding="utf-8") == "ok = OK\n"
    assert (root / "i18n" / "app" / "labels_de.properties").read_text(encoding="utf-8") == "ok = Okay\n"


def test_import_then_export_round_trip(tmp_path):
    """Test 8: Imported values show up when the files are read again."""
    root = tmp_path / "res"
    source = write_sheet(tmp_path / "i18n.xlsx", [
        ["messages", "greeting", "Hi", "Hallo"],
        ["messages", "spaced", "  leading", "a=b: c"],
        ["messages", "multiline", "one\ntwo", None],
    ])

    import_xls(root, source)
    content = read_bundle_content(to_bundle_files_map(root, find_property_files(root)), "utf-8")

    assert content.get(BundleKey("messages", "greeting")) == [
        Translation(Language(""), "Hi"),
        Translation(Language("de"), "Hallo"),
    ]
    assert content.get(BundleKey("messages", "spaced")) == [
        Translation(Language(""), "  leading"),
        Translation(Language("de"), "a=b: c"),
    ]
    assert content.get(BundleKey("messages", "multiline")) == [
        Translation(Language(""), "one\ntwo"),
    ]


def test_import_csv_latin1(tmp_path):
    """Test 9: CSV sources and non UTF-8 property files are supported."""
    source = tmp_path / "i18n.csv"
    source.write_text("Bundle,Key,<default>\nprices,euro,5 €\n", encoding="utf-8")
    root = tmp_path / "res"

    import_xls(root, source, "iso-8859-1")

    assert (root / "prices.properties").read_bytes() == b"euro = 5 \\u20ac\n"


def test_import_invalid_source_touches_nothing(tmp_path):
    """Test 10: A malformed sheet aborts the run before any file is written."""
    root = tmp_path / "res"
    root.mkdir()
    (root / "messages.properties").write_text("greeting=Hi\n", encoding="utf-8")
    source = write_sheet(tmp_path / "i18n.xlsx", [
        ["messages", "greeting", "Hello", "Hallo"],
        ["messages", "greeting", "Hello again", None],
    ])

    with pytest.raises(FormatError):
        import_xls(root, source, None, "delete")

    assert (root / "messages.properties").read_text(encoding="utf-8") == "greeting=Hi\n"
    assert not (root / "messages_de.properties").exists()


def test_import_missing_source(tmp_path):
    """Test 11: A missing source file raises OSError."""
    with pytest.raises(OSError):
        import_xls(tmp_path, tmp_path / "missing.xlsx")


@pytest.mark.parametrize("kwargs", [
    {"root": None},
    {"source_path": None},
    {"encoding": "no-such-codec"},
    {"missing_key_action": "ignore-everything"},
])
def test_import_preconditions(tmp_path, kwargs):
    """Test 12: Invalid arguments are rejected before any I/O."""
    args = {"root": tmp_path, "source_path": tmp_path / "i18n.xlsx"}
    args.update(kwargs)

    with pytest.raises(PreconditionError):
        import_xls(**args)


def test_import_invalid_language_column(tmp_path):
    """Test 13: A language column that is no locale code is rejected."""
    source = write_sheet(tmp_path / "i18n.xlsx", [["messages", "k", "v", "w"]],
                         header=["Bundle", "Key", "<default>", "German"])
    root = tmp_path / "res"

    with pytest.raises(FormatError):
        import_xls(root, source)
    assert not root.exists()


@pytest.mark.parametrize("bundle", ["../outside/evil", "i18n/../../evil", None])
def test_import_rejects_bundles_outside_root(tmp_path, bundle):
    """Test 14: Bundle names that leave the root directory abort the import."""
    root = tmp_path / "res"
    root.mkdir()
    if bundle is None:
        bundle = str(tmp_path / "outside" / "evil")
    source = write_sheet(tmp_path / "i18n.xlsx", [
        ["messages", "greeting", "Hi", None],
        [bundle, "k", "v", None],
    ])

    with pytest.raises(FormatError):
        import_xls(root, source)

    assert not (tmp_path / "outside").exists()
    assert not (tmp_path / "evil.properties").exists()
    assert list(root.iterdir()) == []


def test_import_three_letter_language(tmp_path):
    """Test 15: Three letter and script languages map to their own files."""
    root = tmp_path / "res"
    source = write_sheet(tmp_path / "i18n.xlsx", [["messages", "greeting", "Hi", "Kumusta", "你好"]],
                         header=["Bundle", "Key", "<default>", "fil", "zh_Hant"])

    result = import_xls(root, source)

    assert sorted(result["written"]) == sorted(str(root / name) for name in [
        "messages.properties", "messages_fil.properties", "messages_zh_Hant.properties",
    ])
    assert (root / "messages_fil.properties").read_text(encoding="utf-8") == "greeting = Kumusta\n"
