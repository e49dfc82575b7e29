#!/usr/bin/env python3
"""
Tests for the content model:
1. Language ordering, default language and header labels
2. BundleKey as hashable mapping key
3. Translation emptiness
4. BundleContent ordering and language collection
"""

from bundlesheet.model import BundleContent, BundleKey, Language, Translation


def test_language_default_and_ordering():
    """Test 1: Empty language is the default and sorts first."""
    assert Language().is_default
    assert Language("") == Language()
    assert not Language("de").is_default
    assert sorted([Language("en_US"), Language("de"), Language("")]) == [
        Language(""), Language("de"), Language("en_US"),
    ]


def test_language_header_round_trip():
    """Test 2: Header labels map back to the same language."""
    assert Language("").header == "<default>"
    assert Language("de").header == "de"
    assert Language.from_header("<default>") == Language("")
    assert Language.from_header("") == Language("")
    assert Language.from_header(None) == Language("")
    assert Language.from_header(" de ") == Language("de")


def test_bundle_key_is_hashable_value():
    """Test 3: Equal bundle keys are interchangeable as dict keys."""
    mapping = {BundleKey("messages", "greeting"): 1}
    assert mapping[BundleKey("messages", "greeting")] == 1
    assert BundleKey("messages", "greeting") != BundleKey("messages", "Greeting")
    assert BundleKey("i18n/messages", "a.b").to_identifier() == "i18n/messages.a.b"


def test_translation_is_empty():
    """Test 4: None and empty string both mean 'no value'."""
    assert Translation(Language("de"), None).is_empty
    assert Translation(Language("de"), "").is_empty
    assert not Translation(Language("de"), " ").is_empty
    assert not Translation(Language("de"), "Hallo").is_empty


def test_bundle_content_keeps_first_seen_order():
    """Test 5: Keys keep insertion order, translations are grouped per key."""
    content = BundleContent()
    content.add(BundleKey("b", "z"), Translation(Language(""), "Z"))
    content.add(BundleKey("a", "y"), Translation(Language(""), "Y"))
    content.add(BundleKey("b", "z"), Translation(Language("de"), "Z-de"))

    assert content.bundle_keys() == [BundleKey("b", "z"), BundleKey("a", "y")]
    assert content.get(BundleKey("b", "z")) == [
        Translation(Language(""), "Z"),
        Translation(Language("de"), "Z-de"),
    ]
    assert len(content) == 2
    assert BundleKey("a", "y") in content
    assert content.get(BundleKey("a", "missing")) == []


def test_bundle_content_replaces_same_language():
    """Test 6: A second translation for the same language replaces the first."""
    content = BundleContent()
    content.add(BundleKey("b", "k"), Translation(Language("de"), "alt"))
    content.add(BundleKey("b", "k"), Translation(Language("de"), "neu"))

    assert content.get(BundleKey("b", "k")) == [Translation(Language("de"), "neu")]


def test_bundle_content_languages():
    """Test 7: languages() returns every observed language, sorted."""
    content = BundleContent()
    content.add(BundleKey("a", "k"), Translation(Language("fr"), "x"))
    content.add(BundleKey("b", "k"), Translation(Language(""), "x"))
    content.add(BundleKey("b", "k"), Translation(Language("de"), "x"))

    assert content.languages() == [Language(""), Language("de"), Language("fr")]
