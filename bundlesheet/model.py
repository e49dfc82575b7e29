#!/usr/bin/env python3
"""
In-memory content model shared by the exporter and the importer.

A BundleContent maps BundleKey (bundle basename + property key) to the
translations of that key, one per language. It is built fresh for every
import or export run and never cached.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

DEFAULT_LANGUAGE_HEADER = "<default>"


@dataclass(frozen=True, order=True)
class Language:
    """Locale suffix of a resource bundle file. Empty string is the default file."""
    lang: str = ""

    def __post_init__(self):
        if self.lang is None:
            object.__setattr__(self, "lang", "")

    @property
    def is_default(self) -> bool:
        return self.lang == ""

    @property
    def header(self) -> str:
        """Column label used in the tabular file."""
        return DEFAULT_LANGUAGE_HEADER if self.is_default else self.lang

    @classmethod
    def from_header(cls, label: Optional[str]) -> "Language":
        """Inverse of `header`. Blank labels are the default language too."""
        if label is None:
            return cls("")
        label = str(label).strip()
        if label in ("", DEFAULT_LANGUAGE_HEADER):
            return cls("")
        return cls(label)

    def __str__(self) -> str:
        return self.lang


@dataclass(frozen=True, order=True)
class BundleKey:
    """Identifies one entry: the bundle it belongs to and its property key."""
    bundle_basename: str
    key: str

    def to_identifier(self) -> str:
        return f"{self.bundle_basename}.{self.key}"

    def __str__(self) -> str:
        return self.to_identifier()


@dataclass(frozen=True)
class Translation:
    """One (language, value) pair of a single key. None means no value."""
    lang: Language
    value: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.value is None or self.value == ""


@dataclass
class BundleContent:
    """
    Ordered mapping of BundleKey -> translations.

    Keys keep the order in which they were first added, so output generated
    from the same input is stable across runs.
    """
    _content: dict[BundleKey, list[Translation]] = field(default_factory=dict)

    def add(self, bundle_key: BundleKey, translation: Translation) -> None:
        """Append a translation, replacing an earlier one for the same language."""
        translations = self._content.setdefault(bundle_key, [])
        for i, existing in enumerate(translations):
            if existing.lang == translation.lang:
                translations[i] = translation
                return
        translations.append(translation)

    def get(self, bundle_key: BundleKey) -> list[Translation]:
        return list(self._content.get(bundle_key, []))

    def bundle_keys(self) -> list[BundleKey]:
        return list(self._content)

    def languages(self) -> list[Language]:
        """Every language observed for any key, sorted (default first)."""
        seen = {t.lang for translations in self._content.values() for t in translations}
        return sorted(seen)

    def items(self) -> Iterator[tuple[BundleKey, list[Translation]]]:
        for bundle_key, translations in self._content.items():
            yield bundle_key, list(translations)

    def __contains__(self, bundle_key: object) -> bool:
        return bundle_key in self._content

    def __len__(self) -> int:
        return len(self._content)

    def __iter__(self) -> Iterator[BundleKey]:
        return iter(self._content)
