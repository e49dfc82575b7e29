#!/usr/bin/env python3
"""
Java .properties format handler.

Handles parsing and writing of resource bundle files while keeping their
layout: comments, blank lines, key order, separators and continuation lines
of untouched entries are written back exactly as they were read.

.properties format structure:
```
# Comment
! Another style of comment
greeting = Hello
farewell: Goodbye
multi.line = first part \\
             second part
unicode = Gr\\u00fc\\u00dfe
```
"""

import codecs
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..errors import FormatError, PreconditionError

logger = logging.getLogger(__name__)

WHITESPACE = " \t\f"
SEPARATORS = "=:"
COMMENT_CHARS = "#!"

DEFAULT_ENCODING = "utf-8"

_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


def resolve_encoding(encoding: Optional[str]) -> str:
    """Return the encoding to use (UTF-8 if None), rejecting unknown codecs."""
    encoding = encoding or DEFAULT_ENCODING
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise PreconditionError(f"Unknown encoding: {encoding}") from None
    return encoding


class MissingKeyAction(Enum):
    """What happens to keys that exist on disk but not in the new content."""
    NOTHING = "nothing"
    DELETE = "delete"
    COMMENT = "comment"

    @classmethod
    def from_string(cls, value: Union[str, "MissingKeyAction"]) -> "MissingKeyAction":
        if isinstance(value, cls):
            return value
        aliases = {
            "nothing": cls.NOTHING,
            "donothing": cls.NOTHING,
            "delete": cls.DELETE,
            "removekey": cls.DELETE,
            "comment": cls.COMMENT,
            "markmissing": cls.COMMENT,
            "ascomment": cls.COMMENT,
        }
        normalized = str(value).replace("_", "").replace("-", "").lower()
        if normalized not in aliases:
            available = ", ".join(a.value for a in cls)
            raise PreconditionError(f"Unknown missing key action: {value}. Available: {available}")
        return aliases[normalized]


@dataclass
class WriteOptions:
    """Options applied when writing a PropertyFile to disk."""
    encoding: str = "utf-8"
    missing_key_action: MissingKeyAction = MissingKeyAction.NOTHING


@dataclass
class BasicEntry:
    """Comment or blank line(s), written back verbatim."""
    lines: list[str]

    def render(self, encoding: str) -> list[str]:
        return list(self.lines)


@dataclass
class PropertyEntry:
    """
    A single key/value pair.

    Attributes:
        key: Unescaped key
        value: Unescaped value
        leading: Whitespace before the key
        raw_key: Key as written in the file
        separator: Text between key and value (e.g. " = ")
        raw_lines: Original lines, None once the value was changed
    """
    key: str
    value: str
    leading: str = ""
    raw_key: Optional[str] = None
    separator: str = " = "
    raw_lines: Optional[list[str]] = None

    def set_value(self, value: str) -> None:
        if value != self.value:
            self.value = value
            self.raw_lines = None

    def render(self, encoding: str) -> list[str]:
        if self.raw_lines is not None:
            return list(self.raw_lines)
        raw_key = self.raw_key if self.raw_key is not None else escape_key(self.key, encoding)
        text = f"{self.leading}{raw_key}{self.separator}{escape_value(self.value, encoding)}"
        return [text]


def _is_surrogate(char: str) -> bool:
    return "\ud800" <= char <= "\udfff"


def _is_encodable(char: str, encoding: str) -> bool:
    try:
        char.encode(encoding)
        return True
    except UnicodeEncodeError:
        return False


def _escape_char(char: str, encoding: str) -> str:
    if char in _ESCAPES:
        return _ESCAPES[char]
    if ord(char) > 0x7E and not _is_encodable(char, encoding):
        # astral characters become a surrogate pair, like Java does
        data = char.encode("utf-16-be", "surrogatepass")
        return "".join(
            "\\u%04x" % int.from_bytes(data[i:i + 2], "big")
            for i in range(0, len(data), 2)
        )
    return char


def escape_key(key: str, encoding: str = "utf-8") -> str:
    """Escape a key: separators, whitespace and leading comment chars."""
    result = []
    for i, char in enumerate(key):
        if char in SEPARATORS or char in " " or (i == 0 and char in COMMENT_CHARS):
            result.append("\\" + char)
        else:
            result.append(_escape_char(char, encoding))
    return "".join(result)


def escape_value(value: str, encoding: str = "utf-8") -> str:
    """Escape a value. Only leading whitespace needs protection."""
    result = []
    leading = True
    for char in value:
        if leading and char == " ":
            result.append("\\ ")
            continue
        leading = False
        result.append(_escape_char(char, encoding))
    return "".join(result)


def unescape(text: str, path: Optional[Path] = None, line: Optional[int] = None) -> str:
    """Resolve backslash escapes including \\uXXXX."""
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\" or i == len(text) - 1:
            result.append(char)
            i += 1
            continue

        nxt = text[i + 1]
        if nxt == "u":
            digits = text[i + 2:i + 6]
            if len(digits) != 4 or any(c not in "0123456789abcdefABCDEF" for c in digits):
                raise FormatError(f"Malformed \\uXXXX encoding: '\\u{digits}'", path=path, line=line)
            result.append(chr(int(digits, 16)))
            i += 6
        else:
            result.append(_UNESCAPES.get(nxt, nxt))
            i += 2

    # \\uD83D\\uDE00 style escapes form a single astral character
    decoded = "".join(result).encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    for char in decoded:
        if _is_surrogate(char):
            raise FormatError(f"Unpaired surrogate \\u{ord(char):04x}", path=path, line=line)
    return decoded


def _ends_with_continuation(line: str) -> bool:
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _split_key_value(logical: str) -> tuple[str, str, str]:
    """Split a logical line (leading whitespace removed) into raw key, separator, raw value."""
    i = 0
    while i < len(logical):
        char = logical[i]
        if char == "\\":
            i += 2
            continue
        if char in SEPARATORS or char in WHITESPACE:
            break
        i += 1
    raw_key = logical[:i]

    j = i
    while j < len(logical) and logical[j] in WHITESPACE:
        j += 1
    if j < len(logical) and logical[j] in SEPARATORS:
        j += 1
        while j < len(logical) and logical[j] in WHITESPACE:
            j += 1

    return raw_key, logical[i:j], logical[j:]


@dataclass
class PropertyFile:
    """
    Ordered, layout preserving content of one .properties file.

    Keys are case sensitive. When a key occurs more than once the last
    occurrence wins for reading and all occurrences are updated on write.
    """
    entries: list[Union[BasicEntry, PropertyEntry]] = field(default_factory=list)
    newline: str = "\n"

    @classmethod
    def from_file(cls, path: Union[str, Path], encoding: str = "utf-8") -> "PropertyFile":
        path = Path(path)
        data = path.read_bytes()
        try:
            content = data.decode(encoding)
        except UnicodeDecodeError as e:
            raise FormatError(f"Cannot decode file as {encoding}: {e}", path=path) from e
        except LookupError as e:
            raise PreconditionError(f"Unknown encoding: {encoding}") from e
        return cls.parse(content, path=path)

    @classmethod
    def parse(cls, content: str, path: Optional[Path] = None) -> "PropertyFile":
        """
        Parse .properties content.

        Args:
            content: Raw file content
            path: File the content came from (only used in error messages)

        Returns:
            PropertyFile with all entries in file order
        """
        if content.startswith("\ufeff"):
            content = content[1:]

        newline = "\r\n" if "\r\n" in content else "\n"
        lines = re.split(r"\r\n|\r|\n", content)
        if lines and lines[-1] == "":
            lines.pop()
        entries: list[Union[BasicEntry, PropertyEntry]] = []

        i = 0
        while i < len(lines):
            line = lines[i]
            stripped = line.lstrip(WHITESPACE)
            line_num = i + 1

            if not stripped or stripped[0] in COMMENT_CHARS:
                if entries and isinstance(entries[-1], BasicEntry):
                    entries[-1].lines.append(line)
                else:
                    entries.append(BasicEntry([line]))
                i += 1
                continue

            raw_lines = [line]
            logical = stripped
            while _ends_with_continuation(logical) and i + 1 < len(lines):
                i += 1
                raw_lines.append(lines[i])
                logical = logical[:-1] + lines[i].lstrip(WHITESPACE)
            if _ends_with_continuation(logical):
                # continuation on the last line of the file
                logical = logical[:-1]

            raw_key, separator, raw_value = _split_key_value(logical)
            entries.append(PropertyEntry(
                key=unescape(raw_key, path, line_num),
                value=unescape(raw_value, path, line_num),
                leading=line[:len(line) - len(stripped)],
                raw_key=raw_key,
                separator=separator or " = ",
                raw_lines=raw_lines,
            ))
            i += 1

        return cls(entries=entries, newline=newline)

    def _property_entries(self) -> list[PropertyEntry]:
        return [e for e in self.entries if isinstance(e, PropertyEntry)]

    def contains_key(self, key: str) -> bool:
        return any(e.key == key for e in self._property_entries())

    def get_value(self, key: str) -> Optional[str]:
        value = None
        for entry in self._property_entries():
            if entry.key == key:
                value = entry.value
        return value

    def set_value(self, key: str, value: Optional[str]) -> None:
        """Set the value of a key, appending a new entry if it does not exist yet."""
        if value is None:
            value = ""
        found = False
        for entry in self._property_entries():
            if entry.key == key:
                entry.set_value(value)
                found = True
        if not found:
            self.entries.append(PropertyEntry(key=key, value=value))

    def keys(self) -> list[str]:
        return list(dict.fromkeys(e.key for e in self._property_entries()))

    def to_dict(self) -> dict[str, str]:
        return {e.key: e.value for e in self._property_entries()}

    def properties_size(self) -> int:
        return len(self.keys())

    def update(self, other: "PropertyFile", missing_key_action: MissingKeyAction) -> None:
        """
        Merge the content of another PropertyFile into this one.

        Keys in both are updated in place, keys only in `other` are appended
        and keys only in this file are handled by `missing_key_action`.
        """
        new_values = other.to_dict()
        merged: list[Union[BasicEntry, PropertyEntry]] = []

        for entry in self.entries:
            if isinstance(entry, PropertyEntry) and entry.key in new_values:
                entry.set_value(new_values[entry.key])
            elif isinstance(entry, PropertyEntry):
                if missing_key_action is MissingKeyAction.DELETE:
                    continue
                if missing_key_action is MissingKeyAction.COMMENT:
                    commented = ["#" + line for line in entry.render("utf-8")]
                    if merged and isinstance(merged[-1], BasicEntry):
                        merged[-1].lines.extend(commented)
                    else:
                        merged.append(BasicEntry(commented))
                    continue
            merged.append(entry)

        existing = {e.key for e in self._property_entries()}
        for key, value in new_values.items():
            if key not in existing:
                merged.append(PropertyEntry(key=key, value=value))

        self.entries = merged

    def to_text(self, encoding: str = "utf-8") -> str:
        lines = []
        for entry in self.entries:
            lines.extend(entry.render(encoding))
        if not lines:
            return ""
        return self.newline.join(lines) + self.newline

    def save_to(self, path: Union[str, Path], options: Optional[WriteOptions] = None) -> None:
        """
        Write this content to `path`, merging it into the file if it exists.

        Parent directories are created as needed.
        """
        options = options or WriteOptions()
        path = Path(path)
        resolve_encoding(options.encoding)

        if path.exists():
            target = PropertyFile.from_file(path, options.encoding)
        else:
            target = PropertyFile(newline=self.newline)
        target.update(self, options.missing_key_action)
        target.write_to(path, options.encoding)

    def write_to(self, path: Union[str, Path], encoding: str = "utf-8") -> None:
        """Write this content to `path` as is, replacing the file."""
        path = Path(path)
        data = self.to_text(encoding).encode(encoding)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Wrote %d entries to %s", self.properties_size(), path)
