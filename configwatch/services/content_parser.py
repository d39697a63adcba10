from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import yaml

from configwatch.exceptions import ParseError

_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


class PropertiesParser:
    """Parse `.properties` text into a flat map.

    Reads the java.util.Properties line format: `#` and `!` comments, `=` or
    `:` as separator, backslash escapes (`\\n`, `\\=`, `\\uXXXX`, ...) and a
    trailing backslash to continue a line. The first unescaped separator
    splits key from value, so values may contain `=`. Whitespace after the
    separator is dropped, trailing whitespace is part of the value.
    """

    def parse(self, namespace: str, raw_content: str) -> Dict[str, str]:
        result: Dict[str, str] = {}
        for lineno, line in _logical_lines(raw_content or ""):
            pair = _split_pair(line)
            if pair is None:
                raise ParseError(namespace, f"line {lineno} has no key/value separator")
            key, value = pair
            result[key] = value
        return result


def format_properties(items: Mapping[str, str]) -> str:
    """Render a flat map as `.properties` text that PropertiesParser reads back unchanged."""
    return "\n".join(
        f"{_escape(str(key), is_key=True)}={_escape(str(value), is_key=False)}"
        for key, value in items.items()
    )


class YamlParser:
    """Parse a YAML document and flatten it to dotted keys (`a.b.c`, `items[0]`)."""

    def parse(self, namespace: str, raw_content: str) -> Dict[str, str]:
        try:
            data = yaml.safe_load(raw_content or "")
        except yaml.YAMLError as e:
            raise ParseError(namespace, str(e)) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ParseError(namespace, "top-level YAML value must be a mapping")
        result: Dict[str, str] = {}
        _flatten("", data, result)
        return result


class RawContentParser:
    """Expose the whole raw text under a single `content` key."""

    def parse(self, namespace: str, raw_content: str) -> Dict[str, str]:
        return {"content": raw_content or ""}


def _logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    pending: Optional[str] = None
    start = 0
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.lstrip()
        if pending is None:
            if not line or line[0] in "#!":
                continue
            start = lineno
            pending = ""
        # An odd run of trailing backslashes continues the line.
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        yield start, pending + line
        pending = None
    if pending:
        yield start, pending


def _split_pair(line: str) -> Optional[Tuple[str, str]]:
    key = []
    significant = 0
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            decoded, i = _read_escape(line, i)
            key.append(decoded)
            significant = len(key)
            continue
        if ch in "=:":
            value = _unescape(line[i + 1:].lstrip())
            return "".join(key[:significant]), value
        key.append(ch)
        if not ch.isspace():
            significant = len(key)
        i += 1
    return None


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        if text[i] == "\\":
            decoded, i = _read_escape(text, i)
            out.append(decoded)
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def _read_escape(text: str, i: int) -> Tuple[str, int]:
    """Decode the escape starting at text[i] (a backslash); return it and the next index."""
    if i + 1 >= len(text):
        return "", i + 1
    ch = text[i + 1]
    if ch == "u":
        digits = text[i + 2:i + 6]
        if len(digits) == 4:
            try:
                return chr(int(digits, 16)), i + 6
            except ValueError:
                pass
        return "u", i + 2
    return _UNESCAPES.get(ch, ch), i + 2


def _escape(text: str, is_key: bool) -> str:
    out = []
    for pos, ch in enumerate(text):
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif is_key and ch in " =:#!":
            out.append("\\" + ch)
        elif pos == 0 and ch == " ":
            out.append("\\ ")
        else:
            out.append(ch)
    return "".join(out)


def _flatten(prefix: str, value: Any, out: Dict[str, str]) -> None:
    if isinstance(value, dict):
        if not value and prefix:
            out[prefix] = ""
        for k, v in value.items():
            key = f"{prefix}.{k}" if prefix else str(k)
            _flatten(key, v, out)
        return
    if isinstance(value, list):
        if not value:
            out[prefix] = ""
        for i, item in enumerate(value):
            _flatten(f"{prefix}[{i}]", item, out)
        return
    out[prefix] = _scalar_to_str(value)


def _scalar_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
