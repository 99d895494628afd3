"""
Parser for generated implementor shard files.

A shard file is the JavaScript the documentation generator writes under
``implementors/<module path>/trait.<Name>.js``:

    (function() {var implementors = {};
    implementors["openssl"] = ["impl <a ...>Not</a> for ...",];
    implementors["clap"] = [{text:"impl ...",synthetic:false,types:["clap::Values"]},];
    implementors["hyper"] = [];
    ...register or stash boilerplate...
    })()

Only the literal data is read; the surrounding code is never evaluated.
"""
import re
from pathlib import Path
from typing import Any, List, Optional, Tuple

from traitindex.registry.schema import Shard, normalize_payload


class ShardParseError(ValueError):
    """Raised when a shard file or path cannot be parsed."""
    pass


SHARD_FILE_RE = re.compile(r'^trait\.(?P<name>[^.]+)\.js$')

_BLOCK_START_RE = re.compile(r'\bvar\s+implementors\s*=\s*\{\s*\}\s*;?')
_MARKER_RE = re.compile(r'\bvar\s+implementors\s*=\s*\{\s*\}\s*;?|\bimplementors\s*\[\s*')

_WS_RE = re.compile(r'\s*')
_IDENT_RE = re.compile(r'[A-Za-z_$][\w$]*')
_NUMBER_RE = re.compile(r'-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?')

_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
}


def trait_key_from_path(path: Path, root: Path) -> str:
    """
    Derive a trait key from a shard file's location.

    Args:
        path: Shard file, e.g. ``<root>/core/ops/trait.Not.js``
        root: The ``implementors`` directory

    Returns:
        Trait key, e.g. ``core::ops::Not``

    Raises:
        ShardParseError: If the file name is not ``trait.<Name>.js``
            or the file is not below root
    """
    path = Path(path)
    match = SHARD_FILE_RE.match(path.name)
    if not match:
        raise ShardParseError(f"Not a shard file name (expected trait.<Name>.js): {path}")

    try:
        relative = path.relative_to(root)
    except ValueError:
        raise ShardParseError(f"Shard file {path} is not below {root}")

    modules = list(relative.parent.parts)
    return '::'.join(modules + [match.group('name')])


class _LiteralReader:
    """Reads the JavaScript literal subset the generator emits."""

    def __init__(self, text: str, source: Optional[str]):
        self.text = text
        self.source = source or '<shard>'

    def error(self, message: str, pos: int) -> ShardParseError:
        return ShardParseError(f"{self.source}: {message} at offset {pos}")

    def skip_ws(self, pos: int) -> int:
        return _WS_RE.match(self.text, pos).end()

    def expect(self, char: str, pos: int) -> int:
        pos = self.skip_ws(pos)
        if not self.text.startswith(char, pos):
            raise self.error(f"Expected {char!r}", pos)
        return pos + 1

    def value(self, pos: int) -> Tuple[Any, int]:
        pos = self.skip_ws(pos)
        if pos >= len(self.text):
            raise self.error("Unexpected end of input", pos)

        char = self.text[pos]
        if char in '"\'':
            return self.string(pos)
        if char == '[':
            return self.array(pos)
        if char == '{':
            return self.object(pos)

        number = _NUMBER_RE.match(self.text, pos)
        if number:
            literal = number.group(0)
            parsed = float(literal) if any(c in literal for c in '.eE') else int(literal)
            return parsed, number.end()

        ident = _IDENT_RE.match(self.text, pos)
        if ident:
            word = ident.group(0)
            if word == 'true':
                return True, ident.end()
            if word == 'false':
                return False, ident.end()
            if word == 'null':
                return None, ident.end()
            raise self.error(f"Unexpected identifier {word!r}", pos)

        raise self.error(f"Unexpected character {char!r}", pos)

    def string(self, pos: int) -> Tuple[str, int]:
        quote = self.text[pos]
        pos += 1
        parts = []
        while True:
            if pos >= len(self.text):
                raise self.error("Unterminated string", pos)
            char = self.text[pos]
            if char == quote:
                return ''.join(parts), pos + 1
            if char == '\n':
                raise self.error("Newline in string literal", pos)
            if char != '\\':
                parts.append(char)
                pos += 1
                continue

            pos += 1
            if pos >= len(self.text):
                raise self.error("Unterminated escape", pos)
            escape = self.text[pos]
            if escape == 'u':
                digits = self.text[pos + 1:pos + 5]
                if not re.fullmatch(r'[0-9A-Fa-f]{4}', digits):
                    raise self.error("Invalid \\u escape", pos)
                parts.append(chr(int(digits, 16)))
                pos += 5
            elif escape == 'x':
                digits = self.text[pos + 1:pos + 3]
                if not re.fullmatch(r'[0-9A-Fa-f]{2}', digits):
                    raise self.error("Invalid \\x escape", pos)
                parts.append(chr(int(digits, 16)))
                pos += 3
            elif escape == '\n':
                # Line continuation
                pos += 1
            elif escape == '\r':
                pos += 2 if self.text.startswith('\n', pos + 1) else 1
            else:
                parts.append(_SIMPLE_ESCAPES.get(escape, escape))
                pos += 1

    def array(self, pos: int) -> Tuple[List[Any], int]:
        pos += 1
        items = []
        while True:
            pos = self.skip_ws(pos)
            if self.text.startswith(']', pos):
                return items, pos + 1
            item, pos = self.value(pos)
            items.append(item)
            pos = self.skip_ws(pos)
            if self.text.startswith(',', pos):
                pos += 1
            elif not self.text.startswith(']', pos):
                raise self.error("Expected ',' or ']'", pos)

    def object(self, pos: int) -> Tuple[dict, int]:
        pos += 1
        result = {}
        while True:
            pos = self.skip_ws(pos)
            if self.text.startswith('}', pos):
                return result, pos + 1

            if pos < len(self.text) and self.text[pos] in '"\'':
                key, pos = self.string(pos)
            else:
                ident = _IDENT_RE.match(self.text, pos)
                if not ident:
                    raise self.error("Expected object key", pos)
                key, pos = ident.group(0), ident.end()

            pos = self.expect(':', pos)
            result[key], pos = self.value(pos)
            pos = self.skip_ws(pos)
            if self.text.startswith(',', pos):
                pos += 1
            elif not self.text.startswith('}', pos):
                raise self.error("Expected ',' or '}'", pos)


def parse_shard_source(text: str, trait_key: str, source: Optional[str] = None) -> List[Shard]:
    """
    Parse the text of a shard file.

    Args:
        text: JavaScript source of the shard file
        trait_key: Trait key the file declares data for
        source: File path for error messages and provenance

    Returns:
        One Shard per ``var implementors = {}`` block, in file order

    Raises:
        ShardParseError: If a package assignment is malformed or no block is found
        SubmissionValidationError: If a package name or entry is malformed
    """
    reader = _LiteralReader(text, source)
    blocks: List[dict] = []
    pos = 0

    while True:
        marker = _MARKER_RE.search(text, pos)
        if not marker:
            break

        if _BLOCK_START_RE.match(text, marker.start()):
            blocks.append({})
            pos = marker.end()
            continue

        if not blocks:
            raise reader.error("Package assignment before 'var implementors = {}'", marker.start())

        start = reader.skip_ws(marker.end())
        if start >= len(text) or text[start] not in '"\'':
            raise reader.error("Expected quoted package name", start)
        package, pos = reader.string(start)

        pos = reader.expect(']', pos)
        pos = reader.expect('=', pos)
        entries, pos = reader.value(pos)
        if not isinstance(entries, list):
            raise reader.error(f"Entries for package {package!r} must be an array", pos)

        # Repeated assignment overwrites, as it would when evaluated
        blocks[-1][package] = entries

    if not blocks:
        raise reader.error("No 'var implementors = {}' block found", 0)

    return [
        Shard(trait_key=trait_key, payload=normalize_payload(block), source=source)
        for block in blocks
    ]


def parse_shard_file(path: Path, root: Path) -> List[Shard]:
    """
    Read and parse one shard file.

    Args:
        path: Shard file below root
        root: The ``implementors`` directory

    Returns:
        Shards declared by the file
    """
    path = Path(path)
    trait_key = trait_key_from_path(path, Path(root))
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return parse_shard_source(text, trait_key, source=str(path))
