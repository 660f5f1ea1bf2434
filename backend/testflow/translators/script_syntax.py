"""
Lexical helpers for Playwright script fragments.

Only what the translators need: quote-aware bracket matching, argument
splitting, object literal entries, literal decoding and a scanner that turns
``page.getByRole('x').filter({...}).click()`` into a list of call segments.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

QUOTES = "'\"`"
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = set(OPENERS.values())

IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
REGEX_LITERAL = re.compile(r"/((?:\\.|[^/\\])+)/[dgimsuy]*")
INT_LITERAL = re.compile(r"-?\d+")
FLOAT_LITERAL = re.compile(r"-?\d+\.\d+")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


@dataclass
class CallSegment:
    name: str
    raw_args: Optional[str] = None  # None for a plain property access

    @property
    def is_call(self) -> bool:
        return self.raw_args is not None

    @property
    def args(self) -> List[str]:
        return split_top_level(self.raw_args or "")

    def arg(self, position: int) -> Optional[str]:
        args = self.args
        return args[position] if position < len(args) else None

    def render(self) -> str:
        return self.name if self.raw_args is None else f"{self.name}({self.raw_args})"


@dataclass
class CallChain:
    root: str
    segments: List[CallSegment] = field(default_factory=list)
    rest: str = ""

    @property
    def calls(self) -> List[CallSegment]:
        return [segment for segment in self.segments if segment.is_call]


def skip_string(text: str, start: int) -> int:
    """Index just past the string literal opening at ``start`` (or len(text))."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return len(text)


def find_closing(text: str, open_index: int) -> int:
    """Index of the bracket matching ``text[open_index]``, -1 when unbalanced."""
    expected: List[str] = []
    i = open_index
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch in OPENERS:
            expected.append(OPENERS[ch])
        elif ch in CLOSERS:
            if not expected or expected.pop() != ch:
                return -1
            if not expected:
                return i
        i += 1
    return -1


def bracket_depth(text: str) -> int:
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        i += 1
    return depth


def split_top_level(text: str, separator: str = ",") -> List[str]:
    parts: List[str] = []
    depth = 0
    current = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append(text[current:i].strip())
            current = i + 1
        i += 1
    tail = text[current:].strip()
    if tail:
        parts.append(tail)
    return parts


def strip_line_comment(line: str) -> str:
    i = 0
    while i < len(line):
        ch = line[i]
        if ch in QUOTES:
            i = skip_string(line, i)
            continue
        if line.startswith("//", i):
            return line[:i].rstrip()
        i += 1
    return line


def _unescape(body: str) -> str:
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def string_literal(raw: Optional[str]) -> Optional[str]:
    """Decode a quoted, template or regex literal; None for anything else."""
    if raw is None:
        return None
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] in QUOTES and skip_string(raw, 0) == len(raw) and raw[-1] == raw[0]:
        return _unescape(raw[1:-1])
    match = REGEX_LITERAL.fullmatch(raw)
    if match:
        return match.group(1)
    return None


def literal(raw: Optional[str]) -> Any:
    """Decode a JS literal into a Python value. Raises ValueError when ``raw`` is an expression."""
    text = string_literal(raw)
    if text is not None:
        return text
    raw = (raw or "").strip()
    if raw in ("true", "false"):
        return raw == "true"
    if raw in ("null", "undefined"):
        return None
    if INT_LITERAL.fullmatch(raw):
        return int(raw)
    if FLOAT_LITERAL.fullmatch(raw):
        return float(raw)
    raise ValueError(f"not a literal: {raw!r}")


def int_literal(raw: Optional[str]) -> Optional[int]:
    try:
        value = literal(raw)
    except ValueError:
        return None
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def object_entries(raw: Optional[str]) -> Optional[Dict[str, str]]:
    """Split ``{ key: value, ... }`` into raw (undecoded) values per key."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.startswith("{") or find_closing(raw, 0) != len(raw) - 1:
        return None

    entries: Dict[str, str] = {}
    for entry in split_top_level(raw[1:-1]):
        key, value = _split_entry(entry)
        if key:
            entries[key] = value
    return entries


def _split_entry(entry: str):
    if entry and entry[0] in QUOTES:
        end = skip_string(entry, 0)
        key = string_literal(entry[:end])
        rest = entry[end:].lstrip()
        return key, rest[1:].strip() if rest.startswith(":") else ""

    match = IDENTIFIER.match(entry)
    if not match:
        return None, ""
    rest = entry[match.end():].lstrip()
    if rest.startswith(":"):
        return match.group(), rest[1:].strip()
    # shorthand `{ name }`
    return match.group(), match.group()


def parse_call_chain(text: str) -> CallChain:
    """
    Scan ``root.prop.call(args).call(args)...``.

    Leading property accesses form ``root`` (``page``, ``page.keyboard``,
    ``this.page``); everything from the first call on is a segment. Scanning
    stops at the first character that does not continue the chain and the
    remainder is kept in ``rest``.
    """
    tokens: List[CallSegment] = []
    pos = 0
    length = len(text)
    while True:
        while pos < length and text[pos].isspace():
            pos += 1
        match = IDENTIFIER.match(text, pos)
        if not match:
            break
        name = match.group()
        pos = match.end()
        while pos < length and text[pos].isspace():
            pos += 1
        if pos < length and text[pos] == "(":
            close = find_closing(text, pos)
            if close < 0:
                pos = match.start()
                break
            tokens.append(CallSegment(name, text[pos + 1:close]))
            pos = close + 1
        else:
            tokens.append(CallSegment(name))

        lookahead = pos
        while lookahead < length and text[lookahead].isspace():
            lookahead += 1
        if text.startswith("?.", lookahead):
            pos = lookahead + 2
        elif lookahead < length and text[lookahead] == ".":
            pos = lookahead + 1
        else:
            break

    first_call = next((i for i, token in enumerate(tokens) if token.is_call), len(tokens))
    root = ".".join(token.name for token in tokens[:first_call])
    return CallChain(root=root, segments=tokens[first_call:], rest=text[pos:].strip())
