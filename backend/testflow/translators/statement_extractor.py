import logging
import re
from typing import Dict, List, Optional, Tuple

from testflow.translators.script_syntax import (
    IDENTIFIER,
    QUOTES,
    bracket_depth,
    parse_call_chain,
    skip_string,
    strip_line_comment,
)

logger = logging.getLogger(__name__)

ROOT_OBJECTS = ("page", "frame", "this.page")

# identifiers that are never element handles
KNOWN_GLOBALS = {
    "page", "frame", "context", "browser", "request", "expect", "test", "this",
    "console", "Math", "JSON", "Date", "Promise", "process", "window", "document",
    "await", "new", "typeof", "return",
}

DECLARATION = re.compile(r"^(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(.+)$", re.DOTALL)
BLOCK_OPENER = re.compile(
    r"(?:=>|\))\s*\{$|^(?:else|try|finally|do)\b.*\{$|^(?:async\s+)?function\b.*\{$|^class\b.*\{$"
)
CONTINUATION_ENDINGS = ("=", ",", "+", "-", "*", "&&", "||", "?", ":", "(", "[", "{")


def _last_block(stack: List[bool]) -> int:
    for position in range(len(stack) - 1, -1, -1):
        if stack[position]:
            return position
    return -1


class _AliasScopes:
    """Block-scoped alias table. Inner declarations shadow outer ones."""

    def __init__(self) -> None:
        self._scopes: List[Dict[str, Optional[str]]] = [{}]

    def push(self) -> None:
        self._scopes.append({})

    def pop(self) -> None:
        if len(self._scopes) > 1:
            self._scopes.pop()

    def declare(self, name: str, expression: Optional[str]) -> None:
        self._scopes[-1][name] = expression

    def lookup(self, name: str) -> Tuple[bool, Optional[str]]:
        for scope in reversed(self._scopes):
            if name in scope:
                return True, scope[name]
        return False, None


class StatementExtractor:
    """
    Splits Playwright script source into awaited statements with local
    locator aliases (``const row = page.getByRole('row')``) expanded in place.
    """

    fallback_template = "page.locator('{name}')"

    def extract(self, source: str) -> List[str]:
        lines = [piece for line in self._source_lines(source) for piece in self._fragments(line)]
        scopes = _AliasScopes()
        statements: List[str] = []
        buffer: List[str] = []

        for position, line in enumerate(lines):
            next_line = lines[position + 1] if position + 1 < len(lines) else ""

            if not buffer:
                if line.startswith("}"):
                    scopes.pop()
                    if line.endswith("{"):
                        scopes.push()
                    continue
                if BLOCK_OPENER.search(line):
                    scopes.push()
                    continue

            buffer.append(line)
            if self._is_boundary(line, next_line, bracket_depth(" ".join(buffer))):
                self._flush(" ".join(buffer), scopes, statements)
                buffer = []

        if buffer:
            self._flush(" ".join(buffer), scopes, statements)

        logger.debug("Extracted %d statements", len(statements))
        return statements

    @staticmethod
    def _source_lines(source: str) -> List[str]:
        lines: List[str] = []
        in_comment = False
        for raw in source.splitlines():
            line = raw.strip()
            if in_comment:
                if "*/" not in line:
                    continue
                in_comment = False
                line = line.split("*/", 1)[1].strip()
            if line.startswith("/*"):
                if "*/" not in line:
                    in_comment = True
                    continue
                line = line.split("*/", 1)[1].strip()

            line = strip_line_comment(line)
            if not line or line.startswith("import ") or line.startswith("import{"):
                continue
            lines.append(line)
        return lines

    @staticmethod
    def _fragments(line: str) -> List[str]:
        """
        Split one source line at top-level ``;`` and at inline block braces,
        so ``test('t', async ({ page }) => { await a(); await b(); });``
        becomes an opener, two statements and a closer.
        """
        pieces: List[str] = []
        # True for a block brace, False for a bracket inside an expression
        stack: List[bool] = []
        start = 0
        i = 0
        while i < len(line):
            ch = line[i]
            if ch in QUOTES:
                i = skip_string(line, i)
                continue

            if ch == "{" and BLOCK_OPENER.search(line[start:i + 1].strip()):
                pieces.append(line[start:i + 1].strip())
                stack.append(True)
                start = i + 1
            elif ch in "([{":
                stack.append(False)
            elif ch == "}" and stack and stack[-1]:
                stack.pop()
                if line[start:i].strip():
                    pieces.append(line[start:i].strip())
                # `});` closes the block and the call that opened it
                end = i + 1
                while end < len(line) and line[end] in ")];, \t":
                    if line[end] in ")]" and stack and not stack[-1]:
                        stack.pop()
                    end += 1
                pieces.append(line[i:end].strip())
                start = end
                i = end
                continue
            elif ch in ")]}":
                if stack:
                    stack.pop()
            elif ch == ";" and False not in stack[_last_block(stack) + 1:]:
                pieces.append(line[start:i + 1].strip())
                start = i + 1
            i += 1

        tail = line[start:].strip()
        if tail:
            pieces.append(tail)
        return pieces

    @staticmethod
    def _is_boundary(line: str, next_line: str, depth: int) -> bool:
        if depth > 0:
            return next_line.startswith("await ")
        if next_line.startswith(".") or next_line.startswith("?."):
            return False
        return not line.endswith(CONTINUATION_ENDINGS)

    def _flush(self, text: str, scopes: _AliasScopes, statements: List[str]) -> None:
        text = text.strip().rstrip(";").strip()

        declaration = DECLARATION.match(text)
        if declaration:
            name, expression = declaration.groups()
            resolved = self._substitute(expression.strip(), scopes, fallback=False)
            if self._starts_with_root(resolved):
                scopes.declare(name, resolved)
            else:
                scopes.declare(name, None)
            return

        if not text.startswith("await "):
            logger.debug("Skipping non-awaited statement: %s", text[:80])
            return
        statements.append(self._substitute(text, scopes, fallback=True))

    @staticmethod
    def _starts_with_root(expression: str) -> bool:
        root = parse_call_chain(expression).root
        return root in ROOT_OBJECTS or root.split(".")[0] in ("page", "frame")

    def _substitute(self, text: str, scopes: _AliasScopes, fallback: bool) -> str:
        out: List[str] = []
        i = 0
        while i < len(text):
            ch = text[i]
            if ch in QUOTES:
                end = skip_string(text, i)
                out.append(text[i:end])
                i = end
                continue

            match = IDENTIFIER.match(text, i)
            if not match or (i > 0 and (text[i - 1].isalnum() or text[i - 1] in "_$")):
                out.append(ch)
                i += 1
                continue

            name = match.group()
            end = match.end()
            before = text[:i].rstrip()
            after = text[end:].lstrip()
            if before.endswith(".") or after.startswith(":"):
                out.append(name)
                i = end
                continue

            known, expression = scopes.lookup(name)
            if expression:
                out.append(expression)
            elif (
                fallback
                and not known
                and name not in KNOWN_GLOBALS
                and self._is_receiver(before, after)
            ):
                logger.debug("No alias for %r, using fallback locator", name)
                out.append(self.fallback_template.format(name=name))
            else:
                out.append(name)
            i = end
        return "".join(out)

    @staticmethod
    def _is_receiver(before: str, after: str) -> bool:
        # `await x.click()`, `expect(x)`, `expect(x.first())`
        if before == "await":
            return after.startswith(".")
        if before.endswith("expect(") or before.endswith("expect.soft("):
            return after.startswith(".") or after.startswith(")")
        return False
