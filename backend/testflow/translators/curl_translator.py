import base64
import json
import logging
import re
import shlex
from typing import Dict, List, Optional
from urllib.parse import urlparse

from testflow.models import CanonicalModel, TestCase, TestData, TestSuite
from testflow.translators.url_helpers import application_name_from_url, url_origin

logger = logging.getLogger(__name__)

# flag -> what its value means
VALUE_FLAGS = {
    "-H": "header",
    "--header": "header",
    "-b": "cookie",
    "--cookie": "cookie",
    "-X": "method",
    "--request": "method",
    "-d": "data",
    "--data": "data",
    "--data-raw": "data",
    "--data-binary": "data",
    "--data-ascii": "data",
    "--data-urlencode": "data",
    "--json": "json",
    "-u": "user",
    "--user": "user",
    "-A": "agent",
    "--user-agent": "agent",
    "-e": "referer",
    "--referer": "referer",
    "--url": "url",
    "-F": "form",
    "--form": "form",
}
# flags that take a value we do not use
IGNORED_VALUE_FLAGS = {
    "-o", "--output", "-m", "--max-time", "--connect-timeout", "-w", "--write-out",
    "-x", "--proxy", "-U", "--proxy-user", "-T", "--upload-file", "-E", "--cert",
    "--cacert", "--key", "-r", "--range", "-c", "--cookie-jar", "-K", "--config",
    "--resolve", "--retry", "--limit-rate",
}
GET_FLAGS = ("-G", "--get")
HEAD_FLAGS = ("-I", "--head")

LINE_CONTINUATION = re.compile(r"\\\r?\n")
ANSI_C_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "a": "\a", "b": "\b", "f": "\f", "v": "\v",
    "e": "\x1b", "E": "\x1b", "\\": "\\", "'": "'", "\"": "\"", "?": "?",
}
ANSI_C_NUMERIC = re.compile(r"x([0-9a-fA-F]{1,2})|u([0-9a-fA-F]{1,4})|U([0-9a-fA-F]{1,8})|([0-7]{1,3})")


class CurlImportError(ValueError):
    pass


class ParsedCurl(CanonicalModel):
    method: str
    url: str
    headers: Dict[str, str] = {}
    cookies: str = ""
    body: Optional[str] = None


class CurlTranslator:
    """
    Converts a single cURL command (as copied from browser dev tools or API
    docs) into an API suite with one test case and one request.
    """

    def parse(self, command: str) -> ParsedCurl:
        tokens = self._tokenize(command)

        explicit_method: Optional[str] = None
        url: Optional[str] = None
        headers: Dict[str, str] = {}
        cookies: List[str] = []
        data: List[str] = []
        force_get = force_head = has_form = False

        i = 1
        while i < len(tokens):
            flags, consumed = self._split_flags(tokens, i)
            i += consumed

            for flag, value in flags:
                kind = VALUE_FLAGS.get(flag) if flag else None
                if flag is None:
                    if url is None:
                        url = value
                elif kind == "header":
                    self._add_header(headers, value)
                elif kind == "cookie":
                    cookies.append(value)
                elif kind == "method":
                    explicit_method = value.upper()
                elif kind == "data":
                    data.append(value)
                elif kind == "json":
                    data.append(value)
                    headers.setdefault("Content-Type", "application/json")
                    headers.setdefault("Accept", "application/json")
                elif kind == "user":
                    token = base64.b64encode(value.encode("utf-8")).decode("ascii")
                    headers.setdefault("Authorization", f"Basic {token}")
                elif kind == "agent":
                    headers["User-Agent"] = value
                elif kind == "referer":
                    headers["Referer"] = value
                elif kind == "url":
                    url = value
                elif kind == "form":
                    has_form = True
                elif flag in GET_FLAGS:
                    force_get = True
                elif flag in HEAD_FLAGS:
                    force_head = True

        if not url:
            raise CurlImportError("No URL found in cURL command")

        body = "&".join(data) if data else None
        if explicit_method:
            method = explicit_method
        elif force_head:
            method = "HEAD"
        elif force_get:
            method = "GET"
        elif body is not None or has_form:
            method = "POST"
        else:
            method = "GET"

        if force_get and body is not None:
            url = f"{url}{'&' if '?' in url else '?'}{body}"
            body = None

        cookie_string = "; ".join(cookies)
        if cookie_string and not any(name.lower() == "cookie" for name in headers):
            headers["Cookie"] = cookie_string

        logger.debug("Parsed cURL: %s %s (%d headers)", method, url, len(headers))
        return ParsedCurl(method=method, url=url, headers=headers, cookies=cookie_string, body=body)

    def to_test_data(self, parsed: ParsedCurl) -> TestData:
        return TestData(
            name=f"{parsed.method} {self._path(parsed.url)}",
            method=parsed.method,
            endpoint=parsed.url,
            headers=dict(parsed.headers),
            body=self._json_body(parsed.body),
            assertions=[],
            store={},
        )

    def generate_test_suite(self, parsed: ParsedCurl, suite_name: Optional[str] = None) -> TestSuite:
        application_name = application_name_from_url(parsed.url, "API")
        test_data = self.to_test_data(parsed)
        return TestSuite(
            suite_name=suite_name or f"{application_name} cURL Suite",
            application_name=application_name,
            type="API",
            base_url=url_origin(parsed.url),
            test_cases=[
                TestCase(name=test_data.name, type="REST", test_data=[test_data], test_steps=[])
            ],
        )

    def translate(self, command: str, suite_name: Optional[str] = None) -> TestSuite:
        return self.generate_test_suite(self.parse(command), suite_name)

    @staticmethod
    def _tokenize(command: str) -> List[str]:
        if not command or not command.strip():
            raise CurlImportError("Empty cURL command")

        normalized = LINE_CONTINUATION.sub(" ", command.strip())
        normalized = CurlTranslator._requote_ansi_c(normalized)
        try:
            tokens = shlex.split(normalized)
        except ValueError as e:
            raise CurlImportError(f"Invalid cURL command: {e}")

        if not tokens or tokens[0].rsplit("/", 1)[-1].lower() not in ("curl", "curl.exe"):
            raise CurlImportError("Command must start with 'curl'")
        return tokens

    @staticmethod
    def _requote_ansi_c(command: str) -> str:
        """Rewrite bash ``$'...'`` segments as plain POSIX quoting so shlex can split them."""
        out: List[str] = []
        quote = None
        i = 0
        while i < len(command):
            ch = command[i]
            if quote is None and command.startswith("$'", i):
                decoded, i = CurlTranslator._decode_ansi_c(command, i + 2)
                out.append(shlex.quote(decoded))
                continue
            if ch == "\\" and quote != "'":
                out.append(command[i:i + 2])
                i += 2
                continue
            if ch in "'\"":
                if quote is None:
                    quote = ch
                elif quote == ch:
                    quote = None
            out.append(ch)
            i += 1
        return "".join(out)

    @staticmethod
    def _decode_ansi_c(command: str, start: int):
        """Decode the body of ``$'...'`` starting at ``start``; returns (text, index after the closing quote)."""
        out: List[str] = []
        i = start
        while i < len(command):
            ch = command[i]
            if ch == "'":
                return "".join(out), i + 1
            if ch != "\\" or i + 1 >= len(command):
                out.append(ch)
                i += 1
                continue

            escape = command[i + 1]
            if escape in ANSI_C_ESCAPES:
                out.append(ANSI_C_ESCAPES[escape])
                i += 2
                continue
            numeric = ANSI_C_NUMERIC.match(command, i + 1)
            if numeric:
                hex_byte, short, long_, octal = numeric.groups()
                if octal is not None:
                    out.append(chr(int(octal, 8)))
                else:
                    out.append(chr(int(hex_byte or short or long_, 16)))
                i = numeric.end()
                continue
            out.append(command[i:i + 2])
            i += 2
        raise CurlImportError("Invalid cURL command: No closing quotation")

    @staticmethod
    def _split_flags(tokens: List[str], i: int):
        """
        Return ([(flag, value), ...], tokens consumed). flag is None for a
        positional argument. Short flags may be grouped (``-sX POST``,
        ``-kH 'a: b'``) or carry their value attached (``-XPOST``).
        """
        token = tokens[i]
        following = tokens[i + 1] if i + 1 < len(tokens) else ""
        if not token.startswith("-") or token == "-":
            return [(None, token)], 1

        if token.startswith("--"):
            if "=" in token:
                flag, value = token.split("=", 1)
                return [(flag, value)], 1
            if token in VALUE_FLAGS or token in IGNORED_VALUE_FLAGS:
                return [(token, following)], 2
            return [(token, "")], 1

        flags = []
        for position in range(1, len(token)):
            flag = "-" + token[position]
            if flag in VALUE_FLAGS or flag in IGNORED_VALUE_FLAGS:
                attached = token[position + 1:]
                if attached:
                    return flags + [(flag, attached)], 1
                return flags + [(flag, following)], 2
            flags.append((flag, ""))
        return flags, 1

    @staticmethod
    def _add_header(headers: Dict[str, str], raw: str) -> None:
        if ":" not in raw:
            return
        name, value = raw.split(":", 1)
        name = name.strip()
        if name:
            headers[name] = value.strip()

    @staticmethod
    def _path(url: str) -> str:
        try:
            return urlparse(url).path or "/"
        except ValueError:
            return "/"

    @staticmethod
    def _json_body(body: Optional[str]):
        if body is None:
            return None
        try:
            decoded = json.loads(body)
        except json.JSONDecodeError:
            logger.debug("cURL body is not JSON, not attaching it")
            return None
        return decoded if isinstance(decoded, (dict, list)) else None
