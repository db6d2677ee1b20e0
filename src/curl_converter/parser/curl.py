"""curl flag grammar: maps shell tokens to a CurlAst.

``FLAG_TABLE`` is the single source of truth for which flags take a value
and which are switches. ``FLAG_FIELDS`` says where a recognised flag lands
in the AST; table entries without a field are accepted and dropped.
"""

import math
from typing import Literal

from .base import CurlAst, HeaderEntry, UnsupportedFlag
from .tokenizer import tokenize

FlagArity = Literal["value", "boolean"]

FLAG_TABLE: dict[str, FlagArity] = {
    # Value flags
    "-X": "value", "--request": "value",
    "-H": "value", "--header": "value",
    "-d": "value", "--data": "value", "--data-ascii": "value",
    "--data-raw": "value",
    "--data-binary": "value",
    "--data-urlencode": "value",
    "-F": "value", "--form": "value",
    "--form-string": "value",
    "-u": "value", "--user": "value",
    "-o": "value", "--output": "value",
    "-x": "value", "--proxy": "value",
    "-m": "value", "--max-time": "value",
    "--max-redirs": "value",
    "--cacert": "value", "--cert": "value", "--key": "value",
    "-b": "value", "--cookie": "value",
    "-c": "value", "--cookie-jar": "value",
    "-A": "value", "--user-agent": "value",
    "-e": "value", "--referer": "value",
    "--connect-timeout": "value",
    "--retry": "value",
    "--retry-delay": "value",
    "-w": "value", "--write-out": "value",
    "--resolve": "value",
    "--interface": "value",
    "--local-port": "value",
    "--limit-rate": "value",
    "--ciphers": "value",
    "--proto": "value",
    # Switches
    "-G": "boolean", "--get": "boolean",
    "-I": "boolean", "--head": "boolean",
    "-L": "boolean", "--location": "boolean",
    "-k": "boolean", "--insecure": "boolean",
    "-s": "boolean", "--silent": "boolean",
    "-S": "boolean", "--show-error": "boolean",
    "-v": "boolean", "--verbose": "boolean",
    "--compressed": "boolean",
    "--http2": "boolean",
    "--http2-prior-knowledge": "boolean",
    "--http1.1": "boolean",
    "-N": "boolean", "--no-buffer": "boolean",
    "--raw": "boolean",
    "-f": "boolean", "--fail": "boolean",
    "--fail-early": "boolean",
    "--globoff": "boolean",
    "-#": "boolean", "--progress-bar": "boolean",
    "--tr-encoding": "boolean",
    "--tcp-nodelay": "boolean",
    "--tcp-fastopen": "boolean",
    "--tlsv1.2": "boolean",
    "--tlsv1.3": "boolean",
}

FLAG_FIELDS: dict[str, str] = {
    "-X": "method", "--request": "method",
    "-H": "headers", "--header": "headers",
    "-d": "data", "--data": "data", "--data-ascii": "data",
    "--data-raw": "data_raw",
    "--data-binary": "data_binary",
    "--data-urlencode": "data_urlencode",
    "-F": "form", "--form": "form",
    "--form-string": "form_string",
    "-u": "user", "--user": "user",
    "-o": "output", "--output": "output",
    "-x": "proxy", "--proxy": "proxy",
    "-m": "max_time", "--max-time": "max_time",
    "--max-redirs": "max_redirs",
    "--cacert": "cacert",
    "--cert": "cert",
    "--key": "key",
    "-b": "cookie", "--cookie": "cookie",
    "-c": "cookie_jar", "--cookie-jar": "cookie_jar",
    "-A": "user_agent", "--user-agent": "user_agent",
    "-e": "referer", "--referer": "referer",
    "-G": "get", "--get": "get",
    "-I": "head", "--head": "head",
    "-L": "location", "--location": "location",
    "-k": "insecure", "--insecure": "insecure",
    "--compressed": "compressed",
    "--http2": "http2",
    "-s": "silent", "--silent": "silent",
    "-v": "verbose", "--verbose": "verbose",
}

LIST_FIELDS = ("data", "data_raw", "data_binary", "data_urlencode", "form", "form_string")


def _seconds(value: str) -> float:
    seconds = float(value)
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(value)
    return seconds


NUMERIC_FIELDS = {"max_time": _seconds, "max_redirs": int}


def supported_flags() -> list[tuple[str, FlagArity]]:
    """Return every recognised flag with its arity, in table order."""
    return list(FLAG_TABLE.items())


def parse_curl(text: str) -> CurlAst:
    """Parse a raw curl command string into a CurlAst."""
    return parse_tokens(tokenize(text.strip()))


def parse_tokens(tokens: list[str]) -> CurlAst:
    """Parse pre-tokenized arguments into a CurlAst.

    Never raises: anything unknown is collected in ``unsupported_flags``.
    """
    collector = _AstCollector()

    i = 1 if tokens and tokens[0] == "curl" else 0
    while i < len(tokens):
        token = tokens[i]

        if not token.startswith("-"):
            if not collector.fields.get("url"):
                collector.fields["url"] = token
            i += 1
            continue

        if not token.startswith("--") and len(token) > 2:
            short = token[:2]
            if FLAG_TABLE.get(short) == "value":
                # Value glued to the flag letter: -XPOST, -d@body.json
                collector.apply(short, token[2:])
                i += 1
                continue
            letters = [f"-{ch}" for ch in token[1:]]
            if all(FLAG_TABLE.get(f) == "boolean" for f in letters):
                for flag in letters:
                    collector.apply(flag, None)
                i += 1
                continue

        arity = FLAG_TABLE.get(token)
        if arity == "value":
            if i + 1 < len(tokens):
                collector.apply(token, tokens[i + 1])
            i += 2
            continue
        if arity == "boolean":
            collector.apply(token, None)
            i += 1
            continue

        # Unknown flag: assume it takes the next token unless that looks like a flag
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        if nxt is not None and not nxt.startswith("-"):
            collector.unsupported.append(UnsupportedFlag(flag=token, value=nxt))
            i += 2
        else:
            collector.unsupported.append(UnsupportedFlag(flag=token))
            i += 1

    return collector.build()


class _AstCollector:
    """Accumulates flag values during a single pass, then builds the AST once."""

    def __init__(self):
        self.fields: dict = {}
        self.headers: list[HeaderEntry] = []
        self.lists: dict[str, list[str]] = {name: [] for name in LIST_FIELDS}
        self.unsupported: list[UnsupportedFlag] = []

    def apply(self, flag: str, value: str | None) -> None:
        field = FLAG_FIELDS.get(flag)
        if field is None:
            return

        if FLAG_TABLE[flag] == "boolean":
            self.fields[field] = True
        elif field == "headers":
            self._add_header(value)
        elif field == "method":
            self.fields["method"] = value.upper()
        elif field in self.lists:
            self.lists[field].append(value)
        elif field in NUMERIC_FIELDS:
            try:
                self.fields[field] = NUMERIC_FIELDS[field](value)
            except ValueError:
                self.unsupported.append(UnsupportedFlag(flag=flag, value=value))
        else:
            self.fields[field] = value

    def _add_header(self, raw: str) -> None:
        key, sep, value = raw.partition(":")
        key = key.strip()
        if not sep or not key:
            return
        self.headers.append(HeaderEntry(key=key, value=value.strip()))

    def build(self) -> CurlAst:
        return CurlAst(
            **self.fields,
            **self.lists,
            headers=self.headers,
            unsupported_flags=self.unsupported,
        )
