"""Curl generator: RequestIR -> shell-safe curl command.

Commands are deterministic and spread over several lines joined with
backslash continuations.
"""

import json
import math
import re
from urllib.parse import quote, unquote, urlencode

from curl_converter.parser.base import RequestConfig, RequestIR
from curl_converter.parser.document import document_to_ir
from curl_converter.parser.normalizer import urlencode_entry

SEGMENT_SEPARATOR = " \\\n  "

_NEEDS_QUOTING_RE = re.compile(r"[^a-zA-Z0-9_./:@=,+%-]")


def shell_quote(value: str) -> str:
    """Quote a value for a POSIX shell, leaving safe values bare."""
    if "'" in value:
        escaped = (
            value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("$", "\\$")
            .replace("`", "\\`")
        )
        return f'"{escaped}"'
    if value == "" or _NEEDS_QUOTING_RE.search(value):
        return f"'{value}'"
    return value


def generate_curl(ir: RequestIR) -> str:
    """Generate a curl command from a RequestIR."""
    segments = ["curl"]

    if ir.method != "GET" or ir.body is not None or ir.form_data is not None:
        segments.append(f"-X {ir.method}")

    for key, value in ir.headers.items():
        segments.append(f"-H {shell_quote(f'{key}: {value}')}")

    if ir.auth is not None:
        if ir.auth.type == "basic":
            user = f"{ir.auth.username or ''}:{ir.auth.password or ''}"
            segments.append(f"-u {shell_quote(user)}")
        elif ir.auth.token:
            header = f"Authorization: Bearer {ir.auth.token}"
            segments.append(f"-H {shell_quote(header)}")

    if ir.form_data is not None:
        segments.extend(_form_segments(ir))
    elif ir.body is not None:
        segments.extend(_body_segments(ir))

    if ir.timeout is not None:
        segments.append(f"--max-time {math.ceil(ir.timeout / 1000)}")
    if ir.follow_redirects:
        segments.append("-L")
    if ir.max_redirects is not None:
        segments.append(f"--max-redirs {ir.max_redirects}")
    if ir.proxy:
        segments.append(f"-x {shell_quote(ir.proxy)}")
    if ir.insecure:
        segments.append("-k")
    if ir.http2:
        segments.append("--http2")
    if ir.output:
        segments.append(f"-o {shell_quote(ir.output)}")
    if ir.ssl is not None:
        if ir.ssl.ca:
            segments.append(f"--cacert {shell_quote(ir.ssl.ca)}")
        if ir.ssl.cert:
            segments.append(f"--cert {shell_quote(ir.ssl.cert)}")
        if ir.ssl.key:
            segments.append(f"--key {shell_quote(ir.ssl.key)}")

    segments.append(shell_quote(build_url(ir.url, ir.params)))
    return SEGMENT_SEPARATOR.join(segments)


def generate_curl_from_document(config: RequestConfig | dict) -> str:
    """Generate a curl command straight from a YAML request.

    Unlike ``generate_curl``, redirects are followed unless the request sets
    ``followRedirects: false``.
    """
    ir = document_to_ir(config)
    if ir.follow_redirects is None:
        ir = ir.model_copy(update={"follow_redirects": True})
    return generate_curl(ir)


def build_url(url: str, params: dict[str, str] | None) -> str:
    """Append percent-encoded query params to a URL."""
    if not params:
        return url
    query = urlencode(params, quote_via=quote)
    return f"{url}{'&' if '?' in url else '?'}{query}"


def _form_segments(ir: RequestIR) -> list[str]:
    segments = []
    for name, value in ir.form_data.items():
        if isinstance(value, str):
            segments.append(f"--form-string {shell_quote(f'{name}={value}')}")
            continue
        spec = f"@{value.file}"
        if value.filename:
            spec += f";filename={value.filename}"
        if value.content_type:
            spec += f";type={value.content_type}"
        segments.append(f"-F {shell_quote(f'{name}={spec}')}")
    return segments


def _body_segments(ir: RequestIR) -> list[str]:
    body = ir.body
    if body.type == "json":
        payload = json.dumps(body.content, separators=(",", ":"), ensure_ascii=False, default=str)
        segments = [f"-d {shell_quote(payload)}"]
        if not any(key.lower() == "content-type" for key in ir.headers):
            segments.append(f"-H {shell_quote('Content-Type: application/json')}")
        return segments
    if body.type == "urlencoded":
        return _urlencoded_segments(str(body.content))
    if body.type == "binary":
        return [f"--data-binary {shell_quote(str(body.content))}"]
    return [f"-d {shell_quote(str(body.content))}"]


def _urlencoded_segments(content: str) -> list[str]:
    """One --data-urlencode per pair, when curl would re-encode them exactly.

    Content that curl would encode differently is sent verbatim with -d.
    """
    entries = []
    for piece in content.split("&"):
        name, sep, value = piece.partition("=")
        entry = f"{name}={unquote(value)}" if sep else unquote(piece)
        if urlencode_entry(entry) != piece:
            return [f"-d {shell_quote(content)}"]
        entries.append(entry)
    return [f"--data-urlencode {shell_quote(entry)}" for entry in entries]
