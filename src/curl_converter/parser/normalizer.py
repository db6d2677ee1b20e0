"""Normalization layer: CurlAst -> RequestIR.

Infers the method, classifies the body, canonicalizes headers, splits the
query string and turns everything without a YAML equivalent into warnings.
"""

import base64
import binascii
import json
import math
import re
from collections.abc import Callable
from urllib.parse import quote, unquote

from .base import AuthIR, BodyIR, CurlAst, FormField, FormFile, IRMetadata, RequestIR, SslIR

FORM_URLENCODED_RE = re.compile(r"^[^=&]+=[^&]*(&[^=&]+=[^&]*)*$")

# Characters left alone by --data-urlencode, besides letters and digits
URLENCODE_SAFE = "-_.!~*'()"


def normalize(ast: CurlAst) -> RequestIR:
    """Normalize a CurlAst into the canonical RequestIR."""
    warnings: list[str] = []

    url, params = split_url(ast.url)
    headers = normalize_headers(ast)
    auth = detect_auth(ast, headers)
    body, form_data = detect_body(ast)
    method = infer_method(ast, body, form_data)

    for f in ast.unsupported_flags:
        warnings.append(f"Unsupported curl flag: {f.flag}{f' {f.value}' if f.value else ''}")
    if ast.compressed:
        warnings.append("Flag --compressed has no YAML equivalent; curl handles decompression natively")
    if ast.cookie:
        warnings.append(f"Cookie flag (-b {ast.cookie}) stored as header; manual review recommended")
        headers["Cookie"] = ast.cookie
    if ast.cookie_jar:
        warnings.append(f"Cookie jar flag (-c {ast.cookie_jar}) has no YAML equivalent")
    if ast.user_agent and "User-Agent" not in headers:
        headers["User-Agent"] = ast.user_agent
    if ast.referer and "Referer" not in headers:
        headers["Referer"] = ast.referer

    ssl = None
    if ast.cacert or ast.cert or ast.key:
        ssl = SslIR(ca=ast.cacert, cert=ast.cert, key=ast.key)

    return RequestIR(
        method=method,
        url=url,
        headers=headers,
        params=params or None,
        body=body,
        form_data=form_data,
        auth=auth,
        insecure=True if ast.insecure else None,
        follow_redirects=True if ast.location else None,
        max_redirects=ast.max_redirs,
        timeout=round(ast.max_time * 1000) if ast.max_time is not None else None,
        proxy=ast.proxy or None,
        output=ast.output or None,
        http2=True if ast.http2 else None,
        ssl=ssl,
        metadata=IRMetadata(
            source="curl",
            warnings=warnings,
            unsupported_flags=list(ast.unsupported_flags),
        ),
    )


def split_url(raw_url: str) -> tuple[str, dict[str, str]]:
    """Split a URL at the first '?' into (base, decoded query params)."""
    base, sep, query = raw_url.partition("?")
    params: dict[str, str] = {}
    if not sep:
        return raw_url, params

    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params[unquote(key)] = unquote(value)
    return base, params


def canonical_header_case(name: str) -> str:
    """content-type -> Content-Type"""
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def normalize_headers(ast: CurlAst) -> dict[str, str]:
    headers: dict[str, str] = {}
    for h in ast.headers:
        # Authorization is handled by detect_auth
        if h.key.lower() == "authorization":
            continue
        headers[canonical_header_case(h.key)] = h.value
    return headers


def detect_auth(ast: CurlAst, headers: dict[str, str]) -> AuthIR | None:
    """Detect auth from -u or an Authorization header.

    An Authorization header that cannot be decoded is written back into
    ``headers`` verbatim.
    """
    if ast.user:
        username, _, password = ast.user.partition(":")
        return AuthIR(type="basic", username=username, password=password)

    for h in ast.headers:
        if h.key.lower() == "authorization":
            auth = parse_authorization(h.value)
            if auth is None:
                headers["Authorization"] = h.value.strip()
            return auth
    return None


def parse_authorization(value: str) -> AuthIR | None:
    """Decode a Bearer or Basic Authorization header value, or return None."""
    value = value.strip()
    scheme = value[:7].lower()
    if scheme == "bearer ":
        return AuthIR(type="bearer", token=value[7:].strip())
    if scheme.startswith("basic "):
        try:
            decoded = base64.b64decode(value[6:].strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
        username, sep, password = decoded.partition(":")
        if not sep:
            return None
        return AuthIR(type="basic", username=username, password=password)
    return None


# -- body detection ----------------------------------------------------------

BodyResult = tuple[BodyIR | None, dict[str, FormField] | None]


def detect_body(ast: CurlAst) -> BodyResult:
    """Run the body detectors in order; the first one that matches wins."""
    for detector in BODY_DETECTORS:
        result = detector(ast)
        if result is not None:
            return result
    return None, None


def _multipart_body(ast: CurlAst) -> BodyResult | None:
    if not ast.form and not ast.form_string:
        return None
    form_data: dict[str, FormField] = {}
    for entry in ast.form:
        name, sep, value = entry.partition("=")
        if sep and name:
            form_data[name] = parse_form_value(value)
    for entry in ast.form_string:
        name, sep, value = entry.partition("=")
        if sep and name:
            form_data[name] = value
    return None, form_data


def parse_form_value(value: str) -> FormField:
    """Parse the right-hand side of -F name=value.

    ``@path;filename=x;type=y`` is a file attachment, anything else a string.
    """
    if not value.startswith("@"):
        return value
    path, *options = value[1:].split(";")
    filename = None
    content_type = None
    for option in options:
        key, _, val = option.partition("=")
        if key == "filename":
            filename = val
        elif key == "type":
            content_type = val
    return FormFile(file=path, filename=filename, content_type=content_type)


def _urlencoded_body(ast: CurlAst) -> BodyResult | None:
    if not ast.data_urlencode:
        return None
    content = "&".join(urlencode_entry(entry) for entry in ast.data_urlencode)
    return BodyIR(type="urlencoded", content=content), None


def urlencode_entry(entry: str) -> str:
    """Encode one --data-urlencode argument the way curl does.

    ``name=content`` encodes only the content, ``=content`` and ``content``
    encode everything after the '='. File references (``@file``,
    ``name@file``) cannot be read here and are kept as written.
    """
    eq = entry.find("=")
    at = entry.find("@")
    if at != -1 and (eq == -1 or at < eq):
        return entry
    if eq == -1:
        return quote(entry, safe=URLENCODE_SAFE)
    name, content = entry[:eq], entry[eq + 1:]
    encoded = quote(content, safe=URLENCODE_SAFE)
    return f"{name}={encoded}" if name else encoded


def _binary_body(ast: CurlAst) -> BodyResult | None:
    if not ast.data_binary:
        return None
    first = ast.data_binary[0]
    if first.startswith("@"):
        return BodyIR(type="binary", content=first), None
    return BodyIR(type="raw", content="".join(ast.data_binary)), None


def _data_body(ast: CurlAst) -> BodyResult | None:
    entries = ast.data + ast.data_raw
    if not entries:
        return None
    return classify_data("&".join(entries)), None


BODY_DETECTORS: list[Callable[[CurlAst], BodyResult | None]] = [
    _multipart_body,
    _urlencoded_body,
    _binary_body,
    _data_body,
]


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text} overflows a float")
    return value


def _as_json(text: str) -> BodyIR | None:
    try:
        content = json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError:
        return None
    return BodyIR(type="json", content=content)


def _as_form(text: str) -> BodyIR | None:
    if FORM_URLENCODED_RE.match(text):
        return BodyIR(type="urlencoded", content=text)
    return None


# Order matters: a JSON document is never reclassified as a form
DATA_CLASSIFIERS: list[Callable[[str], BodyIR | None]] = [_as_json, _as_form]


def classify_data(text: str) -> BodyIR:
    """Classify a -d payload as json, urlencoded or raw, in that order."""
    for classifier in DATA_CLASSIFIERS:
        body = classifier(text)
        if body is not None:
            return body
    return BodyIR(type="raw", content=text)


def infer_method(ast: CurlAst, body: BodyIR | None, form_data: dict | None) -> str:
    if ast.method:
        return ast.method
    if ast.head:
        return "HEAD"
    # -G keeps the data but sends it as a query string
    if ast.get:
        return "GET"
    if body is not None or form_data is not None:
        return "POST"
    return "GET"
