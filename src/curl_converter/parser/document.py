"""YAML request documents -> RequestIR.

Reads the ``request`` / ``requests`` / ``collection.requests`` layout of a
request file and maps each entry onto the same IR the curl normalizer
produces, so the curl generator can run in reverse.
"""

from typing import Any
from urllib.parse import quote, urlencode

import yaml

from .base import AuthIR, BodyIR, FormField, FormFile, IRMetadata, RequestConfig, RequestIR, SslIR
from .normalizer import canonical_header_case, parse_authorization

# Body mapping keys and the IR body type each one selects
TAGGED_BODY_KEYS = {
    "json": "json",
    "form": "urlencoded",
    "raw": "raw",
    "binary": "binary",
}

DOCUMENT_ONLY_WARNINGS = {
    "expect": "expect block has no curl equivalent",
    "store": "store block has no curl equivalent",
    "when": "when condition has no curl equivalent",
    "retry": "retry config simplified in curl output",
    "snapshot": "snapshot config has no curl equivalent",
    "diff": "diff config has no curl equivalent",
}


def load_requests(text: str) -> tuple[list[dict], list[str]]:
    """Collect the raw request mappings from a YAML document.

    Returns (requests, warnings). A document that does not parse yields no
    requests and a single warning.
    """
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return [], [f"Could not parse YAML document: {e}"]

    if not isinstance(doc, dict):
        return [], []

    requests: list[dict] = []
    if isinstance(doc.get("request"), dict):
        requests.append(doc["request"])
    if isinstance(doc.get("requests"), list):
        requests.extend(doc["requests"])
    collection = doc.get("collection")
    if isinstance(collection, dict) and isinstance(collection.get("requests"), list):
        requests.extend(collection["requests"])
    return requests, []


def document_to_ir(config: RequestConfig | dict) -> RequestIR:
    """Convert a parsed YAML request into a RequestIR.

    Fields without a curl equivalent are reported as warnings.
    """
    if not isinstance(config, RequestConfig):
        config = RequestConfig.model_validate(config)

    warnings: list[str] = []
    headers: dict[str, str] = {}
    auth = _convert_auth(config)
    header_auth = None

    for key, value in (config.headers or {}).items():
        if key.lower() == "authorization":
            if auth is not None:
                warnings.append("Authorization header ignored; the auth block takes precedence")
                continue
            header_auth = parse_authorization(str(value))
            if header_auth is None:
                headers["Authorization"] = str(value).strip()
            continue
        headers[canonical_header_case(key)] = _scalar(value)

    insecure = config.insecure
    if config.ssl is not None and config.ssl.verify is False:
        insecure = True

    ssl = None
    if config.ssl is not None and (config.ssl.ca or config.ssl.cert or config.ssl.key):
        ssl = SslIR(ca=config.ssl.ca, cert=config.ssl.cert, key=config.ssl.key)

    form_data = _convert_form_data(config.form_data)
    body = _convert_body(config.body)
    if form_data is not None and body is not None:
        warnings.append("body ignored; formData takes precedence")
        body = None

    for field, message in DOCUMENT_ONLY_WARNINGS.items():
        if getattr(config, field) is not None:
            warnings.append(message)

    return RequestIR(
        name=config.name,
        method=(config.method or "GET").upper(),
        url=config.url,
        headers=headers,
        params={k: _scalar(v) for k, v in config.params.items()} if config.params else None,
        body=body,
        form_data=form_data,
        auth=auth or header_auth,
        insecure=True if insecure else None,
        follow_redirects=config.follow_redirects,
        max_redirects=config.max_redirects,
        timeout=round(config.timeout) if config.timeout is not None else None,
        proxy=config.proxy or None,
        output=config.output or None,
        http2=True if config.http2 else None,
        ssl=ssl,
        metadata=IRMetadata(source="yaml", warnings=warnings),
    )


def _convert_auth(config: RequestConfig) -> AuthIR | None:
    if config.auth is None:
        return None
    return AuthIR(
        type=config.auth.type,
        username=config.auth.username,
        password=config.auth.password,
        token=config.auth.token,
    )


def _convert_body(body: Any) -> BodyIR | None:
    if body is None:
        return None
    if isinstance(body, str):
        return BodyIR(type="raw", content=body)
    if isinstance(body, dict):
        for key, body_type in TAGGED_BODY_KEYS.items():
            if key in body:
                content = body[key]
                if body_type == "urlencoded" and isinstance(content, dict):
                    pairs = {str(k): _scalar(v) for k, v in content.items()}
                    content = urlencode(pairs, quote_via=quote)
                elif body_type != "json":
                    content = _scalar(content)
                return BodyIR(type=body_type, content=content)
    # Untagged mapping, list or scalar: the value itself is the JSON body
    return BodyIR(type="json", content=body)


def _convert_form_data(form_data: dict | None) -> dict[str, FormField] | None:
    if not form_data:
        return None
    result: dict[str, FormField] = {}
    for name, value in form_data.items():
        if isinstance(value, dict) and "file" in value:
            result[name] = FormFile(
                file=str(value["file"]),
                filename=value.get("filename"),
                content_type=value.get("contentType"),
            )
        else:
            result[name] = _scalar(value)
    return result


def _scalar(value: Any) -> str:
    """Render a YAML scalar the way it reads in the file (true, not True)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
