"""YAML generator: RequestIR -> request file text.

Keys come out in a fixed order, map-valued sections are sorted, and every
warning can be prepended as a ``# Warning:`` comment (the loss report).
"""

from typing import Any

import yaml

from curl_converter.parser.base import RequestIR


class _Flow:
    """Marks a value to be written in flow style ({a: 1} / [1, 2])."""

    def __init__(self, value: Any):
        self.value = value


class DocumentDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their parent key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)

    def ignore_aliases(self, data):
        return True


def _represent_flow(dumper: DocumentDumper, data: _Flow):
    value = data.value
    if isinstance(value, dict):
        return dumper.represent_mapping("tag:yaml.org,2002:map", value, flow_style=True)
    if isinstance(value, list):
        return dumper.represent_sequence("tag:yaml.org,2002:seq", value, flow_style=True)
    return dumper.represent_data(value)


DocumentDumper.add_representer(_Flow, _represent_flow)


def render_request(ir: RequestIR, pretty: bool = True, loss_report: bool = True) -> str:
    """Render a single IR as a ``request:`` document."""
    warnings = ir.metadata.warnings if loss_report else []
    return _with_warnings(_dump({"request": request_fields(ir, pretty=pretty)}), warnings)


def render_batch(irs: list[RequestIR], pretty: bool = True, loss_report: bool = True) -> str:
    """Render several IRs as a ``requests:`` list.

    Unnamed entries are called ``request_<n>`` after their 1-based position.
    """
    entries = [
        request_fields(ir, pretty=pretty, default_name=f"request_{index}")
        for index, ir in enumerate(irs, start=1)
    ]
    warnings = [w for ir in irs for w in ir.metadata.warnings] if loss_report else []
    return _with_warnings(_dump({"requests": entries}), warnings)


def request_fields(ir: RequestIR, pretty: bool = True, default_name: str | None = None) -> dict:
    """Build the ordered mapping for one request block."""
    fields: dict[str, Any] = {}

    name = ir.name or default_name
    if name:
        fields["name"] = name
    fields["method"] = ir.method
    fields["url"] = ir.url

    if ir.params:
        fields["params"] = _sorted(ir.params)
    if ir.headers:
        fields["headers"] = _sorted(ir.headers)

    if ir.auth is not None:
        auth: dict[str, Any] = {"type": ir.auth.type}
        if ir.auth.type == "basic":
            auth["username"] = ir.auth.username or ""
            auth["password"] = ir.auth.password or ""
        else:
            auth["token"] = ir.auth.token or ""
        fields["auth"] = auth

    if ir.body is not None:
        fields["body"] = _body_fields(ir, pretty)

    if ir.form_data:
        form: dict[str, Any] = {}
        for key, value in _sorted(ir.form_data).items():
            if isinstance(value, str):
                form[key] = value
                continue
            entry = {"file": value.file}
            if value.filename:
                entry["filename"] = value.filename
            if value.content_type:
                entry["contentType"] = value.content_type
            form[key] = entry
        fields["formData"] = form

    if ir.timeout is not None:
        fields["timeout"] = ir.timeout
    if ir.follow_redirects:
        fields["followRedirects"] = True
    if ir.max_redirects is not None:
        fields["maxRedirects"] = ir.max_redirects
    if ir.proxy:
        fields["proxy"] = ir.proxy
    if ir.insecure:
        fields["insecure"] = True
    if ir.http2:
        fields["http2"] = True
    if ir.output:
        fields["output"] = ir.output

    if ir.ssl is not None:
        ssl = {key: value for key, value in (("ca", ir.ssl.ca), ("cert", ir.ssl.cert), ("key", ir.ssl.key)) if value}
        if ssl:
            fields["ssl"] = ssl

    return fields


def _body_fields(ir: RequestIR, pretty: bool) -> dict:
    body = ir.body
    if body.type == "json":
        content = body.content
        if not pretty and isinstance(content, (dict, list)):
            content = _Flow(content)
        return {"json": content}
    if body.type == "urlencoded":
        return {"form": str(body.content)}
    if body.type == "binary":
        return {"binary": str(body.content)}
    return {"raw": str(body.content)}


def _sorted(mapping: dict) -> dict:
    return {key: mapping[key] for key in sorted(mapping)}


def _dump(data: dict) -> str:
    return yaml.dump(
        data,
        Dumper=DocumentDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )


def _with_warnings(text: str, warnings: list[str]) -> str:
    if not warnings:
        return text
    comments = "".join(f"# Warning: {' '.join(w.splitlines())}\n" for w in warnings)
    return f"{comments}\n{text}"
