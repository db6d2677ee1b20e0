"""End-to-end conversions: curl command, shell script or YAML document in,
generated text plus warnings out.

Nothing here raises on bad input: problems end up in ``warnings``.
"""

import logging

from pydantic import BaseModel, ValidationError

from curl_converter.generator.curl import generate_curl
from curl_converter.generator.document import render_batch, render_request
from curl_converter.generator.validator import validate_command, validate_document
from curl_converter.parser.base import CurlAst, RequestIR
from curl_converter.parser.batch import extract_curl_commands
from curl_converter.parser.curl import parse_curl
from curl_converter.parser.document import document_to_ir, load_requests
from curl_converter.parser.normalizer import normalize
from curl_converter.parser.tokenizer import tokenize

logger = logging.getLogger(__name__)


class ConvertOptions(BaseModel):
    pretty: bool = True  # block-style JSON bodies
    loss_report: bool = True  # warnings as leading comments
    batch: bool = False  # always emit a requests: list
    debug: bool = False


class DebugInfo(BaseModel):
    tokens: list[str] | None = None
    ast: CurlAst | None = None
    ir: RequestIR | list[RequestIR] | None = None


class ConvertResult(BaseModel):
    output: str
    warnings: list[str] = []
    debug: DebugInfo | None = None


def convert_curl_to_yaml(command: str, options: ConvertOptions | None = None) -> ConvertResult:
    """Convert a single curl command to a YAML request document."""
    options = options or ConvertOptions()
    ast = parse_curl(command)
    ir = normalize(ast)
    logger.debug("Parsed %s %s with %d warnings", ir.method, ir.url, len(ir.metadata.warnings))

    warnings = list(ir.metadata.warnings)
    if not ast.url:
        warnings.append("No URL found in curl command")

    if options.batch:
        output = render_batch([ir], pretty=options.pretty, loss_report=options.loss_report)
    else:
        output = render_request(ir, pretty=options.pretty, loss_report=options.loss_report)
    _check(validate_document(output), warnings)

    result = ConvertResult(output=output, warnings=warnings)
    if options.debug:
        result.debug = DebugInfo(tokens=tokenize(command.strip()), ast=ast, ir=ir)
    return result


def convert_script_to_yaml(script: str, options: ConvertOptions | None = None) -> ConvertResult:
    """Convert every curl command found in a shell script to YAML."""
    options = options or ConvertOptions()
    commands = extract_curl_commands(script)
    logger.info("Found %d curl commands", len(commands))

    if not commands:
        return ConvertResult(output="", warnings=["No curl commands found in file"])

    irs = [_convert_command(command, index) for index, command in enumerate(commands, start=1)]
    warnings = [w for ir in irs for w in ir.metadata.warnings]

    if len(irs) == 1 and not options.batch:
        output = render_request(irs[0], pretty=options.pretty, loss_report=options.loss_report)
    else:
        output = render_batch(irs, pretty=options.pretty, loss_report=options.loss_report)
    _check(validate_document(output), warnings)

    result = ConvertResult(output=output, warnings=warnings)
    if options.debug:
        result.debug = DebugInfo(ir=irs[0] if len(irs) == 1 else irs)
    return result


def _convert_command(command: str, index: int) -> RequestIR:
    ir = normalize(parse_curl(command))
    return ir.model_copy(update={"name": f"request_{index}"})


def convert_yaml_to_curl(text: str, options: ConvertOptions | None = None) -> ConvertResult:
    """Convert every request in a YAML document to a curl command."""
    options = options or ConvertOptions()
    requests, warnings = load_requests(text)
    logger.info("Found %d requests", len(requests))

    if not requests:
        return ConvertResult(output="", warnings=warnings or ["No requests found in YAML file"])

    irs: list[RequestIR] = []
    commands: list[str] = []
    for index, request in enumerate(requests, start=1):
        try:
            ir = document_to_ir(request)
        except ValidationError as e:
            logger.debug("Request %d failed validation: %s", index, e)
            warnings.append(f"Skipping request {index}: {_describe(e)}")
            continue
        command = generate_curl(ir)
        warnings.extend(ir.metadata.warnings)
        _check(validate_command(command), warnings)
        irs.append(ir)
        commands.append(command)

    result = ConvertResult(output="\n\n".join(commands), warnings=warnings)
    if options.debug:
        result.debug = DebugInfo(ir=irs)
    return result


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


def _check(error: str | None, warnings: list[str]) -> None:
    if error:
        logger.warning("Generated output failed validation: %s", error)
        warnings.append(error)
