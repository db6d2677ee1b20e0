"""Validates generated output before it is handed back to the caller."""

import yaml

from curl_converter.parser.tokenizer import tokenize


def validate_document(text: str) -> str | None:
    """Check that generated YAML parses back into a request document.

    Returns an error message, or None if the document is valid.
    """
    if not text.strip():
        return None
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return f"YAMLError: {e}"
    if not isinstance(data, dict) or not ("request" in data or "requests" in data):
        return "Generated document has no request block"
    return None


def validate_command(text: str) -> str | None:
    """Check that a generated command tokenizes back into a curl call with a URL.

    Returns an error message, or None if the command is valid.
    """
    tokens = tokenize(text)
    if not tokens or tokens[0] != "curl":
        return "Generated command does not start with curl"
    if len(tokens) < 2 or not tokens[-1] or tokens[-1].startswith("-"):
        return "Generated command has no URL"
    return None
