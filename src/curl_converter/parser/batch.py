"""Batch extraction: finds curl invocations inside a shell script."""

import re

# curl right after a shell operator: &&, ;, ||, $( or a backtick
_CURL_AFTER_OPERATOR_RE = re.compile(r"(?:&&|;|\|\||\$\(|`)\s*(curl\s)")

MIN_COMMAND_LENGTH = 5

SUBSTITUTION_CLOSERS = {"$(": ")", "`": "`"}


def extract_curl_commands(script: str) -> list[str]:
    """Extract curl command strings from a shell script, in file order.

    Joins backslash-continued lines, drops anything piped after the command
    and a trailing ';'.
    """
    commands: list[str] = []
    lines = [line.rstrip("\r") for line in script.split("\n")]
    i = 0

    while i < len(lines):
        line = lines[i].strip()

        if not line or line.startswith("#") or line.startswith("//"):
            i += 1
            continue

        start = find_curl_start(line)
        if start >= 0:
            cmd = line[start:]
            while cmd.endswith("\\") and i + 1 < len(lines):
                i += 1
                cmd = cmd[:-1].rstrip() + " " + lines[i].strip()

            # Cut at the closer of $(curl ...) or `curl ...`
            opener = line[:start].rstrip()
            closer = SUBSTITUTION_CLOSERS.get(opener[-2:]) or SUBSTITUTION_CLOSERS.get(opener[-1:])
            if closer:
                end = find_unquoted(cmd, closer)
                if end > 0:
                    cmd = cmd[:end].strip()

            pipe = find_unquoted_pipe(cmd)
            if pipe > 0:
                cmd = cmd[:pipe].strip()

            cmd = re.sub(r";\s*$", "", cmd).strip()

            if len(cmd) >= MIN_COMMAND_LENGTH:
                commands.append(cmd)

        i += 1

    return commands


def find_curl_start(line: str) -> int:
    """Return the index where a curl invocation starts on this line, or -1."""
    if line.startswith(("curl ", "curl\t")) or line == "curl":
        return 0
    match = _CURL_AFTER_OPERATOR_RE.search(line)
    if match:
        return match.start(1)
    return -1


def find_unquoted_pipe(text: str) -> int:
    """Index of the first '|' outside quotes, or -1."""
    return find_unquoted(text, "|")


def find_unquoted(text: str, target: str) -> int:
    """Index of the first ``target`` character outside quotes, or -1.

    Quote handling mirrors the tokenizer: no escapes inside single quotes,
    a backslash escapes the next character everywhere else.
    """
    in_single = False
    in_double = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and not in_single:
            i += 2
            continue
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == target and not in_single and not in_double:
            return i
        i += 1
    return -1
