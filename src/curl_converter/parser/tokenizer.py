"""Shell-style tokenizer for curl command lines.

Handles single quotes, double quotes, backslash escapes and backslash
line continuations. Quoting is removed from the returned tokens.
"""

WHITESPACE = (" ", "\t", "\n", "\r")

# Characters a backslash may escape inside double quotes
DOUBLE_QUOTE_ESCAPES = ('"', "\\", "$", "`")


def tokenize(text: str) -> list[str]:
    """Split a shell command string into a list of unquoted tokens."""
    tokens: list[str] = []
    current: list[str] = []
    # A quoted empty string ('' or "") is still a token
    pending = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch == "\\" and i + 1 < n and text[i + 1] in ("\n", "\r"):
            i += 2
            if text[i - 1] == "\r" and i < n and text[i] == "\n":
                i += 1
            while i < n and text[i] in (" ", "\t"):
                i += 1
            continue

        if ch in WHITESPACE:
            if current or pending:
                tokens.append("".join(current))
                current = []
                pending = False
            i += 1
            continue

        if ch == "'":
            pending = True
            end = text.find("'", i + 1)
            if end == -1:
                current.append(text[i + 1:])
                break
            current.append(text[i + 1:end])
            i = end + 1
            continue

        if ch == '"':
            pending = True
            i += 1
            while i < n and text[i] != '"':
                if text[i] == "\\" and i + 1 < n:
                    nxt = text[i + 1]
                    if nxt in ("\n", "\r"):
                        i += 2
                        if nxt == "\r" and i < n and text[i] == "\n":
                            i += 1
                        continue
                    if nxt in DOUBLE_QUOTE_ESCAPES:
                        current.append(nxt)
                        i += 2
                        continue
                current.append(text[i])
                i += 1
            i += 1  # closing quote
            continue

        if ch == "\\" and i + 1 < n:
            current.append(text[i + 1])
            i += 2
            continue

        current.append(ch)
        i += 1

    if current or pending:
        tokens.append("".join(current))

    return tokens
