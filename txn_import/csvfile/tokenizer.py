from __future__ import annotations

"""Single-line CSV tokenizer.

Comma-delimited, double-quote quoting, ``""`` inside quotes is a literal quote.
Every field is stripped. An unbalanced quote is not an error: the rest of the
line is read as quoted.
"""

__all__ = [
    "tokenize_line",
]

DELIMITER = ","
QUOTE = '"'


def tokenize_line(line: str) -> list[str]:
    """Split one CSV record line into trimmed field strings.

    >>> tokenize_line('a,"b,c",d')
    ['a', 'b,c', 'd']
    >>> tokenize_line('a,"b""c",d')
    ['a', 'b"c', 'd']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 1  # skip escaped quote
            else:
                in_quotes = not in_quotes
        elif ch == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    # last field is pushed even when empty (trailing comma)
    fields.append("".join(current).strip())
    return fields
