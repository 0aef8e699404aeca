from __future__ import annotations

_VALUE_CODES = {"A", "C", "c", "F", "f", "H", "h", "Q", "q", "T", "t", "W", "w", "p"}
_TOGGLE_CODES = {"L", "l", "O", "o", "K", "k"}
_HEX_DIGITS = "0123456789abcdefABCDEF"

Directive = tuple[str, str]


def parse_mtext_content(value: str) -> tuple[str, list[Directive]]:
    """Split raw MTEXT content into plain text and formatting directives.

    Paragraph breaks (``\\P``) become newlines. Value codes such as
    ``\\H2.5x;`` or ``\\Farial|b0;`` are returned as ``("H", "2.5x")`` in
    the order they appear; toggles like ``\\L`` are returned with an empty
    value.
    """
    if not value:
        return "", []

    out: list[str] = []
    directives: list[Directive] = []
    i = 0
    n = len(value)
    while i < n:
        ch = value[i]

        if ch in "{}":
            i += 1
            continue
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            out.append("\\")
            break

        code = value[i + 1]
        if code in "\\{}":
            out.append(code)
            i += 2
            continue
        if code in {"P", "X"}:
            out.append("\n")
            i += 2
            continue
        if code == "~":
            out.append(" ")
            i += 2
            continue
        if code in _TOGGLE_CODES:
            directives.append((code, ""))
            i += 2
            continue
        if code in {"U", "u"} and i + 6 < n and value[i + 2] == "+":
            hex_digits = value[i + 3 : i + 7]
            if all(c in _HEX_DIGITS for c in hex_digits):
                out.append(chr(int(hex_digits, 16)))
                i += 7
                continue
        if code == "S":
            i += 2
            stacked: list[str] = []
            while i < n and value[i] != ";":
                token = value[i]
                if token in {"#", "^"}:
                    token = "/"
                stacked.append(token)
                i += 1
            if i < n:
                i += 1
            out.append("".join(stacked))
            continue
        if code in _VALUE_CODES:
            start = i + 2
            i = start
            while i < n and value[i] != ";":
                i += 1
            directives.append((code.upper(), value[start:i]))
            if i < n:
                i += 1
            continue

        out.append(code)
        i += 2

    return "".join(out), directives


def height_from_directives(directives: list[Directive], height: float) -> float:
    """Apply ``\\H`` directives to ``height``; the last one wins.

    ``\\H2.5;`` sets an absolute height, ``\\H0.5x;`` scales the current one.
    """
    for code, raw in directives:
        if code != "H" or not raw:
            continue
        text = raw.strip()
        relative = text.lower().endswith("x")
        if relative:
            text = text[:-1]
        try:
            number = float(text)
        except ValueError:
            continue
        if number <= 0.0:
            continue
        height = height * number if relative else number
    return height
