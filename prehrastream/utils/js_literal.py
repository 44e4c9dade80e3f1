import json
import re
from typing import Any, List, Tuple

from prehrastream.core.exceptions import ParseFailure

# ===========================
# Tokens
# ===========================
# Player scripts embed JS literals, not JSON
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_KEYWORDS = {"true": "true", "false": "false", "null": "null", "undefined": "null"}
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_QUOTES = "\"'`"

# ===========================
# Lexing Helpers
# ===========================
def _read_string(text: str, start: int) -> Tuple[str, int]:
    quote = text[start]
    chars: List[str] = []
    i = start + 1
    length = len(text)

    while i < length:
        ch = text[i]
        if ch == "\\":
            i += 1
            if i >= length:
                break
            escape = text[i]
            if escape in "ux":
                width = 4 if escape == "u" else 2
                digits = text[i + 1:i + 1 + width]
                if len(digits) != width:
                    raise ParseFailure(f"Truncated \\{escape} escape at {i}")
                try:
                    chars.append(chr(int(digits, 16)))
                except ValueError:
                    raise ParseFailure(f"Invalid \\{escape} escape at {i}")
                i += 1 + width
                continue
            if escape == "\n":
                i += 1
                continue
            chars.append(_ESCAPES.get(escape, escape))
            i += 1
            continue
        if ch == quote:
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1

    raise ParseFailure("Unterminated string literal")


def _skip_blank(text: str, i: int) -> int:
    while i < len(text):
        if text[i].isspace():
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = len(text) if end == -1 else end + 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ParseFailure("Unterminated comment")
            i = end + 2
        else:
            break
    return i


def _number_token(token: str) -> str:
    if any(c in token for c in ".eE"):
        return json.dumps(float(token))
    return str(int(token))

# ===========================
# Conversion
# ===========================
def to_json(text: str) -> str:
    out: List[str] = []
    i = 0
    length = len(text)

    while True:
        i = _skip_blank(text, i)
        if i >= length:
            break
        ch = text[i]

        if ch in _QUOTES:
            value, i = _read_string(text, i)
            out.append(json.dumps(value))
            continue

        if ch == ",":
            following = _skip_blank(text, i + 1)
            # Trailing comma
            if following < length and text[following] in "]}":
                i = following
                continue
            out.append(",")
            i += 1
            continue

        if ch in "{}[]:":
            out.append(ch)
            i += 1
            continue

        if ch.isdigit() or ch in "-.":
            match = _NUMBER.match(text, i)
            if not match:
                raise ParseFailure(f"Invalid number at {i}")
            out.append(_number_token(match.group(0)))
            i = match.end()
            continue

        match = _IDENTIFIER.match(text, i)
        if match:
            word = match.group(0)
            out.append(_KEYWORDS.get(word, json.dumps(word)))
            i = match.end()
            continue

        raise ParseFailure(f"Unexpected character {ch!r} at {i}")

    return "".join(out)


def parse_js_literal(text: str) -> Any:
    if not text or not text.strip():
        raise ParseFailure("Empty literal")

    try:
        return json.loads(to_json(text))
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Invalid literal: {e.msg}")
