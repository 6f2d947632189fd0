"""
Console log message parsing.

Browser console entries arrive as loosely structured text: quoted strings and
bare integers separated by arbitrary noise. Entries carry three header values
(a quoted source URL, then ``line:col``) ahead of the arguments the page
passed to ``console.log``.

Grammar (single left-to-right scan):

    message := (token | noise)*
    token   := '"' [^"]* '"'     -> str argument (possibly empty)
             | digit-run         -> int argument, only when not glued to a
                                    word character on either side
    noise   := any other char    -> skipped

Malformed input is never an error: an unterminated quote or a digit run
inside a word is treated as noise.
"""

import json
import math
from decimal import Decimal
import re
import string
from typing import List, Union

Arg = Union[str, int, float]

HEADER_ARG_COUNT = 3
# Longest digit run still exact as a double; longer runs become floats
MAX_EXACT_DIGITS = 15
NEWLINE_ESCAPE = "\\n"

_DIGITS = frozenset(string.digits)
_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")
_PARSE_INT_RE = re.compile(r"^\s*([+-]?)(0[xX][0-9a-fA-F]+|\d+)")
_PARSE_FLOAT_RE = re.compile(r"^\s*([+-]?(Infinity|(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?))")


def extract_args(message: str) -> List[Arg]:
    """Scan a raw console message into its ordered list of arguments."""
    args: List[Arg] = []
    pos = 0
    length = len(message)

    while pos < length:
        ch = message[pos]

        if ch == '"':
            end = message.find('"', pos + 1)
            if end != -1:
                args.append(message[pos + 1 : end])
                pos = end + 1
                continue

        elif ch in _DIGITS:
            end = pos
            while end < length and message[end] in _DIGITS:
                end += 1
            bounded_left = pos == 0 or message[pos - 1] not in _WORD_CHARS
            bounded_right = end == length or message[end] not in _WORD_CHARS
            if bounded_left and bounded_right:
                args.append(_digit_run_value(message[pos:end]))
            # A run glued to a word character is noise as a whole
            pos = end
            continue

        pos += 1

    return args


def _digit_run_value(run: str) -> Union[int, float]:
    if len(run) <= MAX_EXACT_DIGITS:
        return int(run)
    # float() takes any length and saturates to inf, like Number()
    return float(run)


def _hex_to_float(text: str) -> float:
    try:
        return float(int(text, 16))
    except OverflowError:
        return math.inf


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0 and math.copysign(1.0, value) < 0:
        return "-0"
    if value.is_integer() and abs(value) < 1e21:
        # Shortest round-trip digits, zero padded: 1.2345678901234567e19 -> 12345678901234567000
        return str(int(Decimal(repr(value))))
    return repr(value)


def _to_number(arg: Arg) -> float:
    """Numeric coercion with console semantics (``Number(x)``)."""
    if not isinstance(arg, str):
        return float(arg)
    text = arg.strip()
    if not text:
        return 0.0
    if _DECIMAL_RE.match(text):
        return float(text)
    if _HEX_RE.match(text):
        return _hex_to_float(text)
    if _INFINITY_RE.match(text):
        return -math.inf if text.startswith("-") else math.inf
    return math.nan


def _parse_int(arg: Arg) -> float:
    if not isinstance(arg, str):
        return float(arg)
    match = _PARSE_INT_RE.match(arg)
    if not match:
        return math.nan
    sign, digits = match.groups()
    value = _hex_to_float(digits) if digits[:2].lower() == "0x" else float(digits)
    return -value if sign == "-" else value


def _parse_float(arg: Arg) -> float:
    if not isinstance(arg, str):
        return float(arg)
    match = _PARSE_FLOAT_RE.match(arg)
    if not match:
        return math.nan
    literal = match.group(1)
    if literal.lstrip("+-") == "Infinity":
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def _inspect(arg: Arg) -> str:
    if not isinstance(arg, str):
        return _format_number(float(arg))
    if "'" in arg and '"' not in arg:
        return '"' + arg + '"'
    return "'" + arg.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _substitute(directive: str, arg: Arg) -> str:
    if directive == "s":
        return arg if isinstance(arg, str) else _format_number(float(arg))
    if directive == "d":
        return _format_number(_to_number(arg))
    if directive == "i":
        return _format_number(_parse_int(arg))
    if directive == "f":
        return _format_number(_parse_float(arg))
    if directive == "j":
        if isinstance(arg, float):
            return _format_number(arg) if math.isfinite(arg) else "null"
        return json.dumps(arg, ensure_ascii=False)
    if directive in ("o", "O"):
        return _inspect(arg)
    # %c carries CSS, which has no meaning in a terminal
    return ""


def format_message(args: List[Arg]) -> str:
    """
    Render arguments the way a browser console renders ``console.log(...)``.

    When the first argument is a string it is used as a printf-style template
    (``%s %d %i %f %j %o %O %c %%``). Placeholders with no argument left stay
    verbatim; leftover arguments are appended separated by spaces.
    """
    if not args:
        return ""

    first = args[0]
    out: List[str] = []
    used = 0
    join = ""

    if isinstance(first, str):
        if len(args) == 1:
            return first

        last_pos = 0
        i = 0
        while i < len(first) - 1:
            if first[i] == "%":
                i += 1
                directive = first[i]
                if used + 1 != len(args):
                    if directive in "sdifjoOc":
                        used += 1
                        out.append(first[last_pos : i - 1])
                        out.append(_substitute(directive, args[used]))
                        last_pos = i + 1
                    elif directive == "%":
                        out.append(first[last_pos:i])
                        last_pos = i + 1
                elif directive == "%":
                    out.append(first[last_pos:i])
                    last_pos = i + 1
            i += 1

        if last_pos != 0:
            used += 1
            join = " "
            out.append(first[last_pos:])

    for value in args[used:]:
        out.append(join)
        out.append(value if isinstance(value, str) else _inspect(value))
        join = " "

    return "".join(out)


def split_lines(text: str) -> List[str]:
    """Split on the literal two-character ``\\n`` escape, not on real newlines."""
    if not text:
        return []
    return text.split(NEWLINE_ESCAPE)


def parse_log_message(message: str) -> List[str]:
    """Turn one raw console entry into the output lines it should print."""
    args = extract_args(message)[HEADER_ARG_COUNT:]
    return split_lines(format_message(args))
