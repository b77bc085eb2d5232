"""
Parse error reporting for RPAL source text
Locates the failure, names the offending token and suggests likely fixes
"""

from typing import Callable, List, Optional, Tuple
import re

from pyparsing import ParseBaseException, col, lineno


# Lexical classes used to name the token found at an error position
TOKEN_PATTERNS: List[Tuple[str, str]] = [
    ("string", r"'(?:\\.|[^'\\])*'?"),
    ("integer", r"\d+"),
    ("name", r"[A-Za-z][A-Za-z0-9_]*"),
    ("operator", r"->|\*\*|>=|<=|[-+*/<>&@.,|=()]"),
    ("character", r"\S"),
]


# ============================================================================
# LOCATION HELPERS
# ============================================================================

def excerpt(source_text: str, line_num: int, col_num: int, radius: int = 2) -> str:
    """Numbered source lines around `line_num` with a caret under `col_num`"""
    lines = source_text.splitlines() or [""]
    first = max(1, line_num - radius)
    last = min(len(lines), line_num + radius)

    rendered = []
    for number in range(first, last + 1):
        rendered.append(f"{number:4d} | {lines[number - 1]}")
        if number == line_num:
            rendered.append("     | " + " " * (col_num - 1) + "^")
    return "\n".join(rendered)


def token_at(source_text: str, loc: int) -> str:
    """Describe the token starting at `loc`"""
    rest = source_text[loc:]
    stripped = rest.lstrip()
    if not stripped:
        return "end of input"
    if stripped.startswith("//"):
        return "a comment"
    for kind, pattern in TOKEN_PATTERNS:
        match = re.match(pattern, stripped)
        if match:
            return f"{kind} {match.group(0)!r}"
    return "end of input"


def expected_from(exc: ParseBaseException) -> List[str]:
    """What the grammar was looking for, from pyparsing's message"""
    match = re.match(r"Expected\s+(.+)", exc.msg or "")
    if match:
        return [match.group(1).strip()]
    return []


# ============================================================================
# SUGGESTIONS
# ============================================================================

# (test, hint) pairs; each test sees the source text, the found token and
# the expected descriptions
HINT_RULES: List[Tuple[Callable[[str, str, str], bool], str]] = [
    (lambda src, found, expected: '"' in found or '"' in src,
     "Strings are written with single quotes: 'text'"),
    (lambda src, found, expected: "';'" in found,
     "An RPAL program is one expression; there are no statement separators"),
    (lambda src, found, expected: re.search(r"\blet\b", src) is not None
     and re.search(r"\bin\b", src) is None,
     "Every 'let' needs 'in' followed by the body expression"),
    (lambda src, found, expected: "->" in src and "|" not in src,
     "A conditional needs both branches: condition -> then | else"),
    (lambda src, found, expected: re.search(r"\bfn\b", src) is not None and "." not in src,
     "A lambda is written 'fn x . body'"),
    (lambda src, found, expected: found == "end of input" and src.count("(") > src.count(")"),
     "Check for an unclosed '('"),
    (lambda src, found, expected: src.count(")") > src.count("("),
     "There is a ')' without a matching '('"),
]


def suggest_fixes(source_text: str, found: str, expected: List[str]) -> List[str]:
    expected_text = " ".join(expected)
    return [hint for test, hint in HINT_RULES if test(source_text, found, expected_text)]


# ============================================================================
# EXCEPTION AND HANDLER CLASSES
# ============================================================================

class RPALParseError(Exception):
    """RPAL syntax error carrying location and context"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    def __str__(self) -> str:
        if not self.line:
            return f"Parse error: {self.message}"

        parts = [f"Parse error at {self.filename}:{self.line}:{self.column}: {self.message}"]
        if self.expected:
            parts.append(f"  Expected: {', '.join(self.expected)}")
        if self.got:
            parts.append(f"  Found: {self.got}")
        if self.context:
            parts.append(self.context)
        for suggestion in self.suggestions:
            parts.append(f"  Hint: {suggestion}")
        return "\n".join(parts)


class RPALErrorHandler:
    """Turns pyparsing exceptions into RPAL parse errors for one source text"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance_parse_exception(self, exc: ParseBaseException) -> RPALParseError:
        loc = min(exc.loc, len(self.source_text))
        line_num = lineno(loc, self.source_text)
        col_num = col(loc, self.source_text)
        found = token_at(self.source_text, loc)
        expected = expected_from(exc)

        context = None
        if self.source_text.strip():
            context = excerpt(self.source_text, line_num, col_num)

        return RPALParseError(
            message=f"unexpected {found}",
            location=loc,
            line=line_num,
            column=col_num,
            expected=expected,
            got=found,
            context=context,
            suggestions=suggest_fixes(self.source_text, found, expected),
            filename=self.filename
        )
