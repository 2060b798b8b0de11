"""Regex patterns for Rust declarations, one per DeclarationKind.

Item patterns are anchored at the start of a line (after indentation and
any outer attributes such as ``#[derive(Debug)]``) so that type positions
such as ``-> impl Trait`` or ``&'static str`` never read as declarations.
Bindings and ``macro_rules!`` may appear mid-line.
"""

import re

from .models import DeclarationKind

# Optional visibility: pub, pub(crate), pub(in path)
VIS = r"(?:pub(?:\s*\([^)]*\))?\s+)?"
# Indentation, then any outer attributes sharing the line
LINE_START = r"^[ \t]*(?:#\[[^\]\n]*\][ \t]*)*"
IDENT = r"[A-Za-z_]\w*"

# ``[T; N]`` groups (one level of nesting) inside a type or initializer run
_BRACKETED = r"\[(?:[^\[\]\n]|\[[^\[\]\n]*\])*\]"
_STRING = r'"(?:[^"\\\n]|\\.)*"'

BINDING = re.compile(
    r"(?<![\w'*.])(?P<keyword>let|const|static)\s+(?P<mut>mut\s+)?"
    r"(?!(?:unsafe\s+|async\s+|extern\s+)*fn\b)"
    rf"(?P<name>{IDENT})(?=\s*(?:[:=;]|$))"
    rf"(?:\s*:(?!:)\s*(?P<type>(?:{_BRACKETED}|[^=;\n\[])+))?"
    rf"(?:\s*=\s*(?P<init>(?:{_BRACKETED}|{_STRING}|[^;\n])*))?",
    re.MULTILINE,
)

# Signature head up to the opening parenthesis of the parameter list
FUNCTION = re.compile(
    LINE_START
    + r"(?P<qual>"
    + VIS
    + r"(?:default\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?"
    r'(?:extern\s+(?:"[^"]*"\s+)?)?)'
    rf"fn\s+(?P<name>{IDENT})\s*"
    r"(?:<(?P<generics>[^{};]*?)>)?\s*\(",
    re.MULTILINE,
)

RETURN_TYPE = re.compile(r"\s*->\s*(?P<ret>[^{;]+)")

AGGREGATE = {
    kind: re.compile(
        LINE_START + rf"(?P<qual>{VIS}){kind.value}\s+(?P<name>{IDENT})",
        re.MULTILINE,
    )
    for kind in (DeclarationKind.STRUCT, DeclarationKind.ENUM, DeclarationKind.UNION)
}

TRAIT = re.compile(
    LINE_START + VIS + rf"(?:unsafe\s+)?(?:auto\s+)?trait\s+(?P<name>{IDENT})",
    re.MULTILINE,
)

IMPL = re.compile(
    LINE_START
    + r"(?:unsafe\s+)?(?:default\s+)?impl\b\s*"
    r"(?:<(?P<generics>[^{;]*?)>)?\s*"
    r"(?:(?P<negative>!)?(?P<trait>[A-Za-z_][\w:]*(?:<[^{;]*?>)?)\s+for\s+)?"
    r"(?P<target>&?(?:'\w+\s+)?(?:mut\s+)?(?:dyn\s+)?[A-Za-z_][\w:]*)",
    re.MULTILINE,
)

TYPE_ALIAS = re.compile(
    LINE_START
    + VIS
    + rf"type\s+(?P<name>{IDENT})\s*(?:<(?P<generics>[^=;]*?)>)?\s*=\s*"
    rf"(?P<definition>(?:{_BRACKETED}|[^;\[])+);",
    re.MULTILINE,
)

MODULE = re.compile(LINE_START + VIS + rf"mod\s+(?P<name>{IDENT})", re.MULTILINE)

MACRO = re.compile(rf"\bmacro_rules!\s*(?P<name>{IDENT})")

USE = re.compile(LINE_START + VIS + r"use\s+(?P<path>[^;]+);", re.MULTILINE)

EXTERN_CRATE = re.compile(
    LINE_START + VIS + rf"extern\s+crate\s+(?P<name>{IDENT})(?:\s+as\s+(?P<alias>{IDENT}))?",
    re.MULTILINE,
)

EXTERN_BLOCK = re.compile(
    LINE_START + r'(?:unsafe\s+)?extern\s*(?:"(?P<abi>[^"]*)")?\s*\{',
    re.MULTILINE,
)

# Parameters that stand for the receiver: self, mut self, &self, &'a mut self, self: Box<Self>
SELF_PARAM = re.compile(r"^(?:&\s*(?:'\w+\s+)?)?(?:mut\s+)?self\b")

WHERE_CLAUSE = re.compile(r"\bwhere\b.*$", re.DOTALL)
WHITESPACE = re.compile(r"\s+")


def squash(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return WHITESPACE.sub(" ", text).strip()
