"""Heuristic size estimator: type text (+ initializer) -> stack/heap bytes.

The rule table is ordered and first match wins. Rules test the outermost
type constructor, so containers are classified before the primitives they
may wrap (``Vec<u8>`` is a vector, not a byte) and wider integer rules sit
ahead of narrower ones (``i128`` before ``i8``). A fixed array ``[T; N]``
is charged its literal length N, whatever T is.

Heap sizes for growable strings, vectors, maps and sets are refined from
the initializer expression when one is available:

    empty constructor        String::new(), vec![], HashMap::default()  -> 0
    string literal           String::from("hello")                     -> 5
    capacity reservation     Vec::with_capacity(100)                   -> 100 x element
    inline list              vec![1, 2, 3] / [0u8; 512]                 -> count x element
    anything else            class default

Every failure to interpret a literal falls back to the class default.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .models import TypeEstimate

# Leading path qualifiers (std::collections::, ::core::, crate::) before a type name
_PATH = r"^(?:(?:::)?[A-Za-z_]\w*::)*"

STRING = "string"
VECTOR = "vector"
MAP = "map"
SET = "set"
ARRAY = "array"
TUPLE = "tuple"

DEFAULT_ESTIMATE = TypeEstimate(8, 0)
ARRAY_FALLBACK = TypeEstimate(24, 0)

DEFAULT_STRING_HEAP = 64
DEFAULT_VECTOR_LENGTH = 16
MAP_ENTRY_SIZE = 64
DEFAULT_ELEMENT_SIZE = 8


@dataclass(frozen=True)
class TypeRule:
    """One row of the estimator table."""

    name: str
    pattern: re.Pattern
    stack: int
    heap: int = 0
    category: Optional[str] = None

    def matches(self, label: str) -> bool:
        return self.pattern.search(label) is not None


def _rule(name: str, regex: str, stack: int, heap: int = 0, category: Optional[str] = None):
    return TypeRule(name, re.compile(regex), stack, heap, category)


RULES: tuple[TypeRule, ...] = (
    _rule("slice_ref", r"^&(?:'\w+\s*)?(?:mut\s+)?(?:str\b|\[[^;\]]*\])", 16),
    _rule("reference", r"^&", 8),
    _rule("array", r"^\[.*;.*\]$", 0, category=ARRAY),
    _rule("tuple", r"^\(.*\)$", 0, category=TUPLE),
    _rule("string", _PATH + r"String\b", 24, category=STRING),
    _rule("vector", _PATH + r"(?:Vec|VecDeque|BinaryHeap)\b", 24, category=VECTOR),
    _rule("map", _PATH + r"(?:HashMap|BTreeMap)\b", 48, category=MAP),
    _rule("set", _PATH + r"(?:HashSet|BTreeSet)\b", 32, category=SET),
    _rule("box", _PATH + r"Box\b", 8, 8),
    _rule("shared", _PATH + r"(?:Rc|Arc)\b", 8, 24),
    _rule("optional", _PATH + r"(?:Option|Result)\b", 24),
    _rule("int128", _PATH + r"(?:i128|u128)\b", 16),
    _rule("word", _PATH + r"(?:i64|u64|f64|isize|usize)\b|^\*\s*(?:const|mut)\b", 8),
    _rule("int32", _PATH + r"(?:i32|u32|f32)\b", 4),
    _rule("int16", _PATH + r"(?:i16|u16)\b", 2),
    _rule("byte", _PATH + r"(?:i8|u8|bool)\b", 1),
    _rule("char", _PATH + r"char\b", 4),
)

_WHITESPACE = re.compile(r"\s+")
_ARRAY_PARTS = re.compile(r"^\[.*;(?P<length>[^;\]]*)\]$", re.DOTALL)
_INTEGER = re.compile(r"^(?P<digits>0x[0-9a-fA-F_]+|[0-9][0-9_]*)(?:[iu](?:8|16|32|64|128|size))?$")

_EMPTY_CONSTRUCTOR = re.compile(
    r"::\s*(?:new|default)\s*\(\s*\)|^Default::default\(\s*\)|^vec!\s*\[\s*\]$|^\[\s*\]$|^\"\"$"
)
_STRING_LITERAL = re.compile(r'"((?:[^"\\]|\\.)*)"')
_CAPACITY = re.compile(r"\bwith_capacity\s*\(\s*([^()]*?)\s*\)")

_INFERENCE = (
    (re.compile(r'^"(?:[^"\\]|\\.)*"\s*\.\s*(?:to_string|to_owned|into)\s*\(|^format!'), "String"),
    (re.compile(r'^"'), "&str"),
    (re.compile(r"^b\""), "&[u8]"),
    (re.compile(r"^'(?:[^'\\]|\\.[^']*)'$"), "char"),
    (re.compile(r"^(?:true|false)$"), "bool"),
    (re.compile(r"^vec!"), "Vec"),
    (re.compile(r"^Some\s*\(|^None$"), "Option"),
    (re.compile(r"^(?:Ok|Err)\s*\("), "Result"),
)
_CONSTRUCTOR_TYPE = re.compile(
    _PATH
    + r"(?P<name>String|Vec|VecDeque|BinaryHeap|HashMap|BTreeMap|HashSet|BTreeSet|Box|Rc|Arc)"
    r"\s*(?:::|<)"
)
_INT_LITERAL = re.compile(
    r"^-?(?:0x[0-9a-fA-F_]+|[0-9][0-9_]*)(?P<suffix>[iu](?:8|16|32|64|128|size))?$"
)
_FLOAT_LITERAL = re.compile(r"^-?[0-9][0-9_]*\.[0-9_]*(?:[eE][+-]?\d+)?(?P<suffix>f32|f64)?$")


def parse_count(text: str) -> Optional[int]:
    """Parse a non-negative integer literal (``1_000``, ``64usize``, ``0x10``).

    Returns None for anything else, including negative numbers and constants.
    """
    m = _INTEGER.match(text.strip())
    if m is None:
        return None
    digits = m.group("digits").replace("_", "")
    try:
        return int(digits, 16) if digits.lower().startswith("0x") else int(digits)
    except ValueError:
        return None


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` outside (), [] and {}; blank segments dropped.

    Angle brackets are not tracked, so ``HashMap<K, V>`` still splits.
    """
    segments: list[str] = []
    depth = 0
    current: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            segments.append("".join(current))
            current = []
            continue
        current.append(ch)
    segments.append("".join(current))
    return [s.strip() for s in segments if s.strip()]


def balanced_span(text: str, start: int, open_ch: str, close_ch: str) -> Optional[tuple[int, int]]:
    """Locate the first ``open_ch`` at or after ``start`` and its matching close.

    Returns ``(open_index, close_index)`` or None when either is missing.
    """
    open_index = text.find(open_ch, start)
    if open_index == -1:
        return None
    depth = 0
    for i in range(open_index, len(text)):
        ch = text[i]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return open_index, i
    return None


def generic_argument(label: str) -> Optional[str]:
    """Text between the first ``<`` and the last ``>``."""
    start = label.find("<")
    end = label.rfind(">")
    if start == -1 or end <= start:
        return None
    inner = label[start + 1 : end].strip()
    return inner or None


class SizeEstimator:
    """Maps a type label and optional initializer to a TypeEstimate.

    Pure: the same inputs always produce the same estimate.
    """

    def __init__(self, rules: tuple[TypeRule, ...] = RULES) -> None:
        self.rules = rules

    def classify(self, label: str) -> Optional[TypeRule]:
        """First rule matching ``label``, or None for the default class."""
        for rule in self.rules:
            if rule.matches(label):
                return rule
        return None

    def estimate(self, type_label: Optional[str], initializer: Optional[str] = None) -> TypeEstimate:
        label = _WHITESPACE.sub(" ", type_label or "").strip()
        init = initializer.strip() if initializer else None

        rule = self.classify(label)
        if rule is None and init:
            inferred = infer_type(init)
            if inferred is not None:
                label = inferred
                rule = self.classify(label)
        if rule is None:
            return DEFAULT_ESTIMATE

        if rule.category == ARRAY:
            return self._array(label)
        if rule.category == TUPLE:
            return self._tuple(label)
        if rule.category in (STRING, VECTOR, MAP, SET):
            return TypeEstimate(rule.stack, self._heap(rule.category, label, init))
        return TypeEstimate(rule.stack, rule.heap)

    def element_size(self, label: str) -> int:
        """Per-element size for a vector-like label, from its generic argument."""
        inner = generic_argument(label)
        if inner is None:
            return DEFAULT_ELEMENT_SIZE
        return self.estimate(inner).stack

    # ── Composite types ────────────────────────────────────────

    def _array(self, label: str) -> TypeEstimate:
        m = _ARRAY_PARTS.match(label)
        if m is None:
            return ARRAY_FALLBACK
        length = parse_count(m.group("length"))
        if length is None:
            return ARRAY_FALLBACK
        return TypeEstimate(length, 0)

    def _tuple(self, label: str) -> TypeEstimate:
        parts = split_top_level(label[1:-1])
        stack = sum(self.estimate(p).stack for p in parts)
        return TypeEstimate(stack, 0)

    # ── Heap heuristics ────────────────────────────────────────

    def _heap(self, category: str, label: str, init: Optional[str]) -> int:
        if category == STRING:
            per_entry = 1
            default = DEFAULT_STRING_HEAP
        elif category == VECTOR:
            per_entry = self.element_size(label)
            default = per_entry * DEFAULT_VECTOR_LENGTH
        else:
            per_entry = MAP_ENTRY_SIZE
            default = 0

        if not init:
            return default

        if _EMPTY_CONSTRUCTOR.search(init):
            return 0

        if category == STRING:
            literal = _STRING_LITERAL.search(init)
            if literal is not None:
                return len(literal.group(1).encode("utf-8"))

        capacity = _CAPACITY.search(init)
        if capacity is not None:
            count = parse_count(capacity.group(1))
            return default if count is None else count * per_entry

        if category != STRING:
            count = _inline_count(init)
            if count is not None:
                return count * per_entry

        return default


def _inline_count(init: str) -> Optional[int]:
    """Element count of the first bracketed list in ``init``.

    ``[v; n]`` counts as n. Unbalanced or malformed lists give None.
    """
    span = balanced_span(init, 0, "[", "]")
    if span is None:
        return None
    body = init[span[0] + 1 : span[1]]
    repeat = split_top_level(body, ";")
    if len(repeat) == 2:
        return parse_count(repeat[1])
    if len(repeat) > 2:
        return None
    return len(split_top_level(body))


def infer_type(initializer: str) -> Optional[str]:
    """Best-effort type name for an unannotated binding's initializer."""
    init = initializer.strip()
    for pattern, type_name in _INFERENCE:
        if pattern.search(init):
            return type_name
    m = _CONSTRUCTOR_TYPE.match(init)
    if m is not None:
        return m.group("name")
    m = _INT_LITERAL.match(init)
    if m is not None:
        return m.group("suffix") or "i32"
    m = _FLOAT_LITERAL.match(init)
    if m is not None:
        return m.group("suffix") or "f64"
    return None


_DEFAULT_ESTIMATOR = SizeEstimator()


def estimate(type_label: Optional[str], initializer: Optional[str] = None) -> TypeEstimate:
    """Estimate with the default rule table."""
    return _DEFAULT_ESTIMATOR.estimate(type_label, initializer)
