"""Aggregate body parser: struct, enum and union sizing from their bodies."""

from __future__ import annotations

import re
from typing import Optional

from .estimator import SizeEstimator, balanced_span, split_top_level
from .models import DeclarationKind, TypeEstimate

DISCRIMINANT_SIZE = 8
UNKNOWN_AGGREGATE = TypeEstimate(8, 0)

_LINE_COMMENT = re.compile(r"//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_ATTRIBUTE = re.compile(r"#!?\[[^\]]*\]")
_FIELD = re.compile(
    r"^(?:pub(?:\s*\([^)]*\))?\s+)?(?P<name>[A-Za-z_]\w*)\s*:(?!:)\s*(?P<type>.+)$", re.DOTALL
)
_VARIANT = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*(?P<payload>.*)$", re.DOTALL)
# Name, optional generics, then a tuple payload: ``struct P<T>(T, u8);``
_TUPLE_HEAD = re.compile(r"\s*(?:<[^{;(]*>)?\s*\(")


def _clean(body: str) -> str:
    body = _BLOCK_COMMENT.sub(" ", body)
    body = _LINE_COMMENT.sub(" ", body)
    return _ATTRIBUTE.sub(" ", body)


def find_body(text: str, start: int) -> Optional[str]:
    """Interior of the first ``{...}`` at or after ``start``.

    A ``;`` before the first ``{`` ends the declaration (unit and tuple
    structs), so no body is returned in that case.
    """
    span = balanced_span(text, start, "{", "}")
    if span is None:
        return None
    semicolon = text.find(";", start, span[0])
    if semicolon != -1:
        return None
    return text[span[0] + 1 : span[1]]


def parse_body(text: str, start: int) -> list[str]:
    """Top-level comma-separated field or variant segments of an aggregate."""
    body = find_body(text, start)
    if body is None:
        return []
    return split_top_level(_clean(body))


class AggregateSizer:
    """Computes aggregate sizes with a SizeEstimator for the member types."""

    def __init__(self, estimator: Optional[SizeEstimator] = None) -> None:
        self.estimator = estimator or SizeEstimator()

    def size_of(self, kind: DeclarationKind, text: str, name_end: int) -> TypeEstimate:
        """Size of the aggregate whose name ends at ``name_end`` in ``text``."""
        if kind is DeclarationKind.ENUM:
            return self.enum_size(parse_body(text, name_end))
        segments = parse_body(text, name_end)
        if not segments:
            segments = self._tuple_fields(text, name_end)
            if segments:
                return self._sum(segments)
        return self.struct_size(segments)

    def struct_size(self, segments: list[str]) -> TypeEstimate:
        """Sum of ``name: Type`` fields; ``(8, 0)`` when no field matched."""
        stack = heap = 0
        matched = False
        for segment in segments:
            m = _FIELD.match(segment)
            if m is None:
                continue
            matched = True
            field_estimate = self.estimator.estimate(m.group("type"))
            stack += field_estimate.stack
            heap += field_estimate.heap
        if not matched:
            return UNKNOWN_AGGREGATE
        return TypeEstimate(stack, heap)

    def enum_size(self, segments: list[str]) -> TypeEstimate:
        """Discriminant plus the largest variant; heap is not modelled."""
        largest = 0
        for segment in segments:
            largest = max(largest, self.variant_size(segment))
        return TypeEstimate(DISCRIMINANT_SIZE + largest, 0)

    def variant_size(self, segment: str) -> int:
        m = _VARIANT.match(segment.strip())
        if m is None:
            return 0
        payload = m.group("payload").strip()
        if payload.startswith("("):
            span = balanced_span(payload, 0, "(", ")")
            inner = payload[1 : span[1]] if span else payload[1:]
            return sum(self.estimator.estimate(t).stack for t in split_top_level(inner))
        if payload.startswith("{"):
            span = balanced_span(payload, 0, "{", "}")
            inner = payload[1 : span[1]] if span else payload[1:]
            return sum(
                self.estimator.estimate(f.group("type")).stack
                for f in map(_FIELD.match, split_top_level(inner))
                if f is not None
            )
        return 0

    def _tuple_fields(self, text: str, name_end: int) -> list[str]:
        head = _TUPLE_HEAD.match(text, name_end)
        if head is None:
            return []
        span = balanced_span(text, head.end() - 1, "(", ")")
        if span is None:
            return []
        return split_top_level(_clean(text[span[0] + 1 : span[1]]))

    def _sum(self, types: list[str]) -> TypeEstimate:
        stack = heap = 0
        for type_text in types:
            # Tuple fields may carry a visibility: ``pub(crate) u8``
            type_text = re.sub(r"^pub(?:\s*\([^)]*\))?\s+", "", type_text)
            field_estimate = self.estimator.estimate(type_text)
            stack += field_estimate.stack
            heap += field_estimate.heap
        return TypeEstimate(stack, heap)
