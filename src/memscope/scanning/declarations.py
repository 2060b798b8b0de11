"""Declaration scanner: pattern-based extraction of Rust declarations.

Each DeclarationKind has its own matcher. Every matcher runs over the whole
text independently, so overlapping matches across kinds are kept as-is.
Matches whose line is a ``//`` comment are dropped; block comments and
multi-line strings are not tracked.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

from . import patterns
from .estimator import balanced_span, split_top_level
from .lines import LineLocator
from .models import DeclarationKind, RawMatch

INFERRED = "inferred"

_USE_BRACES = re.compile(r"[{}]")

Matcher = Callable[[str, LineLocator], Iterator[RawMatch]]


def count_params(params: str) -> int:
    """Count parameters, ignoring a leading receiver and blank segments."""
    segments = split_top_level(params)
    if segments and patterns.SELF_PARAM.match(segments[0]):
        segments = segments[1:]
    return len(segments)


def function_label(param_count: int, ret: str) -> str:
    if ret:
        return f"fn({param_count}) -> {ret}"
    return f"fn({param_count})"


def use_display_name(path: str) -> str:
    """Imported name(s) of a use path: ``fmt`` or ``HashMap, HashSet``."""
    brace = path.find("{")
    last = path[brace:] if brace != -1 else path.split("::")[-1]
    return patterns.squash(_USE_BRACES.sub("", last))


def _make(
    locator: LineLocator,
    kind: DeclarationKind,
    match: re.Match,
    name: str,
    type_label: str,
    qualifier: str,
    type_text: str = "",
    initializer: str | None = None,
    end: int | None = None,
) -> RawMatch:
    return RawMatch(
        kind=kind,
        name=name,
        type_text=type_text,
        type_label=type_label,
        offset=match.start(),
        end=match.end() if end is None else end,
        line=locator.line_of(match.start()),
        initializer=initializer,
        qualifier=qualifier,
    )


class DeclarationScanner:
    """Extracts raw declaration matches from Rust source text.

    Stateless between calls, so one instance can be shared across threads.
    """

    def __init__(self) -> None:
        self._matchers: dict[DeclarationKind, Matcher] = {
            DeclarationKind.BINDING: self._bindings,
            DeclarationKind.FUNCTION: self._functions,
            DeclarationKind.STRUCT: self._aggregates(DeclarationKind.STRUCT),
            DeclarationKind.ENUM: self._aggregates(DeclarationKind.ENUM),
            DeclarationKind.TRAIT: self._traits,
            DeclarationKind.IMPL: self._impls,
            DeclarationKind.TYPE_ALIAS: self._type_aliases,
            DeclarationKind.MODULE: self._modules,
            DeclarationKind.UNION: self._aggregates(DeclarationKind.UNION),
            DeclarationKind.MACRO: self._macros,
            DeclarationKind.USE: self._uses,
            DeclarationKind.EXTERN_CRATE: self._extern_crates,
            DeclarationKind.EXTERN_BLOCK: self._extern_blocks,
        }

    def scan(self, text: str) -> list[RawMatch]:
        """Run every kind's matcher over ``text``.

        Results are grouped by kind (in DeclarationKind order) and ordered by
        position within each kind.
        """
        locator = LineLocator(text)
        matches: list[RawMatch] = []
        for kind in DeclarationKind:
            matches.extend(self._run(kind, text, locator))
        return matches

    def scan_kind(self, text: str, kind: DeclarationKind) -> list[RawMatch]:
        """Run a single kind's matcher over ``text``."""
        return self._run(kind, text, LineLocator(text))

    def _run(self, kind: DeclarationKind, text: str, locator: LineLocator) -> list[RawMatch]:
        return [m for m in self._matchers[kind](text, locator) if not locator.is_commented(m.line)]

    # ── Per-kind matchers ──────────────────────────────────────

    def _bindings(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.BINDING.finditer(text):
            annotation = patterns.squash(m.group("type") or "")
            init = (m.group("init") or "").strip()
            qualifier = m.group("keyword") + (" mut" if m.group("mut") else "")
            yield _make(
                locator,
                DeclarationKind.BINDING,
                m,
                name=m.group("name"),
                type_label=annotation or INFERRED,
                qualifier=qualifier,
                type_text=annotation,
                initializer=init or None,
            )

    def _functions(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.FUNCTION.finditer(text):
            span = balanced_span(text, m.end() - 1, "(", ")")
            if span is None:
                continue
            open_index, close_index = span
            end = close_index + 1
            ret = ""
            ret_match = patterns.RETURN_TYPE.match(text, end)
            if ret_match:
                ret = patterns.squash(patterns.WHERE_CLAUSE.sub("", ret_match.group("ret")))
                end = ret_match.end()
            yield _make(
                locator,
                DeclarationKind.FUNCTION,
                m,
                name=m.group("name"),
                type_label=function_label(count_params(text[open_index + 1 : close_index]), ret),
                qualifier=patterns.squash(m.group("qual") + "fn"),
                type_text=ret,
                end=end,
            )

    def _aggregates(self, kind: DeclarationKind) -> Matcher:
        pattern = patterns.AGGREGATE[kind]

        def matcher(text: str, locator: LineLocator) -> Iterator[RawMatch]:
            for m in pattern.finditer(text):
                yield _make(
                    locator,
                    kind,
                    m,
                    name=m.group("name"),
                    type_label=kind.value,
                    qualifier=patterns.squash(m.group("qual") + kind.value),
                )

        return matcher

    def _traits(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.TRAIT.finditer(text):
            yield _make(locator, DeclarationKind.TRAIT, m, m.group("name"), "trait", "trait")

    def _impls(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.IMPL.finditer(text):
            trait = m.group("trait")
            if trait:
                negation = "!" if m.group("negative") else ""
                label = f"impl {negation}{patterns.squash(trait)}"
            else:
                label = "impl"
            yield _make(
                locator,
                DeclarationKind.IMPL,
                m,
                name=patterns.squash(m.group("target")),
                type_label=label,
                qualifier="impl",
            )

    def _type_aliases(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.TYPE_ALIAS.finditer(text):
            definition = patterns.squash(m.group("definition"))
            yield _make(
                locator,
                DeclarationKind.TYPE_ALIAS,
                m,
                name=m.group("name"),
                type_label=definition,
                qualifier="type",
                type_text=definition,
            )

    def _modules(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.MODULE.finditer(text):
            yield _make(locator, DeclarationKind.MODULE, m, m.group("name"), "module", "mod")

    def _macros(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.MACRO.finditer(text):
            yield _make(
                locator, DeclarationKind.MACRO, m, m.group("name"), "macro_rules!", "macro_rules!"
            )

    def _uses(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.USE.finditer(text):
            yield _make(
                locator,
                DeclarationKind.USE,
                m,
                name=use_display_name(m.group("path")),
                type_label="use",
                qualifier="use",
            )

    def _extern_crates(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.EXTERN_CRATE.finditer(text):
            yield _make(
                locator,
                DeclarationKind.EXTERN_CRATE,
                m,
                m.group("name"),
                "extern crate",
                "extern crate",
            )

    def _extern_blocks(self, text: str, locator: LineLocator) -> Iterator[RawMatch]:
        for m in patterns.EXTERN_BLOCK.finditer(text):
            abi = m.group("abi") or "C"
            yield _make(
                locator,
                DeclarationKind.EXTERN_BLOCK,
                m,
                abi,
                "extern block",
                f'extern "{abi}"',
            )
