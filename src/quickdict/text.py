"""
Text shaping helpers shared by the dictionary writers.

Covers XML escaping, wrapping strings (or occurrences inside them) in
markup tags, whitespace and diacritic normalization, and splitting a
definition into its numbered senses.
"""

import re
import unicodedata
from enum import Enum
from typing import Iterator

# Whitespace runs collapsed by normalize_whitespace
WHITESPACE_RUN = re.compile(r"\s+")

# Contexts that mark an occurrence as a whole word: (before, after) the
# target. Both sides are checked against the unmodified string.
WHOLE_WORD_CONTEXTS: list[tuple[str, str]] = [
    (" ", " "),
    ("(", " "),
    (" ", ")"),
    ("(", ")"),
    ("", "."),
    ("", ";"),
    ("", ","),
    ("(", ","),
    ("", "/"),
    ("/", ""),
    ("—", " "),
    (" ", "—"),
]


class WrapOptions(Enum):
    """How wrap_occurrences_in_tag decides which occurrences to wrap."""

    LITERAL = "literal"
    WHOLE_WORDS_ONLY = "whole_words_only"


def _require_not_none(value: str | None, name: str) -> str:
    if value is None:
        raise ValueError(f"{name} must not be None")
    return value


def _require_not_blank(value: str | None, name: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{name} must be a non-blank string")
    return value


def escape_for_xml(s: str) -> str:
    """
    Escape &, < and > for use as XML character data.

    The ampersand goes first so the entities produced for < and > are not
    escaped again. Applying the function twice escapes the entities
    produced by the first pass.
    """
    _require_not_none(s, "s")
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def wrap_in_tag(s: str, tag: str) -> str:
    """Return s enclosed in <tag>...</tag>; the tag name is trimmed."""
    _require_not_none(s, "s")
    tag = _require_not_blank(tag, "tag").strip()
    return f"<{tag}>{s}</{tag}>"


# Matches one markup tag, so tag names and attributes can be stepped over
MARKUP_TAG = r"<[^>]*>"


def occurrence_pattern(
    targets: list[str],
    options: WrapOptions,
    skip_markup: bool = False,
) -> re.Pattern:
    """
    Compile a regex matching any of targets, longest first.

    For WHOLE_WORDS_ONLY the match must sit in one of WHOLE_WORD_CONTEXTS,
    at the start of the string followed by a space, or at the end preceded
    by a space. Contexts are lookarounds, so neighbouring occurrences can
    share the character between them. With skip_markup, whole tags are
    matched first as the "markup" group so callers can leave them alone.
    """
    alternatives = "|".join(re.escape(t) for t in sorted(set(targets), key=len, reverse=True))
    term = f"(?:{alternatives})"

    if options is WrapOptions.LITERAL:
        branches = [term]
    else:
        branches = []
        for before, after in WHOLE_WORD_CONTEXTS:
            behind = f"(?<={re.escape(before)})" if before else ""
            ahead = f"(?={re.escape(after)})" if after else ""
            branches.append(f"{behind}{term}{ahead}")
        branches.append(rf"\A{term}(?= )")
        branches.append(rf"(?<= ){term}\Z")

    if skip_markup:
        branches.insert(0, f"(?P<markup>{MARKUP_TAG})")
    return re.compile("|".join(branches))


def wrap_terms_in_tag(
    s: str,
    targets: list[str],
    tag: str,
    options: WrapOptions = WrapOptions.LITERAL,
    skip_markup: bool = False,
) -> str:
    """
    Wrap occurrences of any of targets inside s in <tag>...</tag>.

    Every match is found in one scan of the original s, so markup added
    for one occurrence is never matched again. Within each context the
    longest target is tried first. skip_markup=True treats s as markup and
    only wraps occurrences outside its tags. An empty targets list returns
    s as is.
    """
    _require_not_none(s, "s")
    if s == "" or not targets:
        return s
    _require_not_blank(s, "s")
    for target in targets:
        _require_not_blank(target, "target")
    tag = _require_not_blank(tag, "tag").strip()

    def replace(match: re.Match) -> str:
        if skip_markup and match.group("markup") is not None:
            return match.group(0)
        return wrap_in_tag(match.group(0), tag)

    return occurrence_pattern(targets, options, skip_markup).sub(replace, s)


def wrap_occurrences_in_tag(
    s: str,
    target: str,
    tag: str,
    options: WrapOptions = WrapOptions.LITERAL,
) -> str:
    """
    Wrap occurrences of target inside s in <tag>...</tag>.

    LITERAL wraps every occurrence. WHOLE_WORDS_ONLY only wraps occurrences
    that sit in one of the punctuation/whitespace contexts listed in
    WHOLE_WORD_CONTEXTS, or at the start (followed by a space) or the end
    (preceded by a space) of the string.
    """
    _require_not_none(s, "s")
    if s == "":
        return ""
    _require_not_blank(target, "target")
    return wrap_terms_in_tag(s, [target], tag, options)


def get_definitions(s: str, keep_numbers: bool) -> Iterator[str]:
    """
    Split a definition into its numbered senses ("1. ... 2. ...").

    Returns a lazy iterator. Text without a "1. " marker comes back as a
    single definition. With keep_numbers=False the "N. " markers are cut
    out of each sense; any text before "1. " stays with the first sense.
    """
    _require_not_none(s, "s")
    return _iter_definitions(s, keep_numbers)


def _iter_definitions(s: str, keep_numbers: bool) -> Iterator[str]:
    remaining = s
    num = 1

    while True:
        marker = f"{num}. "
        next_marker = f" {num + 1}. "

        found = remaining.find(marker)
        next_found = remaining.find(next_marker, found + 1)

        if num == 1 and found > 0 and next_found > 0:
            # Numbered senses with some text ahead of the first marker
            if keep_numbers:
                yield remaining[:next_found]
            else:
                yield remaining[:found] + remaining[found + len(marker) : next_found]
        elif found == 0 and next_found > 0:
            if keep_numbers:
                yield remaining[:next_found]
            else:
                yield remaining[len(marker) : next_found]
        elif found == 0:
            # Last numbered sense
            yield remaining if keep_numbers else remaining[len(marker) :]
        else:
            yield remaining

        if next_found <= 0:
            return

        # Skip the single space separating the senses
        remaining = remaining[next_found + 1 :]
        num += 1


def normalize_whitespace(s: str) -> str:
    """Collapse every run of whitespace into a single space."""
    _require_not_blank(s, "s")
    return WHITESPACE_RUN.sub(" ", s)


def remove_diacritics(s: str) -> str:
    """Strip combining marks (accents, cedillas, ...) from s."""
    _require_not_blank(s, "s")
    decomposed = unicodedata.normalize("NFD", s)
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return unicodedata.normalize("NFC", stripped)


def strip_newlines(s: str) -> str:
    """Replace line breaks (CRLF, CR or LF) with single spaces."""
    _require_not_none(s, "s")
    return s.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def strip_tabs(s: str) -> str:
    """Replace tabs with single spaces."""
    _require_not_none(s, "s")
    return s.replace("\t", " ")


def single_line_no_tabs(s: str) -> str:
    return strip_tabs(strip_newlines(s))
