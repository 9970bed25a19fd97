"""
Best-effort extraction of title, cooking time and servings from generated
recipe text.

Each field has an ordered table of rules. Rules are tried in order and the
first one whose pattern matches *and* whose converter accepts the capture
wins. When nothing matches the field keeps its default, so parsing never
fails.
"""

import re
from typing import Callable, NamedTuple, Optional, Pattern, Sequence, TypeVar

from ..models.recipe import (
    DEFAULT_COOKING_TIME,
    DEFAULT_SERVINGS,
    DEFAULT_TITLE,
    ParsedFields,
)

T = TypeVar("T")

MAX_TITLE_LENGTH = 100

_TITLE_JUNK = re.compile(r"[*#:\"'“”‘’]")
_LEADING_MARKERS = re.compile(r"^[*#:\-\d.]+")
_UNIT_MINUTES = r"(?:minutes?|mins?)"
_UNIT_ANY = r"(?:minutes?|mins?|hours?|hrs?|h)\b"


class Rule(NamedTuple):
    name: str
    pattern: Pattern[str]
    convert: Callable[[str], Optional[object]]


def _clean_title(raw: str) -> Optional[str]:
    title = _TITLE_JUNK.sub("", raw.strip()).strip()[:MAX_TITLE_LENGTH].strip()
    return title or None


def _verbatim(raw: str) -> Optional[str]:
    return raw.strip() or None


def _servings(raw: str) -> Optional[int]:
    try:
        value = int(raw)
    except ValueError:
        return None
    # head counts only
    if 0 < value < 100:
        return value
    return None


TITLE_RULES = (
    Rule("label", re.compile(r"(?:recipe\s*title|title)\**:\**\s*(.+)", re.I), _clean_title),
    Rule("heading", re.compile(r"^#+[ \t]*(.+)", re.M), _clean_title),
    Rule("bold", re.compile(r"^\*\*(.+?)\*\*", re.M), _clean_title),
    Rule("recipe_label", re.compile(r"^Recipe:\s*(.+)", re.I | re.M), _clean_title),
    Rule("ends_with_recipe", re.compile(r"^(.+?)\s*\brecipe\W*$", re.I | re.M), _clean_title),
    Rule("double_quoted", re.compile(r'^"(.+?)"', re.M), _clean_title),
    Rule("curly_quoted", re.compile(r"^[“‘](.+?)[”’]", re.M), _clean_title),
)

COOKING_TIME_RULES = (
    Rule(
        "label",
        re.compile(
            r"(?:cooking\s*time|prep\s*time|total\s*time|time|duration)\**:\**\s*"
            rf"(\d+\s*{_UNIT_ANY})",
            re.I,
        ),
        _verbatim,
    ),
    Rule(
        "qualified",
        re.compile(rf"(\d+\s*{_UNIT_MINUTES})\s*(?:cooking|preparation|total)", re.I),
        _verbatim,
    ),
    Rule(
        "phrase",
        re.compile(
            r"(?:(?:takes?|requires?)\s*)?(?:(?:about|approximately|around)\s*)?"
            # not the upper end of a range, which belongs to the range rule
            r"(?<![\d\-–])(?<![\-–]\s)(\d+\s*(?:minutes?|mins?|hours?|hrs?))",
            re.I,
        ),
        _verbatim,
    ),
    Rule("range", re.compile(rf"(\d+\s*[-–]\s*\d+\s*{_UNIT_MINUTES})", re.I), _verbatim),
)

SERVINGS_RULES = (
    Rule("label", re.compile(r"(?:servings?|serves?|portions?)\**:\**\s*(\d+)", re.I), _servings),
    Rule("yield", re.compile(r"(?:makes?|yields?):\s*(\d+)\s*(?:servings?|portions?)", re.I), _servings),
    Rule("count", re.compile(r"(\d+)\s*(?:people|persons?|servings?)", re.I), _servings),
    Rule("for_people", re.compile(r"for\s*(\d+)\s*people", re.I), _servings),
)


def apply_rules(text: str, rules: Sequence[Rule], default: T) -> T:
    for rule in rules:
        match = rule.pattern.search(text)
        if not match:
            continue
        value = rule.convert(match.group(1))
        if value is not None:
            return value
    return default


def first_line_title(text: str) -> Optional[str]:
    for line in text.splitlines():
        if line.strip():
            candidate = _LEADING_MARKERS.sub("", line.strip()).strip()
            if 5 < len(candidate) < MAX_TITLE_LENGTH:
                return candidate
            return None
    return None


class RecipeParser:
    title_rules = TITLE_RULES
    cooking_time_rules = COOKING_TIME_RULES
    servings_rules = SERVINGS_RULES

    @classmethod
    def parse_title(cls, text: str) -> str:
        title = apply_rules(text, cls.title_rules, None)
        if title is None:
            title = first_line_title(text)
        return title or DEFAULT_TITLE

    @classmethod
    def parse_cooking_time(cls, text: str) -> str:
        return apply_rules(text, cls.cooking_time_rules, DEFAULT_COOKING_TIME)

    @classmethod
    def parse_servings(cls, text: str) -> int:
        return apply_rules(text, cls.servings_rules, DEFAULT_SERVINGS)

    @classmethod
    def parse(cls, raw: str) -> ParsedFields:
        text = raw or ""
        return ParsedFields(
            title=cls.parse_title(text),
            cooking_time=cls.parse_cooking_time(text),
            servings=cls.parse_servings(text),
        )
