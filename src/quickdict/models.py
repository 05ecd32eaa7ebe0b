"""
Entity model for a dictionary being compiled.

A Dictionary owns its Metadata plus the articles and abbreviations added
to it, in insertion order. Optional hooks let callers derive the key or
value written for an entity without touching the stored entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable


class AbbreviationType(Enum):
    """Usage classification of an abbreviation."""

    NONE = "none"
    GRAMMATICAL = "grammatical"
    STYLISTIC = "stylistic"
    KNOWLEDGE = "knowledge"
    AUXILIARY = "auxiliary"
    OTHER = "other"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(value: str | None, name: str) -> str:
    """Trim value, rejecting None and whitespace-only strings."""
    if value is None or not value.strip():
        raise ValueError(f"{name} must be a non-blank string")
    return value.strip()


@dataclass
class Metadata:
    """Descriptive information written into the output headers."""

    short_title: str | None = None
    long_title: str | None = None
    description: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    authors: list[str] = field(default_factory=list)
    source_url: str | None = None
    file_version: str | None = None
    created: datetime = field(default_factory=_utcnow)

    def __setattr__(self, name: str, value) -> None:
        # created is fixed once __init__ has assigned it
        if name == "created" and "created" in self.__dict__:
            raise AttributeError("created is set once at construction")
        super().__setattr__(name, value)


@dataclass(frozen=True)
class Article:
    """A term and its definition."""

    key: str
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", _require_text(self.key, "key"))
        object.__setattr__(self, "value", _require_text(self.value, "value"))


@dataclass(frozen=True)
class Abbreviation(Article):
    """An article classified by usage, referenced from article definitions."""

    kind: AbbreviationType = AbbreviationType.NONE


ArticleHook = Callable[[Article], str]
AbbreviationHook = Callable[[Abbreviation], str]
RawTransform = Callable[[str], str]


def _raw(value: str, raw_transform: RawTransform | None) -> str:
    return raw_transform(value) if raw_transform is not None else value


class Dictionary:
    """
    Aggregate of metadata, articles and abbreviations.

    Entities are only appended; the dictionary is built once and then handed
    to exactly one writer. Each hook, when set, replaces the corresponding
    raw field in the output.
    """

    def __init__(
        self,
        metadata: Metadata | None = None,
        key_from_article: ArticleHook | None = None,
        value_from_article: ArticleHook | None = None,
        key_from_abbreviation: AbbreviationHook | None = None,
        value_from_abbreviation: AbbreviationHook | None = None,
    ):
        self.metadata = metadata if metadata is not None else Metadata()
        self.key_from_article = key_from_article
        self.value_from_article = value_from_article
        self.key_from_abbreviation = key_from_abbreviation
        self.value_from_abbreviation = value_from_abbreviation
        self._articles: list[Article] = []
        self._abbreviations: list[Abbreviation] = []

    @property
    def articles(self) -> tuple[Article, ...]:
        return tuple(self._articles)

    @property
    def abbreviations(self) -> tuple[Abbreviation, ...]:
        return tuple(self._abbreviations)

    def add_article(self, key: str, value: str) -> Article:
        """Create an article and append it. Raises ValueError on blank input."""
        article = Article(key, value)
        self._articles.append(article)
        return article

    def add_abbreviation(
        self,
        key: str,
        value: str,
        kind: AbbreviationType = AbbreviationType.NONE,
    ) -> Abbreviation:
        """Create an abbreviation and append it. Raises ValueError on blank input."""
        abbreviation = Abbreviation(key, value, kind)
        self._abbreviations.append(abbreviation)
        return abbreviation

    # The raw_transform argument is applied to the raw field only, never to
    # hook output, e.g. escape_for_xml when the caller emits markup.

    def article_key(self, article: Article, raw_transform: RawTransform | None = None) -> str:
        if self.key_from_article is not None:
            return self.key_from_article(article)
        return _raw(article.key, raw_transform)

    def article_value(self, article: Article, raw_transform: RawTransform | None = None) -> str:
        if self.value_from_article is not None:
            return self.value_from_article(article)
        return _raw(article.value, raw_transform)

    def abbreviation_key(self, abbreviation: Abbreviation, raw_transform: RawTransform | None = None) -> str:
        if self.key_from_abbreviation is not None:
            return self.key_from_abbreviation(abbreviation)
        return _raw(abbreviation.key, raw_transform)

    def abbreviation_value(self, abbreviation: Abbreviation, raw_transform: RawTransform | None = None) -> str:
        if self.value_from_abbreviation is not None:
            return self.value_from_abbreviation(abbreviation)
        return _raw(abbreviation.value, raw_transform)
