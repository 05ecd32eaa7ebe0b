"""
Writes a Dictionary as an XDXF document (logical format, revision 33).

Articles and abbreviations keep insertion order. Keys and definitions are
assembled as markup strings (escaped raw fields or hook output) and parsed
back into the element tree, so tags injected by wrapping are kept as
elements rather than escaped text.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import BinaryIO, Callable, Iterable
from xml.etree.ElementTree import Element

from quickdict.models import Abbreviation, AbbreviationType, Article, Dictionary
from quickdict.output import atomic_outputs
from quickdict.text import WrapOptions, escape_for_xml, wrap_in_tag, wrap_terms_in_tag

logger = logging.getLogger(__name__)

XDXF_FORMAT = "logical"
XDXF_REVISION = "33"
XDXF_SUFFIX = ".xdxf"
CREATION_DATE_FORMAT = "%d-%m-%Y"
INDENT = "  "

# type attribute of <abbr_def>; AbbreviationType.NONE gets no attribute
ABBREVIATION_TYPE_CODES: dict[AbbreviationType, str] = {
    AbbreviationType.GRAMMATICAL: "grm",
    AbbreviationType.STYLISTIC: "stl",
    AbbreviationType.KNOWLEDGE: "knl",
    AbbreviationType.AUXILIARY: "aux",
    AbbreviationType.OTHER: "oth",
}

# Containers laid out one child per line; entries inside them are left compact
STRUCTURAL_TAGS = {"xdxf", "meta_info", "authors", "abbreviations", "lexicon"}

MultiArticleHook = Callable[[Article], list[str]]
MultiAbbreviationHook = Callable[[Abbreviation], list[str]]
OptionalTermsHook = Callable[[], Iterable[str]]


def set_attribute_if_not_blank(elem: Element, name: str, value: str | None) -> None:
    if value is not None and value.strip():
        elem.set(name, value.strip())


def add_element_if_not_blank(parent: Element, tag: str, value: str | None) -> Element | None:
    """Append <tag>value</tag> (trimmed) unless value is None or blank."""
    if value is None or not value.strip():
        return None
    elem = ET.SubElement(parent, tag)
    elem.text = value.strip()
    return elem


def parse_fragment(tag: str, markup: str) -> Element:
    """Parse markup as the content of a new <tag> element."""
    return ET.fromstring(f"<{tag}>{markup}</{tag}>")


def indent_structure(elem: Element, level: int = 0) -> None:
    """Indent the structural containers, leaving entry content untouched."""
    if elem.tag not in STRUCTURAL_TAGS or len(elem) == 0:
        return

    child_indent = "\n" + INDENT * (level + 1)
    elem.text = child_indent
    for child in elem:
        indent_structure(child, level + 1)
        child.tail = child_indent
    child.tail = "\n" + INDENT * level


class XdxfWriter:
    """
    Compiles a Dictionary into an XDXF document.

    The multi-value hooks let one article or abbreviation produce several
    keys or definitions and take precedence over the Dictionary's
    single-value hooks. Their output is inserted as markup, so it must
    already be escaped. key_optional_terms returns the terms to mark with
    <opt> inside article keys.
    """

    def __init__(
        self,
        dictionary: Dictionary,
        keys_from_article: MultiArticleHook | None = None,
        values_from_article: MultiArticleHook | None = None,
        key_optional_terms: OptionalTermsHook | None = None,
        keys_from_abbreviation: MultiAbbreviationHook | None = None,
    ):
        if dictionary is None:
            raise ValueError("dictionary must not be None")
        self.dictionary = dictionary
        self.keys_from_article = keys_from_article
        self.values_from_article = values_from_article
        self.key_optional_terms = key_optional_terms
        self.keys_from_abbreviation = keys_from_abbreviation

    def save(self, filename: str | Path) -> Path:
        """Write the document to disk, appending ".xdxf" when missing."""
        if filename is None or not str(filename).strip():
            raise ValueError("filename must be a non-blank path")

        path = Path(str(filename).strip())
        if path.suffix.lower() != XDXF_SUFFIX:
            path = path.with_name(path.name + XDXF_SUFFIX)

        with atomic_outputs([path]) as (sink,):
            self.write(sink)

        logger.info("Saved XDXF dictionary to %s", path)
        return path

    def write(self, sink: BinaryIO) -> None:
        """Write the UTF-8 XDXF document to a binary sink."""
        if sink is None:
            raise ValueError("sink must not be None")

        root = self.build()
        indent_structure(root)
        ET.ElementTree(root).write(sink, encoding="utf-8", xml_declaration=True)
        sink.write(b"\n")
        sink.flush()

        logger.info(
            "Wrote %d articles and %d abbreviations",
            len(self.dictionary.articles),
            len(self.dictionary.abbreviations),
        )

    def build(self) -> Element:
        """Build the <xdxf> element tree."""
        metadata = self.dictionary.metadata

        root = Element("xdxf", {"format": XDXF_FORMAT, "revision": XDXF_REVISION})
        set_attribute_if_not_blank(root, "lang_from", metadata.source_lang)
        set_attribute_if_not_blank(root, "lang_to", metadata.target_lang)

        root.append(self._build_meta_info())

        articles = self.dictionary.articles
        if articles:
            lexicon = ET.SubElement(root, "lexicon")
            for article in articles:
                markup = self._wrapped_article_keys(article) + self._wrapped_article_values(article)
                lexicon.append(parse_fragment("ar", markup))

        return root

    def _build_meta_info(self) -> Element:
        metadata = self.dictionary.metadata
        meta_info = Element("meta_info")

        add_element_if_not_blank(meta_info, "title", metadata.short_title)
        add_element_if_not_blank(meta_info, "full_title", metadata.long_title)

        if metadata.authors:
            authors = ET.SubElement(meta_info, "authors")
            for author in metadata.authors:
                add_element_if_not_blank(authors, "author", author)

        add_element_if_not_blank(meta_info, "description", metadata.description)

        abbreviations = self.dictionary.abbreviations
        if abbreviations:
            abbreviations_elem = ET.SubElement(meta_info, "abbreviations")
            for abbreviation in abbreviations:
                abbreviations_elem.append(self._build_abbreviation(abbreviation))

        add_element_if_not_blank(meta_info, "file_ver", metadata.file_version)
        add_element_if_not_blank(meta_info, "creation_date", metadata.created.strftime(CREATION_DATE_FORMAT))
        add_element_if_not_blank(meta_info, "dict_src_url", metadata.source_url)

        return meta_info

    def _build_abbreviation(self, abbreviation: Abbreviation) -> Element:
        keys = "".join(wrap_in_tag(key, "abbr_k") for key in self._abbreviation_keys(abbreviation))
        value = self._abbreviation_value(abbreviation)

        abbr_def = parse_fragment("abbr_def", keys + wrap_in_tag(value, "abbr_v"))
        type_code = ABBREVIATION_TYPE_CODES.get(abbreviation.kind)
        if type_code is not None:
            abbr_def.set("type", type_code)
        return abbr_def

    def _abbreviation_keys(self, abbreviation: Abbreviation) -> list[str]:
        """Non-blank markup keys of an abbreviation, hooks first."""
        if self.keys_from_abbreviation is not None:
            keys = self.keys_from_abbreviation(abbreviation)
        else:
            keys = [self.dictionary.abbreviation_key(abbreviation, escape_for_xml)]
        return [key for key in keys if key and key.strip()]

    def _abbreviation_value(self, abbreviation: Abbreviation) -> str:
        return self.dictionary.abbreviation_value(abbreviation, escape_for_xml)

    def _wrapped_article_keys(self, article: Article) -> str:
        if self.keys_from_article is not None:
            keys = self.keys_from_article(article)
        else:
            keys = [self.dictionary.article_key(article, escape_for_xml)]

        optional_terms = list(self.key_optional_terms()) if self.key_optional_terms is not None else []

        wrapped = []
        for key in keys:
            if not key or not key.strip():
                continue
            marked = wrap_terms_in_tag(key, optional_terms, "opt", skip_markup=True)
            wrapped.append(wrap_in_tag(marked, "k"))
        return "".join(wrapped)

    def _wrapped_article_values(self, article: Article) -> str:
        if self.values_from_article is not None:
            values = self.values_from_article(article)
        else:
            values = [self.dictionary.article_value(article, escape_for_xml)]

        abbreviation_keys = [
            key
            for abbreviation in self.dictionary.abbreviations
            for key in self._abbreviation_keys(abbreviation)
        ]

        definitions = []
        for value in values:
            # All keys in one pass, so <abbr> markup is never rescanned
            value = wrap_terms_in_tag(
                value,
                abbreviation_keys,
                "abbr",
                WrapOptions.WHOLE_WORDS_ONLY,
                skip_markup=True,
            )
            definitions.append(wrap_in_tag(wrap_in_tag(value, "deftext"), "def"))

        markup = "".join(definitions)
        if len(values) > 1:
            markup = wrap_in_tag(markup, "def")
        return markup
