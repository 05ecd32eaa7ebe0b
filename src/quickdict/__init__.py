"""
quickdict - Compile bilingual dictionaries into StarDict and XDXF.

This package provides tools for:
- Building a dictionary in memory (models)
- Ordering entries the way StarDict expects (collation)
- Writing the four-file StarDict format (stardict)
- Writing XDXF documents (xdxf)
- Shaping definition text for both formats (text)
"""

from quickdict.models import (
    Abbreviation,
    AbbreviationType,
    Article,
    Dictionary,
    Metadata,
)

from quickdict.text import (
    WrapOptions,
    escape_for_xml,
    wrap_in_tag,
    wrap_occurrences_in_tag,
    wrap_terms_in_tag,
    get_definitions,
    normalize_whitespace,
    remove_diacritics,
    strip_newlines,
    strip_tabs,
    single_line_no_tabs,
)

from quickdict.collation import (
    collation_key,
    compare,
)

from quickdict.stardict import (
    StarDictStats,
    StarDictWriter,
)

from quickdict.xdxf import XdxfWriter

__version__ = "0.1.0"
