"""
Writes a Dictionary in the StarDict format.

The format is four files sharing a base name:

- .ifo:  CRLF-terminated key=value header
- .dict: the definitions, concatenated with no separators
- .idx:  key\\0, then the definition's offset and length (u32 big-endian)
- .syn:  synonym\\0, then the index of the article it points to (u32 big-endian)

Articles are laid out in StarDict collation order.
"""

import logging
import struct
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, NamedTuple

from quickdict.collation import collation_key
from quickdict.models import Article, Dictionary
from quickdict.output import atomic_outputs

logger = logging.getLogger(__name__)

IFO_MAGIC = "StarDict's dict ifo file"
STARDICT_VERSION = "2.4.2"
SAME_TYPE_SEQUENCE = "h"
IFO_DATE_FORMAT = "%Y.%m.%d"

# File suffixes in the order write() takes its sinks
STARDICT_SUFFIXES = (".ifo", ".dict", ".idx", ".syn")

SynonymHook = Callable[[Article], Iterable[str]]


class StarDictStats(NamedTuple):
    """Counts recorded in the .ifo header."""
    wordcount: int
    synwordcount: int
    idxfilesize: int


class StarDictWriter:
    """
    Compiles a Dictionary into the four StarDict streams.

    synonyms_from_article, when given, returns the alternative spellings
    that should resolve to an article; the article's own key is ignored.
    """

    def __init__(self, dictionary: Dictionary, synonyms_from_article: SynonymHook | None = None):
        if dictionary is None:
            raise ValueError("dictionary must not be None")
        self.dictionary = dictionary
        self.synonyms_from_article = synonyms_from_article

    def save(self, filename: str | Path) -> list[Path]:
        """
        Write the dictionary to disk, returning the .ifo/.dict/.idx/.syn paths.

        A filename without a suffix gets ".ifo"; the four files replace
        whatever suffix the filename has.
        """
        if filename is None or not str(filename).strip():
            raise ValueError("filename must be a non-blank path")

        base = Path(str(filename).strip())
        if not base.suffix:
            base = base.with_suffix(".ifo")
        paths = [base.with_suffix(suffix) for suffix in STARDICT_SUFFIXES]

        with atomic_outputs(paths) as (ifo, dict_, idx, syn):
            self.write(ifo, dict_, idx, syn)

        logger.info("Saved StarDict dictionary to %s", paths[0])
        return paths

    def write(self, ifo: BinaryIO, dict_: BinaryIO, idx: BinaryIO, syn: BinaryIO) -> StarDictStats:
        """Write all four streams. The .ifo header goes last, once its counts are known."""
        for name, sink in (("ifo", ifo), ("dict", dict_), ("idx", idx), ("syn", syn)):
            if sink is None:
                raise ValueError(f"{name} sink must not be None")

        keyed = self._sorted_articles()

        idxfilesize = self._write_articles(keyed, dict_, idx)
        synwordcount = self._write_synonyms(keyed, syn)

        stats = StarDictStats(
            wordcount=len(keyed),
            synwordcount=synwordcount,
            idxfilesize=idxfilesize,
        )
        self._write_ifo(ifo, stats)

        logger.info(
            "Wrote %d articles and %d synonyms (idxfilesize=%d)",
            stats.wordcount,
            stats.synwordcount,
            stats.idxfilesize,
        )
        return stats

    def _sorted_articles(self) -> list[tuple[str, Article]]:
        """Pair each article with its trimmed effective key, in collation order."""
        keyed = []
        for article in self.dictionary.articles:
            key = (self.dictionary.article_key(article) or "").strip()
            if not key:
                raise ValueError(f"Article {article.key!r} has an empty effective key")
            keyed.append((key, article))

        # sorted() is stable, so identical keys keep insertion order
        return sorted(keyed, key=lambda pair: collation_key(pair[0]))

    def _write_articles(self, keyed: list[tuple[str, Article]], dict_: BinaryIO, idx: BinaryIO) -> int:
        """Write .dict and .idx records, returning the .idx size in bytes."""
        offset = 0
        idx_size = 0

        for index, (key, article) in enumerate(keyed):
            definition = self.dictionary.article_value(article).strip().encode("utf-8")
            dict_.write(definition)

            record = key.encode("utf-8") + b"\x00" + struct.pack(">II", offset, len(definition))
            idx.write(record)

            logger.debug("idx[%d] %r offset=%d length=%d", index, key, offset, len(definition))
            offset += len(definition)
            idx_size += len(record)

        dict_.flush()
        idx.flush()
        return idx_size

    def _write_synonyms(self, keyed: list[tuple[str, Article]], syn: BinaryIO) -> int:
        """Write .syn records, returning how many were written."""
        synonyms: list[tuple[str, int]] = []

        if self.synonyms_from_article is not None:
            for index, (key, article) in enumerate(keyed):
                raw = self.synonyms_from_article(article) or ()
                names = {name.strip() for name in raw if name and name.strip()}
                # An article is never its own synonym
                names.discard(key)
                synonyms.extend((name, index) for name in names)

        synonyms.sort(key=lambda pair: (collation_key(pair[0]), pair[1]))

        for name, index in synonyms:
            syn.write(name.encode("utf-8") + b"\x00" + struct.pack(">I", index))

        syn.flush()
        return len(synonyms)

    def _write_ifo(self, ifo: BinaryIO, stats: StarDictStats) -> None:
        metadata = self.dictionary.metadata
        lines = [
            IFO_MAGIC,
            f"version={STARDICT_VERSION}",
            f"bookname={metadata.long_title or ''}",
            f"wordcount={stats.wordcount}",
            f"synwordcount={stats.synwordcount}",
            f"idxfilesize={stats.idxfilesize}",
            f"sametypesequence={SAME_TYPE_SEQUENCE}",
            f"author={', '.join(metadata.authors)}",
            f"description={metadata.description or ''}",
            f"date={metadata.created.strftime(IFO_DATE_FORMAT)}",
        ]
        ifo.write("".join(f"{line}\r\n" for line in lines).encode("utf-8"))
        ifo.flush()
