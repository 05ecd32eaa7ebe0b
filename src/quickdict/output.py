"""
Path-based output for the writers.

Files are written under temporary names next to their destination and
only moved into place once every one of them has been written, so a
failure while compiling never leaves a half-written file behind. The
finished files are then renamed into place one at a time; each rename is
atomic, but a failure between renames leaves the earlier destinations
already replaced.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)


def temporary_path(path: Path) -> Path:
    """Return the hidden sibling path used while path is being written."""
    return path.with_name(f".{path.name}.tmp")


@contextmanager
def atomic_outputs(paths: list[Path]) -> Iterator[list[BinaryIO]]:
    """
    Yield one binary sink per path, renaming each into place on success.

    Renames happen in the order of paths, one file at a time. On any
    exception, including a failed rename, the remaining temporary files are
    removed and the exception propagates unchanged; destinations renamed
    before the failure keep their new content.
    """
    opened: list[tuple[BinaryIO, Path, Path]] = []

    try:
        for path in paths:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = temporary_path(path)
            opened.append((tmp_path.open("wb"), tmp_path, path))

        yield [sink for sink, _, _ in opened]

        for sink, _, _ in opened:
            sink.close()
        for _, tmp_path, path in opened:
            os.replace(tmp_path, path)
            logger.debug("Published %s", path)
    except BaseException:
        for sink, tmp_path, _ in opened:
            sink.close()
            tmp_path.unlink(missing_ok=True)
        logger.debug("Discarded partial output for %s", [str(p) for p in paths])
        raise
