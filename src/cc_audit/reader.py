"""Streaming line reader for large JSONL transcripts."""

from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

# Read transcripts in 1 MiB blocks so memory use does not grow with file size
CHUNK_SIZE = 1024 * 1024

# Sample sizes for cheap first/last record extraction
HEAD_BYTES = 8192
TAIL_BYTES = 65536


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r")


class ChunkedLineReader:
    """Iterate complete text lines of a binary file, one block at a time.

    Lines that straddle block boundaries are reassembled before decoding, so a
    multi-byte UTF-8 character split across two blocks is never corrupted.
    Every call to ``iter()`` starts again from the beginning of the file.
    """

    def __init__(self, fh: BinaryIO, size: int, chunk_size: int = CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.fh = fh
        self.size = size
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[str]:
        self.fh.seek(0)
        position = 0
        pending = b""

        while position < self.size:
            block = self.fh.read(min(self.chunk_size, self.size - position))
            if not block:
                break
            position += len(block)

            pending += block
            *complete, pending = pending.split(b"\n")
            for raw in complete:
                yield _decode(raw)

        # Final line without a trailing newline
        if pending.strip():
            yield _decode(pending)


def iter_file_lines(path: Path, chunk_size: int = CHUNK_SIZE) -> Iterator[str]:
    """Yield every line of a file through a ChunkedLineReader.

    Raises OSError if the file cannot be opened or read.
    """
    with open(path, "rb") as fh:
        size = Path(path).stat().st_size
        yield from ChunkedLineReader(fh, size, chunk_size)


def read_first_last_line(path: Path) -> tuple[str, str, int]:
    """Sample the head and tail of a file to get its first and last lines.

    Only HEAD_BYTES from the start and TAIL_BYTES from the end are read.
    Returns (first_line, last_line, size_in_bytes).
    """
    with open(path, "rb") as fh:
        size = Path(path).stat().st_size

        head = fh.read(HEAD_BYTES).decode("utf-8", errors="replace")
        newline = head.find("\n")
        first_line = head[:newline] if newline > 0 else head

        fh.seek(max(0, size - TAIL_BYTES))
        tail = fh.read(TAIL_BYTES).decode("utf-8", errors="replace")
        lines = [line for line in tail.split("\n") if line.strip()]
        last_line = lines[-1] if lines else ""

    return first_line, last_line, size
