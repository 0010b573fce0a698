"""
Reading and writing header files.
"""

from io import StringIO
import os
from pathlib import Path
import re
from typing import Iterator, Optional, TextIO, Union

import hatanaka

from .decoder import parse_header
from .encoder import write_header
from .header import Header

COMPRESSED_SUFFIXES = (".gz", ".bz2", ".zip", ".crx")
# Hatanaka-compressed RINEX 2 style names, e.g. `abmf0010.21d`
_SHORT_CRX_NAME_PATTERN = re.compile(r".*\.\d{2}d$")


class HeaderLineReader:
    """
    Line source over a text stream that keeps a count of the lines read.

    Reading stops wherever the consumer stops, so after `parse_header` the
    stream is positioned on the first line after `END OF HEADER`.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.line_number = 0

    def next_line(self) -> Optional[str]:
        line = self.stream.readline()
        if not line:
            return None
        self.line_number += 1
        return line.rstrip("\r\n")

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line


def is_compressed(filepath: Union[str, os.PathLike]) -> bool:
    name = os.fspath(filepath)
    if name.endswith(".Z") or name.lower().endswith(COMPRESSED_SUFFIXES):
        return True
    return _SHORT_CRX_NAME_PATTERN.match(name.lower()) is not None


def read_header(filepath: Union[str, os.PathLike]) -> Header:
    """
    Parses the header of a RINEX 3 observation file.

    Compressed files (gzip, bzip2, zip, unix compress and/or Hatanaka) are
    decompressed in memory first.
    """
    if is_compressed(filepath):
        content = hatanaka.decompress(Path(filepath))
        return parse_header(HeaderLineReader(StringIO(content.decode())))
    with open(filepath, "r") as f:
        return parse_header(HeaderLineReader(f))


def write_header_file(header: Header, filepath: Union[str, os.PathLike]) -> int:
    """
    Writes a header-only file and returns the number of lines written.
    """
    with open(filepath, "w") as f:
        return write_header(header, f)
