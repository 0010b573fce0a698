import gzip
from io import StringIO

from rinex3_header import HeaderLineReader, format_header, parse_header, read_header, write_header_file
from rinex3_header.io import is_compressed

BODY_LINE = "> 2020 01 02 00 00  0.0000000  0  1"


def test_write_and_read(tmp_path, full_header):
    filepath = tmp_path / "ABMF00GLP_R_20200020000_01D_30S_MO.rnx"
    num_lines = write_header_file(full_header, filepath)
    assert num_lines == len(filepath.read_text().splitlines())
    assert read_header(filepath) == full_header


def test_read_gzip(tmp_path, full_header):
    filepath = tmp_path / "ABMF00GLP_R_20200020000_01D_30S_MO.rnx.gz"
    text = "\n".join(format_header(full_header) + [BODY_LINE]) + "\n"
    filepath.write_bytes(gzip.compress(text.encode()))
    assert read_header(filepath) == full_header


def test_is_compressed():
    assert is_compressed("ABMF00GLP_R_20200020000_01D_30S_MO.crx.gz")
    assert is_compressed("abmf0020.20d.Z")
    assert is_compressed("abmf0020.20d")
    assert not is_compressed("ABMF00GLP_R_20200020000_01D_30S_MO.rnx")
    assert not is_compressed("abmf0020.20o")


def test_reader_leaves_stream_after_header(full_header):
    stream = StringIO("\n".join(format_header(full_header) + [BODY_LINE, ""]))
    reader = HeaderLineReader(stream)
    parse_header(reader)
    assert reader.line_number == len(format_header(full_header))
    assert reader.next_line() == BODY_LINE
    assert reader.next_line() is None
