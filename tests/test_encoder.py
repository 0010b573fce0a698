from io import StringIO

import pytest

from conftest import header_line, minimal_header_lines, obs_ids
from rinex3_header import (
    IncompleteHeaderError,
    InvalidFileTypeError,
    InvalidSystemError,
    MalformedFieldError,
    ObsID,
    RecordKind,
    SatID,
    UnsupportedVersionError,
    count_header_lines,
    format_header,
    parse_header,
    try_format_header,
    write_header,
)


def lines_with_label(lines, label):
    return [line for line in lines if line[60:].strip() == label]


class TestRoundTrip:
    def test_full_header(self, full_header):
        assert parse_header(format_header(full_header)) == full_header

    def test_version_3_00(self, full_header):
        full_header.rinex_version = 3.0
        full_header.valid &= ~RecordKind.SYS_PHASE_SHIFT
        full_header.phase_shifts = {}
        assert parse_header(format_header(full_header)) == full_header

    def test_twice(self, full_header):
        lines = format_header(full_header)
        assert format_header(parse_header(lines)) == lines


class TestFormatHeader:
    def test_line_layout(self, full_header):
        lines = format_header(full_header)
        assert all(len(line) == 80 for line in lines)
        assert lines[0] == (
            "     3.01           OBSERVATION DATA    M (Mixed)           RINEX VERSION / TYPE"
        )
        assert lines[-1] == f"{'':60}END OF HEADER       "

    def test_record_order(self, full_header):
        labels = [line[60:].strip() for line in format_header(full_header)]
        assert labels[:4] == ["RINEX VERSION / TYPE", "PGM / RUN BY / DATE", "COMMENT", "COMMENT"]
        assert labels.index("SYS / # / OBS TYPES") < labels.index("TIME OF FIRST OBS")
        assert labels.index("SYS / PHASE SHIFTS") < labels.index("PRN / # OF OBS")

    def test_only_valid_records(self, full_header):
        full_header.valid &= ~RecordKind.INTERVAL
        lines = format_header(full_header)
        assert lines_with_label(lines, "INTERVAL") == []

    def test_time_of_obs_line(self, full_header):
        (line,) = lines_with_label(format_header(full_header), "TIME OF LAST OBS")
        assert line[:60] == "  2020     1     2    23    59   30.5000000     GPS         "

    def test_glonass_slots(self, full_header):
        (line,) = lines_with_label(format_header(full_header), "GLONASS SLOT / FRQ #")
        assert line[:31] == "  4 R01  1 R02 -4 R03  5 R04  6"


class TestContinuationLines:
    def test_obs_types(self, full_header):
        lines = lines_with_label(format_header(full_header), "SYS / # / OBS TYPES")
        # 15 GPS codes on two lines, one line each for GLONASS and Galileo
        assert len(lines) == 4
        assert lines[0].startswith("G   15 C1C L1C")
        assert lines[1].startswith("       L2L D2L S2L C5Q L5Q D5Q")

    def test_scale_factors(self, full_header):
        codes = [f"{t}{band}X" for band in "12567" for t in "CLDS"]
        full_header.scale_factors = {"G": {ObsID("G", code): 10 for code in codes}}
        lines = lines_with_label(format_header(full_header), "SYS / SCALE FACTOR")
        assert len(lines) == 2
        assert lines[0].startswith("G   10  20 C1X")
        assert parse_header(format_header(full_header)) == full_header

    def test_phase_shift_satellites(self, full_header):
        sats = [SatID("G", prn) for prn in range(1, 15)]
        full_header.phase_shifts = {ObsID("G", "L1C"): {sat_id: 0.25 for sat_id in sats}}
        lines = lines_with_label(format_header(full_header), "SYS / PHASE SHIFTS")
        assert len(lines) == 2
        assert lines[0].startswith("G L1C  0.25000  14 G01 G02")
        assert lines[1].startswith(" " * 18 + " G11 G12 G13 G14")
        assert parse_header(format_header(full_header)) == full_header

    def test_prn_obs_counts(self, full_header):
        full_header.system_obs_types["E"] = obs_ids("E", [f"{t}{b}X" for b in "157" for t in "CLDS"])
        full_header.number_of_obs[SatID("E", 11)] = list(range(12))
        lines = lines_with_label(format_header(full_header), "PRN / # OF OBS")
        e11_line = next(i for i, line in enumerate(lines) if line.startswith("   E11"))
        assert lines[e11_line + 1].startswith(" " * 6 + f"{9:6}{10:6}{11:6}")
        assert parse_header(format_header(full_header)) == full_header

    def test_phase_shift_groups(self, full_header):
        full_header.phase_shifts = {
            ObsID("G", "L2L"): {SatID("G", 1): -0.25, SatID("G", 2): 0.5, SatID("G", 3): -0.25}
        }
        lines = lines_with_label(format_header(full_header), "SYS / PHASE SHIFTS")
        assert [line[:26] for line in lines] == [
            "G L2L -0.25000   2 G01 G03",
            "G L2L  0.50000   1 G02    ",
        ]
        assert parse_header(format_header(full_header)) == full_header

    def test_scale_factor_without_obs_types(self):
        lines = minimal_header_lines()
        lines = lines[:-1] + [header_line("E   10", "SYS / SCALE FACTOR")] + lines[-1:]
        header = parse_header(lines)
        formatted = format_header(header)
        (line,) = lines_with_label(formatted, "SYS / SCALE FACTOR")
        assert line[:10] == "E   10    "
        assert parse_header(formatted) == header
        assert count_header_lines(header) == len(formatted)

    def test_scale_factor_for_all_and_listed_codes(self, full_header):
        full_header.scale_factors = {"S": {ObsID("S", ""): 100, ObsID("S", "C1C"): 100}}
        lines = lines_with_label(format_header(full_header), "SYS / SCALE FACTOR")
        assert [line[:18] for line in lines] == ["S  100            ", "S  100   1 C1C    "]


class TestPreflight:
    def test_missing_marker_name(self, full_header):
        full_header.rinex_version = 3.0
        full_header.valid &= ~RecordKind.MARKER_NAME
        with pytest.raises(IncompleteHeaderError) as e:
            format_header(full_header)
        assert RecordKind.MARKER_NAME in e.value.missing
        assert "MARKER NAME" in str(e.value)

    def test_missing_phase_shifts(self, full_header):
        full_header.valid &= ~RecordKind.SYS_PHASE_SHIFT
        with pytest.raises(IncompleteHeaderError) as e:
            format_header(full_header)
        assert e.value.missing == [RecordKind.SYS_PHASE_SHIFT]

    def test_phase_shifts_optional_in_3_00(self, full_header):
        full_header.rinex_version = 3.0
        full_header.valid &= ~RecordKind.SYS_PHASE_SHIFT
        assert lines_with_label(format_header(full_header), "SYS / PHASE SHIFTS") == []

    def test_unsupported_version(self, full_header):
        full_header.rinex_version = 2.11
        with pytest.raises(UnsupportedVersionError):
            format_header(full_header)

    def test_file_type(self, full_header):
        full_header.file_type = "NAVIGATION DATA"
        with pytest.raises(InvalidFileTypeError):
            format_header(full_header)

    def test_system(self, full_header):
        full_header.system_code = "J"
        with pytest.raises(InvalidSystemError):
            format_header(full_header)

    def test_lowercase_system(self, full_header):
        full_header.system_code = "m"
        lines = format_header(full_header)
        assert lines[0][40:60] == "M (Mixed)           "

    def test_phase_shift_code_without_satellites(self, full_header):
        full_header.phase_shifts = {ObsID("G", "L1C"): {}}
        with pytest.raises(MalformedFieldError) as e:
            format_header(full_header)
        assert e.value.record is RecordKind.SYS_PHASE_SHIFT
        assert "GL1C" in str(e.value)

    def test_empty_scale_factor_system(self, full_header):
        full_header.scale_factors = {"E": {}}
        with pytest.raises(MalformedFieldError):
            format_header(full_header)

    def test_nothing_written_on_failure(self, full_header):
        full_header.valid &= ~RecordKind.END_OF_HEADER
        output = StringIO()
        with pytest.raises(IncompleteHeaderError):
            write_header(full_header, output)
        assert output.getvalue() == ""

    def test_try_format_header(self, full_header):
        assert try_format_header(full_header).ok
        full_header.file_type = ""
        result = try_format_header(full_header)
        assert isinstance(result.error, InvalidFileTypeError)


class TestCountHeaderLines:
    def test_single_system(self, full_header):
        for system_code in ("R", "E"):
            del full_header.system_obs_types[system_code]
        full_header.number_of_obs = {
            SatID("G", prn): list(range(15)) for prn in (1, 2, 3)
        }
        assert count_header_lines(full_header) == len(format_header(full_header))

    def test_uses_first_satellite_count_length(self, full_header):
        # G01 needs two lines per satellite, R01 and E11 need one
        assert count_header_lines(full_header) == len(format_header(full_header)) + 2

    def test_write_header(self, full_header):
        output = StringIO()
        num_lines = write_header(full_header, output)
        text = output.getvalue()
        assert num_lines == len(format_header(full_header))
        assert text.count("\n") == num_lines
        assert text.endswith("END OF HEADER       \n")
