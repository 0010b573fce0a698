from datetime import datetime
from typing import List

import pytest

from rinex3_header import (
    AntennaPhaseCenterOffset,
    CorrectionInfo,
    Header,
    HEADER_LABELS,
    ObsID,
    SatID,
    TimeOfObs,
)

GPS_CODES = [
    "C1C", "L1C", "D1C", "S1C", "C2W", "L2W", "D2W", "S2W",
    "C2L", "L2L", "D2L", "S2L", "C5Q", "L5Q", "D5Q",
]
GLONASS_CODES = ["C1C", "L1C", "D1C", "S1C", "C2P", "L2P", "D2P", "S2P"]
GALILEO_CODES = ["C1C", "L1C", "C5Q", "L5Q"]


def obs_ids(system: str, codes: List[str]) -> List[ObsID]:
    return [ObsID(system, code) for code in codes]


def header_line(data: str, label: str) -> str:
    return f"{data:<60}{label:<20}"


def minimal_header_lines(version: str = "3.01", system: str = "G (GPS)") -> List[str]:
    """
    The required records for a single-system header, as file lines.
    """
    lines = [
        header_line(f"{version:>9}{'':11}{'OBSERVATION DATA':<20}{system:<20}", "RINEX VERSION / TYPE"),
        header_line(f"{'teqc':<20}{'CU SENSE LAB':<20}{'20200102 000512 UTC':<20}", "PGM / RUN BY / DATE"),
        header_line("ABMF", "MARKER NAME"),
        header_line(f"{'OPERATOR':<20}{'IGN':<40}", "OBSERVER / AGENCY"),
        header_line(f"{'3008280':<20}{'SEPT POLARX5':<20}{'5.3.2':<20}", "REC # / TYPE / VERS"),
        header_line(f"{'5546':<20}{'TRM57971.00     NONE':<20}", "ANT # / TYPE"),
        header_line(f"{2919785.712:14.4f}{-5383745.067:14.4f}{1774604.692:14.4f}", "APPROX POSITION XYZ"),
        header_line(f"{0.0:14.4f}{0.0:14.4f}{0.0:14.4f}", "ANTENNA: DELTA H/E/N"),
        header_line("G    5 C1C L1C D1C S1C C2W", "SYS / # / OBS TYPES"),
        header_line(f"{2020:6}{1:6}{2:6}{0:6}{0:6}{0.0:13.7f}{'GPS':>8}", "TIME OF FIRST OBS"),
    ]
    if version != "3.00":
        lines.append(header_line("G", "SYS / PHASE SHIFTS"))
    lines.append(header_line("", "END OF HEADER"))
    return lines


@pytest.fixture
def minimal_lines() -> List[str]:
    return minimal_header_lines()


@pytest.fixture
def full_header() -> Header:
    """
    A mixed-system 3.01 header with every record present.
    """
    header = Header(
        rinex_version=3.01,
        file_type="OBSERVATION DATA",
        system_code="M",
        program_name="sbf2rin-13.4.3",
        run_by="CU SENSE LAB",
        date="20200102 000512 UTC",
        marker_name="ABMF",
        marker_number="97103M001",
        marker_type="GEODETIC",
        observer="OPERATOR",
        agency="IGN",
        receiver_number="3008280",
        receiver_type="SEPT POLARX5",
        receiver_version="5.3.2",
        antenna_number="5546",
        antenna_type="TRM57971.00     NONE",
        approximate_position=(2919785.712, -5383745.067, 1774604.692),
        antenna_delta_hen=(0.0135, 0.0, 0.0),
        antenna_delta_xyz=(0.0, 0.0, 0.0135),
        antenna_phase_center=AntennaPhaseCenterOffset("G", "L1C", (0.0125, 0.0, 0.0652)),
        antenna_boresight=(0.0, 0.0, 1.0),
        antenna_zerodir_azi=90.0,
        antenna_zerodir_xyz=(1.0, 0.0, 0.0),
        center_of_mass_xyz=(0.1, 0.2, 0.3),
        system_obs_types={
            "G": obs_ids("G", GPS_CODES),
            "R": obs_ids("R", GLONASS_CODES),
            "E": obs_ids("E", GALILEO_CODES),
        },
        signal_strength_unit="DBHZ",
        interval=30.0,
        time_of_first_obs=TimeOfObs(datetime(2020, 1, 2, 0, 0, 0), "GPS"),
        time_of_last_obs=TimeOfObs(datetime(2020, 1, 2, 23, 59, 30, 500000), "GPS"),
        is_receiver_clock_offset_applied=False,
        applied_dcbs=[CorrectionInfo("G", "CC2NONCC", "http://www.ngs.noaa.gov/igs")],
        applied_pcvs=[CorrectionInfo("G", "PAGES", "igs08.atx")],
        scale_factors={
            "G": {ObsID("G", "C1C"): 100, ObsID("G", "L1C"): 100, ObsID("G", "S1C"): 10},
        },
        phase_shifts={
            ObsID("G", "L1C"): {SatID.system_only("G"): 0.0},
            ObsID("G", "L2L"): {SatID("G", 1): -0.25, SatID("G", 5): -0.25},
            ObsID("R", ""): {},
            ObsID("E", "L1C"): {SatID.system_only("E"): 0.5},
        },
        glonass_slot_frequencies={
            SatID("R", 1): 1,
            SatID("R", 2): -4,
            SatID("R", 3): 5,
            SatID("R", 4): 6,
        },
        leap_seconds=18,
        number_of_satellites=3,
        number_of_obs={
            SatID("G", 1): [2880 - i for i in range(15)],
            SatID("R", 1): [1440, 1440, 1440, 1440, 1200, 1200, 1200, 1200],
            SatID("E", 11): [10, 10, 0, 0],
        },
        comment_lines=["Generated for header round trip tests", "second comment line"],
    )
    for _, kind in HEADER_LABELS:
        header.mark_valid(kind)
    return header
