"""
Human-readable summary of a header, for inspection and debugging.
"""

from typing import List, Tuple

from .errors import UnsupportedVersionError
from .fields import TimeOfObs
from .header import CorrectionInfo, Header
from .identifiers import SYSTEM_ID_TO_NAME_MAP, SYSTEM_LETTER_TO_ID_MAP, system_name
from .labels import RecordKind


def _format_time(time_of_obs: TimeOfObs) -> str:
    return f"{time_of_obs.epoch:%Y/%m/%d %H:%M:%S.%f}"[:-3] + f" {time_of_obs.time_system}"


def _format_xyz(xyz: Tuple[float, float, float]) -> str:
    return "({:.4f}, {:.4f}, {:.4f})".format(*xyz)


def _gnss_name(system_code: str) -> str:
    return SYSTEM_ID_TO_NAME_MAP.get(SYSTEM_LETTER_TO_ID_MAP.get(system_code, ""), system_code)


def _dump_corrections(kind: str, infos: List[CorrectionInfo]) -> List[str]:
    return [
        f"System {kind} correction applied to {_gnss_name(info.system_code)} data "
        f"using program {info.program_name} from source {info.source}"
        for info in infos
    ]


def dump_validity(header: Header) -> List[str]:
    try:
        missing = header.missing_records()
    except UnsupportedVersionError:
        return [f"(This header is NOT VALID: unsupported RINEX version {header.rinex_version:.2f})"]
    if not missing:
        return ["(This header is VALID)"]
    lines = [f"(This header is NOT VALID RINEX {header.rinex_version:.2f})"]
    lines += [f" {kind.label:<20} is NOT valid" for kind in missing]
    return lines


def dump_header(header: Header) -> str:
    """
    Returns a multi-line description of `header`: required records, a
    validity verdict naming any missing required records, the optional
    records that are present and the comments.
    """
    lines = ["-" * 34 + " REQUIRED " + "-" * 34]
    lines.append(
        f"Rinex Version {header.rinex_version:5.2f},  File type {header.file_type},  "
        f"System {header.system_code} ({system_name(header.system_code)})."
    )
    lines.append(f"Prgm: {header.program_name},  Run: {header.date},  By: {header.run_by}")
    lines.append(f"Marker name: {header.marker_name}")
    lines.append(f"Observer : {header.observer},  Agency: {header.agency}")
    lines.append(
        f"Rec#: {header.receiver_number},  Type: {header.receiver_type},  Vers: {header.receiver_version}"
    )
    lines.append(f"Antenna # : {header.antenna_number},  Type : {header.antenna_type}")
    lines.append(f"Position      (XYZ,m) : {_format_xyz(header.approximate_position)}")
    lines.append(f"Antenna Delta (HEN,m) : {_format_xyz(header.antenna_delta_hen)}")
    for system_code, obs_ids in header.system_obs_types.items():
        lines.append(f"{_gnss_name(system_code)} Observation types ({len(obs_ids)}):")
        for i, obs_id in enumerate(obs_ids):
            lines.append(f" Type #{i + 1:02} ({obs_id.qualified})")
    lines.append(f"Time of first obs {_format_time(header.time_of_first_obs)}")
    if header.is_valid(RecordKind.SYS_PHASE_SHIFT):
        for obs_id, sat_corrections in header.phase_shifts.items():
            if not sat_corrections:
                lines.append(f"No phase shift correction applied to {_gnss_name(obs_id.system)}")
            for sat_id, correction in sat_corrections.items():
                lines.append(
                    f"Phase shift correction {correction:8.5f} cycles applied to {sat_id} {obs_id.qualified}"
                )
    lines += dump_validity(header)

    lines.append("-" * 34 + " OPTIONAL " + "-" * 34)
    if header.is_valid(RecordKind.MARKER_NUMBER):
        lines.append(f"Marker number : {header.marker_number}")
    if header.is_valid(RecordKind.MARKER_TYPE):
        lines.append(f"Marker type : {header.marker_type}")
    if header.is_valid(RecordKind.ANTENNA_DELTA_XYZ):
        lines.append(f"Antenna Delta    (XYZ,m) : {_format_xyz(header.antenna_delta_xyz)}")
    if header.is_valid(RecordKind.ANTENNA_PHASE_CENTER):
        phase_center = header.antenna_phase_center
        lines.append(
            f"Antenna PhaseCtr (XYZ,m) : {phase_center.system_code} {phase_center.obs_code} "
            f"{_format_xyz(phase_center.offset)}"
        )
    if header.is_valid(RecordKind.ANTENNA_BORESIGHT_XYZ):
        lines.append(f"Antenna B.sight  (XYZ,m) : {_format_xyz(header.antenna_boresight)}")
    if header.is_valid(RecordKind.ANTENNA_ZERODIR_AZI):
        lines.append(f"Antenna ZeroDir  (deg)   : {header.antenna_zerodir_azi:.4f}")
    if header.is_valid(RecordKind.ANTENNA_ZERODIR_XYZ):
        lines.append(f"Antenna ZeroDir  (XYZ,m) : {_format_xyz(header.antenna_zerodir_xyz)}")
    if header.is_valid(RecordKind.CENTER_OF_MASS):
        lines.append(f"Center of Mass   (XYZ,m) : {_format_xyz(header.center_of_mass_xyz)}")
    if header.is_valid(RecordKind.SIGNAL_STRENGTH_UNIT):
        lines.append(f"Signal Strength Unit = {header.signal_strength_unit}")
    if header.is_valid(RecordKind.INTERVAL):
        lines.append(f"Interval = {header.interval:7.3f}")
    if header.is_valid(RecordKind.LAST_TIME):
        lines.append(f"Time of Last Obs {_format_time(header.time_of_last_obs)}")
    if header.is_valid(RecordKind.RECEIVER_OFFSET):
        applied = "ARE" if header.is_receiver_clock_offset_applied else "are NOT"
        lines.append(f"Clock offset record is present and offsets {applied} applied.")
    if header.is_valid(RecordKind.SYS_DCBS_APPLIED):
        lines += _dump_corrections("DCBS", header.applied_dcbs)
    if header.is_valid(RecordKind.SYS_PCVS_APPLIED):
        lines += _dump_corrections("PCVS", header.applied_pcvs)
    if header.is_valid(RecordKind.SYS_SCALE_FACTOR):
        for system_code, sys_factors in header.scale_factors.items():
            lines.append(f"{_gnss_name(system_code)} scale factors applied:")
            lines += [f"   {obs_id.qualified} {factor}" for obs_id, factor in sys_factors.items()]
    if header.is_valid(RecordKind.GLONASS_SLOT_FREQ):
        lines.append("GLONASS frequency channels:")
        slots = [f" {sat_id} {freq:2}" for sat_id, freq in header.glonass_slot_frequencies.items()]
        lines += ["".join(slots[i : i + 8]) for i in range(0, len(slots), 8)]
    if header.is_valid(RecordKind.LEAP_SECONDS):
        lines.append(f"Leap seconds: {header.leap_seconds}")
    if header.is_valid(RecordKind.NUM_SATELLITES):
        lines.append(f"Number of Satellites with data : {header.number_of_satellites}")
    if header.is_valid(RecordKind.PRN_OBS):
        lines.append(" PRN and number of observations for each obs type:")
        for sat_id, counts in header.number_of_obs.items():
            lines.append(f" {sat_id} " + "".join(f" {count:6}" for count in counts))

    lines.append(f"Comments ({len(header.comment_lines)}) :")
    lines += header.comment_lines
    lines.append("-" * 33 + " END OF HEADER " + "-" * 32)
    return "\n".join(lines)
