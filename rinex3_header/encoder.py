"""
Encoding of RINEX 3.00 / 3.01 observation headers.

Records are written in label declaration order. Every line is exactly 80
characters: 60 data columns followed by the 20-column label.
"""

import logging
from typing import Callable, Dict, List, Sequence, TextIO, Tuple

from .errors import (
    HeaderResult,
    IncompleteHeaderError,
    InvalidFileTypeError,
    InvalidSystemError,
    MalformedFieldError,
    RinexHeaderError,
)
from .fields import format_text_field, format_time_of_obs
from .header import CorrectionInfo, Header
from .identifiers import HEADER_SYSTEM_NAMES, ObsID, SatID, system_name
from .labels import (
    HEADER_LABELS,
    LABEL_START,
    LABEL_WIDTH,
    RecordKind,
    missing_records,
    required_records,
)

MAX_OBS_TYPES_PER_LINE = 9
MAX_SCALE_FACTOR_CODES_PER_LINE = 12
MAX_PHASE_SHIFT_SATS_PER_LINE = 10
MAX_GLONASS_SLOTS_PER_LINE = 8
MAX_PRN_OBS_PER_LINE = 9


def _chunks(items: Sequence, size: int) -> List[Sequence]:
    if not items:
        return [items]
    return [items[i : i + size] for i in range(0, len(items), size)]


def _num_lines(num_items: int, per_line: int) -> int:
    return max(1, (num_items + per_line - 1) // per_line)


def _format_xyz(xyz: Tuple[float, float, float]) -> str:
    x, y, z = xyz
    return f"{x:14.4f}{y:14.4f}{z:14.4f}"


def format_line(data: str, record: RecordKind) -> str:
    return format_text_field(data, LABEL_START) + format_text_field(record.label, LABEL_WIDTH)


def group_scale_factors(sys_factors: Dict[ObsID, int]) -> Dict[int, List[ObsID]]:
    """
    Groups a system's observation codes by scale factor, in order of first appearance.
    """
    groups: Dict[int, List[ObsID]] = {}
    for obs_id, factor in sys_factors.items():
        groups.setdefault(factor, []).append(obs_id)
    return groups


def group_phase_shifts(sat_corrections: Dict[SatID, float]) -> Dict[float, List[SatID]]:
    groups: Dict[float, List[SatID]] = {}
    for sat_id, correction in sat_corrections.items():
        groups.setdefault(correction, []).append(sat_id)
    return groups


def _is_system_wide(sat_ids: List[SatID]) -> bool:
    return len(sat_ids) == 1 and sat_ids[0].is_system_only


def format_rinex_version_type(header: Header) -> List[str]:
    system_code = header.system_code.upper()
    system = f"{system_code} ({system_name(system_code)})"
    return [
        f"{header.rinex_version:9.2f}{'':11}"
        + format_text_field(header.file_type, 20)
        + format_text_field(system, 20)
    ]


def format_program_run_by_date(header: Header) -> List[str]:
    return [
        format_text_field(header.program_name, 20)
        + format_text_field(header.run_by, 20)
        + format_text_field(header.date, 20)
    ]


def format_comments(header: Header) -> List[str]:
    return [format_text_field(comment, 60) for comment in header.comment_lines]


def format_marker_name(header: Header) -> List[str]:
    return [format_text_field(header.marker_name, 60)]


def format_marker_number(header: Header) -> List[str]:
    return [format_text_field(header.marker_number, 20)]


def format_marker_type(header: Header) -> List[str]:
    return [format_text_field(header.marker_type, 20)]


def format_observer_agency(header: Header) -> List[str]:
    return [format_text_field(header.observer, 20) + format_text_field(header.agency, 40)]


def format_receiver_type_version(header: Header) -> List[str]:
    return [
        format_text_field(header.receiver_number, 20)
        + format_text_field(header.receiver_type, 20)
        + format_text_field(header.receiver_version, 20)
    ]


def format_antenna_type(header: Header) -> List[str]:
    return [
        format_text_field(header.antenna_number, 20) + format_text_field(header.antenna_type, 20)
    ]


def format_antenna_phase_center(header: Header) -> List[str]:
    phase_center = header.antenna_phase_center
    x, y, z = phase_center.offset
    return [
        format_text_field(phase_center.system_code, 1)
        + f" {phase_center.obs_code[:3]:>3}"
        + f"{x:9.4f}{y:14.4f}{z:14.4f}"
    ]


def format_system_obs_types(header: Header) -> List[str]:
    lines = []
    for system_code, obs_ids in header.system_obs_types.items():
        for i, chunk in enumerate(_chunks(obs_ids, MAX_OBS_TYPES_PER_LINE)):
            line = f"{system_code:1}  {len(obs_ids):3}" if i == 0 else " " * 6
            lines.append(line + "".join(f" {obs_id.code:>3}" for obs_id in chunk))
    return lines


def _format_correction_infos(infos: List[CorrectionInfo]) -> List[str]:
    return [
        format_text_field(info.system_code, 1)
        + " "
        + format_text_field(info.program_name, 17)
        + " "
        + format_text_field(info.source, 40)
        for info in infos
    ]


def format_sys_scale_factors(header: Header) -> List[str]:
    lines = []
    for system_code, sys_factors in header.scale_factors.items():
        for factor, obs_ids in group_scale_factors(sys_factors).items():
            codes = [obs_id for obs_id in obs_ids if obs_id.code]
            if len(codes) < len(obs_ids):
                # blank count: all observation types of the system
                lines.append(f"{system_code:1} {factor:4}")
            if not codes:
                continue
            for i, chunk in enumerate(_chunks(codes, MAX_SCALE_FACTOR_CODES_PER_LINE)):
                line = f"{system_code:1} {factor:4}  {len(codes):2}" if i == 0 else " " * 10
                lines.append(line + "".join(f" {obs_id.code:>3}" for obs_id in chunk))
    return lines


def format_sys_phase_shifts(header: Header) -> List[str]:
    lines = []
    for obs_id, sat_corrections in header.phase_shifts.items():
        if not sat_corrections:
            lines.append(obs_id.system)
            continue
        for correction, sat_ids in group_phase_shifts(sat_corrections).items():
            line = f"{obs_id.system:1} {obs_id.code:>3} {correction:8.5f}"
            if _is_system_wide(sat_ids):
                lines.append(line)
                continue
            line += f"  {len(sat_ids):2}"
            for i, chunk in enumerate(_chunks(sat_ids, MAX_PHASE_SHIFT_SATS_PER_LINE)):
                if i > 0:
                    line = " " * 18
                lines.append(line + "".join(f" {str(sat_id):<3}" for sat_id in chunk))
    return lines


def format_glonass_slot_frequencies(header: Header) -> List[str]:
    slots = list(header.glonass_slot_frequencies.items())
    lines = []
    for i, chunk in enumerate(_chunks(slots, MAX_GLONASS_SLOTS_PER_LINE)):
        line = f"{len(slots):3} " if i == 0 else " " * 4
        lines.append(line + "".join(f"{str(sat_id):<3}{freq:3} " for sat_id, freq in chunk))
    return lines


def format_number_of_obs(header: Header) -> List[str]:
    lines = []
    for sat_id, counts in header.number_of_obs.items():
        for i, chunk in enumerate(_chunks(counts, MAX_PRN_OBS_PER_LINE)):
            line = f"   {str(sat_id):<3}" if i == 0 else " " * 6
            lines.append(line + "".join(f"{count:6}" for count in chunk))
    return lines


RECORD_FORMATTERS: Dict[RecordKind, Callable[[Header], List[str]]] = {
    RecordKind.VERSION: format_rinex_version_type,
    RecordKind.RUN_BY: format_program_run_by_date,
    RecordKind.COMMENT: format_comments,
    RecordKind.MARKER_NAME: format_marker_name,
    RecordKind.MARKER_NUMBER: format_marker_number,
    RecordKind.MARKER_TYPE: format_marker_type,
    RecordKind.OBSERVER: format_observer_agency,
    RecordKind.RECEIVER: format_receiver_type_version,
    RecordKind.ANTENNA_TYPE: format_antenna_type,
    RecordKind.ANTENNA_POSITION: lambda h: [_format_xyz(h.approximate_position)],
    RecordKind.ANTENNA_DELTA_HEN: lambda h: [_format_xyz(h.antenna_delta_hen)],
    RecordKind.ANTENNA_DELTA_XYZ: lambda h: [_format_xyz(h.antenna_delta_xyz)],
    RecordKind.ANTENNA_PHASE_CENTER: format_antenna_phase_center,
    RecordKind.ANTENNA_BORESIGHT_XYZ: lambda h: [_format_xyz(h.antenna_boresight)],
    RecordKind.ANTENNA_ZERODIR_AZI: lambda h: [f"{h.antenna_zerodir_azi:14.4f}"],
    RecordKind.ANTENNA_ZERODIR_XYZ: lambda h: [_format_xyz(h.antenna_zerodir_xyz)],
    RecordKind.CENTER_OF_MASS: lambda h: [_format_xyz(h.center_of_mass_xyz)],
    RecordKind.SYS_OBS_TYPES: format_system_obs_types,
    RecordKind.SIGNAL_STRENGTH_UNIT: lambda h: [format_text_field(h.signal_strength_unit, 20)],
    RecordKind.INTERVAL: lambda h: [f"{h.interval:10.3f}"],
    RecordKind.FIRST_TIME: lambda h: [format_time_of_obs(h.time_of_first_obs)],
    RecordKind.LAST_TIME: lambda h: [format_time_of_obs(h.time_of_last_obs)],
    RecordKind.RECEIVER_OFFSET: lambda h: [f"{int(h.is_receiver_clock_offset_applied):6}"],
    RecordKind.SYS_DCBS_APPLIED: lambda h: _format_correction_infos(h.applied_dcbs),
    RecordKind.SYS_PCVS_APPLIED: lambda h: _format_correction_infos(h.applied_pcvs),
    RecordKind.SYS_SCALE_FACTOR: format_sys_scale_factors,
    RecordKind.SYS_PHASE_SHIFT: format_sys_phase_shifts,
    RecordKind.GLONASS_SLOT_FREQ: format_glonass_slot_frequencies,
    RecordKind.LEAP_SECONDS: lambda h: [f"{h.leap_seconds:6}"],
    RecordKind.NUM_SATELLITES: lambda h: [f"{h.number_of_satellites:6}"],
    RecordKind.PRN_OBS: format_number_of_obs,
    RecordKind.END_OF_HEADER: lambda h: [""],
}


def check_header(header: Header) -> None:
    """
    Checks that `header` can be written.

    Raises:
        UnsupportedVersionError: version is not 3.00 or 3.01
        IncompleteHeaderError: required records for the version are not all valid
        InvalidFileTypeError: file type does not start with `O`
        InvalidSystemError: system code is not one of G, R, E, S, M
        MalformedFieldError: a scale factor system or a phase shift
            observation code has nothing to write
    """
    required = required_records(header.rinex_version)
    missing = missing_records(header.valid, required)
    if missing:
        raise IncompleteHeaderError(missing, header.rinex_version)
    if not header.file_type or header.file_type[0] not in "Oo":
        raise InvalidFileTypeError(header.file_type)
    if header.system_code.upper() not in HEADER_SYSTEM_NAMES:
        raise InvalidSystemError(header.system_code)
    if header.is_valid(RecordKind.SYS_SCALE_FACTOR):
        for system_code, sys_factors in header.scale_factors.items():
            if not sys_factors:
                raise MalformedFieldError("scale factors", RecordKind.SYS_SCALE_FACTOR, system_code)
    if header.is_valid(RecordKind.SYS_PHASE_SHIFT):
        for obs_id, sat_corrections in header.phase_shifts.items():
            # only the system-only entry may have no satellites
            if obs_id.code and not sat_corrections:
                raise MalformedFieldError("satellites", RecordKind.SYS_PHASE_SHIFT, obs_id.qualified)


def format_header(header: Header) -> List[str]:
    """
    Returns the header lines (without newlines). Nothing is formatted unless
    `check_header` passes.
    """
    check_header(header)
    lines = []
    for _, record in HEADER_LABELS:
        if not header.is_valid(record):
            continue
        for data in RECORD_FORMATTERS[record](header):
            lines.append(format_line(data, record))
    return lines


def _count_scale_factor_lines(header: Header) -> int:
    num_lines = 0
    for sys_factors in header.scale_factors.values():
        for obs_ids in group_scale_factors(sys_factors).values():
            num_codes = sum(1 for obs_id in obs_ids if obs_id.code)
            if num_codes < len(obs_ids):
                num_lines += 1
            if num_codes:
                num_lines += _num_lines(num_codes, MAX_SCALE_FACTOR_CODES_PER_LINE)
    return num_lines


def _count_phase_shift_lines(header: Header) -> int:
    num_lines = 0
    for sat_corrections in header.phase_shifts.values():
        if not sat_corrections:
            num_lines += 1
            continue
        for sat_ids in group_phase_shifts(sat_corrections).values():
            if _is_system_wide(sat_ids):
                num_lines += 1
            else:
                num_lines += _num_lines(len(sat_ids), MAX_PHASE_SHIFT_SATS_PER_LINE)
    return num_lines


def _count_prn_obs_lines(header: Header) -> int:
    if not header.number_of_obs:
        return 0
    # every satellite is assumed to have as many counts as the first one
    first_counts = next(iter(header.number_of_obs.values()))
    return len(header.number_of_obs) * _num_lines(len(first_counts), MAX_PRN_OBS_PER_LINE)


RECORD_LINE_COUNTERS: Dict[RecordKind, Callable[[Header], int]] = {
    RecordKind.COMMENT: lambda h: len(h.comment_lines),
    RecordKind.SYS_OBS_TYPES: lambda h: sum(
        _num_lines(len(obs_ids), MAX_OBS_TYPES_PER_LINE) for obs_ids in h.system_obs_types.values()
    ),
    RecordKind.SYS_DCBS_APPLIED: lambda h: len(h.applied_dcbs),
    RecordKind.SYS_PCVS_APPLIED: lambda h: len(h.applied_pcvs),
    RecordKind.SYS_SCALE_FACTOR: _count_scale_factor_lines,
    RecordKind.SYS_PHASE_SHIFT: _count_phase_shift_lines,
    RecordKind.GLONASS_SLOT_FREQ: lambda h: _num_lines(
        len(h.glonass_slot_frequencies), MAX_GLONASS_SLOTS_PER_LINE
    ),
    RecordKind.PRN_OBS: _count_prn_obs_lines,
}


def count_header_lines(header: Header) -> int:
    """
    Number of lines `format_header` writes for `header`.

    `PRN / # OF OBS` is counted using the first satellite's number of
    observation counts for every satellite, so headers mixing systems with
    different numbers of observation types may be miscounted.
    """
    num_lines = 0
    for _, record in HEADER_LABELS:
        if not header.is_valid(record):
            continue
        counter = RECORD_LINE_COUNTERS.get(record)
        num_lines += counter(header) if counter else 1
    return num_lines


def write_header(header: Header, output: TextIO) -> int:
    """
    Writes the header to a text stream and returns the number of lines written.
    """
    lines = format_header(header)
    for line in lines:
        output.write(line + "\n")
    logging.debug(f"Wrote RINEX {header.rinex_version:.2f} header ({len(lines)} lines)")
    return len(lines)


def try_format_header(header: Header) -> HeaderResult[List[str]]:
    try:
        return HeaderResult(value=format_header(header))
    except RinexHeaderError as e:
        return HeaderResult(error=e)
