"""
Decoding of RINEX 3.00 / 3.01 observation headers.

Each header line is dispatched on its label to a record parser. Records that
span several lines (`SYS / # / OBS TYPES`, `SYS / SCALE FACTOR`,
`SYS / PHASE SHIFTS`, `PRN / # OF OBS`) carry their state from one line to the
next in a `ParseContext` that lives only for one call to `parse_header`.
"""

from dataclasses import dataclass
import logging
from typing import Callable, Dict, Iterable, Optional, Tuple

from .errors import (
    HeaderResult,
    IncompleteHeaderError,
    InvalidFileTypeError,
    InvalidSystemError,
    MalformedFieldError,
    MalformedLineError,
    RinexHeaderError,
    UnexpectedContinuationError,
)
from .fields import (
    parse_float_field,
    parse_int_field,
    parse_text_field,
    parse_time_of_obs,
)
from .header import AntennaPhaseCenterOffset, CorrectionInfo, Header
from .identifiers import HEADER_SYSTEM_NAMES, SYSTEM_LETTER_TO_ID_MAP, ObsID, SatID
from .labels import (
    LABEL_START,
    LABEL_WIDTH,
    NO_RECORDS,
    RecordKind,
    lookup_record_kind,
    missing_records,
    required_records,
)

MIN_LINE_LENGTH = 60
MAX_LINE_LENGTH = 80

# reading capacities; writers are free to put fewer entries on a line
MAX_OBS_TYPES_PER_LINE_READ = 13
MAX_SCALE_FACTOR_CODES_PER_LINE_READ = 12
MAX_PHASE_SHIFT_SATS_PER_LINE_READ = 10
MAX_GLONASS_SLOTS_PER_LINE_READ = 8
MAX_PRN_OBS_PER_LINE_READ = 9


@dataclass
class ParseContext:
    previous_record: RecordKind = NO_RECORDS
    previous_system: str = ""
    previous_count: int = 0
    previous_scale_factor: int = 0
    items_read: int = 0  # codes or satellites read so far for the open record
    last_satellite: Optional[SatID] = None
    pending_phase_shift: Optional[ObsID] = None
    pending_phase_shift_correction: float = 0.0
    line_number: int = 0


def _check_system_code(system_code: str, record: RecordKind) -> str:
    if system_code not in SYSTEM_LETTER_TO_ID_MAP:
        raise MalformedFieldError("system", record, system_code)
    return system_code


def _parse_sat_id(text: str, record: RecordKind) -> SatID:
    try:
        return SatID.from_string(text)
    except ValueError:
        raise MalformedFieldError("satellite", record, text.strip()) from None


def _parse_obs_id(code: str, system_code: str, record: RecordKind) -> ObsID:
    try:
        return ObsID.from_string(code, system_code)
    except ValueError:
        raise MalformedFieldError("observation code", record, code) from None


def _parse_xyz(line: str, record: RecordKind) -> Tuple[float, float, float]:
    x = parse_float_field(line, 0, 14, record, "x")
    y = parse_float_field(line, 14, 14, record, "y")
    z = parse_float_field(line, 28, 14, record, "z")
    return (x, y, z)


def parse_rinex_version_type(line: str, header: Header, context: ParseContext) -> None:
    header.rinex_version = parse_float_field(line, 0, 20, RecordKind.VERSION, "version")
    file_type = parse_text_field(line, 20, 20)
    system = parse_text_field(line, 40, 20)
    if not file_type or file_type[0] not in "Oo":
        raise InvalidFileTypeError(file_type)
    if not system or system[0].upper() not in HEADER_SYSTEM_NAMES:
        raise InvalidSystemError(system)
    header.file_type = file_type
    header.system_code = system[0].upper()


def parse_program_run_by_date(line: str, header: Header, context: ParseContext) -> None:
    header.program_name = parse_text_field(line, 0, 20)
    header.run_by = parse_text_field(line, 20, 20)
    header.date = parse_text_field(line, 40, 20)


def parse_comment(line: str, header: Header, context: ParseContext) -> None:
    header.comment_lines.append(parse_text_field(line, 0, 60))


def parse_marker_name(line: str, header: Header, context: ParseContext) -> None:
    header.marker_name = parse_text_field(line, 0, 60)


def parse_marker_number(line: str, header: Header, context: ParseContext) -> None:
    header.marker_number = parse_text_field(line, 0, 20)


def parse_marker_type(line: str, header: Header, context: ParseContext) -> None:
    header.marker_type = parse_text_field(line, 0, 20)


def parse_observer_agency(line: str, header: Header, context: ParseContext) -> None:
    header.observer = parse_text_field(line, 0, 20)
    header.agency = parse_text_field(line, 20, 40)


def parse_receiver_type_version(line: str, header: Header, context: ParseContext) -> None:
    header.receiver_number = parse_text_field(line, 0, 20)
    header.receiver_type = parse_text_field(line, 20, 20)
    header.receiver_version = parse_text_field(line, 40, 20)


def parse_antenna_type(line: str, header: Header, context: ParseContext) -> None:
    header.antenna_number = parse_text_field(line, 0, 20)
    header.antenna_type = parse_text_field(line, 20, 20)


def parse_approx_position_xyz(line: str, header: Header, context: ParseContext) -> None:
    header.approximate_position = _parse_xyz(line, RecordKind.ANTENNA_POSITION)


def parse_antenna_delta_hen(line: str, header: Header, context: ParseContext) -> None:
    header.antenna_delta_hen = _parse_xyz(line, RecordKind.ANTENNA_DELTA_HEN)


def parse_antenna_delta_xyz(line: str, header: Header, context: ParseContext) -> None:
    header.antenna_delta_xyz = _parse_xyz(line, RecordKind.ANTENNA_DELTA_XYZ)


def parse_antenna_phase_center(line: str, header: Header, context: ParseContext) -> None:
    record = RecordKind.ANTENNA_PHASE_CENTER
    x = parse_float_field(line, 5, 9, record, "x")
    y = parse_float_field(line, 14, 14, record, "y")
    z = parse_float_field(line, 28, 14, record, "z")
    header.antenna_phase_center = AntennaPhaseCenterOffset(
        parse_text_field(line, 0, 1), parse_text_field(line, 2, 3), (x, y, z)
    )


def parse_antenna_boresight(line: str, header: Header, context: ParseContext) -> None:
    header.antenna_boresight = _parse_xyz(line, RecordKind.ANTENNA_BORESIGHT_XYZ)


def parse_antenna_zerodir_azi(line: str, header: Header, context: ParseContext) -> None:
    header.antenna_zerodir_azi = parse_float_field(
        line, 0, 14, RecordKind.ANTENNA_ZERODIR_AZI, "azimuth"
    )


def parse_antenna_zerodir_xyz(line: str, header: Header, context: ParseContext) -> None:
    header.antenna_zerodir_xyz = _parse_xyz(line, RecordKind.ANTENNA_ZERODIR_XYZ)


def parse_center_of_mass_xyz(line: str, header: Header, context: ParseContext) -> None:
    header.center_of_mass_xyz = _parse_xyz(line, RecordKind.CENTER_OF_MASS)


def parse_system_obs_types(line: str, header: Header, context: ParseContext) -> None:
    record = RecordKind.SYS_OBS_TYPES
    system_code = line[0:1].strip()
    if system_code:
        _check_system_code(system_code, record)
        num_obs = parse_int_field(line, 3, 3, record, "number of observation types")
        obs_ids = []
        header.system_obs_types[system_code] = obs_ids
        context.previous_system = system_code
        context.previous_count = num_obs
    else:
        # continuation line; same system and declared count as the previous line
        if context.previous_record is not record:
            raise UnexpectedContinuationError(record)
        system_code = context.previous_system
        num_obs = context.previous_count
        obs_ids = header.system_obs_types[system_code]

    for i in range(MAX_OBS_TYPES_PER_LINE_READ):
        if len(obs_ids) >= num_obs:
            break
        code = line[7 + 4 * i : 10 + 4 * i].strip()
        if not code:
            break
        obs_ids.append(_parse_obs_id(code, system_code, record))


def parse_signal_strength_unit(line: str, header: Header, context: ParseContext) -> None:
    header.signal_strength_unit = parse_text_field(line, 0, 20)


def parse_interval(line: str, header: Header, context: ParseContext) -> None:
    header.interval = parse_float_field(line, 0, 10, RecordKind.INTERVAL, "interval")


def parse_time_of_first_obs(line: str, header: Header, context: ParseContext) -> None:
    header.time_of_first_obs = parse_time_of_obs(line, RecordKind.FIRST_TIME)


def parse_time_of_last_obs(line: str, header: Header, context: ParseContext) -> None:
    header.time_of_last_obs = parse_time_of_obs(line, RecordKind.LAST_TIME)


def parse_receiver_clock_offset_applied(
    line: str, header: Header, context: ParseContext
) -> None:
    flag = parse_int_field(line, 0, 6, RecordKind.RECEIVER_OFFSET, "offset applied")
    header.is_receiver_clock_offset_applied = flag != 0


def _parse_correction_info(line: str) -> CorrectionInfo:
    return CorrectionInfo(
        parse_text_field(line, 0, 1),
        parse_text_field(line, 2, 17),
        parse_text_field(line, 20, 40),
    )


def parse_applied_dcbs(line: str, header: Header, context: ParseContext) -> None:
    header.applied_dcbs.append(_parse_correction_info(line))


def parse_applied_pcvs(line: str, header: Header, context: ParseContext) -> None:
    header.applied_pcvs.append(_parse_correction_info(line))


def parse_sys_scale_factor(line: str, header: Header, context: ParseContext) -> None:
    record = RecordKind.SYS_SCALE_FACTOR
    system_code = line[0:1].strip()
    if system_code:
        _check_system_code(system_code, record)
        scale_factor = parse_int_field(line, 2, 4, record, "scale factor")
        num_obs = parse_int_field(line, 8, 2, record, "number of observation types", blank=0)
        context.previous_system = system_code
        context.previous_scale_factor = scale_factor
        context.previous_count = num_obs
        context.items_read = 0
        if num_obs == 0:
            # no obs codes listed, so this applies to all obs codes known for the system
            obs_ids = header.system_obs_types.get(system_code, [])
            if not obs_ids:
                logging.warning(
                    f"`SYS / SCALE FACTOR` for all types of system {system_code}, but no observation types are known"
                )
                # kept under the system-only code so the record is not lost
                obs_ids = [ObsID(system_code, "")]
            sys_factors = header.scale_factors.setdefault(system_code, {})
            for obs_id in obs_ids:
                sys_factors[obs_id] = scale_factor
            return
    else:
        if context.previous_record is not record:
            raise UnexpectedContinuationError(record)
        system_code = context.previous_system
        scale_factor = context.previous_scale_factor
        num_obs = context.previous_count

    for i in range(MAX_SCALE_FACTOR_CODES_PER_LINE_READ):
        if context.items_read >= num_obs:
            break
        code = line[11 + 4 * i : 14 + 4 * i].strip()
        if not code:
            break
        obs_id = _parse_obs_id(code, system_code, record)
        header.scale_factors.setdefault(system_code, {})[obs_id] = scale_factor
        context.items_read += 1


def parse_sys_phase_shift(line: str, header: Header, context: ParseContext) -> None:
    record = RecordKind.SYS_PHASE_SHIFT
    system_code = line[0:1].strip()
    if not system_code:
        obs_id = context.pending_phase_shift
        if obs_id is None or context.previous_record is not record:
            raise UnexpectedContinuationError(record)
        sat_corrections = header.phase_shifts[obs_id]
        for i in range(MAX_PHASE_SHIFT_SATS_PER_LINE_READ):
            if context.items_read >= context.previous_count:
                break
            sat_str = line[19 + 4 * i : 22 + 4 * i]
            if not sat_str.strip():
                break
            sat_corrections[_parse_sat_id(sat_str, record)] = context.pending_phase_shift_correction
            context.items_read += 1
        if context.items_read >= context.previous_count:
            context.pending_phase_shift = None
        return

    _check_system_code(system_code, record)
    context.previous_system = system_code
    context.pending_phase_shift = None
    code = line[2:5].strip()
    if not code:
        # system listed without a correction
        header.phase_shifts.setdefault(ObsID(system_code, ""), {})
        return

    obs_id = _parse_obs_id(code, system_code, record)
    correction = parse_float_field(line, 6, 8, record, "correction", blank=0.0)
    num_sats = parse_int_field(line, 16, 2, record, "number of satellites", blank=0)
    sat_corrections = header.phase_shifts.setdefault(obs_id, {})
    if num_sats == 0:
        # correction applies to every satellite of the system
        sat_corrections[SatID.system_only(system_code)] = correction
        return
    num_listed = min(num_sats, MAX_PHASE_SHIFT_SATS_PER_LINE_READ)
    for i in range(num_listed):
        sat_corrections[_parse_sat_id(line[19 + 4 * i : 22 + 4 * i], record)] = correction
    if num_sats > num_listed:
        context.pending_phase_shift = obs_id
        context.pending_phase_shift_correction = correction
        context.previous_count = num_sats
        context.items_read = num_listed


def parse_glonass_slot_frequencies(line: str, header: Header, context: ParseContext) -> None:
    record = RecordKind.GLONASS_SLOT_FREQ
    # the satellite count is read but the list ends at the first blank satellite field
    parse_int_field(line, 0, 3, record, "number of satellites", blank=0)
    for i in range(MAX_GLONASS_SLOTS_PER_LINE_READ):
        sat_str = line[4 + 7 * i : 7 + 7 * i]
        if not sat_str.strip():
            break
        sat_id = _parse_sat_id(sat_str, record)
        header.glonass_slot_frequencies[sat_id] = parse_int_field(
            line, 8 + 7 * i, 2, record, "frequency number"
        )


def parse_leap_seconds(line: str, header: Header, context: ParseContext) -> None:
    header.leap_seconds = parse_int_field(line, 0, 6, RecordKind.LEAP_SECONDS, "leap seconds")


def parse_number_of_satellites(line: str, header: Header, context: ParseContext) -> None:
    header.number_of_satellites = parse_int_field(
        line, 0, 6, RecordKind.NUM_SATELLITES, "number of satellites"
    )


def parse_number_of_obs(line: str, header: Header, context: ParseContext) -> None:
    record = RecordKind.PRN_OBS
    sat_str = line[3:6]
    if sat_str.strip():
        sat_id = _parse_sat_id(sat_str, record)
        context.last_satellite = sat_id
        obs_ids = header.obs_types_for(sat_id)
        if not obs_ids:
            logging.warning(
                f"Skipping `PRN / # OF OBS` for {sat_id}; no `SYS / # / OBS TYPES` for system {sat_id.system}"
            )
            return
        counts = []
        header.number_of_obs[sat_id] = counts
    else:
        if context.last_satellite is None or context.previous_record is not record:
            raise UnexpectedContinuationError(record)
        sat_id = context.last_satellite
        obs_ids = header.obs_types_for(sat_id)
        counts = header.number_of_obs.get(sat_id)
        if not obs_ids or counts is None:
            return

    num_fields = MAX_PRN_OBS_PER_LINE_READ
    # blank fields after the last value are padding, blank fields before it are zero counts
    while num_fields > 0 and not line[6 * num_fields : 6 * num_fields + 6].strip():
        num_fields -= 1
    for i in range(num_fields):
        if len(counts) >= len(obs_ids):
            break
        counts.append(
            parse_int_field(line, 6 + 6 * i, 6, record, "number of observations", blank=0)
        )


def parse_end_of_header(line: str, header: Header, context: ParseContext) -> None:
    pass


RECORD_PARSERS: Dict[RecordKind, Callable[[str, Header, ParseContext], None]] = {
    RecordKind.VERSION: parse_rinex_version_type,
    RecordKind.RUN_BY: parse_program_run_by_date,
    RecordKind.COMMENT: parse_comment,
    RecordKind.MARKER_NAME: parse_marker_name,
    RecordKind.MARKER_NUMBER: parse_marker_number,
    RecordKind.MARKER_TYPE: parse_marker_type,
    RecordKind.OBSERVER: parse_observer_agency,
    RecordKind.RECEIVER: parse_receiver_type_version,
    RecordKind.ANTENNA_TYPE: parse_antenna_type,
    RecordKind.ANTENNA_POSITION: parse_approx_position_xyz,
    RecordKind.ANTENNA_DELTA_HEN: parse_antenna_delta_hen,
    RecordKind.ANTENNA_DELTA_XYZ: parse_antenna_delta_xyz,
    RecordKind.ANTENNA_PHASE_CENTER: parse_antenna_phase_center,
    RecordKind.ANTENNA_BORESIGHT_XYZ: parse_antenna_boresight,
    RecordKind.ANTENNA_ZERODIR_AZI: parse_antenna_zerodir_azi,
    RecordKind.ANTENNA_ZERODIR_XYZ: parse_antenna_zerodir_xyz,
    RecordKind.CENTER_OF_MASS: parse_center_of_mass_xyz,
    RecordKind.SYS_OBS_TYPES: parse_system_obs_types,
    RecordKind.SIGNAL_STRENGTH_UNIT: parse_signal_strength_unit,
    RecordKind.INTERVAL: parse_interval,
    RecordKind.FIRST_TIME: parse_time_of_first_obs,
    RecordKind.LAST_TIME: parse_time_of_last_obs,
    RecordKind.RECEIVER_OFFSET: parse_receiver_clock_offset_applied,
    RecordKind.SYS_DCBS_APPLIED: parse_applied_dcbs,
    RecordKind.SYS_PCVS_APPLIED: parse_applied_pcvs,
    RecordKind.SYS_SCALE_FACTOR: parse_sys_scale_factor,
    RecordKind.SYS_PHASE_SHIFT: parse_sys_phase_shift,
    RecordKind.GLONASS_SLOT_FREQ: parse_glonass_slot_frequencies,
    RecordKind.LEAP_SECONDS: parse_leap_seconds,
    RecordKind.NUM_SATELLITES: parse_number_of_satellites,
    RecordKind.PRN_OBS: parse_number_of_obs,
    RecordKind.END_OF_HEADER: parse_end_of_header,
}


def parse_header_record(line: str, header: Header, context: ParseContext) -> RecordKind:
    """
    Decodes one header line into `header` and marks its record as present.
    """
    record = lookup_record_kind(line[LABEL_START : LABEL_START + LABEL_WIDTH])
    RECORD_PARSERS[record](line, header, context)
    header.mark_valid(record)
    context.previous_record = record
    return record


def check_line_length(line: str, line_number: Optional[int] = None) -> None:
    if not line.strip():
        raise MalformedLineError("No data read", line_number)
    length = len(line)
    if length < MIN_LINE_LENGTH or length > MAX_LINE_LENGTH:
        raise MalformedLineError(f"Invalid line length {length}", line_number)


def check_header_complete(header: Header) -> None:
    required = required_records(header.rinex_version)
    missing = missing_records(header.valid, required)
    if missing:
        raise IncompleteHeaderError(missing, header.rinex_version)


def parse_header(lines: Iterable[str]) -> Header:
    """
    Reads header lines up to and including `END OF HEADER`.

    Lines after `END OF HEADER` are not consumed, so a file object can be
    passed and then used to read the observation records.

    Raises:
        RinexHeaderError: any malformed line or field, an unknown label, an
            unsupported version or a header missing required records.
    """
    header = Header()
    context = ParseContext()
    lines = iter(lines)
    while not header.is_valid(RecordKind.END_OF_HEADER):
        line = next(lines, None)
        context.line_number += 1
        if line is None:
            raise MalformedLineError(
                "Unexpected end of input before `END OF HEADER`", context.line_number
            )
        line = line.rstrip("\r\n")
        check_line_length(line, context.line_number)
        try:
            parse_header_record(line, header, context)
        except RinexHeaderError as e:
            e.add_detail(f"line {context.line_number}: {line}")
            raise

    check_header_complete(header)
    logging.debug(
        f"Parsed RINEX {header.rinex_version:.2f} header ({context.line_number} lines, "
        f"{len(header.system_obs_types)} systems)"
    )
    return header


def try_parse_header(lines: Iterable[str]) -> HeaderResult[Header]:
    try:
        return HeaderResult(value=parse_header(lines))
    except RinexHeaderError as e:
        return HeaderResult(error=e)
