"""
Header record labels and the record-kind flag set used to track which
records a header carries.
"""

from enum import Flag, auto
from typing import Dict, List, Tuple

from .errors import UnknownRecordLabelError, UnsupportedVersionError


class RecordKind(Flag):
    VERSION = auto()
    RUN_BY = auto()
    COMMENT = auto()
    MARKER_NAME = auto()
    MARKER_NUMBER = auto()
    MARKER_TYPE = auto()
    OBSERVER = auto()
    RECEIVER = auto()
    ANTENNA_TYPE = auto()
    ANTENNA_POSITION = auto()
    ANTENNA_DELTA_HEN = auto()
    ANTENNA_DELTA_XYZ = auto()
    ANTENNA_PHASE_CENTER = auto()
    ANTENNA_BORESIGHT_XYZ = auto()
    ANTENNA_ZERODIR_AZI = auto()
    ANTENNA_ZERODIR_XYZ = auto()
    CENTER_OF_MASS = auto()
    SYS_OBS_TYPES = auto()
    SIGNAL_STRENGTH_UNIT = auto()
    INTERVAL = auto()
    FIRST_TIME = auto()
    LAST_TIME = auto()
    RECEIVER_OFFSET = auto()
    SYS_DCBS_APPLIED = auto()
    SYS_PCVS_APPLIED = auto()
    SYS_SCALE_FACTOR = auto()
    SYS_PHASE_SHIFT = auto()
    GLONASS_SLOT_FREQ = auto()
    LEAP_SECONDS = auto()
    NUM_SATELLITES = auto()
    PRN_OBS = auto()
    END_OF_HEADER = auto()

    @property
    def label(self) -> str:
        return RECORD_TO_LABEL[self]


NO_RECORDS = RecordKind(0)

# declaration order is the order records are written in
HEADER_LABELS: List[Tuple[str, RecordKind]] = [
    ("RINEX VERSION / TYPE", RecordKind.VERSION),
    ("PGM / RUN BY / DATE", RecordKind.RUN_BY),
    ("COMMENT", RecordKind.COMMENT),
    ("MARKER NAME", RecordKind.MARKER_NAME),
    ("MARKER NUMBER", RecordKind.MARKER_NUMBER),
    ("MARKER TYPE", RecordKind.MARKER_TYPE),
    ("OBSERVER / AGENCY", RecordKind.OBSERVER),
    ("REC # / TYPE / VERS", RecordKind.RECEIVER),
    ("ANT # / TYPE", RecordKind.ANTENNA_TYPE),
    ("APPROX POSITION XYZ", RecordKind.ANTENNA_POSITION),
    ("ANTENNA: DELTA H/E/N", RecordKind.ANTENNA_DELTA_HEN),
    ("ANTENNA: DELTA X/Y/Z", RecordKind.ANTENNA_DELTA_XYZ),
    ("ANTENNA: PHASECENTER", RecordKind.ANTENNA_PHASE_CENTER),
    ("ANTENNA: B.SIGHT XYZ", RecordKind.ANTENNA_BORESIGHT_XYZ),
    ("ANTENNA: ZERODIR AZI", RecordKind.ANTENNA_ZERODIR_AZI),
    ("ANTENNA: ZERODIR XYZ", RecordKind.ANTENNA_ZERODIR_XYZ),
    ("CENTER OF MASS: XYZ", RecordKind.CENTER_OF_MASS),
    ("SYS / # / OBS TYPES", RecordKind.SYS_OBS_TYPES),
    ("SIGNAL STRENGTH UNIT", RecordKind.SIGNAL_STRENGTH_UNIT),
    ("INTERVAL", RecordKind.INTERVAL),
    ("TIME OF FIRST OBS", RecordKind.FIRST_TIME),
    ("TIME OF LAST OBS", RecordKind.LAST_TIME),
    ("RCV CLOCK OFFS APPL", RecordKind.RECEIVER_OFFSET),
    ("SYS / DCBS APPLIED", RecordKind.SYS_DCBS_APPLIED),
    ("SYS / PCVS APPLIED", RecordKind.SYS_PCVS_APPLIED),
    ("SYS / SCALE FACTOR", RecordKind.SYS_SCALE_FACTOR),
    ("SYS / PHASE SHIFTS", RecordKind.SYS_PHASE_SHIFT),
    ("GLONASS SLOT / FRQ #", RecordKind.GLONASS_SLOT_FREQ),
    ("LEAP SECONDS", RecordKind.LEAP_SECONDS),
    ("# OF SATELLITES", RecordKind.NUM_SATELLITES),
    ("PRN / # OF OBS", RecordKind.PRN_OBS),
    ("END OF HEADER", RecordKind.END_OF_HEADER),
]

LABEL_TO_RECORD: Dict[str, RecordKind] = {label: kind for label, kind in HEADER_LABELS}
RECORD_TO_LABEL: Dict[RecordKind, str] = {kind: label for label, kind in HEADER_LABELS}

# spellings used by other writers; accepted on input only
LABEL_ALIASES: Dict[str, RecordKind] = {
    "SYS / PHASE SHIFT": RecordKind.SYS_PHASE_SHIFT,
}

LABEL_START = 60
LABEL_WIDTH = 20


REQUIRED_V300 = (
    RecordKind.VERSION
    | RecordKind.RUN_BY
    | RecordKind.MARKER_NAME
    | RecordKind.OBSERVER
    | RecordKind.RECEIVER
    | RecordKind.ANTENNA_TYPE
    | RecordKind.ANTENNA_POSITION
    | RecordKind.ANTENNA_DELTA_HEN
    | RecordKind.SYS_OBS_TYPES
    | RecordKind.FIRST_TIME
    | RecordKind.END_OF_HEADER
)
REQUIRED_V301 = REQUIRED_V300 | RecordKind.SYS_PHASE_SHIFT

REQUIRED_RECORDS: Dict[float, RecordKind] = {
    3.0: REQUIRED_V300,
    3.01: REQUIRED_V301,
}


def lookup_record_kind(label_field: str) -> RecordKind:
    label = label_field.strip()
    kind = LABEL_TO_RECORD.get(label)
    if kind is None:
        kind = LABEL_ALIASES.get(label)
    if kind is None:
        raise UnknownRecordLabelError(label_field)
    return kind


def required_records(version: float) -> RecordKind:
    try:
        return REQUIRED_RECORDS[version]
    except KeyError:
        raise UnsupportedVersionError(version) from None


def missing_records(valid: RecordKind, required: RecordKind) -> List[RecordKind]:
    """
    Required record kinds absent from `valid`, in label declaration order.
    """
    return [kind for _, kind in HEADER_LABELS if kind in required and kind not in valid]
