from .errors import (
    RinexHeaderError,
    MalformedLineError,
    UnknownRecordLabelError,
    MalformedFieldError,
    UnsupportedVersionError,
    InvalidFileTypeError,
    InvalidSystemError,
    IncompleteHeaderError,
    UnexpectedContinuationError,
    HeaderResult,
)
from .labels import RecordKind, HEADER_LABELS, REQUIRED_V300, REQUIRED_V301, lookup_record_kind
from .identifiers import SatID, ObsID
from .fields import TimeOfObs
from .header import Header, AntennaPhaseCenterOffset, CorrectionInfo
from .decoder import parse_header, parse_header_record, try_parse_header, ParseContext
from .encoder import format_header, count_header_lines, write_header, try_format_header
from .dump import dump_header
from .arrays import ObsCountArrays, get_obs_count_arrays
from .io import HeaderLineReader, read_header, write_header_file
