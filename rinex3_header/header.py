from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Tuple

from .fields import TimeOfObs
from .identifiers import ObsID, SatID
from .labels import NO_RECORDS, RecordKind, missing_records, required_records

GPS_EPOCH = datetime(year=1980, month=1, day=6, hour=0, minute=0, second=0)


@dataclass
class AntennaPhaseCenterOffset:
    system_code: str = ""
    obs_code: str = ""
    offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass
class CorrectionInfo:
    # NOTE: these entries only describe the program used to make the corrections, not the corrections themselves
    system_code: str
    program_name: str
    source: str


def _epoch_default() -> TimeOfObs:
    return TimeOfObs(GPS_EPOCH, "GPS")


@dataclass
class Header:
    """
    RINEX 3.00 / 3.01 observation header.

    No field is optional; which records are actually present is tracked by `valid`.
    """

    rinex_version: float = 3.01
    file_type: str = "OBSERVATION DATA"
    system_code: str = "M"
    program_name: str = ""
    run_by: str = ""
    date: str = ""

    marker_name: str = ""
    marker_number: str = ""
    marker_type: str = ""
    observer: str = ""
    agency: str = ""

    receiver_number: str = ""
    receiver_type: str = ""
    receiver_version: str = ""
    antenna_number: str = ""
    antenna_type: str = ""

    approximate_position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    antenna_delta_hen: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    antenna_delta_xyz: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    antenna_phase_center: AntennaPhaseCenterOffset = field(default_factory=AntennaPhaseCenterOffset)
    antenna_boresight: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    antenna_zerodir_azi: float = 0.0
    antenna_zerodir_xyz: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    center_of_mass_xyz: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    system_obs_types: Dict[str, List[ObsID]] = field(default_factory=dict)  # system_code -> [obs_ids]
    signal_strength_unit: str = ""

    interval: float = 0.0
    time_of_first_obs: TimeOfObs = field(default_factory=_epoch_default)
    time_of_last_obs: TimeOfObs = field(default_factory=_epoch_default)
    is_receiver_clock_offset_applied: bool = False

    applied_dcbs: List[CorrectionInfo] = field(default_factory=list)
    applied_pcvs: List[CorrectionInfo] = field(default_factory=list)
    scale_factors: Dict[str, Dict[ObsID, int]] = field(default_factory=dict)  # system_code -> obs_id -> factor
    phase_shifts: Dict[ObsID, Dict[SatID, float]] = field(default_factory=dict)  # obs_id -> sat_id -> cycles
    glonass_slot_frequencies: Dict[SatID, int] = field(default_factory=dict)

    leap_seconds: int = 0
    number_of_satellites: int = 0
    number_of_obs: Dict[SatID, List[int]] = field(default_factory=dict)  # sat_id -> [counts per obs code]
    comment_lines: List[str] = field(default_factory=list)

    valid: RecordKind = NO_RECORDS

    def mark_valid(self, kind: RecordKind) -> None:
        self.valid |= kind

    def is_valid(self, kind: RecordKind) -> bool:
        return kind in self.valid

    def add_comment(self, comment: str) -> None:
        self.comment_lines.append(comment)
        self.mark_valid(RecordKind.COMMENT)

    def required_records(self) -> RecordKind:
        return required_records(self.rinex_version)

    def missing_records(self) -> List[RecordKind]:
        return missing_records(self.valid, self.required_records())

    def is_complete(self) -> bool:
        if self.rinex_version not in (3.0, 3.01):
            return False
        return not self.missing_records()

    def obs_types_for(self, sat_id: SatID) -> List[ObsID]:
        return self.system_obs_types.get(sat_id.system, [])
