"""
Satellite and observation-code identifiers as they appear in RINEX 3 headers.
"""

from dataclasses import dataclass

SYSTEM_LETTER_TO_ID_MAP = {
    "G": "GPS",
    "R": "GLO",
    "E": "GAL",
    "J": "QZS",
    "C": "BDS",  # Beidou
    "I": "IRS",
    "S": "SBS",
}

SYSTEM_ID_TO_NAME_MAP = {
    "GPS": "GPS",
    "GLO": "GLONASS",
    "GAL": "Galileo",
    "QZS": "QZSS",
    "BDS": "Beidou",
    "IRS": "IRNSS",
    "SBS": "SBAS",
}

# systems allowed in `RINEX VERSION / TYPE` for versions 3.00 and 3.01
HEADER_SYSTEM_NAMES = {
    "G": "GPS",
    "R": "GLONASS",
    "E": "Galileo",
    "S": "SBAS payload",
    "M": "Mixed",
}

OBSERVATION_LETTERS = {
    "C": "pseudorange",
    "L": "carrier",
    "D": "doppler",
    "S": "cnr",
    "I": "ionosphere",
    "X": "channel",
}


def system_name(system_code: str) -> str:
    if system_code in HEADER_SYSTEM_NAMES:
        return HEADER_SYSTEM_NAMES[system_code]
    return SYSTEM_ID_TO_NAME_MAP.get(SYSTEM_LETTER_TO_ID_MAP.get(system_code, ""), "Unknown")


@dataclass(frozen=True, order=True)
class SatID:
    system: str
    prn: int

    @property
    def is_system_only(self) -> bool:
        return self.prn < 0

    @staticmethod
    def system_only(system: str) -> "SatID":
        return SatID(system, -1)

    @staticmethod
    def from_string(sat_str: str) -> "SatID":
        """
        Parses `G05`, `G 5`, `G5`, `5` (GPS implied) or a bare system letter.
        """
        sat_str = sat_str.strip()
        if not sat_str:
            raise ValueError("Empty satellite ID")
        if sat_str[0].isdigit():
            system, prn_str = "G", sat_str
        else:
            system, prn_str = sat_str[0].upper(), sat_str[1:].strip()
        if system not in SYSTEM_LETTER_TO_ID_MAP:
            raise ValueError(f"Unknown satellite system in satellite ID: {sat_str}")
        if not prn_str:
            return SatID.system_only(system)
        if not prn_str.isdigit():
            raise ValueError(f"Invalid PRN in satellite ID: {sat_str}")
        return SatID(system, int(prn_str))

    def __str__(self) -> str:
        if self.is_system_only:
            return self.system
        return f"{self.system}{self.prn:02}"


@dataclass(frozen=True)
class ObsID:
    system: str
    code: str

    @staticmethod
    def from_string(code: str, system: str) -> "ObsID":
        """
        Builds an observation ID from a 3-character RINEX 3 code and the system letter.
        """
        code = code.strip()
        if system not in SYSTEM_LETTER_TO_ID_MAP:
            raise ValueError(f"Unknown satellite system for observation code: {system}")
        if len(code) != 3:
            raise ValueError(f"Observation code must have 3 characters: {code}")
        if code[0] not in OBSERVATION_LETTERS:
            raise ValueError(f"Unknown observation type in code: {code}")
        if not code[1].isdigit() or not code[2].isalnum():
            raise ValueError(f"Invalid band or attribute in code: {code}")
        return ObsID(system, code)

    @property
    def qualified(self) -> str:
        return self.system + self.code

    def __str__(self) -> str:
        return self.code
