"""
`PRN / # OF OBS` counts as numpy arrays.
"""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from .header import Header
from .identifiers import SatID


@dataclass
class ObsCountArrays:
    # counts[i, j] is the number of observations of `obs_codes[j]` for `satellites[i]`
    satellites: List[SatID]
    obs_codes: List[str]
    counts: np.ndarray


def get_obs_count_arrays(header: Header) -> Dict[str, ObsCountArrays]:
    """
    Get the `PRN / # OF OBS` counts for each system as a (satellites, obs codes) array.

    Satellites are in header order. Entries are `nan` where a satellite's count
    list is shorter than its system's observation code list.
    """
    arrays: Dict[str, ObsCountArrays] = {}
    for system_code, obs_ids in header.system_obs_types.items():
        satellites = [sat_id for sat_id in header.number_of_obs if sat_id.system == system_code]
        counts = np.full((len(satellites), len(obs_ids)), np.nan)
        for i, sat_id in enumerate(satellites):
            sat_counts = header.number_of_obs[sat_id][: len(obs_ids)]
            counts[i, : len(sat_counts)] = sat_counts
        arrays[system_code] = ObsCountArrays(satellites, [obs_id.code for obs_id in obs_ids], counts)
    return arrays
