"""
Peak location in one-dimensional vote profiles.
"""

import numpy as np
from scipy.signal import find_peaks


def find_peak_locations(profile, num_peaks):
    """
    Find the strongest local maxima of a profile.

    Edge bins count as maxima when they exceed their only neighbor, and flat
    plateaus are reported at their middle bin.

    Args:
        profile: 1D array of non-negative votes
        num_peaks: maximum number of peaks to return

    Returns:
        list of bin indices ordered by descending height; equal heights keep
        ascending bin order
    """
    profile = np.asarray(profile, dtype=np.float64)
    if profile.ndim != 1:
        raise ValueError(f"Expected a 1D profile, got shape {profile.shape}")
    if num_peaks < 1 or profile.size == 0:
        return []

    padded = np.pad(profile, 1, mode="constant", constant_values=0.0)
    peaks, _ = find_peaks(padded)
    peaks = peaks - 1

    order = np.argsort(-profile[peaks], kind="stable")
    return [int(p) for p in peaks[order][:num_peaks]]
