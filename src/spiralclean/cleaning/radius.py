"""
Radius peak search with sub-bin centroid refinement.
"""

import numpy as np

from spiralclean.errors import NoPeakError, OutOfRangeError
from spiralclean.hough.peaks import find_peak_locations
from spiralclean.tracer import get_tracer, trace


def refine_peak_centroid(profile, position, width):
    """
    Vote-weighted centroid of the bins within `width` of `position`.

    The window is clamped to both ends of the profile.

    Raises:
        OutOfRangeError: position is not a bin of the profile
        NoPeakError: the window holds no votes
    """
    profile = np.asarray(profile, dtype=np.float64)
    last_bin = len(profile) - 1
    if not 0 <= position <= last_bin:
        raise OutOfRangeError(f"Peak position {position} outside profile of {len(profile)} bins")

    first_pt = max(position - width, 0)
    last_pt = min(position + width, last_bin)

    positions = np.arange(first_pt, last_pt + 1, dtype=np.float64)
    values = profile[first_pt:last_pt + 1]
    total = values.sum()
    if total == 0:
        raise NoPeakError(position, first_pt, last_pt)

    return float(positions.dot(values) / total)


@trace(label="find_peak_radius_bins")
def find_peak_radius_bins(hough_slice, peak_width, num_peaks=2):
    """
    Locate the strongest radius peaks of an angle slice.

    Args:
        hough_slice: 1D radius vote profile
        peak_width: half-width of the refinement window in bins
        num_peaks: maximum number of peaks to report

    Returns:
        list of fractional radius bins, strongest peak first
    """
    tracer = get_tracer()

    max_locs = find_peak_locations(hough_slice, num_peaks)
    peak_ctrs = [refine_peak_centroid(hough_slice, pk_idx, peak_width) for pk_idx in max_locs]

    tracer.event(f"Radius peaks at bins {max_locs}", centroids=peak_ctrs)
    return peak_ctrs
