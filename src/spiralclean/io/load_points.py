"""
Event loading for the spiral cleaner.

An event is an (n, 3) array of x, y, z point coordinates.
"""

import json
import os

import numpy as np

from spiralclean.tracer import get_tracer, trace


def _check_event(event_id, arr):
    arr = np.asarray(arr, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] < 3:
        raise ValueError(f"Event {event_id} must be an (n, 3) array, got shape {arr.shape}")
    return arr[:, :3]


@trace(label="load_events")
def load_events(path):
    """
    Load point events from disk.

    Supported formats:
    - .npz: one array per key, the key is the event id
    - .npy: a single event with id "0"
    - .csv / .txt: a single event with id "0", comma or whitespace separated

    Returns a dict of event id -> (n, 3) float array.

    Raises FileNotFoundError if path does not exist.
    Raises ValueError for unknown suffixes or badly shaped arrays.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Event file not found: {path}")

    suffix = os.path.splitext(path)[1].lower()

    if suffix == ".npz":
        with np.load(path) as archive:
            events = {key: _check_event(key, archive[key]) for key in archive.files}
    elif suffix == ".npy":
        events = {"0": _check_event("0", np.load(path))}
    elif suffix in (".csv", ".txt"):
        delimiter = "," if suffix == ".csv" else None
        events = {"0": _check_event("0", np.loadtxt(path, delimiter=delimiter, ndmin=2))}
    else:
        raise ValueError(f"Unsupported event file type: {suffix}")

    tracer.event(f"Loaded {len(events)} events from {path}")
    return events


def load_centers(path):
    """
    Load per-event rotation centers from a JSON mapping of id -> [x, y].
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    centers = {}
    for event_id, center in data.items():
        if not isinstance(center, (list, tuple)) or len(center) != 2:
            raise ValueError(f"Center for event {event_id} must be [x, y], got {center}")
        centers[str(event_id)] = (float(center[0]), float(center[1]))
    return centers
