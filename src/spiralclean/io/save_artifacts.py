"""
Artifact saving utilities for the spiral cleaner.

Handles writing result archives, JSON reports, and debug renderings of
the Hough accumulator.
"""

import json
import os

import cv2
import numpy as np

from spiralclean.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    os.makedirs(path, exist_ok=True)


def get_debug_dir(out_dir, event_id, stage_name):
    """
    Get the debug directory path for a stage of one event.

    Creates the directory if it does not exist.
    """
    debug_dir = os.path.join(out_dir, "debug", str(event_id), stage_name)
    ensure_dir(debug_dir)
    return debug_dir


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path) or ".")

    if hasattr(data, "model_dump"):
        data = data.model_dump()

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def save_labels(results, path):
    """
    Save per-event labels and distances to one .npz archive.

    Keys are "<event_id>_labels" and "<event_id>_distances".
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path) or ".")

    arrays = {}
    for event_id, result in results.items():
        arrays[f"{event_id}_labels"] = result.classification.labels
        arrays[f"{event_id}_distances"] = result.classification.distances

    np.savez(path, **arrays)
    tracer.event(f"Saved labels for {len(results)} events: {path}")


def hough_space_to_image(hough_space):
    """
    Render a Hough space as an 8-bit grayscale image.

    Rows are angle bins, columns radius bins; the brightest pixel is the
    strongest cell.
    """
    data = np.asarray(hough_space.data, dtype=np.float64)
    peak = data.max() if data.size else 0.0
    if peak <= 0:
        return np.zeros(data.shape, dtype=np.uint8)
    return np.round(data / peak * 255.0).astype(np.uint8)


def save_image(img, path, max_edge=None):
    """
    Save a grayscale image to disk, optionally downscaled to max_edge.
    """
    tracer = get_tracer()

    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (max(1, int(img.shape[1] * scale)), max(1, int(img.shape[0] * scale)))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

    ensure_dir(os.path.dirname(path) or ".")
    cv2.imwrite(path, img)
    tracer.event(f"Saved image: {path}")


class DebugArtifactWriter:
    """
    Helper class to manage debug artifact writing for a single event.

    Handles creation of debug directories and provides convenience methods
    for saving the stage artifacts.
    """

    def __init__(self, out_dir, event_id, enabled=True, max_edge=1600):
        self.out_dir = out_dir
        self.event_id = event_id
        self.enabled = enabled
        self.max_edge = max_edge

    def get_stage_dir(self, stage_name):
        """Get the debug directory for a stage."""
        return get_debug_dir(self.out_dir, self.event_id, stage_name)

    def save_hough_space(self, hough_space, stage_name, filename):
        """Save a Hough space as a PNG image."""
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_image(hough_space_to_image(hough_space), path, max_edge=self.max_edge)

    def save_json(self, data, stage_name, filename):
        """Save a JSON artifact."""
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_json(data, path)

    def save_result(self, result):
        """Save the stage outputs of one cleaned event."""
        if not self.enabled:
            return
        self.save_json(
            {
                "max_angle_bin": result.max_angle_bin,
                "max_angle": result.max_angle,
                "radius_bins": result.radius_bins,
                "radii": result.radii,
            },
            "peaks",
            "peaks.json",
        )
        self.save_json(result.classification.to_dict(), "classify", "classification.json")
