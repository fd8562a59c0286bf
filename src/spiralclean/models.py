"""
Pydantic data models for the spiral cleaner.

Per-event results are frozen snapshots: array fields are marked read-only
when the model is built. Report models hold plain JSON-safe values.
"""

import math
from typing import List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from spiralclean.hough.space import HoughSpace

# Label carried by points that belong to no surviving line
UNASSIGNED = -1


def _readonly(arr, dtype):
    out = np.array(arr, dtype=dtype, copy=True)
    out.flags.writeable = False
    return out


class ClassificationResult(BaseModel):
    """Assignment of every point of one event to a candidate line."""
    labels: np.ndarray
    distances: np.ndarray
    num_lines: int = Field(..., ge=0)

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, extra="forbid")

    @field_validator("labels", mode="before")
    @classmethod
    def _freeze_labels(cls, value):
        return _readonly(value, np.int64)

    @field_validator("distances", mode="before")
    @classmethod
    def _freeze_distances(cls, value):
        return _readonly(value, np.float64)

    @property
    def num_points(self):
        return len(self.labels)

    @property
    def num_unassigned(self):
        return int(np.sum(self.labels == UNASSIGNED))

    def points_per_line(self):
        """Count of points carrying each line label, indexed by line."""
        assigned = self.labels[self.labels != UNASSIGNED]
        return np.bincount(assigned, minlength=self.num_lines)

    def surviving_lines(self):
        """Indices of lines that still own at least one point."""
        return [int(i) for i in np.flatnonzero(self.points_per_line())]

    def to_dict(self):
        """JSON-safe form; unassigned distances become None."""
        return {
            "num_lines": self.num_lines,
            "labels": [int(v) for v in self.labels],
            "distances": [None if math.isinf(d) else float(d) for d in self.distances],
        }


class SpiralCleanerResult(BaseModel):
    """Everything the cleaner derived for one event."""
    classification: ClassificationResult
    arclens: np.ndarray
    max_angle_bin: int
    max_angle: float
    radius_bins: List[float] = Field(default_factory=list)
    radii: List[float] = Field(default_factory=list)
    # Linear Hough space the peaks were read from; left out of dumps
    hough_space: Optional[HoughSpace] = Field(default=None, exclude=True, repr=False)

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, extra="forbid")

    @field_validator("arclens", mode="before")
    @classmethod
    def _freeze_arclens(cls, value):
        return _readonly(value, np.float64)


class EventSummary(BaseModel):
    """Outcome of cleaning one event, as written to the report."""
    event_id: str
    status: str = "ok"  # "ok" or "skipped"
    num_points: int = 0
    num_lines_found: int = 0
    num_lines_kept: int = 0
    num_unassigned: int = 0
    max_angle: Optional[float] = None
    radii: List[float] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class CleaningReport(BaseModel):
    """Collection of per-event summaries."""
    events: List[EventSummary] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @computed_field
    @property
    def processed(self) -> int:
        return sum(1 for e in self.events if e.status == "ok")

    @computed_field
    @property
    def skipped(self) -> int:
        return sum(1 for e in self.events if e.status == "skipped")


class Triplet(BaseModel):
    """Three ordered point indices and the straight line fitted through them."""
    indices: Tuple[int, int, int]
    center: Tuple[float, float, float]
    direction: Tuple[float, float, float]
    error: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class ClusterResult(BaseModel):
    """Point clusters found by triplet clustering."""
    labels: List[int] = Field(default_factory=list)
    clusters: List[List[int]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def num_clusters(self):
        return len(self.clusters)
