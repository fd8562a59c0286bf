"""Pytest fixtures for spiral cleaner tests."""

import tempfile

import numpy as np
import pytest


def make_spiral_event(offsets=(10.0, 60.0), slope=0.1, radius=100.0, num_points=100):
    """
    Points lying on a circle of `radius` about the origin whose arc length
    grows linearly with z, one segment per offset.

    Segment k holds rows [k * num_points, (k + 1) * num_points).
    """
    zs = np.linspace(0.0, 500.0, num_points)
    segments = []
    for offset in offsets:
        arclens = slope * zs + offset
        thetas = arclens / radius
        segments.append(np.column_stack((
            radius * np.cos(thetas),
            radius * np.sin(thetas),
            zs,
        )))
    return np.vstack(segments)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from spiralclean.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def small_config():
    """Pipeline configuration sized for the synthetic spiral event."""
    from spiralclean.config import PipelineConfig

    config = PipelineConfig()
    config.cleaner.num_angle_bins_to_reduce = 5
    config.cleaner.hough_space_slice_size = 2
    config.cleaner.peak_width = 3
    config.cleaner.min_points_per_line = 10
    config.cleaner.linear_hough.num_bins = 200
    config.cleaner.linear_hough.max_radius = 200.0
    config.cleaner.circular_hough.num_bins = 100
    config.cleaner.circular_hough.max_radius = 200.0
    return config


@pytest.fixture
def spiral_event():
    """Two parallel segments in (z, arc length) space, 100 points each."""
    return make_spiral_event()


@pytest.fixture
def hough_space_factory():
    """Build a HoughSpace directly from a vote array."""
    from spiralclean.hough.space import HoughSpace

    def factory(data, max_radius=10.0):
        data = np.asarray(data, dtype=np.float64)
        return HoughSpace(data.shape[0], max_radius, data)

    return factory
