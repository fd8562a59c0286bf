"""
Configuration management for the spiral cleaner.

Loads YAML configuration with sensible defaults for every stage and
validates the values against the configured Hough bin counts.
"""

import numbers
import os
from dataclasses import dataclass, field, fields, is_dataclass

import yaml

from spiralclean.errors import ConfigurationError


@dataclass
class HoughConfig:
    """Bin count and radius range of a Hough accumulator."""
    num_bins: int = 500
    max_radius: float = 2000.0


@dataclass
class CircularHoughConfig(HoughConfig):
    """Configuration for the circular Hough accumulator."""
    num_bins: int = 500
    max_radius: float = 500.0
    row_offset: int = 5  # rows between the two ends of each chord


@dataclass
class CleanerConfig:
    """Configuration for the Hough spiral cleaner."""
    num_angle_bins_to_reduce: int = 10
    hough_space_slice_size: int = 5
    peak_width: int = 10
    min_points_per_line: int = 40
    num_peaks: int = 2
    linear_hough: HoughConfig = field(default_factory=HoughConfig)
    circular_hough: CircularHoughConfig = field(default_factory=CircularHoughConfig)


@dataclass
class ClusteringConfig:
    """Configuration for triplet clustering."""
    num_neighbors: int = 6
    max_triplet_error: float = 2.0
    angle_scale: float = 10.0
    linkage: str = "single"  # "single" or "complete"
    max_distance: float = 5.0
    min_cluster_size: int = 10


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_edge_scale: int = 1600


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    cleaner: CleanerConfig = field(default_factory=CleanerConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values. The merged result is
    validated before it is returned.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        _merge_config(config, yaml_data)

    validate_config(config)
    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, recursing into nested sections."""
    for key, value in yaml_data.items():
        if not hasattr(config, key):
            continue
        current = getattr(config, key)
        if is_dataclass(current) and isinstance(value, dict):
            _merge_config(current, value)
        else:
            setattr(config, key, value)
    return config


def _require_int(name, value):
    # bool is an Integral subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _require_number(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def validate_config(config):
    """
    Check every stage setting against the accumulator sizes.

    Accepts a PipelineConfig or a bare CleanerConfig. Counts and bin widths
    must be integers; a whole-number float such as 3.0 is rejected as well.
    Raises ConfigurationError on the first violation.
    """
    cleaner = config.cleaner if isinstance(config, PipelineConfig) else config

    for name, hough in (("linear_hough", cleaner.linear_hough), ("circular_hough", cleaner.circular_hough)):
        _require_int(f"{name}.num_bins", hough.num_bins)
        _require_number(f"{name}.max_radius", hough.max_radius)
        if hough.num_bins <= 0:
            raise ConfigurationError(f"{name}.num_bins must be positive, got {hough.num_bins}")
        if hough.max_radius <= 0:
            raise ConfigurationError(f"{name}.max_radius must be positive, got {hough.max_radius}")

    _require_int("circular_hough.row_offset", cleaner.circular_hough.row_offset)
    if cleaner.circular_hough.row_offset < 1:
        raise ConfigurationError(
            f"circular_hough.row_offset must be at least 1, got {cleaner.circular_hough.row_offset}"
        )

    for name in ("num_angle_bins_to_reduce", "hough_space_slice_size", "peak_width",
                 "min_points_per_line", "num_peaks"):
        _require_int(name, getattr(cleaner, name))

    num_bins = cleaner.linear_hough.num_bins

    k = cleaner.num_angle_bins_to_reduce
    if not 0 < k <= num_bins * num_bins:
        raise ConfigurationError(
            f"num_angle_bins_to_reduce must be in (0, {num_bins * num_bins}], got {k}"
        )

    s = cleaner.hough_space_slice_size
    if s <= 0 or 2 * s > num_bins:
        raise ConfigurationError(
            f"hough_space_slice_size must be in (0, {num_bins // 2}], got {s}"
        )

    w = cleaner.peak_width
    if not 0 <= w < num_bins:
        raise ConfigurationError(f"peak_width must be in [0, {num_bins}), got {w}")

    if cleaner.min_points_per_line < 0:
        raise ConfigurationError(
            f"min_points_per_line must be non-negative, got {cleaner.min_points_per_line}"
        )

    if cleaner.num_peaks < 1:
        raise ConfigurationError(f"num_peaks must be at least 1, got {cleaner.num_peaks}")

    if isinstance(config, PipelineConfig):
        _validate_clustering(config.clustering)

    return config


def _validate_clustering(clustering):
    from spiralclean.clustering.metrics import CLUSTER_METRICS

    _require_int("clustering.num_neighbors", clustering.num_neighbors)
    _require_int("clustering.min_cluster_size", clustering.min_cluster_size)
    for name in ("max_triplet_error", "angle_scale", "max_distance"):
        _require_number(f"clustering.{name}", getattr(clustering, name))

    if clustering.num_neighbors < 2:
        raise ConfigurationError(
            f"clustering.num_neighbors must be at least 2, got {clustering.num_neighbors}"
        )
    if clustering.max_triplet_error < 0 or clustering.angle_scale < 0 or clustering.max_distance < 0:
        raise ConfigurationError("clustering distances and scales must be non-negative")
    if clustering.linkage not in CLUSTER_METRICS:
        raise ConfigurationError(
            f"Unknown clustering.linkage {clustering.linkage!r}, expected one of {sorted(CLUSTER_METRICS)}"
        )
    if clustering.min_cluster_size < 1:
        raise ConfigurationError(
            f"clustering.min_cluster_size must be at least 1, got {clustering.min_cluster_size}"
        )


def _to_yaml_data(obj):
    return {
        f.name: _to_yaml_data(getattr(obj, f.name)) if is_dataclass(getattr(obj, f.name)) else getattr(obj, f.name)
        for f in fields(obj)
    }


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = _to_yaml_data(PipelineConfig())
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
