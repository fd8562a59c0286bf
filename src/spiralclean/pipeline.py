"""
Main pipeline orchestrator for the spiral cleaner.

Loads events, cleans each one independently, and writes the labels and a
JSON report. An event that fails a precondition is skipped and recorded
in the report; the remaining events are still processed.
"""

import os

from spiralclean.cleaning.cleaner import HoughSpiralCleaner
from spiralclean.clustering.hierarchy import cluster_triplets
from spiralclean.config import load_config, validate_config
from spiralclean.errors import SpiralCleanerError
from spiralclean.io.load_points import load_centers, load_events
from spiralclean.io.save_artifacts import DebugArtifactWriter, ensure_dir, save_json, save_labels
from spiralclean.models import CleaningReport, EventSummary
from spiralclean.tracer import get_tracer, trace


def summarize_result(event_id, result):
    """Build the report entry for a successfully cleaned event."""
    classification = result.classification
    return EventSummary(
        event_id=event_id,
        status="ok",
        num_points=classification.num_points,
        num_lines_found=classification.num_lines,
        num_lines_kept=len(classification.surviving_lines()),
        num_unassigned=classification.num_unassigned,
        max_angle=result.max_angle,
        radii=result.radii,
    )


@trace(label="clean_events")
def clean_events(events, centers, config, debug_writer_factory=None):
    """
    Clean a batch of events.

    Args:
        events: dict of event id -> (n, 3) array
        centers: dict of event id -> (x, y) center
        config: CleanerConfig
        debug_writer_factory: optional callable(event_id) -> DebugArtifactWriter

    Returns:
        (results, report): dict of event id -> SpiralCleanerResult for the
        events that succeeded, and the CleaningReport covering all events
    """
    tracer = get_tracer()

    cleaner = HoughSpiralCleaner(config)

    results = {}
    report = CleaningReport()

    for event_id in sorted(events):
        xyz = events[event_id]
        with tracer.span(f"event_{event_id}", module="pipeline"):
            if event_id not in centers:
                tracer.event(f"No center for event {event_id}, skipping", level="WARN")
                report.events.append(EventSummary(
                    event_id=event_id, status="skipped", num_points=len(xyz),
                    error="no rotation center given",
                ))
                continue

            try:
                result = cleaner.process_event(xyz, centers[event_id])
            except SpiralCleanerError as e:
                tracer.event(f"Skipping event {event_id}: {type(e).__name__}: {e}", level="WARN")
                report.events.append(EventSummary(
                    event_id=event_id, status="skipped", num_points=len(xyz),
                    error=f"{type(e).__name__}: {e}",
                ))
                continue

            results[event_id] = result
            report.events.append(summarize_result(event_id, result))

            if debug_writer_factory is not None:
                debug_writer = debug_writer_factory(event_id)
                debug_writer.save_hough_space(result.hough_space, "hough", "linear_hough.png")
                debug_writer.save_result(result)

    tracer.event(f"Cleaned {report.processed} events, skipped {report.skipped}")
    return results, report


@trace(label="run_pipeline")
def run_pipeline(input_path, out_dir, center=None, centers_path=None,
                 config=None, config_path=None, debug=False):
    """
    Run the cleaner over every event of an input file.

    Args:
        input_path: event file (.npz, .npy, .csv, .txt)
        out_dir: output directory
        center: (x, y) center used for events without their own
        centers_path: JSON file of per-event centers (optional)
        config: PipelineConfig object (optional)
        config_path: path to YAML config file (optional)
        debug: enable debug artifact generation

    Returns:
        CleaningReport
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)
    config.debug.enabled = config.debug.enabled or debug
    validate_config(config)

    events = load_events(input_path)

    centers = {}
    if center is not None:
        centers = {event_id: tuple(center) for event_id in events}
    if centers_path:
        centers.update(load_centers(centers_path))

    ensure_dir(out_dir)

    debug_writer_factory = None
    if config.debug.enabled:
        def debug_writer_factory(event_id):
            return DebugArtifactWriter(
                out_dir, event_id, enabled=True, max_edge=config.debug.max_edge_scale,
            )

    results, report = clean_events(events, centers, config.cleaner, debug_writer_factory)

    save_labels(results, os.path.join(out_dir, "labels.npz"))
    save_json(report, os.path.join(out_dir, "cleaning_report.json"))

    tracer.event(f"Pipeline complete: {report.processed} cleaned, {report.skipped} skipped")
    return report


@trace(label="run_clustering")
def run_clustering(input_path, out_dir, config=None, config_path=None):
    """
    Run triplet clustering over every event of an input file.

    Writes clusters.json mapping event id -> ClusterResult and returns
    the same mapping.
    """
    if config is None:
        config = load_config(config_path)
    validate_config(config)

    events = load_events(input_path)
    ensure_dir(out_dir)

    tracer = get_tracer()
    cluster_results = {}
    for event_id in sorted(events):
        with tracer.span(f"event_{event_id}", module="pipeline"):
            cluster_results[event_id] = cluster_triplets(events[event_id], config.clustering)

    save_json(
        {event_id: r.model_dump() for event_id, r in cluster_results.items()},
        os.path.join(out_dir, "clusters.json"),
    )
    return cluster_results
