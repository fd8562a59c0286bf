"""
Command-line interface for the spiral cleaner.

Provides commands for cleaning events, clustering them, and writing a
default configuration file.
"""

import argparse
import sys

from spiralclean.config import save_default_config
from spiralclean.tracer import configure_tracer, get_tracer


def _add_trace_arguments(parser):
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )


def build_parser():
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="spiralclean",
        description="Spiral cleaner: split spiralling tracks into line segments with a Hough transform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Clean every event of an input file")
    run_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Event file (.npz, .npy, .csv, .txt)",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--center",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        default=None,
        help="Rotation center used for every event",
    )
    run_parser.add_argument(
        "--centers",
        default=None,
        help="JSON file mapping event id to [x, y] center",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug artifact generation",
    )
    _add_trace_arguments(run_parser)

    # Cluster command
    cluster_parser = subparsers.add_parser("cluster", help="Cluster events into tracks with triplets")
    cluster_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Event file (.npz, .npy, .csv, .txt)",
    )
    cluster_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    cluster_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    _add_trace_arguments(cluster_parser)

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="spiralclean_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        if args.center is None and args.centers is None:
            parser.error("run requires --center or --centers")
        return handle_run(args)
    elif args.command == "cluster":
        return handle_cluster(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def _configure_tracing(args):
    configure_tracer(
        enabled=args.trace,
        level=args.trace_level,
        file_path=args.trace_file,
        json_output=args.trace_json,
    )
    return get_tracer()


def handle_run(args):
    """Handle the run command."""
    tracer = _configure_tracing(args)

    try:
        from spiralclean.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            report = run_pipeline(
                input_path=args.input,
                out_dir=args.out,
                center=args.center,
                centers_path=args.centers,
                config_path=args.config,
                debug=args.debug,
            )
    except Exception as e:
        tracer.event(f"Pipeline failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        tracer.config.close()

    print(f"\nCleaning completed.")
    print(f"  Events cleaned: {report.processed}")
    print(f"  Events skipped: {report.skipped}")
    for summary in report.events:
        if summary.status == "ok":
            print(f"    {summary.event_id}: {summary.num_lines_kept}/{summary.num_lines_found} lines kept, "
                  f"{summary.num_unassigned}/{summary.num_points} points unassigned")
        else:
            print(f"    {summary.event_id}: skipped ({summary.error})")
    print(f"\nOutputs saved to: {args.out}/")
    print(f"  - labels.npz")
    print(f"  - cleaning_report.json")

    if report.events and report.processed == 0:
        print(f"\n[!] Every event was skipped. Review cleaning_report.json")
        return 1

    return 0


def handle_cluster(args):
    """Handle the cluster command."""
    tracer = _configure_tracing(args)

    try:
        from spiralclean.pipeline import run_clustering

        with tracer.span("cli_cluster", module="cli"):
            results = run_clustering(
                input_path=args.input,
                out_dir=args.out,
                config_path=args.config,
            )
    except Exception as e:
        tracer.event(f"Clustering failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        tracer.config.close()

    print(f"\nClustering completed.")
    for event_id, result in results.items():
        print(f"  {event_id}: {result.num_clusters} clusters")
    print(f"\nOutputs saved to: {args.out}/clusters.json")
    return 0


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
