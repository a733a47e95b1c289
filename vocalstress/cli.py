"""
VocalStress v1 CLI - Argument parsing and dispatch.

Responsibilities:
- Argument parsing
- Logging setup
- Loading audio and optional JSON config
- Printing / writing the report
- Exit codes

Forbidden:
- No DSP or scoring logic (engine only)
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

logger = logging.getLogger("vocalstress")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="vocalstress",
        description="VocalStress v1 command-line interface.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Replay a recording through the engine and print the report.",
        description=(
            "Replay a recording through the voice stress engine.\n\n"
            "The file is delivered in 30 Hz analysis ticks at its own sample rate,\n"
            "and the end-of-session report is printed as JSON."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    analyze_parser.add_argument(
        "--input",
        metavar="PATH",
        required=True,
        help="Path to input audio file (WAV).",
    )
    analyze_parser.add_argument(
        "--config",
        metavar="PATH",
        help="JSON file with engine configuration overrides.",
    )
    analyze_parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write the report to PATH instead of stdout.",
    )
    analyze_parser.add_argument(
        "--no-timeline",
        action="store_true",
        help="Omit the per-second timeline from the report.",
    )

    return parser


def load_config(path: Path | None, sample_rate: int):
    """
    Build the engine config for a recording.

    The recording's sample rate always wins over the file's value.
    """
    from vocalstress.config import EngineConfig

    overrides = {}
    if path is not None:
        overrides = json.loads(path.read_text())
    config = EngineConfig.from_dict(overrides)
    return replace(config, sample_rate=sample_rate).validate()


def cmd_analyze(args: argparse.Namespace) -> int:
    """
    Handle the 'analyze' subcommand.

    Returns exit code.
    """
    import soundfile as sf

    from vocalstress.contracts import EngineInitError
    from vocalstress.session import VoiceStressEngine
    from vocalstress.transport import AnalyserFrameSource, read_audio, run_session
    from vocalstress.utils import serialize_json

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1
    if not input_path.is_file():
        print(f"Error: Input path is not a file: {input_path}", file=sys.stderr)
        return 1

    config_path = Path(args.config) if args.config else None
    if config_path is not None and not config_path.is_file():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        samples, sr = read_audio(input_path)
    except sf.LibsndfileError as e:
        print(f"Error: Cannot read audio: {e}", file=sys.stderr)
        return 1
    logger.info("Loaded %s: %d samples at %d Hz", input_path, len(samples), sr)

    try:
        config = load_config(config_path, sr)
        engine = VoiceStressEngine(config)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid config JSON: {e}", file=sys.stderr)
        return 1
    except EngineInitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    source = AnalyserFrameSource(
        samples,
        sample_rate=sr,
        fft_size=config.fft_size,
        frame_rate=config.frame_rate,
    )
    report = run_session(engine, source).to_dict()
    if args.no_timeline:
        report.pop("timeline")

    text = serialize_json(report)
    if args.output:
        Path(args.output).write_text(text)
        print(f"Report written: {args.output}")
    else:
        sys.stdout.write(text)
    return 0


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "analyze":
        exit_code = cmd_analyze(args)
        sys.exit(exit_code)
