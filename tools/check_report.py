#!/usr/bin/env python3
"""
VocalStress v1 Report Checker

Checks analysis reports in two passes:

1. Structure: the frozen JSON schema in schemas/report.schema.json
2. Consistency: rules the schema cannot express, e.g. indicator colours
   agreeing with their labels, the timeline running forward in time and
   baseline fields agreeing with baseline_established

Usage:
    python tools/check_report.py report.json
    python tools/check_report.py --audio take1.wav [--config engine.json]

With --audio the recording is analysed in-process and the fresh report is
checked instead of a file.
"""

import argparse
import json
import sys
from pathlib import Path

import jsonschema

SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "report.schema.json"

# Every label the scorer can emit, with its fixed display colour.
INDICATOR_COLORS = {
    "HIGH VOICE STRESS": "red",
    "ELEVATED VOICE STRESS": "orange",
    "SIGNIFICANT PITCH SHIFT": "red",
    "PITCH DEVIATION": "orange",
    "VOCAL TREMOR DETECTED": "red",
    "MILD TREMOR": "yellow",
    "VOCAL TENSION": "orange",
    "VOICE INSTABILITY": "orange",
    "NO BASELINE": "yellow",
    "VOICE NORMAL": "green",
    "INSUFFICIENT SPEECH": "yellow",
}


def load_report_schema() -> dict:
    with open(SCHEMA_PATH, "r") as f:
        return json.load(f)


def schema_errors(report: dict, schema: dict | None = None) -> list[str]:
    """
    Structural errors as "path: message", ordered by path.

    The schema is loaded from disk when not given.
    """
    validator = jsonschema.Draft7Validator(schema or load_report_schema())
    found = sorted(validator.iter_errors(report), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{'.'.join(str(p) for p in e.absolute_path) or '(root)'}: {e.message}" for e in found]


def consistency_errors(report: dict) -> list[str]:
    """
    Cross-field errors in a structurally valid report.

    Returns:
        List of error messages (empty if consistent)
    """
    errors = []
    labels = [indicator["label"] for indicator in report["indicators"]]

    for i, indicator in enumerate(report["indicators"]):
        expected = INDICATOR_COLORS.get(indicator["label"])
        if expected is None:
            errors.append(f"indicators.{i}: unknown label {indicator['label']!r}")
        elif indicator["color"] != expected:
            errors.append(
                f"indicators.{i}: {indicator['label']} must be {expected}, got {indicator['color']}"
            )

    if report["insufficient_data"]:
        if report["stress_score"] != 0:
            errors.append("stress_score: must be 0 when insufficient_data")
        if labels != ["INSUFFICIENT SPEECH"]:
            errors.append("indicators: must be exactly INSUFFICIENT SPEECH when insufficient_data")
    else:
        if "INSUFFICIENT SPEECH" in labels:
            errors.append("indicators: INSUFFICIENT SPEECH without insufficient_data")
        if ("NO BASELINE" in labels) == report["baseline_established"]:
            errors.append("indicators: NO BASELINE must appear exactly when no baseline was established")
        if "VOICE NORMAL" in labels and len(labels) > 1:
            errors.append("indicators: VOICE NORMAL must be the only indicator")

    has_mean = report["fundamental_frequency"]["baseline_mean"] is not None
    if has_mean != report["baseline_established"]:
        errors.append("fundamental_frequency.baseline_mean: must be set exactly when baseline_established")

    metrics = report["speech_metrics"]
    if metrics["total_speech_duration"] > metrics["total_duration"]:
        errors.append("speech_metrics.total_speech_duration: exceeds total_duration")

    times = [entry["time_seconds"] for entry in report.get("timeline", [])]
    for i in range(1, len(times)):
        if times[i] <= times[i - 1]:
            errors.append(f"timeline.{i}.time_seconds: not after previous entry ({times[i - 1]})")

    return errors


def check_report(report: dict) -> list[str]:
    """Schema errors, or consistency errors once the structure is valid."""
    errors = schema_errors(report)
    if errors:
        return errors
    return consistency_errors(report)


def analyze_recording(audio_path: Path, config_path: Path | None = None) -> dict:
    """Analyse a recording in-process and return its report dictionary."""
    from vocalstress.cli import load_config
    from vocalstress.session import VoiceStressEngine
    from vocalstress.transport import AnalyserFrameSource, read_audio, run_session

    samples, sr = read_audio(audio_path)
    config = load_config(config_path, sr)
    source = AnalyserFrameSource(samples, sr, fft_size=config.fft_size, frame_rate=config.frame_rate)
    return run_session(VoiceStressEngine(config), source).to_dict()


def main():
    parser = argparse.ArgumentParser(
        description="Check VocalStress v1 reports for structure and consistency"
    )
    parser.add_argument("report", nargs="?", type=Path, help="Report JSON file")
    parser.add_argument("--audio", type=Path, help="Analyse this recording and check the fresh report")
    parser.add_argument("--config", type=Path, help="Engine config JSON used with --audio")
    args = parser.parse_args()

    if (args.report is None) == (args.audio is None):
        parser.error("give exactly one of REPORT or --audio")

    if args.audio is not None:
        report = analyze_recording(args.audio, args.config)
        source = args.audio
    else:
        try:
            report = json.loads(args.report.read_text())
        except FileNotFoundError:
            sys.exit(f"Error: File not found: {args.report}")
        except json.JSONDecodeError as e:
            sys.exit(f"Error: Invalid JSON: {e}")
        source = args.report

    errors = check_report(report)
    if errors:
        print(f"INVALID: {source}: {len(errors)} error(s)")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)
    print(f"OK: {source}: stress {report['stress_score']}, {len(report['indicators'])} indicator(s)")


if __name__ == "__main__":
    main()
