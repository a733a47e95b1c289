"""
VocalStress v1 Report Checking Tests

The frozen report schema, and the cross-field consistency rules checked
on top of it by tools/check_report.py.
"""

import copy
import sys
from pathlib import Path

import jsonschema
import pytest

# Import checking functions from tools
sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))
from check_report import (
    INDICATOR_COLORS,
    SCHEMA_PATH,
    analyze_recording,
    check_report,
    consistency_errors,
    load_report_schema,
    schema_errors,
)

from vocalstress import scoring
from vocalstress.scoring import full_analysis
from vocalstress.session import VoiceStressEngine
from tests.conftest import feed, silent_frame, voiced_ticks


@pytest.fixture
def schema():
    return load_report_schema()


@pytest.fixture
def stressed_report(engine) -> dict:
    feed(engine, voiced_ticks(200, 150))
    feed(engine, voiced_ticks(240, 60))
    return engine.full_analysis().to_dict()


@pytest.fixture
def silent_report(config) -> dict:
    engine = VoiceStressEngine(config)
    engine.start()
    for _ in range(30):
        engine.process_frame(silent_frame())
    return engine.full_analysis().to_dict()


class TestSchemaLoading:

    def test_report_schema_loads(self, schema):
        assert schema["title"] == "VocalStress v1 Report"
        assert "stress_score" in schema["required"]

    def test_schema_is_valid_draft7(self, schema):
        jsonschema.Draft7Validator.check_schema(schema)

    def test_schema_file_exists(self):
        assert SCHEMA_PATH.is_file()


class TestReportValidation:

    def test_full_report_valid(self, schema, stressed_report):
        assert schema_errors(stressed_report, schema) == []

    def test_default_report_valid(self, schema, silent_report):
        assert schema_errors(silent_report, schema) == []

    def test_timeline_optional(self, schema, stressed_report):
        del stressed_report["timeline"]
        assert schema_errors(stressed_report, schema) == []

    def test_empty_session_valid(self, schema, config):
        engine = VoiceStressEngine(config)
        assert schema_errors(full_analysis(engine.state).to_dict(), schema) == []


class TestReportRejection:

    def test_score_out_of_range(self, schema, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["stress_score"] = 101
        errors = schema_errors(doc, schema)
        assert any(e.startswith("stress_score") for e in errors)

    def test_unknown_top_level_key(self, schema, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["extra"] = True
        assert schema_errors(doc, schema) != []

    def test_bad_indicator_color(self, schema, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["indicators"][0]["color"] = "purple"
        errors = schema_errors(doc, schema)
        assert any(e.startswith("indicators.0.color") for e in errors)

    def test_missing_section(self, schema, stressed_report):
        doc = copy.deepcopy(stressed_report)
        del doc["micro_tremor"]
        assert schema_errors(doc, schema) != []

    def test_empty_indicators(self, schema, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["indicators"] = []
        assert schema_errors(doc, schema) != []


class TestConsistency:

    def test_engine_reports_consistent(self, stressed_report, silent_report):
        assert check_report(stressed_report) == []
        assert check_report(silent_report) == []

    def test_no_baseline_report_consistent(self, engine):
        feed(engine, voiced_ticks(200, 60))
        assert check_report(engine.full_analysis().to_dict()) == []

    def test_color_table_matches_scorer(self):
        """Every indicator the scorer emits uses the checker's colour."""
        emitted = (
            scoring.generate_indicators(75, 20.0, 65, 0.3, True)
            + scoring.generate_indicators(45, 9.0, 35, 2.5, False)
            + scoring.generate_indicators(10, 2.0, 10, 1.0, True)
        )
        for indicator in emitted:
            assert INDICATOR_COLORS[indicator.label] == indicator.color

    def test_color_swapped_between_valid_colors(self, stressed_report):
        doc = copy.deepcopy(stressed_report)
        label = doc["indicators"][0]["label"]
        doc["indicators"][0]["color"] = "green" if INDICATOR_COLORS[label] != "green" else "red"
        errors = check_report(doc)
        assert any(e.startswith("indicators.0:") for e in errors)

    def test_unknown_label(self, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["indicators"].append({"label": "CALM", "color": "green"})
        assert any("unknown label" in e for e in consistency_errors(doc))

    def test_reversed_timeline(self, stressed_report):
        doc = copy.deepcopy(stressed_report)
        assert len(doc["timeline"]) >= 2
        doc["timeline"].reverse()
        assert any(e.startswith("timeline.1.time_seconds") for e in consistency_errors(doc))

    def test_baseline_mean_without_baseline(self, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["baseline_established"] = False
        errors = consistency_errors(doc)
        assert any(e.startswith("fundamental_frequency.baseline_mean") for e in errors)

    def test_insufficient_with_score(self, silent_report):
        doc = copy.deepcopy(silent_report)
        doc["stress_score"] = 40
        assert "stress_score: must be 0 when insufficient_data" in consistency_errors(doc)

    def test_insufficient_with_other_indicators(self, silent_report):
        doc = copy.deepcopy(silent_report)
        doc["indicators"].append({"label": "VOICE NORMAL", "color": "green"})
        assert any(e.startswith("indicators:") for e in consistency_errors(doc))

    def test_speech_longer_than_session(self, stressed_report):
        doc = copy.deepcopy(stressed_report)
        doc["speech_metrics"]["total_speech_duration"] = doc["speech_metrics"]["total_duration"] + 1
        assert any(e.startswith("speech_metrics") for e in consistency_errors(doc))

    def test_schema_errors_reported_first(self, stressed_report):
        doc = copy.deepcopy(stressed_report)
        del doc["speech_metrics"]
        errors = check_report(doc)
        assert errors and all("speech_metrics" in e or e.startswith("(root)") for e in errors)


class TestAnalyzeRecording:

    def test_fresh_report_is_consistent(self, test_wav_path):
        report = analyze_recording(test_wav_path)
        assert report["baseline_established"] is True
        assert check_report(report) == []
