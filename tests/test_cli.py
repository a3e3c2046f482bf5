import json
import logging

import pytest

from curriculum_grading.assembler import ResultAssembler
from curriculum_grading.cli import find_drift, load_requests, main, run
from curriculum_grading.config import GradingConfig
from curriculum_grading.fingerprint import rule_version_hash

ROWS = [
    {
        "student_id": "stu-1",
        "subject_id": "eng",
        "level": "P6",
        "term": "T1",
        "year": 2024,
        "marks": [
            {"assessment_type": "CA", "marks_obtained": 32, "max_marks": 40},
            {"assessment_type": "EXAM", "marks_obtained": 48, "max_marks": 60},
        ],
    },
    {
        "student_id": "stu-2",
        "subject_id": "phy",
        "level": "S6",
        "term": "T1",
        "year": 2024,
        "rule_version_hash": rule_version_hash("UACE_V0"),
        "marks": [
            {"assessment_type": "PAPER1", "marks_obtained": 35, "max_marks": 100},
            {"assessment_type": "PAPER2", "marks_obtained": 30, "max_marks": 100},
            {"assessment_type": "PAPER3", "marks_obtained": 50, "max_marks": 100},
        ],
    },
    {
        "student_id": "stu-3",
        "subject_id": "bio",
        "level": "P1",
        "term": "T1",
        "year": 2024,
        "marks": [],
    },
]


@pytest.fixture
def requests_file(tmp_path):
    path = tmp_path / "requests.jsonl"
    lines = [json.dumps(row) for row in ROWS]
    lines.insert(1, "")
    lines.append("{not json")
    lines.append(json.dumps({"student_id": "stu-4"}))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_load_requests_reports_bad_lines(requests_file):
    requests, invalid = load_requests(requests_file)
    assert [r.student_id for r in requests] == ["stu-1", "stu-2", "stu-3"]
    assert [lineno for lineno, _ in invalid] == [5, 6]
    assert invalid[0][1].startswith("invalid JSON")


def test_load_requests_limit(requests_file):
    requests, _ = load_requests(requests_file, limit=1)
    assert len(requests) == 1


def test_run_grades_and_writes_output(requests_file, tmp_path):
    output_file = tmp_path / "out.json"
    output = run(requests_file, GradingConfig(output_file=str(output_file), check_drift=True))

    grades = {r["student_id"]: r["final_grade"] for r in output["results"]}
    assert grades == {"stu-1": "A", "stu-2": "E"}
    assert output["failures"] == [
        {"student_id": "stu-3", "subject_id": "bio", "error": "no grader for level 'P1'"}
    ]
    assert output["drifted"] == [["stu-2", "phy", "T1", 2024]]
    assert json.loads(output_file.read_text(encoding="utf-8")) == output


def test_find_drift_ignores_current_hashes(requests_file):
    requests, _ = load_requests(requests_file)
    current = requests[1].model_copy(update={"rule_version_hash": rule_version_hash("UACE_V1")})
    results, _ = ResultAssembler().grade_batch([requests[0], current])
    assert find_drift([requests[0], current], results) == []


def test_main_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.jsonl")]) == 1


def test_main_returns_failure_status(requests_file):
    assert main([str(requests_file), "--log-level", "error"]) == 1


def test_main_rejects_bad_log_level(requests_file):
    assert main([str(requests_file), "--log-level", "chatty"]) == 2


def test_find_drift_warns_on_repeated_key(requests_file, caplog):
    requests, _ = load_requests(requests_file)
    repeat = requests[1].model_copy(update={"rule_version_hash": rule_version_hash("UACE_V1")})
    results, _ = ResultAssembler().grade_batch([requests[1]])

    with caplog.at_level(logging.WARNING, logger="curriculum_grading.cli"):
        drifted = find_drift([requests[1], repeat], results)

    assert drifted == []
    assert "Repeated result key ('stu-2', 'phy', 'T1', 2024)" in caplog.text
