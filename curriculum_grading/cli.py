import argparse
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .assembler import GradingRequest, InMemoryResultStore, ResultAssembler, SubjectResult
from .config import GradingConfig
from .curricula import curriculum_for_level, is_current
from .exceptions import ConfigError

console = Console()
logger = logging.getLogger(__name__)


def load_requests(
    filepath: Path, limit: int | None = None
) -> tuple[list[GradingRequest], list[tuple[int, str]]]:
    """Read JSONL grading requests; bad lines come back as (line number, error)."""
    requests: list[GradingRequest] = []
    invalid: list[tuple[int, str]] = []
    with open(filepath, encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                requests.append(GradingRequest.model_validate(json.loads(line)))
            except json.JSONDecodeError as e:
                invalid.append((lineno, f"invalid JSON: {e.msg}"))
            except ValidationError as e:
                invalid.append((lineno, f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}"))

    return (requests[:limit] if limit else requests), invalid


def find_drift(requests: list[GradingRequest], results: list[SubjectResult]) -> list[SubjectResult]:
    """Results whose previously stored fingerprint is not the current rule version."""
    stored: dict[tuple[str, str, str, int], str] = {}
    for r in requests:
        if not r.rule_version_hash:
            continue
        key = (r.student_id, r.subject_id, r.term, r.year)
        if key in stored:
            logger.warning(f"Repeated result key {key}; using the stored hash from the last row")
        stored[key] = r.rule_version_hash
    drifted = []
    for record in results:
        stored_hash = stored.get(record.key)
        curriculum = curriculum_for_level(record.level)
        if stored_hash and curriculum and not is_current(stored_hash, curriculum):
            drifted.append(record)
    return drifted


def _print_results(results: list[SubjectResult], drifted: list[SubjectResult]):
    drifted_keys = {r.key for r in drifted}

    t = Table(title="Subject Results")
    t.add_column("Student", style="cyan")
    t.add_column("Subject")
    t.add_column("Level")
    t.add_column("Term")
    t.add_column("Grade", justify="center", style="bold")
    t.add_column("Rule", style="dim")
    t.add_column("Reason")

    for r in results:
        rule = r.result.rule_version_hash
        if r.key in drifted_keys:
            rule = f"[yellow]{rule} (drift)[/yellow]"
        t.add_row(
            r.student_id,
            r.subject_id,
            r.level,
            f"{r.term} {r.year}",
            r.final_grade,
            rule,
            r.result.computation_reason,
        )

    console.print(t)

    counts = Counter(r.final_grade for r in results)
    summary = Table(title="Grade Distribution")
    summary.add_column("Grade", style="cyan")
    summary.add_column("Count", justify="right")
    summary.add_column("Share", justify="right")
    for grade, count in sorted(counts.items()):
        summary.add_row(grade, str(count), f"{count / len(results):.1%}")
    console.print(summary)


def run(filepath: Path, config: GradingConfig) -> dict[str, Any]:
    requests, invalid = load_requests(filepath, config.limit)
    for lineno, error in invalid:
        console.print(f"[yellow]line {lineno}: {error}[/yellow]")

    if not requests:
        console.print("[red]No grading requests found![/red]")
        return {}

    store = InMemoryResultStore()
    results, failures = ResultAssembler(store).grade_batch(requests)
    logger.info(f"Graded {len(results)} of {len(requests)} requests, {len(failures)} rejected")
    for request, error in failures:
        console.print(f"[red]{request.student_id}/{request.subject_id}: {error}[/red]")

    drifted = find_drift(requests, results) if config.check_drift else []
    if results:
        _print_results(results, drifted)

    output: dict[str, Any] = {
        "results": [r.to_dict() for r in store.all()],
        "failures": [
            {"student_id": req.student_id, "subject_id": req.subject_id, "error": str(err)}
            for req, err in failures
        ],
        "invalid_lines": [{"line": lineno, "error": error} for lineno, error in invalid],
        "drifted": [list(r.key) for r in drifted],
    }

    if config.output_file:
        with open(config.output_file, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2, ensure_ascii=False)
        console.print(f"\n[green]Saved to {config.output_file}[/green]")

    return output


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Grade subject results from recorded marks")
    parser.add_argument("input", type=Path, help="JSONL file of grading requests")
    parser.add_argument("--limit", type=int, help="Limit number of requests")
    parser.add_argument("--output", "-o", help="Output file for results JSON")
    parser.add_argument("--log-level", help="Logging level (default: WARNING or $GRADING_LOG_LEVEL)")
    parser.add_argument(
        "--check-drift",
        action="store_true",
        help="Flag results whose stored rule_version_hash is not the current rule version",
    )
    args = parser.parse_args(argv)

    try:
        config = GradingConfig.from_env().with_log_level(args.log_level)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        return 2

    config.limit = args.limit
    config.output_file = args.output or config.output_file
    config.check_drift = args.check_drift
    config.configure_logging()

    if not args.input.exists():
        console.print(f"[red]Input file not found: {args.input}[/red]")
        return 1

    output = run(args.input, config)
    return 1 if not output or output["failures"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
