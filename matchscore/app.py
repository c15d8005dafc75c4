import argparse
import json
from pathlib import Path

from . import __version__
from .batch import BatchScorer
from .database import init_database
from .engine import MatchRequest, MatchService
from .env import get_settings, load_env
from .logger import get_logger
from .remote import RestClient, RestOutcomeRecorder, RestRecordSource
from .repository import SqlOutcomeRecorder, SqlRecordSource, list_outcomes, record_outcome
from .schema import validate_match_request, validate_outcome
from .sources import RecordNotFoundError


def build_service(args: argparse.Namespace) -> MatchService:
    if getattr(args, "remote", False):
        settings = get_settings()
        if not settings.api_url or not settings.api_key:
            raise SystemExit("MATCHSCORE_API_URL and MATCHSCORE_API_KEY must be set for --remote.")
        client = RestClient(settings.api_url, settings.api_key)
        return MatchService(RestRecordSource(client), RestOutcomeRecorder(client))

    db_path = Path(args.db)
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'matchscore init-db' first.")
    return MatchService(SqlRecordSource(db_path), SqlOutcomeRecorder(db_path))


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_init_db(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    init_database(db_path)
    print(f"Initialized database: {db_path}")


def cmd_score(args: argparse.Namespace) -> None:
    payload = {"candidateId": args.candidate_id, "jobId": args.job_id, "submissionId": args.submission_id}
    try:
        request = MatchRequest.from_dict(payload)
    except ValueError as e:
        raise SystemExit(str(e))

    service = build_service(args)
    try:
        result = service.run(request)
    except RecordNotFoundError as e:
        raise SystemExit(str(e))
    _print_json(result.to_dict())


def cmd_batch(args: argparse.Namespace) -> None:
    scorer = BatchScorer(build_service(args), max_workers=args.workers)
    try:
        report = scorer.run_for_job(args.job_id)
    except RecordNotFoundError as e:
        raise SystemExit(str(e))
    except KeyboardInterrupt:
        scorer.cancel()
        raise SystemExit("Batch cancelled.")

    summary = report.summary()
    summary["errors"] = report.errors
    _print_json(summary)
    get_logger().log_metrics_summary()


def cmd_record_outcome(args: argparse.Namespace) -> None:
    data = {
        "submissionId": args.submission_id,
        "outcome": args.outcome,
        "rejectionCategory": args.rejection_category,
    }
    errors = validate_outcome(data)
    if errors:
        raise SystemExit("Invalid outcome: " + "; ".join(errors))

    db_path = Path(args.db)
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'matchscore init-db' first.")

    try:
        row = record_outcome(
            db_path,
            args.submission_id,
            args.outcome,
            stage=args.stage,
            rejection_reason=args.rejection_reason,
            rejection_category=args.rejection_category,
        )
    except RecordNotFoundError as e:
        raise SystemExit(str(e))
    print(f"Recorded {row['actual_outcome']} for submission {row['submission_id']}")


def cmd_list(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        return
    rows = list_outcomes(db_path, job_id=args.job_id)
    if not rows:
        print("No predictions recorded.")
        return
    print(f"Found {len(rows)} predictions in {db_path}:\n")
    for row in rows:
        print(f"Submission: {row['submission_id']}")
        print(f"  Candidate: {row['candidate_id']}  Job: {row['job_id']}")
        print(
            f"  Overall: {row['predicted_overall_score']}  "
            f"Deal: {row['predicted_deal_probability']}  "
            f"Gate: {(row['gate_results'] or {}).get('overallGate')}"
        )
        if row["actual_outcome"]:
            print(f"  Outcome: {row['actual_outcome']} ({row['outcome_stage'] or 'unknown stage'})")
        print()


def cmd_validate(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    errors = validate_match_request(payload)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def main(argv=None):
    load_env()
    default_db = str(get_settings().db_path)
    parser = argparse.ArgumentParser(prog="matchscore", description="Candidate-job match and deal probability scoring")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    ini = subparsers.add_parser("init-db", help="Create the database tables")
    ini.add_argument("--db", default=default_db, help=f"Path to SQLite database (default: {default_db})")
    ini.set_defaults(func=cmd_init_db)

    sco = subparsers.add_parser("score", help="Score one candidate against one job and print the result JSON")
    sco.add_argument("--candidate-id", required=True, help="Candidate id")
    sco.add_argument("--job-id", required=True, help="Job id")
    sco.add_argument("--submission-id", help="Submission id; when given the result is persisted")
    sco.add_argument("--db", default=default_db, help="Path to SQLite database")
    sco.add_argument("--remote", action="store_true", help="Use the marketplace API instead of the database")
    sco.set_defaults(func=cmd_score)

    bat = subparsers.add_parser("batch", help="Recompute every active submission on a job")
    bat.add_argument("--job-id", required=True, help="Job id")
    bat.add_argument("--workers", type=int, default=4, help="Worker threads (default: 4)")
    bat.add_argument("--db", default=default_db, help="Path to SQLite database")
    bat.add_argument("--remote", action="store_true", help="Use the marketplace API instead of the database")
    bat.set_defaults(func=cmd_batch)

    out = subparsers.add_parser("record-outcome", help="Record the real outcome of a submission")
    out.add_argument("--submission-id", required=True, help="Submission id")
    out.add_argument("--outcome", required=True, help="hired, rejected, withdrew or expired")
    out.add_argument("--stage", help="Pipeline stage the outcome happened at")
    out.add_argument("--rejection-reason", help="Free-text rejection reason")
    out.add_argument("--rejection-category", help="skills, experience, salary, culture, availability or other")
    out.add_argument("--db", default=default_db, help="Path to SQLite database")
    out.set_defaults(func=cmd_record_outcome)

    lst = subparsers.add_parser("list", help="List stored predictions")
    lst.add_argument("--job-id", help="Only predictions for this job")
    lst.add_argument("--db", default=default_db, help="Path to SQLite database")
    lst.set_defaults(func=cmd_list)

    val = subparsers.add_parser("validate", help="Validate a match request JSON file")
    val.add_argument("--input", required=True, help="Path to request JSON")
    val.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
