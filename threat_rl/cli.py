#!/usr/bin/env python3
# threat_rl/cli.py

"""
threat-rl command line
======================

Usage
-----
    # Train on a JSON snapshot ({"cves": [...]}) or a flat CSV
    threat-rl train data/cves.json
    threat-rl train data/cves.csv --progressive --report out/report.json

    # Same flow on the bundled seed corpus
    threat-rl demo

    # Serve the JSON API
    threat-rl serve --host 0.0.0.0 --port 5000

    # Write the seed corpus as a snapshot file
    threat-rl export-seed data/seed.json

Environment: see threat_rl/config.py (THREAT_RL_*).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import Settings
from .corpus import Corpus
from .engine import SeverityEngine
from .errors import CorpusLoadError, ThreatRLError
from .evaluation import evaluate, generate_text_report
from .logging_config import setup_logging
from .seed import seed_corpus

logger = logging.getLogger(__name__)

DEFAULT_PREDICTION_LIMIT = 10


def load_corpus(path) -> Corpus:
    """JSON snapshot, or CSV with the flat columns of Corpus.to_dataframe()."""
    path = Path(path)
    try:
        if path.suffix.lower() == ".csv":
            import pandas as pd

            frame = pd.read_csv(path)
            return Corpus.from_dataframe(frame)
        text = path.read_text(encoding="utf-8")
    except ValueError as exc:
        # pandas EmptyDataError / ParserError and UnicodeDecodeError
        raise CorpusLoadError(f"Cannot read corpus file {path}: {exc}", cause=exc)
    return Corpus.from_snapshot(text)


# ── Commands ──────────────────────────────────────────────────────────────────

def run_training(engine: SeverityEngine, progressive: bool, limit: int, report_path=None) -> dict:
    progress = engine.train_progressive() if progressive else []
    summary = engine.train_full()
    stats = engine.model_stats()
    predictions = engine.predict_all()
    metrics = evaluate(predictions)

    print(f"\n  Full training: {summary.accuracy*100:.2f}% on {summary.sample_count} samples")
    print(generate_text_report(stats, metrics, progress))

    if limit > 0:
        print(f"\n  First {min(limit, len(predictions))} predictions:")
        for p in predictions[:limit]:
            truth = p.ground_truth_severity.value if p.ground_truth_severity else "-"
            mark = {True: "✓", False: "✗", None: " "}[p.was_correct]
            print(f"    {mark} {p.id:<18} {p.predicted_severity.value:<9} "
                  f"conf={p.confidence:.3f}  truth={truth}")

    report = {
        "summary":           summary.to_dict(),
        "learning_progress": [w.to_dict() for w in progress],
        "stats":             stats.to_dict(),
        "metrics":           metrics,
        "predictions":       [p.to_dict() for p in predictions],
    }
    if report_path:
        report_path = Path(report_path)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"\nSaved JSON report  → {report_path}")
    return report


def cmd_train(args, settings: Settings) -> int:
    corpus = load_corpus(args.corpus)
    logger.info("[CLI] Loaded %d records from %s", len(corpus), args.corpus)
    engine = SeverityEngine(settings=settings, corpus=corpus)
    run_training(engine, args.progressive, args.limit, args.report)
    return 0


def cmd_demo(args, settings: Settings) -> int:
    engine = SeverityEngine(settings=settings, corpus=seed_corpus())
    run_training(engine, progressive=True, limit=args.limit, report_path=args.report)
    return 0


def cmd_serve(args, settings: Settings) -> int:
    from .api import create_app

    engine = SeverityEngine(settings=settings)
    if args.seed:
        engine.import_corpus(seed_corpus().to_snapshot())
    app = create_app(engine, settings)
    host = args.host or settings.api_host
    port = args.port or settings.api_port
    print("=" * 60)
    print(f"  threat-rl API on http://{host}:{port}")
    print("=" * 60)
    app.run(host=host, port=port)
    return 0


def cmd_export_seed(args, settings: Settings) -> int:
    path = Path(args.path)
    path.parent.mkdir(parents=True, exist_ok=True)
    snapshot = seed_corpus().to_snapshot()
    path.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
    print(f"Saved {len(snapshot['cves'])} CVEs → {path}")
    return 0


# ── Main ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="threat-rl",
        description="CVE severity prediction from social engagement",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_train = sub.add_parser("train", help="Train on a corpus file")
    p_train.add_argument("corpus", help="JSON snapshot or CSV file")
    p_train.add_argument(
        "--progressive", action="store_true",
        help="Run the 4-week progressive replay before the full retrain",
    )
    p_train.add_argument("--report", help="Write a JSON report to this path")
    p_train.add_argument(
        "--limit", type=int, default=DEFAULT_PREDICTION_LIMIT,
        help="Predictions to print (0 = none)",
    )
    p_train.set_defaults(func=cmd_train)

    p_demo = sub.add_parser("demo", help="Train on the bundled seed corpus")
    p_demo.add_argument("--report", help="Write a JSON report to this path")
    p_demo.add_argument("--limit", type=int, default=DEFAULT_PREDICTION_LIMIT)
    p_demo.set_defaults(func=cmd_demo)

    p_serve = sub.add_parser("serve", help="Run the Flask JSON API")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    p_serve.add_argument("--seed", action="store_true", help="Start with the seed corpus loaded")
    p_serve.set_defaults(func=cmd_serve)

    p_export = sub.add_parser("export-seed", help="Write the seed corpus snapshot")
    p_export.add_argument("path")
    p_export.set_defaults(func=cmd_export_seed)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env()
        setup_logging(settings.log_level_value, settings.log_file)
        return args.func(args, settings)
    except ThreatRLError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
