# threat_rl/api.py

"""
Flask JSON API around one SeverityEngine.

API Endpoints:
  POST /api/rl/train              - Full retrain on the current corpus
  POST /api/rl/train-progressive  - Progressive (4-week) replay + learning curve
  GET  /api/rl/predictions        - Predictions for the corpus (?limit=N)
  GET  /api/rl/stats              - Model stats + engine state
  GET  /api/rl/corpus             - Export the corpus snapshot
  PUT  /api/rl/corpus             - Replace the corpus with the body snapshot
  POST /api/rl/load               - Import, progressive train, full train, report
  POST /api/rl/predict            - Classify ad-hoc records (not stored)
  GET  /api/rl/report             - Evaluation metrics for the current beliefs
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import Settings
from .corpus import parse_record
from .engine import SeverityEngine
from .errors import CorpusLoadError
from .evaluation import evaluate

logger = logging.getLogger(__name__)

LOAD_PREVIEW_LIMIT = 30


def create_app(engine: SeverityEngine | None = None, settings: Settings | None = None) -> Flask:
    settings = settings or (engine.settings if engine is not None else Settings())
    engine = engine or SeverityEngine(settings=settings)

    app = Flask(__name__)
    CORS(app)
    app.config['MAX_CONTENT_LENGTH'] = settings.max_content_mb * 1024 * 1024

    # ── Training ──────────────────────────────────────────────────────────────

    @app.route('/api/rl/train', methods=['POST'])
    def train():
        summary = engine.train_full()
        return jsonify({
            'success': True,
            **summary.to_dict(),
            'state':   engine.state.value,
        })

    @app.route('/api/rl/train-progressive', methods=['POST'])
    def train_progressive():
        progress = engine.train_progressive()
        return jsonify({
            'success':           True,
            'learning_progress': [w.to_dict() for w in progress],
            'state':             engine.state.value,
        })

    # ── Read ──────────────────────────────────────────────────────────────────

    @app.route('/api/rl/predictions', methods=['GET'])
    def predictions():
        limit = request.args.get('limit', type=int)
        if limit is not None and limit < 0:
            return jsonify({'success': False, 'error': 'limit must be >= 0'}), 400
        preds = engine.predict_all()
        total = len(preds)
        if limit is not None:
            preds = preds[:limit]
        return jsonify({
            'success':     True,
            'total':       total,
            'predictions': [p.to_dict() for p in preds],
        })

    @app.route('/api/rl/stats', methods=['GET'])
    def stats():
        return jsonify({
            'success':     True,
            'state':       engine.state.value,
            'corpus_size': engine.corpus_size(),
            **engine.model_stats().to_dict(),
        })

    @app.route('/api/rl/report', methods=['GET'])
    def report():
        metrics = evaluate(engine.predict_all())
        return jsonify({'success': True, 'metrics': metrics})

    # ── Corpus ────────────────────────────────────────────────────────────────

    @app.route('/api/rl/corpus', methods=['GET'])
    def export_corpus():
        return jsonify({'success': True, **engine.export_corpus()})

    @app.route('/api/rl/corpus', methods=['PUT'])
    def import_corpus():
        snapshot = request.get_json(silent=True)
        if snapshot is None:
            return jsonify({'success': False, 'error': 'JSON body required'}), 400
        count = engine.import_corpus(snapshot)
        return jsonify({
            'success':     True,
            'corpus_size': count,
            'state':       engine.state.value,
        })

    @app.route('/api/rl/load', methods=['POST'])
    def load():
        snapshot = request.get_json(silent=True)
        if snapshot is None:
            return jsonify({'success': False, 'error': 'JSON body required'}), 400

        with engine.lock:
            engine.import_corpus(snapshot)
            progress = engine.train_progressive()
            engine.train_full()
            model_stats = engine.model_stats()
            preds = engine.predict_all()

        return jsonify({
            'success':           True,
            'message':           f'Loaded {engine.corpus_size()} CVEs',
            'stats':             model_stats.to_dict(),
            'predictions':       [p.to_dict() for p in preds[:LOAD_PREVIEW_LIMIT]],
            'learning_progress': [w.to_dict() for w in progress],
        })

    @app.route('/api/rl/predict', methods=['POST'])
    def predict():
        body = request.get_json(silent=True)
        if body is None:
            return jsonify({'success': False, 'error': 'JSON body required'}), 400

        if isinstance(body, dict) and isinstance(body.get('cves'), list):
            raw_records = body['cves']
        elif isinstance(body, list):
            raw_records = body
        else:
            raw_records = [body]

        records = []
        for index, raw in enumerate(raw_records):
            if isinstance(raw, dict) and not any(k in raw for k in ('id', 'cve_id', 'cveId')):
                raw = {**raw, 'id': f'adhoc-{index + 1}'}
            records.append(parse_record(raw, index))

        return jsonify({
            'success':     True,
            'predictions': [engine.predict(r).to_dict() for r in records],
        })

    # ── Errors ────────────────────────────────────────────────────────────────

    @app.errorhandler(CorpusLoadError)
    def handle_corpus_error(e):
        logger.warning("[API] Rejected corpus: %s", e.message)
        return jsonify({'success': False, 'error': e.message, 'details': e.details}), 400

    @app.errorhandler(413)
    def handle_too_large(e):
        return jsonify({
            'success': False,
            'error':   f'Request body exceeds {settings.max_content_mb} MB',
        }), 413

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'error': e.description}), e.code
        logger.exception("[API] Unhandled error")
        return jsonify({'success': False, 'error': str(e)}), 500

    logger.info("[API] App created (corpus=%d, state=%s)", engine.corpus_size(), engine.state.value)
    return app
