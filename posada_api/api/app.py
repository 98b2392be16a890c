"""
Flask application serving the market data endpoints as JSON.
"""

import logging
import time
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ..config.models import ApiConfig
from ..leaderboard import InvalidTradeReport
from ..market_system import MarketSystem

logger = logging.getLogger(__name__)


def create_app(config: Optional[ApiConfig] = None, system: Optional[MarketSystem] = None) -> Flask:
    """
    Create the API application.

    Args:
        config: API configuration (defaults are used if None)
        system: Pre-built market system, mainly for tests

    Returns:
        Configured Flask app
    """
    if system is None:
        system = MarketSystem(config or ApiConfig())

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config['MARKET_SYSTEM'] = system
    CORS(app, resources={r"/api/*": {"origins": "*"}}, methods=["GET", "POST"],
         allow_headers=["Content-Type"])

    @app.get('/api/health')
    def health():
        return jsonify({'status': 'ok', 'updated_at': int(system.clock())})

    @app.get('/api/tokens')
    def tokens():
        return jsonify(system.tokens.build_payload())

    @app.get('/api/movers')
    def movers():
        return jsonify(system.movers.build_payload())

    @app.get('/api/whales')
    def whales():
        return jsonify(system.whales.build_payload())

    @app.get('/api/backtest')
    def backtest():
        return jsonify(system.ohlcv.build_payload(
            unit=request.args.get('unit'),
            ticker=request.args.get('ticker'),
            interval=request.args.get('interval'),
            periods=request.args.get('periods'),
        ))

    @app.get('/api/leaderboard')
    def leaderboard():
        if request.args.get('view') == 'strategies':
            return jsonify(system.leaderboard.strategies())
        return jsonify(system.leaderboard.leaderboard())

    @app.post('/api/leaderboard')
    def report_trade():
        body = request.get_json(silent=True)
        try:
            result = system.leaderboard.record_trade(body)
        except InvalidTradeReport as e:
            return jsonify({'error': str(e)}), 400
        status = 200 if result.get('ok') else 503
        return jsonify(result), status

    @app.before_request
    def start_timer():
        request.environ['posada.started'] = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = request.environ.get('posada.started')
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            logger.debug(f"{request.method} {request.path} -> {response.status_code} in {elapsed_ms:.1f}ms")
        return response

    return app
