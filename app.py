"""Flask web application for the ETH yields aggregator.

Provides the REST endpoint the dashboard reads its opportunities from.
"""

from flask import Flask, jsonify
from flask_cors import CORS

from aggregator import get_aggregator
from config import CACHE_CONTROL

app = Flask(__name__)
CORS(app)


# =============================================================================
# API Routes
# =============================================================================

@app.route("/api/yields", methods=["GET"])
def api_yields():
    """Get the aggregated ETH yield opportunities.

    Sources that fail are left out (or replaced by the fallback catalog), so
    this endpoint answers 200 even when every upstream is down.

    Returns:
        JSON with updatedAt, opportunities and per-source status
    """
    result = get_aggregator().assemble()
    response = jsonify(result.to_dict())
    response.headers["Cache-Control"] = CACHE_CONTROL
    return response


@app.route("/api/sources", methods=["GET"])
def api_sources():
    """Get cumulative success/failure counts per source.

    Returns:
        JSON with a counters mapping
    """
    return jsonify({
        "counters": get_aggregator().counters(),
    })
