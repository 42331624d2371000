"""
Patricia Trie Service — a REST API over a shared Patricia trie.

Exposes the compressed trie from :mod:`patricia` as a JSON API with
endpoints for adding, removing and testing keys, prefix enumeration and a
plain-text dump of the tree shape. Built with Flask.

The trie is not safe for concurrent access, so every request takes one
process-wide lock before touching it.
"""

from __future__ import annotations

import logging
import os
import threading
import time

from flask import Blueprint, Flask, Response, current_app, jsonify, request

from patricia import PatriciaTrie

logger = logging.getLogger("patricia-service")
bp = Blueprint("patricia", __name__)

DEFAULT_MAX_KEY_LENGTH = 256
DEFAULT_PREFIX_LIMIT = 25

# Seed with sample data so the service is useful out-of-the-box
_SEED_WORDS = [
    "algorithm", "api", "application", "array", "authentication",
    "binary", "branch", "buffer", "build", "byte",
    "cache", "callback", "class", "client", "compiler",
    "container", "database", "debug", "deploy", "docker",
    "endpoint", "exception", "flask", "function", "gateway",
    "graph", "hash", "heap", "index", "interface",
    "kernel", "lambda", "memory", "node", "parser",
    "patricia", "pipeline", "pointer", "prefix", "process",
    "queue", "radix", "recursion", "request", "response",
    "router", "runtime", "schema", "server", "socket",
    "stack", "stream", "thread", "token", "tree",
    "trie", "tuple", "variable", "version", "worker",
]


def _config_from_env() -> dict:
    config = {
        "MAX_KEY_LENGTH": int(
            os.environ.get("PATRICIA_MAX_KEY_LENGTH", DEFAULT_MAX_KEY_LENGTH)
        ),
        "SEED_WORDS": list(_SEED_WORDS),
    }
    seed = os.environ.get("PATRICIA_SEED_WORDS")
    if seed is not None:
        config["SEED_WORDS"] = [w.strip() for w in seed.split(",") if w.strip()]
    return config


def create_app(config: dict | None = None) -> Flask:
    """Build the Flask app with its own trie, seeded from the config."""
    app = Flask(__name__)
    app.config.update(_config_from_env())
    if config:
        app.config.update(config)

    trie = PatriciaTrie()
    for word in app.config["SEED_WORDS"]:
        trie.add(word)
    logger.info("Seeded trie with %d words", len(trie))

    app.extensions["patricia"] = {
        "trie": trie,
        "lock": threading.Lock(),
        "started": time.time(),
        "seeded": len(trie),
    }
    app.register_blueprint(bp)
    return app


def _state() -> dict:
    return current_app.extensions["patricia"]


def _query_key() -> str:
    return request.args.get("q", "").strip()


def _missing(name: str):
    return jsonify({"error": f"Missing {name}"}), 400


# ── Health & Info ─────────────────────────────────────────────────────

@bp.route("/")
def index():
    """Landing page with API documentation."""
    return jsonify({
        "service": "Patricia Trie Service",
        "version": "1.0.0",
        "description": "REST API over a space-optimized Patricia (radix) trie",
        "endpoints": {
            "GET  /":                  "This help page",
            "GET  /health":            "Health check",
            "GET  /stats":             "Trie statistics",
            "GET  /contains?q=<key>":  "Exact membership test",
            "GET  /prefix?q=<pfx>":    "All keys starting with prefix",
            "GET  /tree":              "Plain-text rendering of the tree",
            "POST /add":               "Add a key  {\"key\": \"...\"}",
            "DELETE /remove?q=<key>":  "Remove a key",
        },
    })


@bp.route("/health")
def health():
    """Liveness / readiness probe."""
    state = _state()
    with state["lock"]:
        size = state["trie"].size()
    return jsonify({
        "status": "healthy",
        "uptime_seconds": round(time.time() - state["started"], 2),
        "trie_size": size,
    })


@bp.route("/stats")
def stats():
    state = _state()
    with state["lock"]:
        size = state["trie"].size()
    return jsonify({
        "total_keys": size,
        "uptime_seconds": round(time.time() - state["started"], 2),
        "seed_words": state["seeded"],
    })


# ── Core API ──────────────────────────────────────────────────────────

@bp.route("/contains")
def contains():
    """Exact key lookup."""
    q = _query_key()
    if not q:
        return _missing("query parameter 'q'")
    state = _state()
    with state["lock"]:
        found = state["trie"].contains(q)
    return jsonify({"key": q, "found": found})


@bp.route("/prefix")
def prefix():
    """Return keys sharing a given prefix, in sorted order."""
    q = _query_key()
    limit = request.args.get("limit", DEFAULT_PREFIX_LIMIT, type=int)
    if limit is None or limit < 1:
        limit = DEFAULT_PREFIX_LIMIT
    if not q:
        return _missing("query parameter 'q'")

    state = _state()
    matches: list[str] = []
    with state["lock"]:
        for key in state["trie"].keys_with_prefix(q):
            matches.append(key)
            if len(matches) >= limit:
                break

    return jsonify({
        "prefix": q,
        "count": len(matches),
        "matches": matches,
    })


@bp.route("/add", methods=["POST"])
def add():
    """Add a key to the trie."""
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    key = body.get("key", "")
    if not isinstance(key, str):
        return jsonify({"error": "'key' must be a string"}), 400
    key = key.strip()

    if not key:
        return _missing("'key' in request body")
    max_len = current_app.config["MAX_KEY_LENGTH"]
    if len(key) > max_len:
        return jsonify({"error": f"Key too long (max {max_len} chars)"}), 400

    state = _state()
    with state["lock"]:
        added = state["trie"].add(key)
        size = state["trie"].size()
    if added:
        logger.info("Added key=%s", key)
    return jsonify({"key": key, "added": added, "trie_size": size}), (
        201 if added else 200
    )


@bp.route("/remove", methods=["DELETE"])
def remove():
    """Remove a key from the trie."""
    q = _query_key()
    if not q:
        return _missing("query parameter 'q'")

    state = _state()
    with state["lock"]:
        removed = state["trie"].remove(q)
        size = state["trie"].size()
    if removed:
        logger.info("Removed key=%s", q)
    status = 200 if removed else 404
    return jsonify({"key": q, "removed": removed, "trie_size": size}), status


@bp.route("/tree")
def tree():
    """Dump the current tree shape as plain text."""
    state = _state()
    with state["lock"]:
        text = state["trie"].render()
    return Response(text, mimetype="text/plain")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    app = create_app()
    port = int(os.environ.get("PORT", 8080))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    logger.info("Starting Patricia Trie Service on port %d", port)
    app.run(host="0.0.0.0", port=port, debug=debug)


if __name__ == "__main__":
    main()
