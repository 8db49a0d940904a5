from flask import Blueprint, current_app, jsonify, make_response, render_template, request
from sqlalchemy.exc import SQLAlchemyError

from stateflare.origin import InvalidUrl, normalize_site_origin
from stateflare.stats import get_stats, record_visit
from stateflare.visitor import request_visitor_hash

bp = Blueprint("main", __name__)

SERVICE_BANNER = "Stateflare - Visitor Counter Service"


def _public_base_url() -> str:
    configured = (current_app.config.get("PUBLIC_BASE_URL") or "").strip()
    if configured:
        return configured.rstrip("/")
    return request.host_url.rstrip("/")


def _request_referrer():
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        referrer = payload.get("referrer")
        if isinstance(referrer, str) and referrer.strip():
            return referrer.strip()
    return request.headers.get("Referer") or request.headers.get("Referrer")


@bp.route("/")
def index():
    response = make_response(SERVICE_BANNER)
    response.mimetype = "text/plain"
    return response


@bp.route("/track.js")
def track_script():
    script = render_template("track.js", track_url=f"{_public_base_url()}/track")
    response = make_response(script)
    response.headers["Content-Type"] = "application/javascript; charset=utf-8"
    response.headers["Cache-Control"] = f"public, max-age={current_app.config['TRACK_SCRIPT_MAX_AGE']}"
    response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
    return response


@bp.route("/track", methods=["POST"])
def track():
    referrer = _request_referrer()
    if not referrer:
        current_app.logger.info("Rejected track request without referrer")
        return jsonify({"error": "No referrer provided"}), 400

    try:
        site_origin = normalize_site_origin(referrer)
    except InvalidUrl:
        current_app.logger.info("Rejected track request with invalid referrer")
        return jsonify({"error": "Invalid referrer"}), 400

    visitor = request_visitor_hash(request, current_app.config.get("TRUST_FORWARDED_HEADERS", True))

    try:
        counts = record_visit(site_origin, visitor)
    except SQLAlchemyError:
        current_app.logger.exception("Failed to record visit for %s", site_origin)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(counts.as_dict())


@bp.route("/stats")
def stats():
    site_origin = (request.args.get("site") or "").strip()
    if not site_origin:
        return jsonify({"error": "Site parameter required"}), 400

    try:
        counts = get_stats(site_origin)
    except SQLAlchemyError:
        current_app.logger.exception("Failed to read stats for %s", site_origin)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(counts.as_dict())
