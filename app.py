# app.py
"""
MediLens Flask API (full).
Features:
 - Medicine package scan: Google Cloud Vision OCR + Gemini enrichment
 - Symptom diagnosis via Gemini with canned fallback
 - Supabase auth (register / login / logout, bearer tokens)
 - Supabase persistence: scan & diagnosis history, dashboard, user profile
 - Health endpoint for uptime monitoring

Run locally:
    flask --app app run
"""

import base64
import os
import logging
import time
from functools import wraps

from flask import Blueprint, Flask, current_app, g, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

import auth_utils
import records
from ai import DiagnosisClient, GenerativeLanguageClient, MedicineInfoClient, VisionClient
from config import Config
from errors import InvalidRequest, ServiceError
from models import DiagnosisRequest, DiagnosisResult, ScanResult
from profile_service import ProfileService

logger = logging.getLogger(__name__)

limiter = Limiter(get_remote_address, default_limits=[Config.RATE_LIMIT_DEFAULT])
api = Blueprint("api", __name__)


def _ai_limit():
    return current_app.config["RATE_LIMIT_AI"]


# ============================================================
# App factory
# ============================================================
def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    origins = app.config["CORS_ORIGINS"]
    CORS(app, origins="*" if origins == "*" else [o.strip() for o in origins.split(",") if o.strip()])
    limiter.init_app(app)

    llm = GenerativeLanguageClient(
        api_key=app.config["GOOGLE_AI_STUDIO_API_KEY"],
        model=app.config["GEMINI_MODEL"],
        api_base=app.config["GEMINI_API_BASE"],
        timeout=app.config["HTTP_TIMEOUT"],
    )
    app.extensions["vision_client"] = VisionClient(
        api_key=app.config["GOOGLE_CLOUD_VISION_API_KEY"],
        api_url=app.config["VISION_API_URL"],
        medicine_client=MedicineInfoClient(llm),
        timeout=app.config["HTTP_TIMEOUT"],
    )
    app.extensions["diagnosis_client"] = DiagnosisClient(llm)
    # Swappable so tests can run without a Supabase project
    app.extensions["supabase_anon"] = auth_utils.get_supabase
    app.extensions["supabase_user"] = auth_utils.client_for_token

    app.register_blueprint(api)

    if not app.config["GOOGLE_CLOUD_VISION_API_KEY"]:
        logger.warning("GOOGLE_CLOUD_VISION_API_KEY not set; scans will return the not-detected result.")
    if not app.config["GOOGLE_AI_STUDIO_API_KEY"]:
        logger.warning("GOOGLE_AI_STUDIO_API_KEY not set; AI answers will use fallbacks.")
    return app


# ============================================================
# Auth helpers
# ============================================================
def _bearer_token():
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return None


def require_user(view):
    """Resolve the bearer token to a user and a per-user Supabase client."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Missing bearer token."}), 401

        anon = current_app.extensions["supabase_anon"]()
        user = auth_utils.get_user_from_token(token, client=anon)
        if user is None:
            return jsonify({"error": "Invalid or expired session. Please sign in again."}), 401

        g.user_id = user.id
        g.supabase = current_app.extensions["supabase_user"](
            token, request.headers.get("X-Refresh-Token")
        )
        return view(*args, **kwargs)
    return wrapper


@api.errorhandler(ServiceError)
def handle_service_error(e):
    return jsonify({"error": e.message}), 500


@api.errorhandler(InvalidRequest)
def handle_invalid_request(e):
    return jsonify({"error": e.message}), 400


def _json_body():
    """The request's JSON object; a missing or unparsable body reads as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object.")
    return data


def _text(data, key):
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidRequest(f"'{key}' must be a string.")
    return value


def _limit_arg(default):
    try:
        return max(1, min(100, int(request.args.get("limit", default))))
    except (TypeError, ValueError):
        return default


# ============================================================
# Routes - health, auth
# ============================================================
@api.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "time": time.time()}), 200


@api.route("/auth/register", methods=["POST"])
def register():
    data = _json_body()
    email = _text(data, "email").strip()
    password = _text(data, "password")
    if not email or not password:
        return jsonify({"error": "Please enter your email and password."}), 400

    result = auth_utils.register_user(email, password, client=current_app.extensions["supabase_anon"]())
    if result["error"]:
        return jsonify(result), 400
    return jsonify(result), 201


@api.route("/auth/login", methods=["POST"])
def login():
    data = _json_body()
    email = _text(data, "email").strip()
    password = _text(data, "password")
    if not email or not password:
        return jsonify({"error": "Please enter your email and password."}), 400

    result = auth_utils.login_user(email, password, client=current_app.extensions["supabase_anon"]())
    if result["error"]:
        return jsonify(result), 401
    return jsonify(result), 200


@api.route("/auth/logout", methods=["POST"])
@require_user
def logout():
    auth_utils.logout_user(client=g.supabase)
    return jsonify({"ok": True}), 200


# ============================================================
# Routes - medicine scan & diagnosis
# ============================================================
def _read_image():
    """(base64 image, image reference) from a multipart upload or a JSON body."""
    uploaded = request.files.get("file")
    if uploaded and uploaded.filename:
        content = uploaded.read()
        image_url = request.form.get("image_url") or uploaded.filename
        return base64.b64encode(content).decode("ascii") if content else "", image_url

    data = _json_body()
    return _text(data, "image_base64"), _text(data, "image_url") or None


@api.route("/scan", methods=["POST"])
@limiter.limit(_ai_limit)
@require_user
def scan():
    image_b64, image_url = _read_image()
    if not image_b64:
        return jsonify({"error": "Please select an image of the medicine package."}), 400

    info = current_app.extensions["vision_client"].analyze_medicine(image_b64)
    payload = info.to_dict()

    # a failed save must not hide the result from the user
    try:
        saved = records.save_scan_result(g.supabase, ScanResult.from_medicine_info(g.user_id, info, image_url))
        payload.update({"scan_id": saved.id, "saved": True})
    except ServiceError as e:
        logger.warning("Scan result not saved for %s: %s", g.user_id, e.message)
        payload.update({"scan_id": None, "saved": False})

    return jsonify(payload), 200


@api.route("/diagnosis", methods=["POST"])
@limiter.limit(_ai_limit)
@require_user
def diagnosis():
    data = _json_body()
    diagnosis_request = DiagnosisRequest(
        symptoms=_text(data, "symptoms").strip(),
        diet=_text(data, "diet").strip(),
        location=_text(data, "location").strip(),
    )
    if not diagnosis_request.symptoms:
        return jsonify({"error": "Please describe your symptoms."}), 400

    result = current_app.extensions["diagnosis_client"].get_diagnosis(diagnosis_request)
    payload = result.to_dict()

    try:
        saved = records.save_diagnosis_result(
            g.supabase, DiagnosisResult.from_response(g.user_id, diagnosis_request, result)
        )
        payload.update({"diagnosis_id": saved.id, "saved": True})
    except ServiceError as e:
        logger.warning("Diagnosis result not saved for %s: %s", g.user_id, e.message)
        payload.update({"diagnosis_id": None, "saved": False})

    return jsonify(payload), 200


# ============================================================
# Routes - dashboard & history
# ============================================================
@api.route("/dashboard", methods=["GET"])
@require_user
def dashboard():
    activity = records.recent_activity(g.supabase, g.user_id, limit=5)
    return jsonify({"recent_activity": activity}), 200


@api.route("/history/scans", methods=["GET"])
@require_user
def scan_history():
    scans = records.list_scan_results(g.supabase, g.user_id, limit=_limit_arg(20))
    return jsonify({"count": len(scans), "results": [s.to_dict() for s in scans]}), 200


@api.route("/history/diagnoses", methods=["GET"])
@require_user
def diagnosis_history():
    results = records.list_diagnosis_results(g.supabase, g.user_id, limit=_limit_arg(20))
    return jsonify({"count": len(results), "results": [r.to_dict() for r in results]}), 200


# ============================================================
# Routes - profile & account
# ============================================================
@api.route("/profile", methods=["GET"])
@require_user
def get_profile():
    profile = ProfileService(g.supabase).get_profile(g.user_id)
    return jsonify(profile.to_dict()), 200


@api.route("/profile", methods=["PUT"])
@require_user
def update_profile():
    data = _json_body()
    profile = ProfileService(g.supabase).update_profile(g.user_id, data)
    return jsonify(profile.to_dict()), 200


@api.route("/account/email", methods=["PUT"])
@require_user
def update_email():
    data = _json_body()
    new_email = _text(data, "email").strip()
    if not new_email:
        return jsonify({"error": "Please enter a new email address."}), 400
    ProfileService(g.supabase).update_email(new_email)
    return jsonify({"ok": True}), 200


@api.route("/account/password", methods=["PUT"])
@require_user
def update_password():
    data = _json_body()
    new_password = _text(data, "password")
    if not new_password:
        return jsonify({"error": "Please enter a new password."}), 400
    ProfileService(g.supabase).update_password(new_password)
    return jsonify({"ok": True}), 200


# ============================================================
# Run
# ============================================================
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "False") == "True")
