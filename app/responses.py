"""
JSON envelope helpers so every endpoint answers with the same shape:

    {"success": true, "data": ..., "message": ...}
    {"success": false, "error": "...", "errors": [...]}
"""

from flask import jsonify, request


def success_response(data=None, message=None, status_code=200, **extra):
    payload = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload), status_code


def error_response(message, status_code=400, errors=None):
    payload = {"success": False, "error": message}
    if errors:
        payload["errors"] = list(errors)
    return jsonify(payload), status_code


def validation_error_response(errors):
    return error_response("Validation failed.", 400, errors=errors)


def not_found_response(kind="Record"):
    return error_response(f"{kind} not found.", 404)


def get_json_payload():
    """The request body as a dict ({} when missing or not an object)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def client_info():
    """IP address and user agent recorded with public submissions."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip = forwarded.split(",")[0].strip() if forwarded else request.remote_addr
    return {
        "ip_address": ip,
        "user_agent": request.headers.get("User-Agent", ""),
    }
