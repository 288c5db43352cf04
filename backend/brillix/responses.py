# Overview: JSON envelope shared by every route: {success, message?, data?, errors?}.

from __future__ import annotations

from flask import jsonify


def success_response(data: dict | None = None, message: str | None = None, status: int = 200):
    body: dict = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def error_response(message: str, status: int, errors: list | None = None, **extra):
    body: dict = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return jsonify(body), status
