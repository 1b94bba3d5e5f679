from __future__ import annotations

from typing import Any

from flask import jsonify


class ApiResponse:
    """Success envelope: {statusCode, data, message, success}."""

    def __init__(self, status_code: int, data: Any = None, message: str = "Success"):
        self.status_code = status_code
        self.data = data if data is not None else {}
        self.message = message
        self.success = status_code < 400

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "data": self.data,
            "message": self.message,
            "success": self.success,
        }

    def to_response(self):
        return jsonify(self.to_dict()), self.status_code
