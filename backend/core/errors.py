from typing import Any, Dict, List, Optional


ERROR_CODES = {
    "UNAUTHORIZED": "UNAUTHORIZED",
    "NOT_FOUND": "NOT_FOUND",
    "INVALID_REQUEST": "INVALID_REQUEST",
    "RATE_LIMITED": "RATE_LIMITED",
    "INTERNAL_SERVER_ERROR": "INTERNAL_SERVER_ERROR",
    "CONFIGURATION_ERROR": "CONFIGURATION_ERROR",
    "UNHANDLED_ERROR": "UNHANDLED_ERROR",
}


def code_for_status(status_code: int) -> str:
    if status_code in (401, 403):
        return ERROR_CODES["UNAUTHORIZED"]
    if status_code == 404:
        return ERROR_CODES["NOT_FOUND"]
    if status_code == 429:
        return ERROR_CODES["RATE_LIMITED"]
    if 400 <= status_code < 500:
        return ERROR_CODES["INVALID_REQUEST"]
    return ERROR_CODES["INTERNAL_SERVER_ERROR"]


class SquareConfigError(RuntimeError):
    """Client is missing configuration it needs to talk to Square (e.g. the access token)."""

    code = ERROR_CODES["CONFIGURATION_ERROR"]


class SquareApiError(RuntimeError):
    """Non-2xx response from the Square API."""

    def __init__(self, status_code: int, errors: Optional[List[Dict[str, Any]]] = None, message: Optional[str] = None):
        self.status_code = status_code
        self.errors = errors or []
        first = self.errors[0] if self.errors else {}
        self.provider_code = first.get("code")
        detail = message or first.get("detail") or f"Square API request failed with status {status_code}"
        super().__init__(detail)

    @property
    def code(self) -> str:
        return code_for_status(self.status_code)

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


def error_envelope(code: str, message: str, details: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def success_envelope(data: Any = None) -> Dict[str, Any]:
    return {"success": True, "data": data}
