from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests


@dataclass
class AppError(Exception):
    code: str
    message: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        return self.message


class ConfigurationError(AppError):
    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__("config_error", message, data or {})


class ToolValidationError(AppError):
    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__("invalid_params", message, data or {})


class UnknownToolError(AppError):
    def __init__(self, name: str):
        super().__init__("method_not_found", f"Unknown tool: {name}", {"tool": name})


def classify_exception(e: Exception) -> AppError:
    """
    Map transport / API issues into stable error codes for logs.
    """
    if isinstance(e, AppError):
        return e

    if isinstance(e, requests.HTTPError) and e.response is not None:
        status = e.response.status_code
        if status == 429:
            return AppError("rate_limited", str(e), {"status": status})
        if status in (401, 403):
            return AppError("auth_error", str(e), {"status": status})
        if status == 404:
            return AppError("not_found", str(e), {"status": status})
        return AppError("http_error", str(e), {"status": status})
    if isinstance(e, requests.Timeout):
        return AppError("timeout", str(e), {})
    if isinstance(e, requests.ConnectionError):
        return AppError("network_error", str(e), {})

    err_str = str(e).lower()

    if "rate limit" in err_str or "429" in err_str:
        return AppError("rate_limited", str(e), {})
    if "timeout" in err_str or "timed out" in err_str:
        return AppError("timeout", str(e), {})
    if "api key" in err_str or "unauthorized" in err_str or "forbidden" in err_str:
        return AppError("auth_error", str(e), {})
    if "not found" in err_str:
        return AppError("not_found", str(e), {})
    if "network" in err_str or "connection" in err_str:
        return AppError("network_error", str(e), {})

    return AppError("unknown_error", str(e), {})
