"""Error taxonomy shared by the client, the stages and the request handler."""
from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    TRANSPORT = "transport"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_STATUS = "upstream_status"
    UPSTREAM_PARSE = "upstream_parse"
    CONFIG = "config"


class CodegenError(Exception):
    """Base error. ``kind`` tags the failure; ``status_code`` is the HTTP mapping."""

    kind: ErrorKind
    status_code: int = 500


class ValidationError(CodegenError):
    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, message: str = "Missing required fields: prompt, language, or taskType") -> None:
        super().__init__(message)


class MethodNotAllowedError(CodegenError):
    kind = ErrorKind.METHOD_NOT_ALLOWED
    status_code = 405

    def __init__(self, method: str) -> None:
        super().__init__("Method not allowed")
        self.method = method


class TransportError(CodegenError):
    """Network-level failure reaching an upstream, after retries."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, upstream: str, attempts: int, cause: Exception) -> None:
        super().__init__(f"{upstream} API request failed after {attempts} attempt(s): {cause}")
        self.upstream = upstream
        self.attempts = attempts


class RetryExhaustedError(CodegenError):
    """Every attempt was answered with HTTP 429."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, upstream: str, attempts: int) -> None:
        super().__init__(f"{upstream} API rate limit: retries exhausted after {attempts} attempt(s)")
        self.upstream = upstream
        self.attempts = attempts


class UpstreamStatusError(CodegenError):
    kind = ErrorKind.UPSTREAM_STATUS

    def __init__(self, upstream: str, status: int, reason: str = "") -> None:
        detail = f"{status} {reason}".strip()
        super().__init__(f"{upstream} API error: {detail}")
        self.upstream = upstream
        self.status = status


class UpstreamParseError(CodegenError):
    kind = ErrorKind.UPSTREAM_PARSE

    def __init__(self, upstream: str, detail: str) -> None:
        super().__init__(f"Malformed {upstream} API response: {detail}")
        self.upstream = upstream


class ConfigError(CodegenError):
    kind = ErrorKind.CONFIG
