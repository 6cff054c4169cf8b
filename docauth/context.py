"""
===============================================================================
CRC CARD: docauth/context.py (Per-request context)
===============================================================================

Responsibilities:
  - Keep request-scoped context in ContextVars (async-safe).
  - Let logs correlate by request without threading parameters everywhere.
  - Provide minimal helpers: set_request_context(), get_context_dict(),
    clear_context().

Collaborators:
  - docauth.crosscutting.middleware: sets request_id/method/path per request.
  - docauth.crosscutting.logger: enriches log lines via get_context_dict().

Constraints:
  - Only str values, "" means "not available".
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_METHOD: Final[str] = "method"
_CTX_PATH: Final[str] = "path"


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    """Set the minimal request context."""
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def get_context_dict() -> dict[str, str]:
    """Return the current context as a dict, skipping empty keys."""
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := http_method_var.get():
        ctx[_CTX_METHOD] = val
    if val := http_path_var.get():
        ctx[_CTX_PATH] = val

    return ctx


def clear_context() -> None:
    """Reset context at the end of a request so it does not leak."""
    request_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
