"""Observability module for structured logging."""

from .logging import (
    RefreshContext,
    get_logger,
    log_external_call_end,
    log_external_call_start,
    refresh_id_var,
    setup_logging,
    trigger_var,
)

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Context
    "RefreshContext",
    "refresh_id_var",
    "trigger_var",
    # Logging helpers
    "log_external_call_start",
    "log_external_call_end",
]
