"""Observability module for mesoswatch.

Provides structured logging with the watched agent and endpoint bound
to every record.
"""

from mesoswatch.observability.logging import (
    LogContext,
    agent_ip_var,
    configure_logging,
    endpoint_var,
)

__all__ = [
    "configure_logging",
    "LogContext",
    "agent_ip_var",
    "endpoint_var",
]
