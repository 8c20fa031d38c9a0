"""Observability package.

Structured JSON logging, request-scoped context, in-process metrics, the ASGI
middleware that ties them together, and the audit file writer for vendor calls.
"""

__all__ = [
    "audit",
    "context",
    "logger",
    "metrics",
    "middleware",
]
