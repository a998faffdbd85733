"""
Storyboard Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [Session] → [CORS] → Route Handler

    The request ID is assigned first so the access log line and any error
    response carry it. Sessions and CORS come from Starlette and are wired
    in storyboard.main.
"""
