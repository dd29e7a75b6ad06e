# Middleware package init
"""
CuriousDog Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Rate limiting runs first so throttled clients cost nothing else. The
    request id is set before logging so access lines carry it. Authentication
    is NOT middleware: routes resolve the actor through a dependency
    (app.dependencies.get_current_actor).
"""
