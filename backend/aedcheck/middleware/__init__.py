# Middleware package init
"""
AEDCheck Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route

    The request ID exists before anything can answer, so 429 responses and
    their access log lines carry it too. CORS answers preflight requests
    closest to the routes.
"""
