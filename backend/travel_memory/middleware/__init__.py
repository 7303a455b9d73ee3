"""
TravelMemory Backend — Middleware Package
==========================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → Route Handler

    CORS is outermost so preflight OPTIONS requests are answered before any
    other processing, and routed responses (including the 4xx/5xx bodies of
    the application exception handlers) carry Access-Control-Allow-Origin.
"""
