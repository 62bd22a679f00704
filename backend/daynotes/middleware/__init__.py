# Middleware package init
"""
DayNotes Backend — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is set before the access logger reads it, and the
    access logger sees the final status code on the way back out.
"""
