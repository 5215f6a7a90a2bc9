"""
NoteShare Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - rate_limit.py:  per-IP sliding window, 429 + Retry-After
    - request_id.py:  X-Request-ID in and out, ContextVar for log lines
    - logging.py:     one access line per request on "noteshare.access"

Responses pass back through the chain in reverse, so the access log sees the
final status and duration, and every response carries X-Request-ID.
"""
