"""
SnipShare — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [Security Headers]
            → [GZip] → [Session] → Route Handler

    1. Rate Limit FIRST: throttle form floods (password guessing) before any work
    2. Request ID: correlation id for every log line of the request
    3. Logging: method, path, status, duration
    4. Security Headers: browser hardening on every response, error pages included
    5. Session: signed cookie decoded into request.session for the handlers
"""
