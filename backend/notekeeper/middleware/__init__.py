# Middleware package init
"""
Notekeeper Backend: Middleware Package
=======================================

What:  Cross-cutting concerns applied to requests.

Middleware Chain (execution order):
    Request → [CORS] → [Request ID] → [Logging] → [Auth Rate Limit] → Router

    1. CORS: preflight handling and CORS headers on every response
    2. Request ID: correlation id for logs and error bodies
    3. Logging: one access line per request, with the resolved user
    4. Auth Rate Limit: reject credential floods before any handler work

Access control (auth.py) is not ASGI middleware: it is a router-level
FastAPI dependency, so it runs after routing and only for protected routers.
"""
