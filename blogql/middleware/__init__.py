# Middleware package init
"""
BlogQL — Middleware Package
============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Auth] → [CORS] → Route Handler

    1. Request ID: correlation ID for every log line of the request
    2. Logging: method, path, status and duration with the request ID
    3. Auth: attaches the AuthContext (never rejects)
    4. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)
"""
