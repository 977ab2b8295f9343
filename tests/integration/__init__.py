"""Integration tests for the HTTP API.

Real FastAPI app, real multipart parsing and request validation; only the
remote model is replaced.

Coverage:
    - POST /chat and the session endpoints
    - POST /documents/capture
    - GET /health
"""
