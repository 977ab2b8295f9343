"""FastAPI endpoints for the FinanceAI chat service.

HTTP routes with async request handling.

Endpoints:
    - GET /health: Service health status
    - POST /chat: Send a message with optional attached documents
    - POST /documents/capture: Read uploaded files into attachable documents
    - GET /sessions/{id}: Chat session history
    - DELETE /sessions/{id}: Start over with a new conversation
"""

from financeai.api.app import app, create_app

__all__ = ["app", "create_app"]
