"""Test package for FinanceAI Chat.

Unit tests cover isolated logic, integration tests drive the FastAPI app
over ASGI with a scripted model client in place of the remote model.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP endpoint tests

Leverages pytest with pytest-check for soft assertions.
"""
