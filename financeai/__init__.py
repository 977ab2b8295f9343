"""FinanceAI Chat - a financial assistant that reads attached documents.

Combines FastAPI for HTTP, Agno for the model call, NiceGUI for
visualization, and Pydantic for data validation.

Components:
    - capture: Reading attached files into text or base64 documents
    - prompting: System prompt and request assembly with document injection
    - dispatch: Model delivery with rate-limit retry and error classification
    - conversation: Session logs and the send pipeline
    - agent: Configuration and the Agno-backed model client
    - api: HTTP endpoints
    - ui: Web interface for chat interactions
    - models: Data model and request/response schemas
"""

__version__ = "0.1.0"
