"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display, seeded with the assistant welcome message
    - Document upload with removable pending attachments
    - Disabling sends while one is in flight

Contains minimal business logic. Delegates all operations to the API.
"""
