"""Unit tests for individual components in isolation.

Coverage:
    - capture/: Text/base64 capture and batch accounting
    - prompting/: History projection and document block layout
    - dispatch/: Error classification and retry with backoff
    - conversation/: Append-only log and the send pipeline
    - agent/: Configuration and the Agno model client
    - ui/: Client-side chat state

Uses a scripted model client and a recording sleep, so no test waits or
reaches the network.
"""
