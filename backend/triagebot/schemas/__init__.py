"""Pydantic Schemas - webhook payloads and repository configuration.

Invariants:
    - Schemas validate at the system boundary (webhook bodies, triagebot.toml)
    - Unknown fields are ignored so upstream payload growth never breaks parsing
"""
