"""Infrastructure Layer — HTTP client, remote log delivery, process logging.

Invariants:
    - Infrastructure never imports from services/
    - All outbound calls wrapped with retry/timeout/error mapping
"""
