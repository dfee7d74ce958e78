"""BridgeX Resilience Package — request retry, error classification, and structured logging.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
