"""Core Layer — pure domain types: error taxonomy and log record types.

Invariants:
    - No I/O and no imports from infrastructure/ or services/
"""
