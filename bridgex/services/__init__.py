"""Services Layer — error handling and bridge API call sites.

Invariants:
    - Services wire infrastructure together; infrastructure never imports services
"""
