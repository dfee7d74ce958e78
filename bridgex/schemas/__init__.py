"""Pydantic Schemas — request/response validation at the bridge API boundary."""
