"""Pydantic schemas for records and API payloads."""
