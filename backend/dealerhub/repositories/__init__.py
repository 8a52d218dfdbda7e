"""
Record stores.

Every entity is reached through the same ``Repository`` contract, backed
either by database tables or by the in-memory demo store.
"""
