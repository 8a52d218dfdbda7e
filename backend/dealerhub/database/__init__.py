"""
Database package initialization.

- base: declarative base, id and timestamp mixins
- connection: async engine and session management
- models: SQLAlchemy ORM rows for every stored entity
- mappers: conversion between stored rows and domain records
"""

__all__ = []
