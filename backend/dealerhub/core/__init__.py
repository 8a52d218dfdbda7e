"""
Core package for shared utilities.

Settings, structured logging and password hashing used across the
backend application.
"""
