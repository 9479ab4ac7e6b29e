"""
Shared utilities for the Personal Library API.
"""
