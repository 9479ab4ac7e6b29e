"""
FastAPI RESTful API for the Personal Library service.

This package provides a small REST API for:
- Creating, listing and deleting books
- Reading a single book with its comments
- Appending comments to a book
"""

__version__ = "1.0.0"
