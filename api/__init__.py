"""
FastAPI application for the spreadsheet record import system.

This package contains the REST API and WebSocket server for uploading
workbooks, editing the in-memory record store and downloading exports.
"""

__version__ = "1.0.0"
