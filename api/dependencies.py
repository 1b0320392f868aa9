"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for the record store, the import
and export services, authentication, and upload checks.
"""

import logging
from pathlib import Path

from fastapi import Depends, HTTPException, Header, Request, status

from api.config import settings
from backend.models.schema import RecordSchema
from services.excel_import_service import ExcelImportService
from services.export_service import ExcelExportService
from services.record_store import RecordStore

logger = logging.getLogger(__name__)


def get_store(request: Request) -> RecordStore:
    """
    Get the process-wide record store.

    The store is created once in the application lifespan and kept on
    ``app.state``.

    Usage:
        @app.get("/endpoint")
        def endpoint(store: RecordStore = Depends(get_store)):
            pass
    """
    return request.app.state.store


def get_schema(request: Request) -> RecordSchema:
    """Get the record schema the application was started with."""
    return request.app.state.schema


def get_import_service(
    store: RecordStore = Depends(get_store),
    schema: RecordSchema = Depends(get_schema)
) -> ExcelImportService:
    """Build an import service bound to the shared store."""
    return ExcelImportService(store, schema, prefer_file_serial=settings.PREFER_FILE_SERIAL)


def get_export_service(schema: RecordSchema = Depends(get_schema)) -> ExcelExportService:
    """Build an export service for the active schema."""
    return ExcelExportService(schema)


def get_api_key(
    x_api_key: str = Header(None, alias=settings.API_KEY_HEADER)
) -> str:
    """
    Validate API key from header.

    Args:
        x_api_key: API key from request header

    Returns:
        Validated API key

    Raises:
        HTTPException: If API key is invalid or missing
    """
    if not settings.ENABLE_API_KEY_AUTH:
        # API key auth disabled - allow all requests
        return "public"

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    if x_api_key not in settings.API_KEYS:
        logger.warning("Rejected request with unknown API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key"
        )

    return x_api_key


def get_current_user(api_key: str = Depends(get_api_key)) -> str:
    """
    Get current user from API key.

    The API key itself identifies the caller; there is no user directory.
    """
    return api_key


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Args:
        file_size: File size in bytes

    Returns:
        True if size is acceptable

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True


def verify_file_extension(filename: str) -> bool:
    """
    Verify file has allowed extension.

    Args:
        filename: Name of uploaded file

    Returns:
        True if extension is allowed

    Raises:
        HTTPException: If extension is not allowed
    """
    if not settings.ALLOWED_EXTENSIONS:
        return True

    ext = Path(filename or '').suffix.lower()

    if ext not in [e.lower() for e in settings.ALLOWED_EXTENSIONS]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File extension '{ext}' not allowed. "
                   f"Allowed extensions: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    return True
