"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...db.supabase import ORDER_REQUESTS_TABLE, get_supabase_client
from ...services.context import AppContext
from ..dependencies import get_context

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(context: AppContext = Depends(get_context)) -> dict:
    """Check which backend stores requests and whether Supabase answers."""
    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "backend": context.backend,
            "message": "Supabase not configured. Set CARDO_SUPABASE_URL and CARDO_SUPABASE_KEY environment variables.",
        }

    try:
        response = supabase.table(ORDER_REQUESTS_TABLE).select("id", count="exact").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "backend": context.backend,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "backend": context.backend,
        "orderRequests": response.count,
        "message": "Database connected.",
    }
