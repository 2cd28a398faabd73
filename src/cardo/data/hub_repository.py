"""Hub directory loader with database-first approach, falling back to the built-in list."""

from __future__ import annotations

import functools
import logging

from ..db.supabase import HUBS_TABLE, get_supabase_client
from ..models.domain import Hub

logger = logging.getLogger(__name__)

DEFAULT_HUBS: tuple[Hub, ...] = (
    Hub(name="Kumily Cardamom Hub", district="Idukki"),
    Hub(name="Wayanad Spice Center", district="Wayanad"),
    Hub(name="Kochi Export Terminal", district="Ernakulam"),
    Hub(name="Palakkad Processing Hub", district="Palakkad"),
    Hub(name="Thiruvananthapuram Distribution Center", district="Thiruvananthapuram"),
    Hub(name="Kozhikode Spice Hub", district="Kozhikode"),
    Hub(name="Thrissur Cardamom Center", district="Thrissur"),
    Hub(name="Kollam Coastal Hub", district="Kollam"),
    Hub(name="Alappuzha Spice Terminal", district="Alappuzha"),
    Hub(name="Kottayam Central Hub", district="Kottayam"),
    Hub(name="Pathanamthitta Hills Hub", district="Pathanamthitta"),
    Hub(name="Malappuram Spice Center", district="Malappuram"),
    Hub(name="Kannur Coastal Hub", district="Kannur"),
    Hub(name="Kasaragod Border Hub", district="Kasaragod"),
)


def _normalize(value: str) -> str:
    return " ".join(value.split()).lower()


def _load_hubs_from_database() -> tuple[Hub, ...] | None:
    """Load hubs from Supabase. Returns None if database not available or empty."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        response = supabase.table(HUBS_TABLE).select("name,district,state").execute()
    except Exception as exc:
        logger.debug(f"Hub query failed, falling back to built-in directory: {exc}")
        return None
    if not response.data:
        return None

    hubs: list[Hub] = []
    for row in response.data:
        try:
            hubs.append(Hub(name=str(row["name"]).strip(), district=str(row["district"]).strip(), state=row.get("state") or "Kerala"))
        except (KeyError, TypeError) as exc:
            logger.warning(f"Skipping invalid hub row: {exc}")
    return tuple(hubs) if hubs else None


@functools.lru_cache(maxsize=1)
def get_hubs() -> tuple[Hub, ...]:
    """Get hubs from the database first, fall back to the built-in Kerala directory."""
    return _load_hubs_from_database() or DEFAULT_HUBS


def resolve_district(preferred_hub: str | None, hubs: tuple[Hub, ...] | None = None) -> str | None:
    """Map a preferred hub (hub name or bare district name) to its district.

    Free text that names neither a known hub nor a known district resolves to None.
    """
    if not preferred_hub or not preferred_hub.strip():
        return None
    directory = hubs if hubs is not None else get_hubs()
    needle = _normalize(preferred_hub)

    for hub in directory:
        if _normalize(hub.name) == needle:
            return hub.district
    for hub in directory:
        if _normalize(hub.district) == needle:
            return hub.district
    # "Kumily Cardamom Hub (Idukki)" style labels used by the request form
    for hub in directory:
        if needle.startswith(_normalize(hub.name)):
            return hub.district
    return None
