"""Centralized dependency providers for the search client and session registry.

This keeps construction in one place so the API layer and tests share
consistent configuration and can override a single factory.
"""
from __future__ import annotations

from functools import lru_cache

from app.config import settings
from app.infra.search_client import SearchClient
from app.session.registry import SessionRegistry


@lru_cache(maxsize=1)
def get_search_client() -> SearchClient:
    return SearchClient(
        settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        top_k=settings.search_top_k,
    )


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(
        get_search_client,
        max_sessions=settings.max_sessions,
        idle_ttl=settings.session_idle_ttl_seconds,
    )
