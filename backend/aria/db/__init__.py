"""Supabase table and storage access."""

from .supabase_client import get_supabase

__all__ = ["get_supabase"]
