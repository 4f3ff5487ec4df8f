"""Database access layer for the Supabase backend."""

from complaintdesk.app.db.client import SupabaseClient

__all__ = ["SupabaseClient"]
