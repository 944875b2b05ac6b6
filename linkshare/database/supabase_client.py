from supabase import create_client, Client
from linkshare.config import settings
from linkshare.database.document_store import SupabaseDocumentStore


class SupabaseClient:
    _client: Client = None
    _document_store: SupabaseDocumentStore = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_document_store(cls) -> SupabaseDocumentStore:
        """One adapter per process, sharing the client (and its auth session)."""
        if cls._document_store is None:
            cls._document_store = SupabaseDocumentStore(cls.get_client())
        return cls._document_store


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_document_store() -> SupabaseDocumentStore:
    return SupabaseClient.get_document_store()
