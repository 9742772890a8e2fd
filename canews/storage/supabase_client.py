# canews/storage/supabase_client.py
from typing import Any, Dict, List, Optional

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from supabase import AsyncClient, create_async_client
from tenacity import (
    AsyncRetrying,
    RetryError,
    stop_after_attempt,
    wait_fixed,
)

from canews.config.settings import settings

RawDocument = Dict[str, Any]

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


class StoreError(Exception):
    """Base exception for document store failures."""

    pass


class StoreUnavailableError(StoreError):
    """The store is not configured, not connected, or refused the request."""

    pass


class RecordNotFoundError(StoreError):
    """A single-record lookup matched nothing."""

    pass


async def initialize_supabase() -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it.

    Client creation is retried a fixed number of times. Returns None when the
    store is not configured or every attempt failed; requests then answer
    with a store-unavailable error instead of crashing the server.
    """
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    if not settings.supabase_url or not settings.supabase_key:
        logger.critical("Supabase URL or Key not configured in settings.")
        return None

    logger.debug(
        f"Attempting to initialize Async Supabase client with URL: {settings.supabase_url}"
    )

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.store_connect_attempts),
            wait=wait_fixed(settings.store_connect_wait_seconds),
            reraise=False,
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.warning(
                        f"Retrying Supabase client creation "
                        f"(attempt {attempt_number}/{settings.store_connect_attempts})"
                    )
                client: AsyncClient = await create_async_client(
                    settings.supabase_url, settings.supabase_key
                )
    except RetryError as e:
        logger.error(
            f"Failed to initialize Async Supabase client after "
            f"{settings.store_connect_attempts} attempts: {e.last_attempt.exception()}"
        )
        return None

    _async_supabase_client = client
    logger.success("Async Supabase client initialized successfully.")
    return client


def get_supabase_client() -> Optional[AsyncClient]:
    """Returns the initialized ASYNC Supabase client instance, if any."""
    if not _async_supabase_client:
        logger.warning("Async Supabase client accessed before initialization.")
    return _async_supabase_client


def reset_supabase_client() -> None:
    """Forgets the module-level client (used on shutdown)."""
    global _async_supabase_client
    _async_supabase_client = None


class SupabaseDocumentStore:
    """Reads raw documents from one Supabase table per domain."""

    def __init__(self, client: Optional[AsyncClient]):
        self.client = client

    def _require_client(self) -> AsyncClient:
        if not self.client:
            raise StoreUnavailableError("Database not connected")
        return self.client

    async def fetch_documents(self, table_name: str) -> List[RawDocument]:
        """Fetches every document of a table, with no filter."""
        client = self._require_client()
        try:
            response: APIResponse = await client.table(table_name).select("*").execute()
        except APIError as e:
            logger.error(f"Supabase API error fetching {table_name}: {e.message}")
            logger.debug(f"Full APIError details: {e}")
            raise StoreUnavailableError(f"Failed to read {table_name}") from e
        except Exception as e:
            logger.exception(f"An unexpected error occurred fetching {table_name}: {e}")
            raise StoreUnavailableError(f"Failed to read {table_name}") from e

        documents = response.data or []
        logger.info(f"Fetched {len(documents)} raw documents from {table_name}.")
        return documents

    async def fetch_document(self, table_name: str, doc_id: str) -> RawDocument:
        """Fetches one document by id, raising RecordNotFoundError when absent."""
        client = self._require_client()
        try:
            response: APIResponse = (
                await client.table(table_name)
                .select("*")
                .eq("id", doc_id)
                .limit(1)
                .execute()
            )
        except APIError as e:
            logger.error(f"Supabase API error fetching {table_name}/{doc_id}: {e.message}")
            # Malformed ids (e.g. not a uuid) are rejected by PostgREST with 22P02
            if e.code == "22P02":
                raise RecordNotFoundError(f"{doc_id} not found in {table_name}") from e
            raise StoreUnavailableError(f"Failed to read {table_name}") from e
        except Exception as e:
            logger.exception(f"An unexpected error occurred fetching {table_name}/{doc_id}: {e}")
            raise StoreUnavailableError(f"Failed to read {table_name}") from e

        if not response.data:
            raise RecordNotFoundError(f"{doc_id} not found in {table_name}")
        return response.data[0]

    async def insert_document(self, table_name: str, payload: RawDocument) -> RawDocument:
        """Inserts a document as-is and returns the stored row."""
        client = self._require_client()
        try:
            response: APIResponse = await client.table(table_name).insert(payload).execute()
        except APIError as e:
            logger.error(f"Supabase API error inserting into {table_name}: {e.message}")
            raise StoreUnavailableError(f"Failed to write {table_name}") from e
        except Exception as e:
            logger.exception(f"An unexpected error occurred inserting into {table_name}: {e}")
            raise StoreUnavailableError(f"Failed to write {table_name}") from e

        stored = response.data[0] if response.data else dict(payload)
        logger.success(f"Created new document in {table_name} with ID: {stored.get('id')}")
        return stored
