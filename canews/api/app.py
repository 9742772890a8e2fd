from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Body, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from canews.config.settings import settings
from canews.models.enums import Domain
from canews.normalization.normalizer import NormalizationError, Normalizer
from canews.storage.supabase_client import (
    RecordNotFoundError,
    StoreUnavailableError,
    SupabaseDocumentStore,
    get_supabase_client,
    initialize_supabase,
    reset_supabase_client,
)


def to_payload(records: Sequence[BaseModel]) -> List[Dict[str, Any]]:
    """Serializes canonical records for the mobile client.

    Only explicitly set fields are emitted, so people built from bare names
    stay ``{"name": ...}``. Every other record sets all of its fields.
    """
    try:
        return [
            record.model_dump(mode="json", by_alias=True, exclude_unset=True)
            for record in records
        ]
    except Exception as e:
        raise NormalizationError(f"Could not serialize records: {e}") from e


def get_store() -> SupabaseDocumentStore:
    return SupabaseDocumentStore(get_supabase_client())


def get_normalizer(request: Request) -> Normalizer:
    return request.app.state.normalizer


@asynccontextmanager
async def lifespan(app: FastAPI):
    await initialize_supabase()
    yield
    reset_supabase_client()
    logger.info("Supabase client released.")


def create_app(
    normalizer: Optional[Normalizer] = None, connect_store: bool = True
) -> FastAPI:
    """Builds the FastAPI application serving normalized collections."""
    app = FastAPI(
        title="canews-api",
        lifespan=lifespan if connect_store else None,
    )
    app.state.normalizer = normalizer or Normalizer(
        sports_policy=settings.sports_date_policy,
        window_days=settings.assumed_year_window_days,
    )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable(request: Request, exc: StoreUnavailableError):
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"error": "Database not connected"})

    @app.exception_handler(RecordNotFoundError)
    async def record_not_found(request: Request, exc: RecordNotFoundError):
        return JSONResponse(status_code=404, content={"error": "Event not found"})

    @app.exception_handler(NormalizationError)
    async def normalization_failed(request: Request, exc: NormalizationError):
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": f"Failed to process {request.url.path}", "details": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unexpected error handling {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": f"Failed to process {request.url.path}", "details": str(exc)},
        )

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok", "message": "Backend API is running"}

    async def _list_domain(
        domain: Domain, store: SupabaseDocumentStore, normalizer: Normalizer
    ) -> List[Dict[str, Any]]:
        documents = await store.fetch_documents(settings.table_for(domain.value))
        records = normalizer.normalize(domain, documents)
        logger.info(f"Returning {len(records)} {domain.value} records.")
        return to_payload(records)

    @app.get("/api/sports")
    async def list_sports(
        store: SupabaseDocumentStore = Depends(get_store),
        normalizer: Normalizer = Depends(get_normalizer),
    ):
        return await _list_domain(Domain.SPORTS, store, normalizer)

    @app.get("/api/sports/{doc_id}")
    async def get_sport(
        doc_id: str,
        store: SupabaseDocumentStore = Depends(get_store),
        normalizer: Normalizer = Depends(get_normalizer),
    ):
        document = await store.fetch_document(settings.sports_table, doc_id)
        return to_payload([normalizer.normalize_sports_document(document)])[0]

    @app.post("/api/sports", status_code=201)
    async def create_sport(
        payload: Dict[str, Any] = Body(...),
        store: SupabaseDocumentStore = Depends(get_store),
    ):
        stored = await store.insert_document(settings.sports_table, payload)
        stored_id = stored.get("id")
        # No row or no id back from the store: report null, not "None"
        return jsonable_encoder(
            {**payload, "id": str(stored_id) if stored_id is not None else None}
        )

    @app.get("/api/general")
    async def list_general(
        store: SupabaseDocumentStore = Depends(get_store),
        normalizer: Normalizer = Depends(get_normalizer),
    ):
        return await _list_domain(Domain.GENERAL, store, normalizer)

    @app.get("/api/academic")
    async def list_academic(
        store: SupabaseDocumentStore = Depends(get_store),
        normalizer: Normalizer = Depends(get_normalizer),
    ):
        return await _list_domain(Domain.ACADEMIC, store, normalizer)

    @app.get("/api/results")
    async def list_results(
        store: SupabaseDocumentStore = Depends(get_store),
        normalizer: Normalizer = Depends(get_normalizer),
    ):
        return await _list_domain(Domain.RESULTS, store, normalizer)

    @app.get("/api/roster")
    async def list_roster(
        store: SupabaseDocumentStore = Depends(get_store),
        normalizer: Normalizer = Depends(get_normalizer),
    ):
        return await _list_domain(Domain.ROSTER, store, normalizer)

    return app
