"""Translation API routes."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from segtrans import __version__
from segtrans.api.dependencies import (
    OptionalAuth,
    RequireAuth,
    get_optional_model_client,
    get_page_store,
    get_settings,
    get_translation_service,
)
from segtrans.config import Settings
from segtrans.core.errors import ValidationError
from segtrans.core.storage import PageStore
from segtrans.core.translation import (
    ModelClient,
    PageInput,
    ProcessingMode,
    TranslationOptions,
    TranslationService,
)
from segtrans.core.translation.delivery import encode_event

logger = logging.getLogger(__name__)

router = APIRouter()


class CamelModel(BaseModel):
    """Request body accepting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranslateSegmentsRequest(CamelModel):
    """Batch translation request."""
    text_segments: List[str]
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    need_pinyin: bool = True
    mode: Optional[str] = None  # "segment" | "paragraph"
    differential: bool = False
    page_id: Optional[str] = None
    note_id: Optional[str] = None


class PageSegments(CamelModel):
    """Segments of one logical page in a stream request."""
    page_id: str
    segments: List[str] = Field(default_factory=list)


class StreamTranslationRequest(CamelModel):
    """Streaming translation request."""
    text_segments: List[str] = Field(default_factory=list)
    page_segments: Optional[List[PageSegments]] = None
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    need_pinyin: bool = True
    processing_mode: Optional[str] = None
    differential: bool = False


def _build_options(
    app_settings: Settings,
    source_language: Optional[str],
    target_language: Optional[str],
    need_pinyin: bool,
    mode: Optional[str],
    differential: bool,
) -> TranslationOptions:
    try:
        processing_mode = ProcessingMode.parse(mode)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TranslationOptions(
        source_language=source_language or app_settings.default_source_language,
        target_language=target_language or app_settings.default_target_language,
        need_pinyin=need_pinyin,
        mode=processing_mode,
        differential=differential,
    )


@router.post("/translation/segments")
async def translate_segments(
    request: TranslateSegmentsRequest,
    _auth: RequireAuth,
    service: TranslationService = Depends(get_translation_service),
    page_store: Optional[PageStore] = Depends(get_page_store),
    app_settings: Settings = Depends(get_settings),
):
    """Translate text segments and return the whole result at once.

    When pageId is given the result is also written to the page store,
    best-effort.
    """
    options = _build_options(
        app_settings,
        request.source_language,
        request.target_language,
        request.need_pinyin,
        request.mode,
        request.differential,
    )
    logger.info(
        f"[Translation API] Translating {len(request.text_segments)} segments "
        f"(mode={options.mode.value}, page={request.page_id}, note={request.note_id})"
    )

    try:
        aggregate, response = await service.translate_batch(request.text_segments, options)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Translation error")
        raise HTTPException(status_code=500, detail=f"Translation failed: {e}")

    if request.page_id and page_store is not None:
        await page_store.persist(request.page_id, aggregate, note_id=request.note_id)

    return response


@router.post("/translation/stream")
async def stream_translation(
    request: StreamTranslationRequest,
    _auth: OptionalAuth,
    service: TranslationService = Depends(get_translation_service),
    app_settings: Settings = Depends(get_settings),
):
    """Translate segments and stream one NDJSON event per finished chunk.

    With pageSegments, each page is chunked separately and its events are
    tagged with the page's id.
    """
    options = _build_options(
        app_settings,
        request.source_language,
        request.target_language,
        request.need_pinyin,
        request.processing_mode,
        request.differential,
    )
    if request.page_segments:
        pages = [PageInput(page_id=p.page_id, segments=p.segments) for p in request.page_segments]
    else:
        pages = [PageInput(page_id=None, segments=request.text_segments)]

    try:
        plan = service.plan_stream(pages, options)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    async def event_generator():
        """Generate NDJSON records from the chunk stream."""
        try:
            async for event in service.stream(plan, options):
                yield encode_event(event)
        except Exception as e:
            logger.exception("Streaming translation failed")
            yield encode_event({"isError": True, "isComplete": True, "error": str(e)})

    return StreamingResponse(
        event_generator(),
        media_type="application/x-ndjson",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/translation/health")
async def translation_health(
    check_model: bool = Query(False, alias="checkModel"),
    client: Optional[ModelClient] = Depends(get_optional_model_client),
    app_settings: Settings = Depends(get_settings),
):
    """Report service status and capabilities.

    With checkModel=true the model provider is sent a tiny completion
    and the status becomes "degraded" when it is unreachable or unconfigured.
    """
    payload = {
        "service": "translation-only",
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "provider": app_settings.llm_provider,
        "model": app_settings.llm_model,
        "capabilities": {
            "batchTranslation": True,
            "pinyinSupport": True,
            "paragraphMode": True,
            "streaming": True,
            "differentialEncoding": True,
            "parallelProcessing": app_settings.max_concurrent_chunks > 1,
            "persistence": app_settings.persist_results,
        },
    }

    if check_model:
        available = client is not None and await client.health_check()
        if not available:
            logger.warning("Model provider %s is unavailable", app_settings.llm_provider)
        payload["modelAvailable"] = available
        payload["status"] = "healthy" if available else "degraded"

    return payload
