"""Delivery of translation results: one batch response or chunk events."""

import json
from typing import Any, Dict, Sequence

from .models.result import AggregateResult, ChunkOutcome


def batch_response(
    aggregate: AggregateResult,
    segments: Sequence[str],
    processing_time_ms: int,
) -> Dict[str, Any]:
    """Build the single, atomic response for a batch request."""
    return {
        "success": True,
        "translation": aggregate.to_response(),
        "statistics": {
            "segmentCount": len(segments),
            "totalCharacters": sum(len(s) for s in segments),
            "processingTimeMs": processing_time_ms,
        },
    }


def chunk_event(
    outcome: ChunkOutcome,
    total_chunks: int,
    is_complete: bool,
) -> Dict[str, Any]:
    """Build the stream event for one resolved chunk.

    A failed chunk becomes an error event; it still carries the fallback
    units so the client keeps one unit per segment.
    """
    chunk = outcome.chunk
    event: Dict[str, Any] = {
        "chunkIndex": chunk.chunk_index,
        "totalChunks": total_chunks,
        "isComplete": is_complete,
    }
    if chunk.page_id is not None:
        event["pageId"] = chunk.page_id

    result = outcome.result.model_dump(by_alias=True, exclude_none=True, mode="json")
    if outcome.succeeded:
        event.update(result)
        event["startIndex"] = chunk.start_index
    else:
        event["isError"] = True
        event["error"] = outcome.error or "Chunk translation failed"
        event["units"] = result["units"]
    return event


def encode_event(event: Dict[str, Any]) -> str:
    """Encode one event as a newline-delimited JSON record."""
    return json.dumps(event, ensure_ascii=False) + "\n"
