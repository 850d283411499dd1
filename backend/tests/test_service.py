import json

import pytest

from segtrans.core.errors import ValidationError
from segtrans.core.translation import (
    PageInput,
    ProcessingMode,
    TranslationOptions,
)
from segtrans.core.translation.pipeline import MODEL_CALL_FAILURE

from .conftest import FakeModelClient, echo_reply, segments_from_prompt


async def collect(service, plan, options):
    return [event async for event in service.stream(plan, options)]


@pytest.mark.unit
async def test_translate_empty_input_skips_model(make_service, fake_client):
    service = make_service(fake_client)
    result = await service.translate([], TranslationOptions())

    assert result.units == []
    assert result.full_translated_text == ""
    assert fake_client.calls == []


@pytest.mark.unit
async def test_translate_batch_statistics(make_service, fake_client):
    service = make_service(fake_client, chunk_size=2)
    segments = ["你好", "谢谢", "再见"]

    aggregate, response = await service.translate_batch(segments, TranslationOptions())

    assert response["success"] is True
    assert response["statistics"]["segmentCount"] == 3
    assert response["statistics"]["totalCharacters"] == 6
    assert response["statistics"]["processingTimeMs"] >= 0
    units = response["translation"]["units"]
    assert [u["originalText"] for u in units] == segments
    assert response["translation"]["sourceLanguage"] == "zh-CN"
    assert response["translation"]["targetLanguage"] == "ko"
    assert len(fake_client.calls) == 2


@pytest.mark.unit
async def test_stream_emits_one_event_per_chunk(make_service, fake_client):
    service = make_service(fake_client, chunk_size=2)
    options = TranslationOptions()
    plan = service.plan_stream([PageInput(None, ["a", "b", "c", "d", "e"])], options)

    events = await collect(service, plan, options)

    assert plan.total_chunks == 3
    assert [e["chunkIndex"] for e in events] == [0, 1, 2]
    assert {e["totalChunks"] for e in events} == {3}
    assert [e["isComplete"] for e in events] == [False, False, True]
    assert events[0]["mode"] == "full"
    assert [u["originalText"] for e in events for u in e["units"]] == ["a", "b", "c", "d", "e"]
    assert all("pageId" not in e for e in events)


@pytest.mark.unit
async def test_stream_tags_pages_and_counts_chunks_once(make_service, fake_client):
    service = make_service(fake_client, chunk_size=2, max_concurrent=3)
    options = TranslationOptions(differential=True)
    pages = [
        PageInput("page-1", ["a", "b", "c"]),
        PageInput("page-2", []),
        PageInput("page-3", ["d"]),
    ]
    plan = service.plan_stream(pages, options)

    events = await collect(service, plan, options)

    assert plan.pages == {"page-1": 2, "page-2": 0, "page-3": 1}
    assert [(e["pageId"], e["chunkIndex"]) for e in events] == [
        ("page-1", 0),
        ("page-1", 1),
        ("page-3", 0),
    ]
    assert [e["isComplete"] for e in events] == [False, False, True]
    assert events[1]["startIndex"] == 2
    assert [u["index"] for u in events[1]["units"]] == [2]
    assert all("originalText" not in u for e in events for u in e["units"])


@pytest.mark.unit
async def test_stream_failure_becomes_error_event(make_service):
    def responder(system, user):
        if "b" in segments_from_prompt(user):
            return ConnectionError("connection reset by peer")
        return echo_reply(segments_from_prompt(user))

    service = make_service(FakeModelClient(responder), chunk_size=1)
    options = TranslationOptions()
    plan = service.plan_stream([PageInput("p", ["a", "b", "c"])], options)

    events = await collect(service, plan, options)

    assert len(events) == 3
    error = events[1]
    assert error["isError"] is True
    assert error["pageId"] == "p"
    assert error["chunkIndex"] == 1
    assert "connection reset by peer" in error["error"]
    assert error["units"][0]["translatedText"] == MODEL_CALL_FAILURE
    assert "isError" not in events[0]
    assert events[2]["isComplete"] is True


@pytest.mark.unit
async def test_stream_paragraph_mode(make_service):
    first = "你" * 180 + "。"
    second = "好" * 150 + "。"
    client = FakeModelClient(
        lambda system, user: json.dumps([{"type": "passage", "original": "x", "translation": "y"}])
    )
    service = make_service(client)
    options = TranslationOptions(mode=ProcessingMode.PARAGRAPH)
    plan = service.plan_stream([PageInput("p", [first, "", second])], options)

    events = await collect(service, plan, options)

    assert plan.total_chunks == 2
    assert [e["mode"] for e in events] == ["paragraph", "paragraph"]
    assert events[-1]["isComplete"] is True


@pytest.mark.unit
def test_plan_stream_rejects_empty_request(make_service, fake_client):
    service = make_service(fake_client)
    with pytest.raises(ValidationError):
        service.plan_stream([PageInput(None, [])], TranslationOptions())


@pytest.mark.unit
def test_invalid_chunk_size_is_a_validation_error(make_service, fake_client):
    service = make_service(fake_client, chunk_size=0)
    with pytest.raises(ValidationError):
        service.build_chunks(["a"], ProcessingMode.SEGMENT)
