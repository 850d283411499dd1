import pytest

from segtrans.core.errors import ParseError
from segtrans.core.translation.models import (
    BlockType,
    Chunk,
    DifferentialUnit,
    ParagraphUnit,
    ResultMode,
    SegmentUnit,
)
from segtrans.core.translation.pipeline.output_processor import (
    MISSING_TRANSLATION,
    MODEL_CALL_FAILURE,
    OutputProcessor,
)

SEGMENTS = ("你好", "谢谢", "再见")


@pytest.fixture
def processor():
    return OutputProcessor(source_language="zh-CN", target_language="ko")


@pytest.mark.unit
def test_map_units_one_per_segment_when_model_returns_fewer(processor):
    parsed = [{"original": "你好", "translation": "안녕", "pinyin": "nǐ hǎo"}]
    units = processor.map_units(parsed, SEGMENTS, ResultMode.SEGMENT)

    assert len(units) == 3
    assert all(isinstance(u, SegmentUnit) for u in units)
    assert units[0].translated_text == "안녕"
    assert units[0].pinyin == "nǐ hǎo"
    assert [u.original_text for u in units[1:]] == ["谢谢", "再见"]
    assert [u.translated_text for u in units[1:]] == ["", ""]
    assert units[2].source_language == "zh-CN"
    assert units[2].target_language == "ko"


@pytest.mark.unit
def test_map_units_ignores_extra_entries(processor):
    parsed = [{"translation": str(i)} for i in range(5)]
    units = processor.map_units(parsed, SEGMENTS, ResultMode.SEGMENT)
    assert [u.translated_text for u in units] == ["0", "1", "2"]


@pytest.mark.unit
def test_field_level_defaults(processor):
    parsed = [{"original": "你好"}, {"translation": "감사", "pinyin": None}, {}]
    units = processor.map_units(parsed, SEGMENTS, ResultMode.SEGMENT)

    assert units[0].translated_text == MISSING_TRANSLATION
    assert units[1].original_text == "谢谢"
    assert units[1].pinyin == ""
    assert units[2].translated_text == MISSING_TRANSLATION


@pytest.mark.unit
def test_pinyin_dropped_when_not_requested():
    processor = OutputProcessor(need_pinyin=False)
    units = processor.map_units([{"translation": "a", "pinyin": "x"}], ("一",), ResultMode.SEGMENT)
    assert units[0].pinyin == ""


@pytest.mark.unit
def test_differential_units_use_global_index(processor):
    parsed = [{"translation": "a"}, {"translation": "b"}]
    units = processor.map_units(parsed, SEGMENTS, ResultMode.DIFFERENTIAL, start_index=6)

    assert all(isinstance(u, DifferentialUnit) for u in units)
    assert [u.index for u in units] == [6, 7, 8]
    payloads = [u.to_dict() for u in units]
    assert all("originalText" not in p for p in payloads)
    assert payloads[0] == {"index": 6, "translatedText": "a", "pinyin": ""}


@pytest.mark.unit
def test_paragraph_units_follow_model_cardinality(processor):
    parsed = [
        {"type": "Title", "original": "第一课", "translation": "제1과"},
        {"type": "passage", "original": "他是学生。", "translation": "그는 학생이다."},
        {"type": "poem", "original": "床前明月光", "translation": "침대 앞 밝은 달빛"},
    ]
    units = processor.map_units(parsed, ("第一课\n他是学生。床前明月光",), ResultMode.PARAGRAPH)

    assert len(units) == 3
    assert all(isinstance(u, ParagraphUnit) for u in units)
    assert [u.type for u in units] == [BlockType.TITLE, BlockType.PASSAGE, BlockType.UNKNOWN]
    assert "pinyin" not in units[0].to_dict()
    assert units[0].to_dict()["type"] == "title"


@pytest.mark.unit
def test_paragraph_without_entries_falls_back_per_segment(processor):
    units = processor.map_units([], ("一段文字",), ResultMode.PARAGRAPH)
    assert len(units) == 1
    assert units[0].original_text == "一段文字"
    assert units[0].type == BlockType.UNKNOWN


@pytest.mark.unit
def test_process_builds_accumulated_texts(processor):
    chunk = Chunk(chunk_index=0, start_index=0, segments=SEGMENTS)
    raw = '[{"translation": "안녕"}, {"translation": "감사합니다"}, {"translation": "잘 가"}]'

    result = processor.process(raw, chunk, ResultMode.SEGMENT)

    assert result.full_original_text == "你好谢谢再见"
    assert result.full_translated_text == "안녕감사합니다잘 가"
    assert result.mode == ResultMode.SEGMENT


@pytest.mark.unit
def test_process_raises_parse_error(processor):
    chunk = Chunk(chunk_index=0, start_index=0, segments=SEGMENTS)
    with pytest.raises(ParseError):
        processor.process("sorry, no", chunk, ResultMode.SEGMENT)


@pytest.mark.unit
def test_fallback_keeps_every_segment(processor):
    chunk = Chunk(chunk_index=2, start_index=6, segments=SEGMENTS)

    result = processor.fallback(chunk, ResultMode.SEGMENT, MODEL_CALL_FAILURE)
    assert [u.original_text for u in result.units] == list(SEGMENTS)
    assert {u.translated_text for u in result.units} == {MODEL_CALL_FAILURE}
    assert result.full_original_text == "你好谢谢再见"
    assert result.full_translated_text == MODEL_CALL_FAILURE

    diff = processor.fallback(chunk, ResultMode.DIFFERENTIAL, MODEL_CALL_FAILURE)
    assert [u.index for u in diff.units] == [6, 7, 8]
    assert diff.full_original_text is None
    assert diff.full_translated_text is None
