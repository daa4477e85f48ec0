import json

import pytest

from brainder.extractor import extract, iter_records, clean_json_response, parse_json_reply

STREAM = (
    '{"id": "1", "category": "Space", "title": "Quiet sun", "teaser": "It hums."}\n'
    '{"id": "2", "category": "Brain", "title": "Memory {edits}", "teaser": "Recall \\"rewrites\\" it."}\n'
    '{"id": "3", "nested": {"a": [1, {"b": 2}]}, "title": "Deep"}\n'
)


def test_single_object():
    o = '{"id": "1", "title": "A", "tags": ["x", "y"], "n": 3}'
    assert extract(o) == ([json.loads(o)], '')


def test_back_to_back_objects_keep_order():
    o1 = '{"id": "1"}'
    o2 = '{"id": "2", "inner": {"k": 1}}'
    records, remainder = extract(o1 + o2)
    assert records == [json.loads(o1), json.loads(o2)]
    assert remainder == ''


def test_truncated_object_is_left_untouched():
    buffer = '{"id": "1", "title": "Half'
    assert extract(buffer) == ([], buffer)


def test_truncated_nested_object_is_left_untouched():
    buffer = '{"id": "1", "inner": {"a": 1}'
    assert extract(buffer) == ([], buffer)


def test_stray_text_between_objects_is_dropped():
    records, remainder = extract('Sure! Here you go:\n{"id": "1"}\nand then {"id": "2"} done.')
    assert records == [{'id': '1'}, {'id': '2'}]
    assert remainder == ''


def test_remainder_starts_at_unfinished_object():
    records, remainder = extract('{"id": "1"}\n\n{"id": "2", ')
    assert records == [{'id': '1'}]
    assert remainder == '{"id": "2", '


def test_malformed_span_is_reported_and_skipped():
    errors = []
    records, remainder = extract('{"id": "1"}{bad json}{"id": "2"}',
                                 on_error=lambda span, exc: errors.append((span, exc)))
    assert records == [{'id': '1'}, {'id': '2'}]
    assert remainder == ''
    assert len(errors) == 1
    assert errors[0][0] == '{bad json}'
    assert isinstance(errors[0][1], ValueError)


def test_malformed_span_without_callback_does_not_raise():
    assert extract('{"id": "1"}{bad json}') == ([{'id': '1'}], '')


def test_three_chunk_scenario():
    chunks = ['{"id":"1","tit', 'le":"A"}\n{"id":"2"', ',"title":"B"}']
    buffer = ''
    emitted = []
    for chunk in chunks:
        records, buffer = extract(buffer + chunk)
        emitted.extend(records)
    assert emitted == [{'id': '1', 'title': 'A'}, {'id': '2', 'title': 'B'}]
    assert buffer == ''


def test_every_two_chunk_split_matches_single_pass():
    expected, _ = extract(STREAM)
    assert len(expected) == 3
    for i in range(len(STREAM) + 1):
        first, remainder = extract(STREAM[:i])
        second, remainder = extract(remainder + STREAM[i:])
        assert first + second == expected, i
        assert remainder == ''


def test_character_by_character_feed_matches_single_pass():
    text = STREAM + 'noise {oops} {"id": "4"}'
    expected, _ = extract(text)
    assert list(iter_records(text)) == expected


class TestBracesInStrings:
    """The naive character count would split these objects at the wrong brace."""

    def test_open_brace_in_string(self):
        assert extract('{"title": "a{b"}') == ([{'title': 'a{b'}], '')

    def test_close_brace_in_string(self):
        assert extract('{"title": "a}b", "id": "1"}') == ([{'title': 'a}b', 'id': '1'}], '')

    def test_escaped_quote_before_brace(self):
        o = '{"title": "say \\"}\\" twice", "id": "7"}'
        assert extract(o) == ([json.loads(o)], '')

    def test_escaped_backslash_ends_string(self):
        o = '{"path": "C:\\\\", "id": "8"}'
        assert extract(o) == ([json.loads(o)], '')

    def test_unclosed_brace_in_string_split_across_chunks(self):
        records, remainder = extract('{"title": "curly {')
        assert records == []
        records, remainder = extract(remainder + ' brace", "id": "1"}')
        assert records == [{'title': 'curly { brace', 'id': '1'}]
        assert remainder == ''


def test_line_break_inside_string_resyncs_on_next_line():
    errors = []
    records, remainder = extract('{"id": "1", "title": "cut off\n{"id": "2"}\n',
                                 on_error=lambda span, exc: errors.append(span))
    assert records == [{'id': '2'}]
    assert remainder == ''
    assert errors == ['{"id": "1", "title": "cut off\n']


def test_pretty_printed_object():
    o = '{\n  "id": "1",\n  "title": "Multi\\nline"\n}'
    assert extract(o) == ([json.loads(o)], '')


def test_iter_records_discards_unfinished_tail():
    assert list(iter_records(['{"id": "1"}{"id": ', '', '"2"'])) == [{'id': '1'}]


@pytest.mark.parametrize('raw', [
    '```json\n[{"type": "text", "content": "x"}]\n```',
    '```\n[{"type": "text", "content": "x"}]\n```',
    '  [{"type": "text", "content": "x"}]  ',
])
def test_parse_json_reply_strips_fences(raw):
    assert parse_json_reply(raw) == [{'type': 'text', 'content': 'x'}]


def test_parse_json_reply_rejects_prose():
    with pytest.raises(ValueError):
        parse_json_reply('I cannot do that.')


def test_clean_json_response_handles_none():
    assert clean_json_response(None) == ''
