"""Pull complete JSON objects out of a growing LLM text buffer.

The model is asked for one JSON object per record, but tokens arrive in
arbitrary slices. extract() returns every object whose braces have closed and
hands back the unfinished tail so the caller can append the next chunk to it.
"""
import json
import re


def _span_end(buffer, start):
    """Index of the brace closing the object opened at `start`, or -1.

    A raw line break inside a string ends the span early. No valid JSON
    contains one, so the span fails to parse and scanning picks up on the
    next line.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(buffer)):
        ch = buffer[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch == '\n':
                return i
            continue
        if ch == '"':
            in_string = True
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return i
    return -1


def extract(buffer, on_error=None):
    """Return (records, remainder) for everything complete in `buffer`.

    Brace-balanced spans that are not valid JSON are dropped and reported
    through on_error(span, exc). Text between objects is discarded; an object
    still waiting for its closing brace is returned untouched as the remainder.
    """
    records = []
    pos = 0
    while True:
        start = buffer.find('{', pos)
        if start == -1:
            return records, ''
        end = _span_end(buffer, start)
        if end == -1:
            return records, buffer[start:]
        span = buffer[start:end + 1]
        try:
            records.append(json.loads(span))
        except ValueError as e:
            if on_error:
                on_error(span, e)
        pos = end + 1


def iter_records(chunks, on_error=None):
    """Yield records from an iterable of text chunks as soon as they close."""
    buffer = ''
    for chunk in chunks:
        if not chunk:
            continue
        buffer += chunk
        records, buffer = extract(buffer, on_error)
        yield from records


_FENCE_RE = re.compile(r'```(?:json)?[ \t]*\n?')


def clean_json_response(text):
    """Strip markdown code fences around a model reply."""
    return _FENCE_RE.sub('', text or '').strip()


def parse_json_reply(text):
    """Parse a whole reply that should be one JSON document."""
    return json.loads(clean_json_response(text))
