"""Discover feed app backend."""
import requests
from flask import request, jsonify, Response, stream_with_context

from brainder.extractor import clean_json_response
from brainder.prompts import existing_topics_section, history_section, theme_section

MAX_FACTS = 20


def _count(data, default):
    """Requested number of facts, clamped to 1..MAX_FACTS. Raises ValueError."""
    try:
        count = int(data.get('count', default))
    except (TypeError, ValueError):
        raise ValueError('Invalid count')
    return max(1, min(count, MAX_FACTS))


def _titles(value):
    if not isinstance(value, list):
        return []
    return [t for t in value if isinstance(t, str)]


def register(app, platform):

    def feed_messages(data, existing, count):
        system = platform.prompt(
            'feed',
            language=data.get('language') or 'English',
            existingTopicsSection=existing_topics_section(existing),
        )
        return [
            {'role': 'system', 'content': system},
            {'role': 'user', 'content': f'Generate {count} facts in the specified JSON format. '
                                        'Each fact should be a separate JSON object on a new line.'},
        ]

    @app.route('/api/feed', methods=['POST'])
    def run_feed():
        data = request.get_json(silent=True) or {}
        existing = _titles(data.get('existingTopics'))
        try:
            count = _count(data, 2)
        except ValueError:
            return jsonify({'error': 'Invalid count'}), 400
        messages = feed_messages(data, existing, count)
        try:
            text = platform.complete(messages, data)
            topics, _ = platform.extract(clean_json_response(text))
        except Exception as e:
            print(f'[feed] Error generating feed content: {e}')
            return jsonify({'error': 'Failed to generate feed content'}), 500
        return jsonify([t for t in topics if t.get('title') not in existing])

    @app.route('/api/feed/stream', methods=['POST'])
    def run_feed_stream():
        data = request.get_json(silent=True) or {}
        existing = _titles(data.get('existingTopics'))
        try:
            count = _count(data, 10)
        except ValueError:
            return jsonify({'error': 'Invalid count'}), 400
        messages = feed_messages(data, existing, count)

        def generate():
            buffer = ''
            sent = 0
            try:
                for token, done in platform.stream(messages, data):
                    if token:
                        buffer += token
                        records, buffer = platform.extract(buffer)
                        for record in records:
                            if record.get('title') in existing:
                                continue
                            sent += 1
                            yield platform.sse({'record': record})
                    if done:
                        break
                yield platform.sse({'done': True, 'count': sent})
            except requests.ConnectionError:
                yield platform.sse({'error': 'Cannot connect to the model backend'})
            except Exception as e:
                print(f'[feed] Streaming error: {e}')
                yield platform.sse({'error': str(e)})

        return Response(stream_with_context(generate()), mimetype='text/event-stream')

    @app.route('/api/discover', methods=['POST'])
    def run_discover():
        data = request.get_json(silent=True) or {}
        system = platform.prompt(
            'discover',
            language=data.get('language') or 'English',
            themeSection=theme_section(data.get('theme')),
            historySection=history_section(_titles(data.get('history'))),
        )
        messages = [
            {'role': 'system', 'content': system},
            {'role': 'user', 'content': 'Generate one fact in the specified JSON format.'},
        ]
        try:
            text = platform.complete(messages, data)
        except Exception as e:
            print(f'[discover] Error generating fact: {e}')
            return jsonify({'error': 'Failed to generate fact'}), 500
        topics, _ = platform.extract(clean_json_response(text))
        if not topics:
            return jsonify({'error': 'Failed to parse AI response'}), 500
        return jsonify(topics[0])
