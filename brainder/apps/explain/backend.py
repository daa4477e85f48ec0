"""Explanation chat and swipe conversation app backend."""
from flask import request, jsonify, Response, stream_with_context


def register(app, platform):

    def text_stream(streamer, tag):
        def generate():
            try:
                for token, done in streamer:
                    if token:
                        yield token
                    if done:
                        break
            except Exception as e:
                # headers are already sent, the client just sees the text end
                print(f'[{tag}] Streaming error: {e}')
        return Response(stream_with_context(generate()), mimetype='text/plain',
                        headers={'Cache-Control': 'no-cache'})

    @app.route('/api/chat', methods=['POST'])
    def run_explain_chat():
        data = request.get_json(silent=True) or {}
        teaser = str(data.get('teaser') or '').strip()
        history = data.get('history') or []
        if not teaser:
            return jsonify({'error': 'Fact is required'}), 400
        if not isinstance(history, list):
            return jsonify({'error': 'History must be a list'}), 400

        messages = [
            {'role': 'system', 'content': platform.prompt('explanation', language=data.get('language') or 'English')},
            {'role': 'user', 'content': f'Please explain this fact in detail: {teaser}'},
            *history,
        ]
        message = str(data.get('message') or '').strip()
        if message:
            messages.append({'role': 'user', 'content': message})

        try:
            streamer = platform.stream(messages, data, max_tokens=app.config['BRAINDER_CHAT_MAX_TOKENS'])
        except Exception as e:
            print(f'[chat] API route error: {e}')
            return jsonify({'error': str(e)}), 500
        return text_stream(streamer, 'chat')

    @app.route('/api/generate', methods=['POST'])
    def run_swipe():
        data = request.get_json(silent=True) or {}
        history = data.get('messages') or []
        if not isinstance(history, list):
            return jsonify({'error': 'Messages must be a list'}), 400
        messages = [
            {'role': 'system', 'content': platform.prompt('swipe', language=data.get('language') or 'English')},
            *history,
        ]
        if len(messages) == 1:
            messages.append({'role': 'user', 'content': 'Show me a fact.'})

        try:
            streamer = platform.stream(messages, data)
        except Exception as e:
            print(f'[generate] API route error: {e}')
            return jsonify({'error': str(e)}), 500
        return text_stream(streamer, 'generate')
