"""Topic reels and similar topic suggestions app backend."""
from flask import request, jsonify

from brainder.extractor import parse_json_reply


def register(app, platform):

    def generate_json(prompt_name, user_prompt, data, tag):
        messages = [
            {'role': 'system', 'content': platform.prompt(prompt_name)},
            {'role': 'user', 'content': user_prompt},
        ]
        try:
            text = platform.complete(messages, data)
        except Exception as e:
            print(f'[{tag}] Error generating content: {e}')
            return None, (jsonify({'error': f'Failed to generate {tag} content'}), 500)
        try:
            return parse_json_reply(text), None
        except ValueError as e:
            print(f'[{tag}] Error parsing JSON response: {e}')
            return None, (jsonify({'error': 'Failed to parse AI response'}), 500)

    @app.route('/api/topic', methods=['GET', 'POST'])
    def run_topic():
        data = request.get_json(silent=True) or {}
        name = str(data.get('name') or request.args.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Topic name is required'}), 400
        reels, err = generate_json('topic', f'Topic: {name}', data, 'topic')
        if err:
            return err
        return jsonify(reels)

    @app.route('/api/similar-topics', methods=['POST'])
    def run_similar_topics():
        data = request.get_json(silent=True) or {}
        viewed = data.get('viewed')
        if not isinstance(viewed, list):
            return jsonify({'error': 'Topic list must be provided as an array in the "viewed" field'}), 400
        listing = '\n'.join(f'- {t}' for t in viewed)
        topics, err = generate_json('similar_topics', f'Previously completed facts:\n{listing}', data, 'similar-topics')
        if err:
            return err
        return jsonify(topics)
