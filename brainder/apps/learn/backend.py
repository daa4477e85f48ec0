"""Learning plan app backend."""
from flask import request, jsonify

from brainder.extractor import clean_json_response
from brainder.prompts import history_section


def register(app, platform):

    @app.route('/api/interview', methods=['POST'])
    def run_interview():
        data = request.get_json(silent=True) or {}
        answer = data.get('answer')
        if isinstance(answer, (dict, list)):
            answer = '\n'.join(f'- {a}' for a in (answer.values() if isinstance(answer, dict) else answer))
        answer = str(answer or '').strip()
        if not answer:
            return jsonify({'error': 'Answer is required'}), 400

        messages = [
            {'role': 'system', 'content': platform.prompt('interview', answer=answer)},
            {'role': 'user', 'content': 'Create my learning plan.'},
        ]
        try:
            plan = platform.complete(messages, data)
        except Exception as e:
            print(f'[interview] API route error: {e}')
            return jsonify({'error': str(e)}), 500
        return jsonify({'learningPlan': plan})

    @app.route('/api/learn', methods=['POST'])
    def run_learn():
        data = request.get_json(silent=True) or {}
        plan = str(data.get('learningPlan') or '').strip()
        history = data.get('history') or []
        if not plan:
            return jsonify({'error': 'Learning plan is required'}), 400
        if not isinstance(history, list):
            return jsonify({'error': 'History must be a list'}), 400

        seen = [m['content'] for m in history
                if isinstance(m, dict) and m.get('role') == 'assistant' and isinstance(m.get('content'), str)]
        system = platform.prompt(
            'learn',
            learningPlan=plan,
            level=data.get('level', 0),
            language=data.get('language') or 'English',
            historySection=history_section(seen),
        )
        messages = [{'role': 'system', 'content': system}, *history]
        if not history:
            messages.append({'role': 'user', 'content': 'Generate the next card.'})

        try:
            text = platform.complete(messages, data)
        except Exception as e:
            print(f'[learn] Error generating learn content: {e}')
            return jsonify({'error': 'Failed to generate feed content'}), 500
        cards, _ = platform.extract(clean_json_response(text))
        if not cards:
            return jsonify({'error': 'Failed to parse AI response'}), 500
        return jsonify(cards)
