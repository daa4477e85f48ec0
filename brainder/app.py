import os
import json
import importlib.util
from datetime import datetime

import requests
from flask import Flask, request, jsonify
from flask_sqlalchemy import SQLAlchemy

from brainder.extractor import extract
from brainder.prompts import get_prompt
from brainder.providers import stream_backend, list_models, validate_messages

app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'brainder-dev-key')
app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('BRAINDER_DATABASE_URL', 'sqlite:///brainder.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['BRAINDER_MODEL'] = os.environ.get('BRAINDER_MODEL', '')
app.config['BRAINDER_TEMPERATURE'] = float(os.environ.get('BRAINDER_TEMPERATURE', '0.7'))
app.config['BRAINDER_MAX_TOKENS'] = int(os.environ.get('BRAINDER_MAX_TOKENS', '1000'))
app.config['BRAINDER_CHAT_MAX_TOKENS'] = int(os.environ.get('BRAINDER_CHAT_MAX_TOKENS', '500'))

AI_PROVIDER = os.environ.get('AI_PROVIDER', 'openai')
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
ANTHROPIC_API_KEY = os.environ.get('ANTHROPIC_API_KEY', '')
OPENAI_BASE = os.environ.get('OPENAI_BASE', 'https://api.openai.com')
ANTHROPIC_BASE = os.environ.get('ANTHROPIC_BASE', 'https://api.anthropic.com')
OLLAMA_BASE = os.environ.get('OLLAMA_HOST', 'http://localhost:11434')

DEFAULT_MODELS = {
    'openai': 'gpt-4',
    'anthropic': 'claude-3-opus-20240229',
    'ollama': 'llama3.2',
}

db = SQLAlchemy(app)

# ─── Models ───────────────────────────────────────────────────────────


class Backend(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    kind = db.Column(db.String(30), nullable=False)  # openai | anthropic | ollama | lmstudio | llamacpp | custom
    base_url = db.Column(db.String(500), nullable=False)
    api_key = db.Column(db.String(500), default='')
    model = db.Column(db.String(120), default='')
    is_default = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # kind presets
    KIND_DEFAULTS = {
        'openai':    {'url': OPENAI_BASE,              'name': 'OpenAI'},
        'anthropic': {'url': ANTHROPIC_BASE,           'name': 'Anthropic'},
        'ollama':    {'url': OLLAMA_BASE,              'name': 'Ollama'},
        'lmstudio':  {'url': 'http://localhost:1234',  'name': 'LM Studio'},
        'llamacpp':  {'url': 'http://localhost:8080',  'name': 'llama.cpp'},
        'custom':    {'url': 'http://localhost:8000',  'name': 'Custom (OpenAI-compatible)'},
    }

    def to_dict(self):
        return {
            'id': self.id, 'name': self.name, 'kind': self.kind,
            'base_url': self.base_url, 'has_key': bool(self.api_key),
            'model': self.model, 'is_default': self.is_default,
        }


def default_backend():
    """Backend described by AI_PROVIDER and the provider keys in the environment."""
    kind = AI_PROVIDER if AI_PROVIDER in Backend.KIND_DEFAULTS else 'openai'
    defaults = Backend.KIND_DEFAULTS[kind]
    api_key = {'openai': OPENAI_API_KEY, 'anthropic': ANTHROPIC_API_KEY}.get(kind, '')
    return Backend(name=defaults['name'], kind=kind, base_url=defaults['url'],
                   api_key=api_key, is_default=True)


def get_active_backend(backend_id=None):
    """Get a specific backend or the default one."""
    if backend_id:
        return Backend.query.filter_by(id=backend_id).first()
    b = Backend.query.filter_by(is_default=True).first()
    if not b:
        b = Backend.query.first()
    if not b:
        b = default_backend()
        db.session.add(b)
        db.session.commit()
    return b

# ─── Platform ─────────────────────────────────────────────────────────


class Platform:
    """Core services exposed to apps via their register() function."""

    def __init__(self, flask_app):
        self._app = flask_app

    def default_model(self, backend):
        return (backend.model or self._app.config['BRAINDER_MODEL']
                or DEFAULT_MODELS.get(backend.kind, DEFAULT_MODELS['ollama']))

    def stream(self, messages, data=None, **options):
        data = data or {}
        backend = get_active_backend(data.get('backend_id'))
        if not backend:
            raise RuntimeError('No backend configured')
        model = data.get('model') or self.default_model(backend)
        options.setdefault('temperature', self._app.config['BRAINDER_TEMPERATURE'])
        options.setdefault('max_tokens', self._app.config['BRAINDER_MAX_TOKENS'])
        return stream_backend(backend, model, validate_messages(messages), **options)

    def complete(self, messages, data=None, **options):
        tokens = []
        for token, done in self.stream(messages, data, **options):
            if token:
                tokens.append(token)
            if done:
                break
        return ''.join(tokens)

    def sse(self, data):
        return f"data: {json.dumps(data)}\n\n"

    def prompt(self, name, **replacements):
        return get_prompt(name, replacements)

    def extract(self, buffer):
        return extract(buffer, on_error=self.report_malformed)

    @staticmethod
    def report_malformed(span, exc):
        print(f'[extract] Skipped malformed record ({exc}): {span[:200]}')


APPS = {}
APPS_DIR = os.path.join(os.path.dirname(__file__), 'apps')


def load_apps(flask_app, platform):
    """Scan apps/ directory, load manifests, register backends."""
    if not os.path.isdir(APPS_DIR):
        return

    for name in sorted(os.listdir(APPS_DIR)):
        app_dir = os.path.join(APPS_DIR, name)
        manifest_path = os.path.join(app_dir, 'manifest.json')
        if not os.path.isfile(manifest_path):
            continue

        with open(manifest_path) as f:
            manifest = json.load(f)

        app_id = manifest['id']
        APPS[app_id] = manifest

        backend_file = manifest.get('entry', {}).get('backend')
        if backend_file:
            spec = importlib.util.spec_from_file_location(
                f'brainder_app_{app_id}', os.path.join(app_dir, backend_file)
            )
            mod = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(mod)
            if hasattr(mod, 'register'):
                mod.register(flask_app, platform)

# ─── Backend CRUD ─────────────────────────────────────────────────────


@app.route('/api/backends')
def list_backends():
    backends = Backend.query.order_by(Backend.created_at, Backend.id).all()
    if not backends:
        get_active_backend()  # auto-create default
        backends = Backend.query.all()
    return jsonify({'backends': [b.to_dict() for b in backends],
                    'kinds': list(Backend.KIND_DEFAULTS.keys())})


@app.route('/api/backends', methods=['POST'])
def add_backend():
    data = request.get_json(silent=True) or {}
    kind = data.get('kind', 'custom')
    if kind not in Backend.KIND_DEFAULTS:
        return jsonify({'error': f'Unknown backend kind: {kind}'}), 400
    defaults = Backend.KIND_DEFAULTS[kind]
    b = Backend(
        name=data.get('name', defaults['name']),
        kind=kind,
        base_url=data.get('base_url', defaults['url']),
        api_key=data.get('api_key', ''),
        model=data.get('model', ''),
    )
    # If first backend, make it default
    if not Backend.query.first():
        b.is_default = True
    db.session.add(b)
    db.session.commit()
    return jsonify({'id': b.id, 'name': b.name})


@app.route('/api/backends/<int:bid>', methods=['PUT'])
def update_backend(bid):
    b = Backend.query.filter_by(id=bid).first_or_404()
    data = request.get_json(silent=True) or {}
    if 'name' in data: b.name = data['name']
    if 'base_url' in data: b.base_url = data['base_url']
    if 'api_key' in data: b.api_key = data['api_key']
    if 'model' in data: b.model = data['model']
    if data.get('is_default'):
        Backend.query.update({'is_default': False})
        b.is_default = True
    db.session.commit()
    return jsonify({'ok': True})


@app.route('/api/backends/<int:bid>', methods=['DELETE'])
def delete_backend(bid):
    b = Backend.query.filter_by(id=bid).first_or_404()
    was_default = b.is_default
    db.session.delete(b)
    db.session.commit()
    if was_default:
        first = Backend.query.first()
        if first:
            first.is_default = True
            db.session.commit()
    return jsonify({'ok': True})


@app.route('/api/backends/<int:bid>/test')
def test_backend(bid):
    b = Backend.query.filter_by(id=bid).first_or_404()
    try:
        list_models(b)
        return jsonify({'ok': True, 'status': 'connected'})
    except Exception as e:
        return jsonify({'ok': False, 'error': str(e)})


@app.route('/api/models')
def api_models():
    backend = get_active_backend(request.args.get('backend_id', type=int))
    if not backend:
        return jsonify({'models': [], 'error': 'No backend configured'})
    try:
        return jsonify({'models': list_models(backend), 'backend': backend.name, 'kind': backend.kind})
    except requests.ConnectionError:
        return jsonify({'models': [], 'error': f'{backend.name} not running'}), 200
    except Exception as e:
        return jsonify({'models': [], 'error': str(e)}), 200

# ─── Misc ─────────────────────────────────────────────────────────────


@app.route('/health')
def health():
    return jsonify({'ok': True, 'apps': sorted(APPS)})


@app.route('/api/apps')
def api_apps():
    return jsonify({'apps': list(APPS.values())})

# ─── Init ─────────────────────────────────────────────────────────────

with app.app_context():
    db.create_all()

# Load apps from apps/ directory
platform = Platform(app)
load_apps(app, platform)

if __name__ == '__main__':
    app.run(debug=True, port=int(os.environ.get('PORT', 3001)))
