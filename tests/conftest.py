import json
import os

os.environ['BRAINDER_DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('AI_PROVIDER', 'openai')

import pytest

from brainder.app import app, db, platform, Backend


@pytest.fixture
def client():
    app.config['TESTING'] = True
    with app.app_context():
        Backend.query.delete()
        db.session.commit()
    return app.test_client()


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace the model backend with canned token chunks.

    Returns an installer; each call records the messages and options passed in.
    """
    calls = []

    def install(*chunks, error=None):
        def stream(messages, data=None, **options):
            calls.append({'messages': messages, 'data': data, 'options': options})

            def gen():
                for chunk in chunks:
                    yield chunk, False
                if error:
                    raise error
                yield '', True
            return gen()

        monkeypatch.setattr(platform, 'stream', stream)
        return calls

    return install


@pytest.fixture
def read_sse():
    def read(response):
        body = response.get_data(as_text=True)
        return [json.loads(line[6:]) for line in body.split('\n') if line.startswith('data: ')]
    return read
