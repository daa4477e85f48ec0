"""LLM backend clients. Every streamer yields (token, done) pairs."""
import json

import requests

ANTHROPIC_VERSION = '2023-06-01'
OPENAI_COMPAT_KINDS = ('openai', 'lmstudio', 'llamacpp', 'custom')


def validate_messages(messages):
    """Drop anything that isn't a {'role': str, 'content': str} dict."""
    if not isinstance(messages, list) or not messages:
        raise ValueError('Messages array must be a non-empty array')
    valid = [m for m in messages
             if isinstance(m, dict)
             and isinstance(m.get('role'), str)
             and isinstance(m.get('content'), str)]
    if not valid:
        raise ValueError('No valid messages found in the array')
    return valid


def stream_ollama(backend, model, messages, temperature=None, max_tokens=None):
    """Stream from Ollama API."""
    options = {}
    if temperature is not None:
        options['temperature'] = temperature
    if max_tokens:
        options['num_predict'] = max_tokens
    resp = requests.post(f'{backend.base_url}/api/chat', json={
        'model': model, 'messages': messages, 'stream': True, 'options': options,
    }, stream=True, timeout=120)
    resp.raise_for_status()
    for line in resp.iter_lines():
        if line:
            chunk = json.loads(line)
            token = chunk.get('message', {}).get('content', '')
            done = chunk.get('done', False)
            yield token, done
            if done:
                return


def stream_openai_compat(backend, model, messages, temperature=None, max_tokens=None):
    """Stream from any OpenAI-compatible API (OpenAI, LM Studio, llama.cpp, vLLM, etc.)."""
    headers = {'Content-Type': 'application/json'}
    if backend.api_key:
        headers['Authorization'] = f'Bearer {backend.api_key}'
    payload = {'model': model, 'messages': messages, 'stream': True}
    if temperature is not None:
        payload['temperature'] = temperature
    if max_tokens:
        payload['max_tokens'] = max_tokens
    base = backend.base_url.rstrip('/')
    resp = requests.post(f'{base}/v1/chat/completions', json=payload,
                         headers=headers, stream=True, timeout=120)
    resp.raise_for_status()
    for line in resp.iter_lines():
        if line:
            text = line.decode('utf-8', errors='ignore')
            if text.startswith('data: '):
                data = text[6:]
                if data.strip() == '[DONE]':
                    yield '', True
                    return
                chunk = json.loads(data)
                choices = chunk.get('choices') or [{}]
                token = (choices[0].get('delta') or {}).get('content') or ''
                yield token, False
    yield '', True


def stream_anthropic(backend, model, messages, temperature=None, max_tokens=None):
    """Stream from the Anthropic Messages API."""
    system = '\n\n'.join(m['content'] for m in messages if m['role'] == 'system')
    payload = {
        'model': model,
        'messages': [m for m in messages if m['role'] != 'system'],
        'max_tokens': max_tokens or 1024,
        'stream': True,
    }
    if system:
        payload['system'] = system
    if temperature is not None:
        payload['temperature'] = temperature
    headers = {
        'Content-Type': 'application/json',
        'x-api-key': backend.api_key,
        'anthropic-version': ANTHROPIC_VERSION,
    }
    base = backend.base_url.rstrip('/')
    resp = requests.post(f'{base}/v1/messages', json=payload,
                         headers=headers, stream=True, timeout=120)
    resp.raise_for_status()
    for line in resp.iter_lines():
        if not line:
            continue
        text = line.decode('utf-8', errors='ignore')
        if not text.startswith('data: '):
            continue
        event = json.loads(text[6:])
        kind = event.get('type')
        if kind == 'content_block_delta':
            yield event.get('delta', {}).get('text', ''), False
        elif kind == 'message_stop':
            yield '', True
            return
        elif kind == 'error':
            raise RuntimeError(event.get('error', {}).get('message', 'Anthropic stream error'))
    yield '', True


def stream_backend(backend, model, messages, **options):
    if backend.kind == 'ollama':
        return stream_ollama(backend, model, messages, **options)
    if backend.kind == 'anthropic':
        return stream_anthropic(backend, model, messages, **options)
    return stream_openai_compat(backend, model, messages, **options)


def list_models(backend):
    """Model names served by a backend. Raises on connection/HTTP errors."""
    if backend.kind == 'ollama':
        resp = requests.get(f'{backend.base_url}/api/tags', timeout=5)
        resp.raise_for_status()
        return [m['name'] for m in resp.json().get('models', [])]
    base = backend.base_url.rstrip('/')
    if backend.kind == 'anthropic':
        resp = requests.get(f'{base}/v1/models', headers={
            'x-api-key': backend.api_key, 'anthropic-version': ANTHROPIC_VERSION,
        }, timeout=5)
    else:
        headers = {}
        if backend.api_key:
            headers['Authorization'] = f'Bearer {backend.api_key}'
        resp = requests.get(f'{base}/v1/models', headers=headers, timeout=5)
    resp.raise_for_status()
    return [m.get('id', m.get('name', '')) for m in resp.json().get('data', [])]
