CARD = '{"id": "1", "category": "Python", "title": "Names, not boxes", "teaser": "Variables are labels."}'


def test_interview_returns_plan(client, fake_llm):
    calls = fake_llm('# Personalized ', 'Learning Plan')
    resp = client.post('/api/interview', json={'answer': 'I want to learn Python in 3 months'})
    assert resp.status_code == 200
    assert resp.get_json() == {'learningPlan': '# Personalized Learning Plan'}
    assert 'I want to learn Python in 3 months' in calls[0]['messages'][0]['content']


def test_interview_accepts_answer_list(client, fake_llm):
    calls = fake_llm('plan')
    client.post('/api/interview', json={'answer': ['Python', 'for a job']})
    assert '- Python\n- for a job' in calls[0]['messages'][0]['content']


def test_interview_requires_answer(client, fake_llm):
    fake_llm()
    assert client.post('/api/interview', json={}).status_code == 400


def test_learn_returns_cards(client, fake_llm):
    calls = fake_llm('```json\n', CARD, '\n```')
    history = [{'role': 'assistant', 'content': 'Lists are mutable.'}, {'role': 'user', 'content': 'next'}]
    resp = client.post('/api/learn', json={'learningPlan': '# Plan', 'level': 1, 'history': history})
    assert resp.status_code == 200
    assert resp.get_json()[0]['title'] == 'Names, not boxes'
    system = calls[0]['messages'][0]['content']
    assert '# Plan' in system
    assert 'Level:\n1' in system
    assert '- Lists are mutable.' in system
    assert calls[0]['messages'][1:] == history


def test_learn_requires_plan(client, fake_llm):
    fake_llm()
    assert client.post('/api/learn', json={'level': 0}).status_code == 400


def test_learn_unparseable_reply(client, fake_llm):
    fake_llm('Sorry, no card.')
    resp = client.post('/api/learn', json={'learningPlan': '# Plan'})
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Failed to parse AI response'}


def test_interview_coerces_numeric_answer(client, fake_llm):
    calls = fake_llm('plan')
    resp = client.post('/api/interview', json={'answer': 5})
    assert resp.status_code == 200
    assert 'User answers:\n5' in calls[0]['messages'][0]['content']
