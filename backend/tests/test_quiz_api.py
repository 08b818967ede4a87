from fastapi.testclient import TestClient
from quiz_api.main import app

client = TestClient(app)

CORRECT_FIELDS = ("correctAnswers", "correctAnswerIds", "correctAnswerTexts", "correct_answer_ids", "accepted_answers")


def _create_quiz(title="Test Quiz"):
    r = client.post('/api/quizzes', json={'title': title})
    assert r.status_code == 201
    return r.json()['data']


def _add_question(quiz_id, payload):
    r = client.post(f'/api/quizzes/{quiz_id}/questions', json=payload)
    assert r.status_code == 201, r.json()
    return r.json()['data']


def test_create_quiz_returns_envelope():
    r = client.post('/api/quizzes', json={'title': '  Java Quiz '})
    assert r.status_code == 201
    body = r.json()
    assert body['success'] is True
    assert body['error'] is None
    assert body['data']['id'] == 1
    assert body['data']['title'] == 'Java Quiz'
    assert body['data']['questionIds'] == []
    assert 'createdAt' in body['data']


def test_create_quiz_rejects_blank_and_missing_title():
    r = client.post('/api/quizzes', json={'title': '   '})
    assert r.status_code == 400
    assert r.json() == {'success': False, 'data': None, 'error': 'Quiz title is required'}
    r2 = client.post('/api/quizzes', json={})
    assert r2.status_code == 400
    assert r2.json()['success'] is False


def test_list_quizzes_reports_question_count():
    q1 = _create_quiz('Quiz 1')
    _create_quiz('Quiz 2')
    _add_question(q1['id'], {'text': 'Q?', 'type': 'SINGLE', 'options': ['A', 'B'], 'correctAnswers': [0]})
    r = client.get('/api/quizzes')
    assert r.status_code == 200
    data = r.json()['data']
    assert [q['title'] for q in data] == ['Quiz 1', 'Quiz 2']
    assert [q['questionCount'] for q in data] == [1, 0]
    assert set(data[0]) == {'id', 'title', 'questionCount', 'createdAt'}


def test_get_single_quiz_and_missing_quiz():
    quiz = _create_quiz()
    r = client.get(f"/api/quizzes/{quiz['id']}")
    assert r.status_code == 200
    assert r.json()['data']['questionCount'] == 0
    missing = client.get('/api/quizzes/999')
    assert missing.status_code == 404
    assert missing.json()['success'] is False


def test_add_question_returns_answers():
    quiz = _create_quiz()
    q = _add_question(quiz['id'], {
        'text': 'What is Java?', 'type': 'SINGLE',
        'options': ['Language', 'Framework', 'Database'], 'correctAnswers': [0],
    })
    assert q['text'] == 'What is Java?'
    assert q['quizId'] == quiz['id']
    assert [o['text'] for o in q['options']] == ['Language', 'Framework', 'Database']
    assert q['correctAnswerIds'] == [q['options'][0]['id']]
    assert q['correctAnswerTexts'] is None
    assert q['wordLimit'] is None


def test_add_text_question_defaults_word_limit():
    quiz = _create_quiz()
    q = _add_question(quiz['id'], {'text': 'Capital of France?', 'type': 'TEXT', 'correctAnswerTexts': ['Paris']})
    assert q['wordLimit'] == 300
    assert q['correctAnswerTexts'] == ['Paris']
    assert q['options'] is None
    assert q['correctAnswerIds'] is None


def test_add_question_validation_errors():
    quiz = _create_quiz()
    cases = [
        ({'text': ' ', 'type': 'SINGLE', 'options': ['A', 'B'], 'correctAnswers': [0]}, 'Question text is required'),
        ({'text': 'Q', 'type': 'SINGLE', 'options': ['A'], 'correctAnswers': [0]}, 'at least 2 options'),
        ({'text': 'Q', 'type': 'SINGLE', 'options': ['A', 'B'], 'correctAnswers': [0, 1]}, 'exactly 1 correct answer'),
        ({'text': 'Q', 'type': 'MULTIPLE', 'options': ['A', 'B'], 'correctAnswers': [3]}, 'Invalid correct answer index'),
        ({'text': 'Q', 'type': 'TEXT', 'correctAnswerTexts': ['x'], 'wordLimit': 301}, 'between 1 and 300'),
    ]
    for payload, reason in cases:
        r = client.post(f"/api/quizzes/{quiz['id']}/questions", json=payload)
        assert r.status_code == 400
        assert reason in r.json()['error']
    assert client.get(f"/api/quizzes/{quiz['id']}").json()['data']['questionCount'] == 0


def test_add_question_unknown_type_is_bad_request():
    quiz = _create_quiz()
    r = client.post(f"/api/quizzes/{quiz['id']}/questions", json={'text': 'Q', 'type': 'ESSAY'})
    assert r.status_code == 400
    assert r.json()['success'] is False


def test_add_question_to_missing_quiz():
    r = client.post('/api/quizzes/999/questions', json={'text': 'Q', 'type': 'TEXT', 'correctAnswerTexts': ['a']})
    assert r.status_code == 404
    assert 'Quiz not found' in r.json()['error']


def test_public_questions_never_expose_answers():
    quiz = _create_quiz()
    _add_question(quiz['id'], {'text': 'S', 'type': 'SINGLE', 'options': ['A', 'B'], 'correctAnswers': [1]})
    _add_question(quiz['id'], {'text': 'M', 'type': 'MULTIPLE', 'options': ['A', 'B', 'C'], 'correctAnswers': [0, 2]})
    _add_question(quiz['id'], {'text': 'T', 'type': 'TEXT', 'correctAnswerTexts': ['x'], 'wordLimit': 10})
    for _ in range(2):
        r = client.get(f"/api/quizzes/{quiz['id']}/questions")
        assert r.status_code == 200
        data = r.json()['data']
        assert [q['text'] for q in data] == ['S', 'M', 'T']
        for q in data:
            for field in CORRECT_FIELDS:
                assert field not in q
        assert data[2]['wordLimit'] == 10
        assert [o['text'] for o in data[1]['options']] == ['A', 'B', 'C']


def test_public_questions_for_missing_quiz():
    r = client.get('/api/quizzes/12345/questions')
    assert r.status_code == 404


def test_submit_single_choice_correct_and_incorrect():
    quiz = _create_quiz('T')
    q = _add_question(quiz['id'], {'text': 'What is 2 + 2?', 'type': 'SINGLE', 'options': ['3', '4', '5'], 'correctAnswers': [1]})
    good = client.post(f"/api/quizzes/{quiz['id']}/submit", json={
        'answers': [{'questionId': q['id'], 'selectedOptions': [q['options'][1]['id']]}],
    })
    assert good.status_code == 200
    assert good.json()['data'] == {'score': 1, 'total': 1, 'results': [{'questionId': q['id'], 'correct': True}]}
    bad = client.post(f"/api/quizzes/{quiz['id']}/submit", json={
        'answers': [{'questionId': q['id'], 'selectedOptions': [q['options'][0]['id']]}],
    })
    assert bad.json()['data']['score'] == 0
    assert bad.json()['data']['total'] == 1
    assert bad.json()['data']['results'][0]['correct'] is False


def test_submit_multiple_choice():
    quiz = _create_quiz()
    q = _add_question(quiz['id'], {'text': 'Evens?', 'type': 'MULTIPLE', 'options': ['1', '2', '3', '4'], 'correctAnswers': [1, 3]})
    opts = [o['id'] for o in q['options']]
    url = f"/api/quizzes/{quiz['id']}/submit"
    r = client.post(url, json={'answers': [{'questionId': q['id'], 'selectedOptions': [opts[3], opts[1]]}]})
    assert r.json()['data']['results'][0]['correct'] is True
    r = client.post(url, json={'answers': [{'questionId': q['id'], 'selectedOptions': [opts[1]]}]})
    assert r.json()['data']['results'][0]['correct'] is False


def test_submit_text_answer_explicit_and_legacy():
    quiz = _create_quiz()
    q = _add_question(quiz['id'], {'text': 'Answer?', 'type': 'TEXT', 'correctAnswerTexts': ['42', 'Forty-Two']})
    url = f"/api/quizzes/{quiz['id']}/submit"
    r = client.post(url, json={'answers': [{'questionId': q['id'], 'textAnswer': ' forty-two '}]})
    assert r.json()['data']['score'] == 1
    r = client.post(url, json={'answers': [{'questionId': q['id'], 'selectedOptions': [42]}]})
    assert r.json()['data']['score'] == 1
    r = client.post(url, json={'answers': [{'questionId': q['id'], 'textAnswer': 'forty'}]})
    assert r.json()['data']['score'] == 0


def test_submit_rejects_question_from_other_quiz():
    quiz_a = _create_quiz('A')
    quiz_b = _create_quiz('B')
    q = _add_question(quiz_a['id'], {'text': 'Q', 'type': 'SINGLE', 'options': ['A', 'B'], 'correctAnswers': [0]})
    r = client.post(f"/api/quizzes/{quiz_b['id']}/submit", json={
        'answers': [{'questionId': q['id'], 'selectedOptions': [q['options'][0]['id']]}],
    })
    assert r.status_code == 400
    body = r.json()
    assert body['success'] is False
    assert body['data'] is None
    assert 'does not belong' in body['error']


def test_submit_unknown_question_and_missing_quiz():
    quiz = _create_quiz()
    r = client.post(f"/api/quizzes/{quiz['id']}/submit", json={'answers': [{'questionId': 777, 'selectedOptions': [1]}]})
    assert r.status_code == 400
    assert 'Invalid question ID: 777' in r.json()['error']
    r2 = client.post('/api/quizzes/999/submit', json={'answers': []})
    assert r2.status_code == 404


def test_submit_requires_answers_list():
    quiz = _create_quiz()
    r = client.post(f"/api/quizzes/{quiz['id']}/submit", json={})
    assert r.status_code == 400


def test_request_id_header_exists():
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers
    echoed = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert echoed.headers['X-Request-ID'] == 'abc123'
