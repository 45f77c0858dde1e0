import pytest
from fastapi.testclient import TestClient

from web.backend.app import app

FCFS_PROCESSES = [
    {'name': 'P1', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'CPU(12)'},
    {'name': 'P2', 'arrival_time': 1, 'priority': 1, 'burst_pattern': 'CPU(2)'},
    {'name': 'P3', 'arrival_time': 2, 'priority': 1, 'burst_pattern': 'CPU(2)'},
    {'name': 'P4', 'arrival_time': 3, 'priority': 1, 'burst_pattern': 'CPU(2)'},
]


@pytest.fixture
def client():
    return TestClient(app)


def test_algorithms(client):
    response = client.get('/algorithms')
    assert response.status_code == 200
    ids = [a['id'] for a in response.json()['algorithms']]
    assert len(ids) == 7
    assert 'MLFQ' in ids


def test_presets(client):
    presets = client.get('/presets').json()['presets']
    names = [p['name'] for p in presets]
    assert 'Basic FCFS' in names
    multi = next(p for p in presets if p['name'] == 'Multi-Core Load')
    assert multi['core_count'] == 2


def test_burst_pattern(client):
    body = client.post('/burst-pattern', json={'pattern': 'cpu(3), io(2), cpu(1)'}).json()
    assert body['pattern'] == 'CPU(3) -> IO(2) -> CPU(1)'
    assert (body['total_cpu'], body['total_io']) == (4, 2)

    assert client.post('/burst-pattern', json={'pattern': 'oops'}).status_code == 400


def test_simulate(client):
    response = client.post('/simulate', json={'processes': FCFS_PROCESSES,
                                              'algorithms': ['FCFS']})
    assert response.status_code == 200
    result = response.json()['results'][0]
    assert result['algorithm'] == 'FCFS'
    assert result['statistics']['avg_waiting_time'] == 9
    assert result['clock'] == 18
    assert result['event_log'][0] == '[T=  0] P1 arrived'
    completions = {p['name']: p['completion_time'] for p in result['processes']}
    assert completions == {'P1': 12, 'P2': 14, 'P3': 16, 'P4': 18}


def test_compare(client):
    response = client.post('/simulate/compare', json={
        'processes': FCFS_PROCESSES, 'algorithms': ['FCFS', 'SJF', 'ROUND_ROBIN'],
        'time_quantum': 4})
    comparison = response.json()['comparison']
    assert comparison['algorithms'] == ['FCFS', 'SJF', 'ROUND_ROBIN']
    assert len(comparison['avg_waiting_time']) == 3
    assert comparison['avg_waiting_time'][0] == 9


@pytest.mark.parametrize("payload", [
    {'processes': FCFS_PROCESSES, 'algorithms': ['lottery']},
    {'processes': FCFS_PROCESSES, 'algorithms': ['FCFS'], 'core_count': 0},
    {'processes': [{'name': 'P1', 'arrival_time': -1, 'burst_pattern': 'CPU(2)'}],
     'algorithms': ['FCFS']},
    {'processes': [{'name': 'P1', 'arrival_time': 0, 'burst_pattern': 'IO(2)'}],
     'algorithms': ['FCFS']},
])
def test_simulate_rejects_bad_input(client, payload):
    response = client.post('/simulate', json=payload)
    assert response.status_code == 400
    assert response.json()['detail']


def test_score_predictions(client):
    response = client.post('/predictions/score', json={
        'processes': FCFS_PROCESSES, 'algorithm': 'FCFS',
        'predictions': [{'process_name': 'P1', 'predicted_ct': 12}],
        'predicted_awt': 9})
    results = response.json()['results']
    assert results['total_score'] == 30
    assert results['max_score'] == 60


def test_realtime_init_step_reset(client):
    with client.websocket_connect('/ws/realtime') as ws:
        ws.send_json({'action': 'init', 'preset': 'Round Robin Demo'})
        initialized = ws.receive_json()
        assert initialized['type'] == 'initialized'
        assert initialized['config']['time_quantum'] == 4
        assert initialized['process_count'] == 2

        ws.send_json({'action': 'step'})
        step = ws.receive_json()
        assert step['type'] == 'step_result'
        assert step['state']['clock'] == 1
        assert step['state']['status'] == 'STEP'
        assert '[T=  0] P1 arrived' in step['new_logs']
        assert step['complete'] is False

        ws.send_json({'action': 'reset'})
        assert ws.receive_json()['type'] == 'reset'


def test_realtime_errors_keep_connection_open(client):
    with client.websocket_connect('/ws/realtime') as ws:
        ws.send_json({'action': 'init', 'processes': [
            {'name': 'P1', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'IO(1)'}]})
        assert ws.receive_json()['type'] == 'error'

        ws.send_json({'action': 'dance'})
        assert ws.receive_json()['message'] == 'Unknown action: dance'

        ws.send_json({'action': 'answer', 'answer': 'P1'})
        assert ws.receive_json()['type'] == 'error'


def test_realtime_quiz_question(client):
    with client.websocket_connect('/ws/realtime') as ws:
        ws.send_json({'action': 'init', 'quiz_enabled': True, 'algorithm': 'SRTF',
                      'processes': [
                          {'name': 'P1', 'arrival_time': 0, 'priority': 1,
                           'burst_pattern': 'CPU(8)'},
                          {'name': 'P2', 'arrival_time': 2, 'priority': 1,
                           'burst_pattern': 'CPU(2)'}]})
        ws.receive_json()

        frames = []
        for _ in range(3):
            ws.send_json({'action': 'step'})
            frames.append(ws.receive_json())
        assert [f['quiz'] is not None for f in frames] == [False, False, True]
        question = frames[-1]
        assert question['quiz']['timestamp'] == 2
        # the tick waits for the answer
        assert question['state']['clock'] == 2
        assert question['new_logs'] == []

        ws.send_json({'action': 'step'})
        held = ws.receive_json()
        assert held['state']['clock'] == 2
        assert held['quiz'] == question['quiz']

        ws.send_json({'action': 'answer', 'answer': 'Yes, preempt'})
        answer = ws.receive_json()
        assert answer['correct'] is True
        assert answer['quiz']['total_points'] == 10

        ws.send_json({'action': 'step'})
        after = ws.receive_json()
        assert after['state']['clock'] == 3
        assert after['quiz'] is None
        assert '[T=  2] P2 arrived' in after['new_logs']
