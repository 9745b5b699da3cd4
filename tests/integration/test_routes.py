"""Integration tests for the Flask JSON API.

Tests cover:
    - POST /api/trace with good, blank, missing and undecodable uploads
    - POST /api/plan with valid payloads and each class of bad input
    - GET /api/styles
"""

import io

import pytest
from PIL import Image

pytestmark = pytest.mark.integration


def _upload(client, data, filename='sig.png'):
    return client.post(
        '/api/trace',
        data={'image': (io.BytesIO(data), filename)},
        content_type='multipart/form-data',
    )


@pytest.fixture
def traced(flask_client, bar_png):
    response = _upload(flask_client, bar_png)
    assert response.status_code == 200
    return response.get_json()


class TestTraceEndpoint:

    def test_bar(self, traced):
        assert traced['strokes']
        assert traced['metadata']['original_size'] == [260, 60]
        assert traced['metadata']['truncated'] is False
        point = traced['strokes'][0]['points'][0]
        assert set(point) >= {'x', 'y'}

    def test_blank_is_not_an_error(self, flask_client, blank_png):
        response = _upload(flask_client, blank_png)
        assert response.status_code == 200
        assert response.get_json()['strokes'] == []

    def test_missing_field(self, flask_client):
        response = flask_client.post('/api/trace', data={'name': 'sig'},
                                     content_type='multipart/form-data')
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_empty_upload(self, flask_client):
        response = _upload(flask_client, b'')
        assert response.status_code == 400

    def test_undecodable_upload(self, flask_client):
        response = _upload(flask_client, b'not an image', filename='notes.txt')
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_oversized_upload(self, flask_client, monkeypatch):
        monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 100)
        buf = io.BytesIO()
        Image.new('RGB', (300, 100), 'white').save(buf, format='PNG')
        response = _upload(flask_client, buf.getvalue())
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_get_not_allowed(self, flask_client):
        assert flask_client.get('/api/trace').status_code == 405


class TestPlanEndpoint:

    def test_plan(self, flask_client, traced):
        response = flask_client.post('/api/plan', json={
            'analysis': traced, 'width': 800, 'height': 300, 'style': 'rigid_formal',
        })
        assert response.status_code == 200
        body = response.get_json()
        assert body['paths']
        assert body['duration'] == body['paths'][-1]['endTime']
        first = body['paths'][0]
        assert first['id'].startswith('stroke-')
        assert first['startTime'] == first['points'][0]['time']
        assert set(first['points'][0]) == {'x', 'y', 'time', 'lineWidth', 'opacity'}

    def test_plan_with_duration(self, flask_client, traced):
        response = flask_client.post('/api/plan', json={
            'analysis': traced, 'width': 800, 'height': 300, 'duration': 2.5,
        })
        assert response.status_code == 200
        assert response.get_json()['duration'] == pytest.approx(2500)

    def test_style_overrides(self, flask_client, traced):
        response = flask_client.post('/api/plan', json={
            'analysis': traced, 'width': 800, 'height': 300,
            'style': {'preset': 'flowing_dynamic', 'pressure_scale': 'lots'},
        })
        assert response.status_code == 200

    def test_empty_analysis(self, flask_client):
        response = flask_client.post('/api/plan', json={
            'analysis': {'strokes': []}, 'width': 800, 'height': 300,
        })
        assert response.status_code == 200
        assert response.get_json() == {'paths': [], 'duration': 0.0}

    @pytest.mark.parametrize("payload", [
        {'width': 800, 'height': 300},
        {'analysis': {'strokes': 'nope'}, 'width': 800, 'height': 300},
        {'analysis': {'strokes': []}, 'width': 0, 'height': 300},
        {'analysis': {'strokes': []}, 'width': 'wide', 'height': 300},
        {'analysis': {'strokes': []}, 'width': 800},
        {'analysis': {'strokes': []}, 'width': 20000, 'height': 300},
        {'analysis': {'strokes': []}, 'width': 800, 'height': 300, 'duration': -1},
        {'analysis': {'strokes': []}, 'width': 800, 'height': 300, 'duration': 'soon'},
        {'analysis': {'strokes': [[1, 2]]}, 'width': 800, 'height': 300},
        {'analysis': {'strokes': [{'points': 'abc'}]}, 'width': 800, 'height': 300},
        {'analysis': {'strokes': [], 'metadata': [1]}, 'width': 800, 'height': 300},
        {'analysis': {'strokes': [], 'metadata': {'original_size': [1]}}, 'width': 800, 'height': 300},
    ])
    def test_bad_payload(self, flask_client, payload):
        response = flask_client.post('/api/plan', json=payload)
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_non_finite_coordinate(self, flask_client):
        body = ('{"analysis": {"strokes": [{"points": [{"x": Infinity, "y": 10}]}]},'
                ' "width": 800, "height": 300}')
        response = flask_client.post('/api/plan', data=body, content_type='application/json')
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_not_json(self, flask_client):
        response = flask_client.post('/api/plan', data='width=800',
                                     content_type='application/x-www-form-urlencoded')
        assert response.status_code == 400

    def test_json_array(self, flask_client):
        response = flask_client.post('/api/plan', json=[1, 2, 3])
        assert response.status_code == 400


class TestStylesEndpoint:

    def test_styles(self, flask_client):
        response = flask_client.get('/api/styles')
        assert response.status_code == 200
        body = response.get_json()
        assert set(body['presets']) == {'smooth_cursive', 'rigid_formal', 'flowing_dynamic'}
        assert body['default']['base_ms_per_px'] == 1.2
        assert body['presets']['rigid_formal']['label'] == 'Rigid Formal'
