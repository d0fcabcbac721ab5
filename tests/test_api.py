"""
HTTP boundary tests for POST /estimate.
"""

import pytest
from fastapi.testclient import TestClient

from coverage_core.api.main import create_app
from coverage_core.heatmaps.visualize import ColorMap, to_rgb


def mask_payload(rows, cols, value=False):
    return {'rows': rows, 'cols': cols, 'data': [[value] * cols for _ in range(rows)]}


@pytest.fixture
def client(fast_settings):
    return TestClient(create_app(fast_settings))


def assert_grid_in_range(grid, rows, cols):
    assert grid['rows'] == rows
    assert grid['cols'] == cols
    assert len(grid['data']) == rows
    for row in grid['data']:
        assert len(row) == cols
        for value, color in row:
            assert 0.0 <= value <= 1.0
            assert len(color) == 3
            assert all(0 <= c <= 255 for c in color)


class TestEstimateEndpoint:

    def test_no_rectangles(self, client):
        resp = client.post('/estimate', json={'mask': mask_payload(3, 3), 'rectangles': []})
        assert resp.status_code == 200

        body = resp.json()
        for name in ('probabilities', 'entropy'):
            for row in body[name]['data']:
                for value, _ in row:
                    assert value == 0.0

    def test_small_feasible(self, client):
        resp = client.post('/estimate', json={
            'mask': mask_payload(3, 3),
            'rectangles': [{'width': 1, 'height': 1}, {'width': 2, 'height': 1}],
        })
        assert resp.status_code == 200

        body = resp.json()
        assert_grid_in_range(body['probabilities'], 3, 3)
        assert_grid_in_range(body['entropy'], 3, 3)

    def test_colors_follow_colormaps(self, client):
        resp = client.post('/estimate', json={
            'mask': mask_payload(1, 3),
            'rectangles': [{'width': 3, 'height': 1}],
        })
        body = resp.json()

        value, color = body['probabilities']['data'][0][0]
        assert value == pytest.approx(1.0)
        assert tuple(color) == to_rgb(value, ColorMap.VIRIDIS)

        value, color = body['entropy']['data'][0][0]
        assert tuple(color) == to_rgb(value, ColorMap.MAGMA)

    def test_over_capacity(self, client):
        resp = client.post('/estimate', json={
            'mask': mask_payload(5, 9, value=True),
            'rectangles': [{'width': 1, 'height': 1}] * 46,
        })
        assert resp.status_code == 200
        body = resp.json()
        for name in ('probabilities', 'entropy'):
            assert all(value == 0.0 for row in body[name]['data'] for value, _ in row)

    def test_masked_cells_zero(self, client):
        mask = mask_payload(2, 3)
        mask['data'][0][1] = True
        resp = client.post('/estimate', json={'mask': mask, 'rectangles': [{'width': 1, 'height': 2}]})
        assert resp.status_code == 200
        assert resp.json()['probabilities']['data'][0][1][0] == 0.0

    def test_max_size_accepted(self, client):
        resp = client.post('/estimate', json={'mask': mask_payload(9, 9), 'rectangles': []})
        assert resp.status_code == 200

    def test_grid_too_large(self, client):
        resp = client.post('/estimate', json={
            'mask': mask_payload(10, 10),
            'rectangles': [{'width': 1, 'height': 1}],
        })
        assert resp.status_code == 400
        assert resp.content == b''

    def test_too_many_columns(self, client):
        resp = client.post('/estimate', json={'mask': mask_payload(3, 10), 'rectangles': []})
        assert resp.status_code == 400

    def test_ragged_mask(self, client):
        mask = mask_payload(2, 2)
        mask['data'][1] = [False]
        resp = client.post('/estimate', json={'mask': mask, 'rectangles': []})
        assert resp.status_code == 400
        assert resp.content == b''

    def test_malformed_json(self, client):
        resp = client.post('/estimate', content=b'{"mask": ', headers={'content-type': 'application/json'})
        assert resp.status_code == 400

    def test_non_positive_rectangle(self, client):
        resp = client.post('/estimate', json={
            'mask': mask_payload(3, 3),
            'rectangles': [{'width': 0, 'height': 1}],
        })
        assert resp.status_code == 400

    def test_oversized_rectangle_side(self, client):
        resp = client.post('/estimate', json={
            'mask': mask_payload(3, 3),
            'rectangles': [{'width': 2 ** 63, 'height': 1}],
        })
        assert resp.status_code == 400
        assert resp.content == b''

    def test_missing_rectangles(self, client):
        resp = client.post('/estimate', json={'mask': mask_payload(3, 3)})
        assert resp.status_code == 400

    def test_non_boolean_mask(self, client):
        mask = mask_payload(1, 2)
        mask['data'][0][0] = "yes"
        resp = client.post('/estimate', json={'mask': mask, 'rectangles': []})
        assert resp.status_code == 400


class TestApp:

    def test_health(self, client):
        assert client.get('/health').json() == {'status': 'ok'}

    def test_static_dir_served(self, fast_settings, tmp_path):
        (tmp_path / 'index.html').write_text('<html>coverage</html>', encoding='utf-8')
        settings = fast_settings.with_overrides(static_dir=str(tmp_path))
        client = TestClient(create_app(settings))

        resp = client.get('/')
        assert resp.status_code == 200
        assert 'coverage' in resp.text
        # API routes still win over the static mount
        assert client.get('/health').status_code == 200

    def test_missing_static_dir_ignored(self, fast_settings, tmp_path):
        settings = fast_settings.with_overrides(static_dir=str(tmp_path / 'missing'))
        client = TestClient(create_app(settings))
        assert client.get('/health').status_code == 200
