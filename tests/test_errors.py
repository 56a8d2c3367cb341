def test_404_json_envelope(client):
    resp = client.get('/no/such/route')
    assert resp.status_code == 404
    data = resp.get_json()
    assert data['success'] is False
    assert data['code'] == 404
    assert isinstance(data.get('error'), str)


def test_unexpected_500_json_envelope(client):
    resp = client.get('/__boom')
    assert resp.status_code == 500
    data = resp.get_json()
    assert data['success'] is False
    assert data['code'] == 500
    assert 'RuntimeError' not in data['error']
    assert 'boom' not in data['error']


def test_ok_helper_endpoint(client):
    resp = client.get('/__ok')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data == {
        'success': True,
        'message': 'success',
        'data': {'ping': 'pong'}
    }


def test_validation_error_lists_fields(client):
    resp = client.post('/api/v1/auth/login', json={'email': 'bad'})
    assert resp.status_code == 400
    data = resp.get_json()
    assert data['error'] == 'Validation error'
    assert set(data['fields']) == {'email', 'password'}


def test_method_not_allowed_uses_envelope(client):
    resp = client.get('/api/v1/vendor-registration/submit')
    assert resp.status_code == 405
    assert resp.get_json()['code'] == 405
