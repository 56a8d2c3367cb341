
def test_health_check(client):
    response = client.get('/health')
    assert response.status_code == 200
    json_data = response.get_json()
    assert json_data.get('status') == 'ok'


def test_metrics_endpoint(client):
    client.get('/health')
    response = client.get('/metrics')
    assert response.status_code == 200
    assert b'flask_http_request' in response.data
