from marketplace.store import StoreError


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'healthy'


def test_liveness(client):
    body = client.get('/health/live').get_json()
    assert body['status'] == 'alive'
    assert isinstance(body['pid'], int)


def test_readiness_with_sql_store(client):
    resp = client.get('/health/ready')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['store'] == 'healthy'
    assert body['store_backend'] == 'sql'
    assert body['overall'] == 'healthy'


def test_readiness_reports_store_failure(app, client, monkeypatch):
    store = app.extensions['store']

    def _fail():
        raise StoreError('connection refused')

    monkeypatch.setattr(store, 'ping', _fail)
    resp = client.get('/health/ready')
    assert resp.status_code == 503
    body = resp.get_json()
    assert body['store'] == 'unhealthy'
    assert body['overall'] == 'unhealthy'
