def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

def test_db_ping(client):
    r = client.get("/db-ping")
    assert r.status_code == 200
    body = r.json()
    assert body["db"] == "ok"
    assert body["value"] == 1

def test_missing_token_uses_error_shape(client):
    r = client.get("/api/posts", headers={})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "No token provided"}

def test_unknown_route_uses_error_shape(client):
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Not Found"}

def test_wrong_method_uses_error_shape(client):
    r = client.put("/api/auth/logout")
    assert r.status_code == 405
    assert r.json() == {"success": False, "message": "Method Not Allowed"}
