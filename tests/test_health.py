def test_health(client):
    assert client.get("/api/v1/health").get_json() == {"status": "healthy"}


def test_health_db(client):
    response = client.get("/api/v1/health/db")
    assert response.status_code == 200
    assert response.get_json()["data"] == {"status": "connected"}
