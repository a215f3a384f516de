def test_performance_endpoint(client):
    response = client.get("/api/v1/performance")

    assert response.status_code == 200

    data = response.get_json()

    assert "memory" in data
    assert "threads" in data
    assert "time" in data

    assert isinstance(data["threads"], int)
    assert "MB" in data["memory"]
    assert data["snapshot"]["expenses"] == 3
    assert data["snapshot"]["storageError"] is None
