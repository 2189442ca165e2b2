"""Health probes and root endpoint."""


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/health/live").json() == {"status": "alive"}


def test_readiness_with_cache_disabled(client):
    body = client.get("/health/ready").json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": "healthy", "redis": "disabled"}


def test_root(client):
    body = client.get("/").json()
    assert body["name"] == "House Treasure Marketplace"
    assert body["environment"] == "test"
    assert body["docs"] == "/docs"
