import httpx
from fastapi.testclient import TestClient

from profile_page.main import create_app
from profile_page.settings import Settings


def make_client(monkeypatch) -> TestClient:
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "1")
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "60")
    monkeypatch.setenv("GITHUB_API_BASE_URL", "https://api.github.test")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TestClient(create_app(Settings(), http_client=http_client))


def test_profile_pages_rate_limited_after_threshold(monkeypatch) -> None:
    """Rate limiter blocks repeated profile requests from one client."""

    client = make_client(monkeypatch)
    headers = {"X-Forwarded-For": "203.0.113.10"}

    first = client.get("/api/profile/octocat", headers=headers)
    second = client.get("/octocat", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.headers["Retry-After"]


def test_rate_limit_buckets_are_per_client(monkeypatch) -> None:
    """Each forwarded client address gets its own request budget."""

    client = make_client(monkeypatch)

    first = client.get("/api/profile/octocat", headers={"X-Forwarded-For": "203.0.113.10"})
    second = client.get("/api/profile/octocat", headers={"X-Forwarded-For": "203.0.113.11"})

    assert first.status_code == 200
    assert second.status_code == 200


def test_health_and_assets_not_rate_limited(monkeypatch) -> None:
    """Rate limiter does not affect health checks or static assets."""

    client = make_client(monkeypatch)

    health = [client.get("/health/live") for _ in range(3)]
    assets = [client.get("/assets/mock/contributions.json") for _ in range(3)]

    assert [response.status_code for response in health] == [200, 200, 200]
    assert [response.status_code for response in assets] == [200, 200, 200]


def test_logins_resembling_exempt_paths_are_rate_limited(monkeypatch) -> None:
    """Exemptions match whole path segments, not login prefixes."""

    client = make_client(monkeypatch)
    headers = {"X-Forwarded-For": "203.0.113.12"}

    responses = [client.get("/healthyuser", headers=headers) for _ in range(3)]
    assets_login = client.get(
        "/assetsmith", headers={"X-Forwarded-For": "203.0.113.13"}
    )
    assets_again = client.get(
        "/api/profile/assetsmith", headers={"X-Forwarded-For": "203.0.113.13"}
    )

    assert [response.status_code for response in responses] == [200, 429, 429]
    assert assets_login.status_code == 200
    assert assets_again.status_code == 429
