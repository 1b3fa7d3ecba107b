from collections.abc import Mapping
from datetime import UTC
from datetime import datetime
from typing import Any

import httpx


USER_AGENT = "github-profile-page"

CONTRIBUTIONS_QUERY = """
query Contributions($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""


def to_iso_instant(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC instant accepted by GraphQL."""

    instant = value.astimezone(UTC).isoformat(timespec="seconds")
    return instant.replace("+00:00", "Z")


async def fetch_user(
    client: httpx.AsyncClient,
    username: str,
    api_base_url: str,
) -> Mapping[str, Any]:
    """Fetch the public profile of `username` from the GitHub REST API.

    The request is unauthenticated so a stale token cannot break it.
    """

    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }

    response = await client.get(
        f"{api_base_url.rstrip('/')}/users/{username}", headers=headers
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub user response is invalid")
    return payload


async def fetch_contribution_weeks(
    client: httpx.AsyncClient,
    username: str,
    token: str,
    graphql_url: str,
    from_dt: datetime,
    to_dt: datetime,
) -> list[Any]:
    """Fetch the raw contribution calendar weeks for a user from GraphQL."""

    variables = {
        "login": username,
        "from": to_iso_instant(from_dt),
        "to": to_iso_instant(to_dt),
    }
    headers = {
        "Authorization": f"bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }

    response = await client.post(
        graphql_url,
        json={"query": CONTRIBUTIONS_QUERY, "variables": variables},
        headers=headers,
    )
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub GraphQL response is invalid")

    if payload.get("errors"):
        raise ValueError("GitHub GraphQL returned errors")

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise ValueError("GitHub GraphQL data is missing")

    user = data.get("user")
    if not isinstance(user, Mapping):
        raise ValueError("GitHub user not found")

    collection = user.get("contributionsCollection")
    if not isinstance(collection, Mapping):
        raise ValueError("GitHub contributionsCollection is missing")

    calendar = collection.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise ValueError("GitHub contributionCalendar is missing")

    weeks = calendar.get("weeks")
    if not isinstance(weeks, list):
        raise ValueError("GitHub contribution weeks are missing")

    return weeks
