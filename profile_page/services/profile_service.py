import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError

from profile_page.api.schemas.profile import ContributionDay
from profile_page.api.schemas.profile import GitHubUser
from profile_page.clients.github_client import fetch_contribution_weeks
from profile_page.clients.github_client import fetch_user
from profile_page.services.heatmap_service import flatten_contribution_weeks


logger = logging.getLogger(__name__)

contribution_series_adapter = TypeAdapter(list[ContributionDay])


class GitHubAPIError(Exception):
    """Raised when GitHub requests fail."""


class ProfileNotFoundError(GitHubAPIError):
    """Raised when GitHub has no user with the requested login."""


class MockDataUnavailableError(Exception):
    """Raised when the bundled mock contributions cannot be loaded."""


class ProfileDataService:
    """Fetches profile and contribution data for the profile view."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_base_url: str,
        graphql_url: str,
        token: str | None,
        mock_contributions_path: Path,
    ) -> None:
        self.client = client
        self.api_base_url = api_base_url
        self.graphql_url = graphql_url
        self.token = token.strip() if token else None
        self.mock_contributions_path = mock_contributions_path

    async def fetch_profile(self, username: str) -> GitHubUser:
        """Fetch the public profile for `username`. Single attempt, no retries.

        Raises:
            ProfileNotFoundError: If GitHub answers 404.
            GitHubAPIError: On any other transport or response failure.
        """

        try:
            payload = await fetch_user(
                self.client,
                username=username,
                api_base_url=self.api_base_url,
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise ProfileNotFoundError(f"GitHub user {username} not found") from exc
            raise GitHubAPIError("GitHub user request failed") from exc
        except Exception as exc:
            raise GitHubAPIError("GitHub user request failed") from exc

        try:
            return GitHubUser.model_validate(payload)
        except ValidationError as exc:
            raise GitHubAPIError("GitHub user response is invalid") from exc

    async def fetch_contributions(
        self, username: str, from_dt: datetime, to_dt: datetime
    ) -> list[ContributionDay]:
        """Fetch the live contribution series, or an empty one.

        Without a token no request is made. Failures are logged and reported
        as an empty series so callers can fall back to mock data.
        """

        if not self.token:
            logger.info("No GitHub token configured, skipping contributions query")
            return []

        try:
            weeks = await fetch_contribution_weeks(
                self.client,
                username=username,
                token=self.token,
                graphql_url=self.graphql_url,
                from_dt=from_dt,
                to_dt=to_dt,
            )
        except Exception:
            logger.exception("GraphQL contributions failed for %s", username)
            return []

        return flatten_contribution_weeks(weeks)

    async def fetch_mock_contributions(self) -> list[ContributionDay]:
        """Load the bundled placeholder contribution series.

        Raises:
            MockDataUnavailableError: If the asset is missing or malformed.
        """

        try:
            raw = await asyncio.to_thread(
                self.mock_contributions_path.read_text, encoding="utf-8"
            )
            series = contribution_series_adapter.validate_python(json.loads(raw))
        except (OSError, ValueError) as exc:
            raise MockDataUnavailableError(
                f"Mock contributions unavailable at {self.mock_contributions_path}"
            ) from exc

        by_date = {}
        for day in series:
            by_date.setdefault(day.date, day)
        return [by_date[day] for day in sorted(by_date)]
