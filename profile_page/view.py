import asyncio
import logging
from collections.abc import Callable
from datetime import UTC
from datetime import datetime
from typing import Any

from profile_page.api.schemas.profile import ContributionDay
from profile_page.api.schemas.profile import ContributionSource
from profile_page.api.schemas.profile import GitHubUser
from profile_page.api.schemas.profile import HeatmapCell
from profile_page.api.schemas.profile import ProfilePage
from profile_page.api.schemas.profile import ProfileTab
from profile_page.api.schemas.profile import Showcase
from profile_page.core.state import Derived
from profile_page.core.state import State
from profile_page.services.heatmap_service import build_chart_option
from profile_page.services.heatmap_service import build_heatmap_cells
from profile_page.services.heatmap_service import total_contributions
from profile_page.services.profile_service import ProfileDataService


logger = logging.getLogger(__name__)

PROFILE_ERROR_MESSAGE = "Failed to load user profile"


def utc_now() -> datetime:
    return datetime.now(UTC)


def trailing_year_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the (from, to) instants covering the year that ends at `now`."""

    try:
        start = now.replace(year=now.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the previous year.
        start = now.replace(year=now.year - 1, day=28)
    return start, now


def format_date(value: str | datetime) -> str:
    """Render a timestamp as e.g. `March 5, 2014`."""

    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{value:%B} {value.day}, {value.year}"


class ProfileView:
    """Display state for one profile page and the values derived from it.

    Each navigation starts two independent loads: the profile and the
    contribution series. Each load writes only its own slice of state, and
    results from a superseded navigation are dropped.
    """

    def __init__(
        self,
        service: ProfileDataService,
        default_username: str,
        showcase: Showcase | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.service = service
        self.default_username = default_username
        self.showcase = showcase or Showcase()
        self.clock = clock
        self._generation = 0

        self.username: State[str] = State(default_username)
        self.user: State[GitHubUser | None] = State(None)
        self.contributions: State[list[ContributionDay]] = State([])
        self.contributions_source: State[ContributionSource] = State(
            ContributionSource.NONE
        )
        self.active_tab: State[ProfileTab] = State(ProfileTab.OVERVIEW)
        self.loading: State[bool] = State(True)
        self.contributions_loading: State[bool] = State(True)
        self.error: State[str | None] = State(None)

        self.total_contributions: Derived[int] = Derived(
            lambda: total_contributions(self.contributions.get()), self.contributions
        )
        self.chart_option: Derived[dict[str, Any]] = Derived(
            lambda: build_chart_option(self.contributions.get()), self.contributions
        )
        self.cells: Derived[list[HeatmapCell]] = Derived(
            lambda: build_heatmap_cells(self.contributions.get()), self.contributions
        )

    async def navigate(self, username: str | None = None) -> None:
        """Show `username`, or the default user when none is given."""

        self.username.set(username or self.default_username)
        await self.load_data()

    async def load_data(self) -> None:
        self._generation += 1
        generation = self._generation
        self.loading.set(True)
        self.contributions_loading.set(True)
        self.error.set(None)

        username = self.username.get()
        await asyncio.gather(
            self._load_profile(username, generation),
            self._load_contributions(username, generation),
        )

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _load_profile(self, username: str, generation: int) -> None:
        try:
            user = await self.service.fetch_profile(username)
        except Exception:
            logger.exception("Failed to load user %s", username)
            if self._is_current(generation):
                self.user.set(None)
                self.error.set(PROFILE_ERROR_MESSAGE)
                self.loading.set(False)
            return

        if not self._is_current(generation):
            logger.debug("Dropping stale profile result for %s", username)
            return
        self.user.set(user)
        self.loading.set(False)

    async def _load_contributions(self, username: str, generation: int) -> None:
        from_dt, to_dt = trailing_year_window(self.clock())
        series = await self.service.fetch_contributions(username, from_dt, to_dt)
        source = ContributionSource.LIVE

        if not series:
            series = await self._load_mock_contributions()
            source = ContributionSource.MOCK

        if not self._is_current(generation):
            logger.debug("Dropping stale contributions result for %s", username)
            return
        self.contributions_source.set(source if series else ContributionSource.NONE)
        self.contributions.set(series)
        self.contributions_loading.set(False)

    async def _load_mock_contributions(self) -> list[ContributionDay]:
        try:
            return await self.service.fetch_mock_contributions()
        except Exception:
            logger.exception("Failed to load mock contributions")
            return []

    def set_active_tab(self, tab: ProfileTab | str) -> None:
        self.active_tab.set(ProfileTab(tab))

    def snapshot(self) -> ProfilePage:
        return ProfilePage(
            username=self.username.get(),
            user=self.user.get(),
            loading=self.loading.get(),
            contributions_loading=self.contributions_loading.get(),
            error=self.error.get(),
            active_tab=self.active_tab.get(),
            contributions_source=self.contributions_source.get(),
            total_contributions=self.total_contributions.get(),
            contributions=self.contributions.get(),
            cells=self.cells.get(),
            chart_option=self.chart_option.get(),
            showcase=self.showcase,
        )
