from datetime import date
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ProfileTab(str, Enum):
    """Tabs shown above the profile content."""

    OVERVIEW = "overview"
    REPOSITORIES = "repositories"
    PROJECTS = "projects"
    PACKAGES = "packages"
    STARS = "stars"


class ContributionSource(str, Enum):
    """Where the currently stored contribution series came from."""

    NONE = "none"
    LIVE = "live"
    MOCK = "mock"


class GitHubUser(BaseModel):
    """Public profile returned by the GitHub REST users endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str
    id: int
    avatar_url: str
    html_url: str = ""
    name: str | None = None
    company: str | None = None
    blog: str | None = None
    location: str | None = None
    email: str | None = None
    bio: str | None = None
    twitter_username: str | None = None
    public_repos: int = 0
    public_gists: int = 0
    followers: int = 0
    following: int = 0
    created_at: datetime


class ContributionDay(BaseModel):
    """Single day of a contribution series."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(ge=0)


class HeatmapCell(BaseModel):
    """Contribution day annotated with its color bucket and tooltip label."""

    date: date
    count: int
    level: int
    label: str


class PopularRepo(BaseModel):
    name: str
    description: str | None = None
    language: str | None = None
    language_color: str | None = None
    stars: int = 0
    forks: int = 0
    is_forked: bool = False
    forked_from: str | None = None
    visibility: str = "Public"


class Achievement(BaseModel):
    icon: str
    name: str
    level: str = ""


class Showcase(BaseModel):
    """Static display data rendered next to the live profile."""

    popular_repos: list[PopularRepo] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)


class ProfilePage(BaseModel):
    """Snapshot of the profile view, as returned by the JSON endpoint."""

    username: str
    user: GitHubUser | None
    loading: bool
    contributions_loading: bool
    error: str | None
    active_tab: ProfileTab
    contributions_source: ContributionSource
    total_contributions: int
    contributions: list[ContributionDay]
    cells: list[HeatmapCell]
    chart_option: dict[str, Any]
    showcase: Showcase
