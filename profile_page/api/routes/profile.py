from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Path
from fastapi import Query
from fastapi import Request
from fastapi.responses import HTMLResponse

from profile_page.api.schemas.profile import ProfilePage
from profile_page.api.schemas.profile import ProfileTab
from profile_page.view import ProfileView
from profile_page.view import format_date


router = APIRouter()

GITHUB_LOGIN_PATTERN = r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$"

Username = Annotated[str, Path(pattern=GITHUB_LOGIN_PATTERN)]


def get_profile_view(request: Request) -> ProfileView:
    """Build a fresh view for one page load from the app-wide collaborators."""

    return ProfileView(
        service=request.app.state.profile_service,
        default_username=request.app.state.settings.default_username,
        showcase=request.app.state.showcase,
    )


async def load_profile_page(
    view: ProfileView, username: str | None, tab: str
) -> ProfilePage:
    try:
        view.set_active_tab(tab)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"unknown tab: {tab}") from exc

    await view.navigate(username)
    return view.snapshot()


def render_profile_page(request: Request, page: ProfilePage) -> HTMLResponse:
    return request.app.state.templates.TemplateResponse(
        request,
        "profile.html",
        {
            "page": page,
            "tabs": list(ProfileTab),
            "joined": format_date(page.user.created_at) if page.user else None,
        },
    )


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/api/profile", response_model=ProfilePage)
async def get_default_profile_data(
    tab: str = Query(default=ProfileTab.OVERVIEW.value),
    view: ProfileView = Depends(get_profile_view),
) -> ProfilePage:
    """Return the profile payload for the configured default user."""

    return await load_profile_page(view, None, tab)


@router.get("/api/profile/{username}", response_model=ProfilePage)
async def get_profile_data(
    username: Username,
    tab: str = Query(default=ProfileTab.OVERVIEW.value),
    view: ProfileView = Depends(get_profile_view),
) -> ProfilePage:
    """Return profile, contributions and heatmap chart option for a user."""

    return await load_profile_page(view, username, tab)


@router.get("/", response_class=HTMLResponse)
async def default_profile_page(
    request: Request,
    tab: str = Query(default=ProfileTab.OVERVIEW.value),
    view: ProfileView = Depends(get_profile_view),
) -> HTMLResponse:
    page = await load_profile_page(view, None, tab)
    return render_profile_page(request, page)


@router.get("/{username}", response_class=HTMLResponse)
async def profile_page(
    request: Request,
    username: Username,
    tab: str = Query(default=ProfileTab.OVERVIEW.value),
    view: ProfileView = Depends(get_profile_view),
) -> HTMLResponse:
    page = await load_profile_page(view, username, tab)
    return render_profile_page(request, page)
