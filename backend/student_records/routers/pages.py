"""
Router des écrans : accueil, authentification et tableau de bord.
Les redirections suivent les règles de session de chaque écran.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from student_records.config import settings
from student_records.errors import to_http_exception
from student_records.results import attempt
from student_records.schemas.auth import SessionInfo
from student_records.schemas.pages import AuthScreenResponse, DashboardResponse, LandingResponse
from student_records.services.auth_screen import AUTH, DASHBOARD
from student_records.workspace import Workspace, get_workspace

router = APIRouter(tags=["Écrans"])


def _redirect(workspace: Workspace, path: str) -> RedirectResponse:
    response = RedirectResponse(path, status_code=303)
    # Le cookie posé par la dépendance n'est pas repris par une réponse retournée directement
    response.set_cookie(settings.WORKSPACE_COOKIE_NAME, workspace.id, httponly=True, samesite="lax")
    return response


def session_info(session) -> SessionInfo:
    if session is None or session.user is None:
        return SessionInfo(authenticated=False)
    profile = session.user.user_metadata or {}
    return SessionInfo(
        authenticated=True,
        user_id=session.user.id,
        email=session.user.email,
        full_name=profile.get("full_name"),
        matricula=profile.get("matricula"),
    )


@router.get("/", response_model=LandingResponse, summary="Page d'accueil")
async def landing(workspace: Workspace = Depends(get_workspace)):
    """Redirige vers le tableau de bord si une session existe, sinon affiche l'appel à l'action."""
    if await workspace.landing.mount():
        return _redirect(workspace, DASHBOARD)
    return LandingResponse(**workspace.landing.call_to_action())


@router.get("/auth", response_model=AuthScreenResponse, summary="Écran de connexion et d'inscription")
async def auth_screen(workspace: Workspace = Depends(get_workspace)):
    screen = workspace.auth_screen
    if await screen.mount():
        return _redirect(workspace, DASHBOARD)
    login = {k: v for k, v in screen.login_form.values.items() if k != "password"}
    signup = {k: v for k, v in screen.signup_form.values.items() if "password" not in k}
    return AuthScreenResponse(login=login, signup=signup, busy=screen.busy)


@router.get("/dashboard", response_model=DashboardResponse, summary="Tableau de bord")
async def dashboard(workspace: Workspace = Depends(get_workspace)):
    """Liste paginée des élèves de l'utilisateur connecté ; sans session, retour à l'écran d'authentification."""
    session = await attempt(workspace.backend.get_session())
    if not session.ok or session.value is None:
        return _redirect(workspace, AUTH)
    workspace.navigate(DASHBOARD)

    panel = workspace.student_list
    result = await panel.mount() if not panel.mounted else await panel.refresh()
    if not result.ok:
        raise to_http_exception(result.error)
    return DashboardResponse(user=session_info(session.value), students=result.value)
