"""
Router d'authentification : connexion, inscription, déconnexion et session courante.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from student_records import messages
from student_records.errors import to_http_exception
from student_records.results import attempt
from student_records.routers.pages import session_info
from student_records.schemas.auth import NoticeResponse, SessionInfo
from student_records.services.auth_screen import AUTH, DASHBOARD
from student_records.workspace import Workspace, get_workspace

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/login", response_model=NoticeResponse, summary="Se connecter")
async def login(form: Dict[str, Any] = Body(...), workspace: Workspace = Depends(get_workspace)):
    """Valide l'e-mail et le mot de passe puis ouvre une session ; redirige vers le tableau de bord."""
    result = await workspace.auth_screen.login(form)
    if not result.ok:
        raise to_http_exception(result.error)
    return NoticeResponse(message=messages.LOGIN_OK, redirect=DASHBOARD)


@router.post("/signup", response_model=NoticeResponse, status_code=201, summary="Créer un compte")
async def signup(form: Dict[str, Any] = Body(...), workspace: Workspace = Depends(get_workspace)):
    """
    Crée le compte avec le profil (nom complet, matricule).
    Pas de redirection : le backend peut demander une confirmation par e-mail.
    """
    result = await workspace.auth_screen.signup(form)
    if not result.ok:
        raise to_http_exception(result.error)
    return NoticeResponse(message=result.value)


@router.post("/logout", response_model=NoticeResponse, summary="Se déconnecter")
async def logout(workspace: Workspace = Depends(get_workspace)):
    """Ferme la session puis efface l'état laissé dans l'espace (sélections, saisies, page)."""
    result = await workspace.auth_screen.sign_out()
    if not result.ok:
        raise to_http_exception(result.error)
    await workspace.end_session()
    return NoticeResponse(message=result.value, redirect=AUTH)


@router.get("/session", response_model=SessionInfo, summary="Session courante")
async def current_session(workspace: Workspace = Depends(get_workspace)):
    result = await attempt(workspace.backend.get_session())
    return session_info(result.value if result.ok else None)
