"""
Router du compte : changement de mot de passe depuis le tableau de bord.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from student_records.errors import to_http_exception
from student_records.schemas.auth import NoticeResponse
from student_records.workspace import Workspace, get_workspace

router = APIRouter(prefix="/api/v1/account", tags=["Compte"])


@router.post("/password", response_model=NoticeResponse, summary="Changer le mot de passe")
async def change_password(form: Dict[str, Any] = Body(...), workspace: Workspace = Depends(get_workspace)):
    """
    Vérifie le mot de passe actuel par une nouvelle connexion, puis enregistre le nouveau.
    Champs : current_password, new_password, confirm_password.
    """
    result = await workspace.password_panel.submit(form)
    if not result.ok:
        raise to_http_exception(result.error)
    return NoticeResponse(message=result.value)
