"""
Router pour les élèves.
Liste paginée (GET /api/v1/students?page=N)
Création (POST /api/v1/students)
Modification (GET /api/v1/students/{id}/edit, PUT /api/v1/students/{id})
Suppression avec confirmation (POST /api/v1/students/{id}/delete, puis /delete/confirm ou /delete/cancel)
Rafraîchissement en direct (WebSocket /api/v1/students/live)
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, WebSocket, WebSocketDisconnect

from student_records.config import settings
from student_records.errors import to_http_exception
from student_records.schemas.auth import NoticeResponse
from student_records.schemas.student import DeleteConfirmation, StudentFormState, StudentPage
from student_records.services.student_list import StudentListPanel
from student_records.workspace import Workspace, get_workspace, registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])


async def _panel(workspace: Workspace) -> StudentListPanel:
    """Monte le panneau de liste à la première utilisation (abonnement + premier chargement)."""
    panel = workspace.student_list
    if not panel.mounted:
        result = await panel.mount()
        if not result.ok:
            raise to_http_exception(result.error)
    return panel


@router.get("", response_model=StudentPage, summary="Lister les élèves (page courante)")
async def list_students(
    page: Optional[int] = Query(None, ge=1),
    workspace: Workspace = Depends(get_workspace),
):
    """Retourne une page de 10 élèves, du plus récent au plus ancien, avec le total."""
    panel = await _panel(workspace)
    if page is not None and page != panel.page:
        result = await panel.set_page(page)
    else:
        result = await panel.refresh()
    if not result.ok:
        raise to_http_exception(result.error)
    return result.value


@router.post("", response_model=NoticeResponse, status_code=201, summary="Créer un élève")
async def create_student(form: Dict[str, Any] = Body(...), workspace: Workspace = Depends(get_workspace)):
    panel = await _panel(workspace)
    result = await panel.create_form.submit(form)
    if not result.ok:
        raise to_http_exception(result.error)
    return NoticeResponse(message=result.value)


@router.get("/{student_id}/edit", response_model=StudentFormState, summary="Ouvrir la modification d'un élève")
async def edit_student(student_id: uuid.UUID, workspace: Workspace = Depends(get_workspace)):
    """Sélectionne l'élève de la page courante et retourne le formulaire pré-rempli."""
    panel = await _panel(workspace)
    result = panel.select_for_edit(str(student_id))
    if not result.ok:
        raise to_http_exception(result.error)
    return result.value.state()


@router.put("/{student_id}", response_model=NoticeResponse, summary="Modifier un élève")
async def update_student(
    student_id: uuid.UUID,
    form: Dict[str, Any] = Body(...),
    workspace: Workspace = Depends(get_workspace),
):
    """Enregistre nom, e-mail et matricule ; referme l'édition et recharge la page en cas de succès."""
    panel = await _panel(workspace)
    selected = panel.select_for_edit(str(student_id))
    if not selected.ok:
        raise to_http_exception(selected.error)
    result = await selected.value.submit(form)
    if not result.ok:
        raise to_http_exception(result.error)
    return NoticeResponse(message=result.value)


@router.post("/edit/close", status_code=204, summary="Fermer la modification")
async def close_editor(workspace: Workspace = Depends(get_workspace)):
    workspace.student_list.close_editor()
    return Response(status_code=204)


@router.post("/{student_id}/delete", response_model=DeleteConfirmation, summary="Demander la suppression")
async def request_delete(student_id: uuid.UUID, workspace: Workspace = Depends(get_workspace)):
    """Sélectionne l'élève et retourne le message de confirmation ; rien n'est supprimé à ce stade."""
    panel = await _panel(workspace)
    result = panel.request_delete(str(student_id))
    if not result.ok:
        raise to_http_exception(result.error)
    return result.value


@router.post("/delete/confirm", response_model=NoticeResponse, summary="Confirmer la suppression")
async def confirm_delete(workspace: Workspace = Depends(get_workspace)):
    """Supprime définitivement l'élève sélectionné puis recharge la page."""
    result = await workspace.student_list.confirm_delete()
    if not result.ok:
        raise to_http_exception(result.error)
    return NoticeResponse(message=result.value)


@router.post("/delete/cancel", status_code=204, summary="Annuler la suppression")
async def cancel_delete(workspace: Workspace = Depends(get_workspace)):
    """Abandonne la suppression en attente, sans appel au backend."""
    workspace.student_list.cancel_delete()
    return Response(status_code=204)


async def get_live_workspace(websocket: WebSocket) -> Optional[Workspace]:
    """Dépendance WebSocket : l'espace doit déjà exister (cookie posé par une requête HTTP)."""
    return registry.get(websocket.cookies.get(settings.WORKSPACE_COOKIE_NAME))


async def _drain(websocket: WebSocket, workspace: Workspace) -> None:
    # Tout message du client (ping) garde l'espace actif ; la lecture détecte la déconnexion
    while True:
        await websocket.receive_text()
        workspace.touch()


@router.websocket("/live")
async def live_students(websocket: WebSocket, workspace: Optional[Workspace] = Depends(get_live_workspace)):
    """Pousse la page courante à chaque rechargement déclenché par le flux de changements."""
    if workspace is None:
        await websocket.close(code=4401)
        return
    await websocket.accept()

    panel = workspace.student_list
    if not panel.mounted:
        await panel.mount()
    queue: asyncio.Queue = asyncio.Queue()
    remove_listener = panel.add_listener(queue.put_nowait)
    reader = asyncio.create_task(_drain(websocket, workspace))
    closed = asyncio.create_task(workspace.closed.wait())
    try:
        await websocket.send_json(panel.snapshot().model_dump(mode="json"))
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({reader, getter, closed}, return_when=asyncio.FIRST_COMPLETED)
            if getter not in done:
                getter.cancel()
                if closed in done and not reader.done():
                    # Espace purgé : le navigateur doit en ouvrir un nouveau
                    await websocket.close(code=1001)
                break
            workspace.touch()
            await websocket.send_json(getter.result().model_dump(mode="json"))
    except WebSocketDisconnect:
        pass
    finally:
        remove_listener()
        closed.cancel()
        reader.cancel()
        if reader.done() and not reader.cancelled():
            reader.exception()
        logger.debug("Flux en direct fermé pour l'espace %s", workspace.id)
