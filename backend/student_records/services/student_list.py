"""
Panneau de liste des élèves : pagination, rafraîchissement en direct,
modification et suppression avec confirmation.

Chaque notification du flux de changements de la table relance le chargement
complet de la page courante (pas de diff). Les chargements qui se chevauchent
sont ordonnés par un jeton croissant : une réponse plus ancienne que la
dernière requête est ignorée.
"""

import asyncio
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Set

from student_records import messages
from student_records.errors import NotFoundError, TransportError
from student_records.results import Err, Ok, Result, attempt
from student_records.schemas.student import DeleteConfirmation, StudentPage, StudentResponse
from student_records.services.backend import Backend, ChangeEvent, Subscription
from student_records.services.student_form import StudentForm

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
ORDER_COLUMN = "created_at"

SnapshotListener = Callable[[StudentPage], None]


class StudentListPanel:
    def __init__(self, backend: Backend, table: str = "students", page_size: int = PAGE_SIZE):
        self.backend = backend
        self.table = table
        self.page_size = page_size
        self.page = 1
        self.total_count = 0
        self.rows: List[Dict[str, Any]] = []
        self.busy = False
        self.editing: Optional[Dict[str, Any]] = None
        self.edit_form: Optional[StudentForm] = None
        self.deleting: Optional[Dict[str, Any]] = None
        self.create_form = StudentForm(backend, table, on_success=self.refresh)
        self.mounted = False
        self._request_token = 0
        self._subscription: Optional[Subscription] = None
        self._listeners: List[SnapshotListener] = []
        self._tasks: Set[asyncio.Task] = set()

    # --- Pagination ---

    @property
    def page_count(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def snapshot(self) -> StudentPage:
        range_start = self.offset + 1 if self.rows else 0
        range_end = min(self.page * self.page_size, self.total_count) if self.rows else 0
        if self.rows:
            summary = f"Mostrando {range_start} a {range_end} de {self.total_count} alunos"
        else:
            summary = messages.EMPTY_LIST
        return StudentPage(
            page=self.page,
            page_size=self.page_size,
            total_count=self.total_count,
            page_count=self.page_count,
            has_previous=self.has_previous,
            has_next=self.has_next,
            range_start=range_start,
            range_end=range_end,
            summary=summary,
            rows=[StudentResponse.model_validate(row) for row in self.rows],
            editing_id=self.editing["id"] if self.editing else None,
            deleting_id=self.deleting["id"] if self.deleting else None,
        )

    # --- Cycle de vie ---

    async def mount(self) -> Result[StudentPage, Any]:
        self.mounted = True
        await self._resubscribe()
        return await self.refresh()

    async def unmount(self) -> None:
        self.mounted = False
        await self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()

    def reset(self) -> None:
        """Oublie la page, les sélections et la saisie (fin de session utilisateur)."""
        self.page = 1
        self.total_count = 0
        self.rows = []
        self.busy = False
        self._request_token += 1
        self.close_editor()
        self.cancel_delete()
        self.create_form.form.reset()

    async def set_page(self, page: int) -> Result[StudentPage, Any]:
        page = max(1, page)
        if self.page_count:
            page = min(page, self.page_count)
        self.page = page
        if self.mounted:
            await self._resubscribe()
        return await self.refresh()

    async def _unsubscribe(self) -> None:
        if self._subscription is None:
            return
        subscription, self._subscription = self._subscription, None
        result = await attempt(subscription.unsubscribe())
        if not result.ok:
            logger.warning("Désabonnement de %s impossible : %s", self.table, result.error.message)

    async def _resubscribe(self) -> None:
        await self._unsubscribe()
        result = await attempt(self.backend.subscribe_to_table_changes(self.table, self._on_change))
        if result.ok:
            self._subscription = result.value
        else:
            logger.warning("Abonnement aux changements de %s impossible : %s", self.table, result.error.message)

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug("Changement %s sur %s : rechargement de la page %d", event.event_type, self.table, self.page)
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # --- Chargement ---

    async def refresh(self) -> Result[StudentPage, Any]:
        self._request_token += 1
        token = self._request_token
        self.busy = True
        try:
            result = await attempt(self.backend.select_page(
                self.table, ORDER_COLUMN, True, self.offset, self.page_size
            ))
        finally:
            # Seul le dernier chargement (terminé ou annulé) libère l'indicateur
            if token == self._request_token:
                self.busy = False
        if token != self._request_token:
            logger.debug("Réponse périmée ignorée (jeton %d, dernier %d)", token, self._request_token)
            return Ok(self.snapshot())

        if not result.ok:
            return Err(TransportError(messages.LOAD_FAILED + result.error.message))

        page = result.value
        self.rows = page.rows
        self.total_count = page.total_count
        # Page devenue vide (suppression de la dernière ligne) : revenir à la dernière page
        if not self.rows and self.page > 1:
            return await self.set_page(max(self.page_count, 1))

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
        return Ok(snapshot)

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        """Appelé avec la nouvelle page après chaque chargement appliqué."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _find(self, student_id: str) -> Optional[Dict[str, Any]]:
        return next((row for row in self.rows if str(row["id"]) == str(student_id)), None)

    # --- Modification ---

    def select_for_edit(self, student_id: str) -> Result[StudentForm, Any]:
        student = self._find(student_id)
        if student is None:
            return Err(NotFoundError(messages.STUDENT_NOT_FOUND))
        if self.editing is None or self.editing["id"] != student["id"]:
            self.editing = student
            self.edit_form = StudentForm(self.backend, self.table, on_success=self._after_edit, student=student)
        return Ok(self.edit_form)

    async def _after_edit(self) -> None:
        self.close_editor()
        await self.refresh()

    def close_editor(self) -> None:
        self.editing = None
        self.edit_form = None

    # --- Suppression ---

    def request_delete(self, student_id: str) -> Result[DeleteConfirmation, Any]:
        student = self._find(student_id)
        if student is None:
            return Err(NotFoundError(messages.STUDENT_NOT_FOUND))
        self.deleting = student
        return Ok(DeleteConfirmation(
            student_id=str(student["id"]),
            full_name=student["full_name"],
            prompt=messages.DELETE_PROMPT.format(name=student["full_name"]),
        ))

    async def confirm_delete(self) -> Result[str, Any]:
        if self.deleting is None:
            return Err(NotFoundError(messages.NO_PENDING_DELETE))
        student = self.deleting
        result = await attempt(self.backend.delete(self.table, student["id"]))
        if not result.ok:
            return Err(TransportError(messages.DELETE_FAILED + result.error.message))

        logger.info("Élève supprimé : %s", student["id"])
        self.deleting = None
        await self.refresh()
        return Ok(messages.STUDENT_DELETED)

    def cancel_delete(self) -> None:
        self.deleting = None
