"""
Espaces de travail : un par navigateur, identifié par cookie.

Chaque espace possède son propre handle de backend (donc sa propre session
utilisateur) et l'état de tous les écrans. Les espaces inactifs sont purgés
par le planificateur.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Request, Response

from student_records.config import Settings, settings
from student_records.services.auth_screen import AuthScreen
from student_records.services.backend import Backend, create_backend
from student_records.services.landing import LandingPage
from student_records.services.password_panel import PasswordChangePanel
from student_records.services.student_list import StudentListPanel

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Workspace:
    def __init__(self, workspace_id: str, backend: Backend, config: Settings = settings):
        self.id = workspace_id
        self.backend = backend
        self.location = "/"
        self.last_seen = _now()
        self.landing = LandingPage(backend, self.navigate)
        self.auth_screen = AuthScreen(backend, self.navigate, site_url=config.SITE_URL)
        self.password_panel = PasswordChangePanel(backend)
        self.student_list = StudentListPanel(
            backend, table=config.STUDENTS_TABLE, page_size=config.STUDENTS_PAGE_SIZE
        )
        self.closed = asyncio.Event()

    def navigate(self, path: str) -> None:
        self.location = path

    def touch(self) -> None:
        self.last_seen = _now()

    async def end_session(self) -> None:
        """Après déconnexion : rien de la session précédente ne doit rester dans l'espace."""
        await self.student_list.unmount()
        self.student_list.reset()
        self.password_panel.form.reset()
        self.auth_screen.login_form.reset()
        self.auth_screen.signup_form.reset()

    async def close(self) -> None:
        self.closed.set()
        self.auth_screen.unmount()
        await self.student_list.unmount()
        await self.backend.close()


class WorkspaceRegistry:
    def __init__(
        self,
        backend_factory: Callable[[Settings], Awaitable[Backend]] = create_backend,
        config: Settings = settings,
    ):
        self._backend_factory = backend_factory
        self._config = config
        self._workspaces: Dict[str, Workspace] = {}

    def __len__(self) -> int:
        return len(self._workspaces)

    def get(self, workspace_id: Optional[str]) -> Optional[Workspace]:
        if not workspace_id:
            return None
        return self._workspaces.get(workspace_id)

    async def get_or_create(self, workspace_id: Optional[str]) -> Workspace:
        workspace = self.get(workspace_id)
        if workspace is None:
            workspace_id = uuid.uuid4().hex
            backend = await self._backend_factory(self._config)
            workspace = Workspace(workspace_id, backend, self._config)
            self._workspaces[workspace_id] = workspace
            logger.info("Nouvel espace de travail %s", workspace_id)
        workspace.touch()
        return workspace

    async def purge_idle(self, max_idle: Optional[timedelta] = None) -> int:
        """Ferme les espaces sans requête depuis WORKSPACE_IDLE_MINUTES. Retourne le nombre purgé."""
        max_idle = max_idle or timedelta(minutes=self._config.WORKSPACE_IDLE_MINUTES)
        limit = _now() - max_idle
        idle = [w for w in self._workspaces.values() if w.last_seen < limit]
        for workspace in idle:
            del self._workspaces[workspace.id]
            await workspace.close()
        if idle:
            logger.info("%d espace(s) de travail inactif(s) purgé(s)", len(idle))
        return len(idle)

    async def close_all(self) -> None:
        workspaces, self._workspaces = list(self._workspaces.values()), {}
        for workspace in workspaces:
            await workspace.close()


registry = WorkspaceRegistry()


async def get_workspace(request: Request, response: Response) -> Workspace:
    """Dépendance FastAPI : fournit l'espace de travail du navigateur et pose son cookie."""
    cookie_name = settings.WORKSPACE_COOKIE_NAME
    workspace = await registry.get_or_create(request.cookies.get(cookie_name))
    response.set_cookie(cookie_name, workspace.id, httponly=True, samesite="lax")
    return workspace
