"""
Interface commune des backends (Supabase ou local).

Un backend est créé par espace de travail (un par navigateur) puis injecté
dans chaque écran. Toutes les opérations sont asynchrones et lèvent
BackendError en cas d'échec, sans nouvelle tentative.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from student_records.config import Settings
from student_records.errors import BackendError


@dataclass
class AuthUser:
    id: str
    email: Optional[str]
    user_metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthSession:
    user: AuthUser
    access_token: str = ""


@dataclass
class Page:
    rows: List[Dict[str, Any]]
    total_count: int


@dataclass
class ChangeEvent:
    table: str
    event_type: str  # INSERT, UPDATE ou DELETE
    record: Dict[str, Any] = field(default_factory=dict)
    old_record: Dict[str, Any] = field(default_factory=dict)


SessionCallback = Callable[[str, Optional[AuthSession]], None]
ChangeCallback = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    async def unsubscribe(self) -> None: ...


class Backend(Protocol):
    async def get_session(self) -> Optional[AuthSession]: ...

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]: ...

    async def sign_up(
        self, email: str, password: str, profile: Dict[str, Any], redirect_to: Optional[str] = None
    ) -> Optional[AuthSession]: ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    async def sign_out(self) -> None: ...

    async def update_password(self, new_password: str) -> AuthUser: ...

    async def select_page(
        self, table: str, order_column: str, descending: bool, offset: int, limit: int
    ) -> Page: ...

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]: ...

    async def update(self, table: str, id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    async def delete(self, table: str, id: str) -> None: ...

    async def subscribe_to_table_changes(self, table: str, callback: ChangeCallback) -> Subscription: ...

    async def close(self) -> None: ...


async def create_backend(settings: Settings) -> Backend:
    """Instancie le backend configuré par BACKEND_MODE."""
    if settings.BACKEND_MODE == "local":
        from student_records.services.local_backend import LocalBackend

        return LocalBackend(bcrypt_rounds=settings.BCRYPT_ROUNDS)

    if settings.BACKEND_MODE == "supabase":
        from student_records.services.supabase_backend import SupabaseBackend

        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            raise BackendError("SUPABASE_URL et SUPABASE_ANON_KEY doivent être configurés.")
        return await SupabaseBackend.connect(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)

    raise BackendError(f"BACKEND_MODE inconnu : {settings.BACKEND_MODE}")
