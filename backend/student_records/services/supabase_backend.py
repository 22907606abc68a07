"""
Backend Supabase : client asynchrone supabase-py (auth, PostgREST, Realtime).
Chaque instance possède son propre client, donc sa propre session utilisateur.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional

import httpx
from supabase import AsyncClient, AuthError, PostgrestAPIError, acreate_client

from student_records.errors import BackendError
from student_records.services.backend import (
    AuthSession,
    AuthUser,
    ChangeCallback,
    ChangeEvent,
    Page,
    SessionCallback,
)

logger = logging.getLogger(__name__)


@contextmanager
def _backend_errors(operation: str):
    """Convertit les erreurs du SDK en BackendError (message d'origine conservé)."""
    try:
        yield
    except PostgrestAPIError as exc:
        logger.warning("Supabase %s : %s (code %s)", operation, exc.message, exc.code)
        raise BackendError(exc.message or str(exc), code=exc.code) from exc
    except AuthError as exc:
        logger.warning("Supabase %s : %s", operation, exc.message)
        raise BackendError(exc.message, code=getattr(exc, "code", None)) from exc
    except httpx.HTTPError as exc:
        logger.warning("Supabase %s : erreur réseau %s", operation, exc)
        raise BackendError(str(exc) or "Erro de conexão") from exc


def _to_user(user) -> Optional[AuthUser]:
    if user is None:
        return None
    return AuthUser(id=str(user.id), email=user.email, user_metadata=dict(user.user_metadata or {}))


def _to_session(session) -> Optional[AuthSession]:
    if session is None or session.user is None:
        return None
    return AuthSession(user=_to_user(session.user), access_token=session.access_token)


def _to_event(table: str, payload: Dict[str, Any]) -> ChangeEvent:
    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    return ChangeEvent(
        table=table,
        event_type=data.get("type") or data.get("eventType") or "*",
        record=data.get("record") or data.get("new") or {},
        old_record=data.get("old_record") or data.get("old") or {},
    )


class SupabaseSubscription:
    """Canal Realtime abonné aux changements d'une table."""

    def __init__(self, client: AsyncClient, channel):
        self._client = client
        self._channel = channel

    async def unsubscribe(self) -> None:
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        with _backend_errors("remove_channel"):
            await self._client.remove_channel(channel)


class SupabaseBackend:
    def __init__(self, client: AsyncClient):
        self.client = client

    @classmethod
    async def connect(cls, url: str, key: str) -> "SupabaseBackend":
        return cls(await acreate_client(url, key))

    # --- Auth ---

    async def get_session(self) -> Optional[AuthSession]:
        with _backend_errors("get_session"):
            return _to_session(await self.client.auth.get_session())

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        def _relay(event, session) -> None:
            callback(str(getattr(event, "value", event)), _to_session(session))

        subscription = self.client.auth.on_auth_state_change(_relay)
        return subscription.unsubscribe

    async def sign_up(
        self, email: str, password: str, profile: Dict[str, Any], redirect_to: Optional[str] = None
    ) -> Optional[AuthSession]:
        options: Dict[str, Any] = {"data": profile}
        if redirect_to:
            options["email_redirect_to"] = redirect_to
        with _backend_errors("sign_up"):
            response = await self.client.auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        return _to_session(response.session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        with _backend_errors("sign_in_with_password"):
            response = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        return _to_session(response.session)

    async def sign_out(self) -> None:
        with _backend_errors("sign_out"):
            await self.client.auth.sign_out()

    async def update_password(self, new_password: str) -> AuthUser:
        with _backend_errors("update_user"):
            response = await self.client.auth.update_user({"password": new_password})
        return _to_user(response.user)

    # --- Données ---

    async def select_page(
        self, table: str, order_column: str, descending: bool, offset: int, limit: int
    ) -> Page:
        with _backend_errors(f"select {table}"):
            response = await (
                self.client.table(table)
                .select("*", count="exact")
                .order(order_column, desc=descending)
                .range(offset, offset + limit - 1)
                .execute()
            )
        return Page(rows=list(response.data or []), total_count=response.count or 0)

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        with _backend_errors(f"insert {table}"):
            response = await self.client.table(table).insert(row).execute()
        return response.data[0] if response.data else {}

    async def update(self, table: str, id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with _backend_errors(f"update {table}"):
            response = await self.client.table(table).update(patch).eq("id", id).execute()
        return response.data[0] if response.data else None

    async def delete(self, table: str, id: str) -> None:
        with _backend_errors(f"delete {table}"):
            await self.client.table(table).delete().eq("id", id).execute()

    async def subscribe_to_table_changes(self, table: str, callback: ChangeCallback) -> SupabaseSubscription:
        def _relay(payload) -> None:
            callback(_to_event(table, payload))

        with _backend_errors(f"subscribe {table}"):
            channel = self.client.channel(f"{table}-changes")
            channel.on_postgres_changes("*", schema="public", table=table, callback=_relay)
            await channel.subscribe()
        return SupabaseSubscription(self.client, channel)

    async def close(self) -> None:
        with _backend_errors("close"):
            await self.client.remove_all_channels()
