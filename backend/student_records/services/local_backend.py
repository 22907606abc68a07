"""
Backend local : mêmes opérations que Supabase, sur SQLAlchemy (SQLite par défaut).

Sert au développement hors ligne et aux tests. Reproduit les messages
d'erreur du backend géré (identifiants invalides, compte existant, clé
dupliquée) et diffuse les changements de table à tous les abonnés du
processus, après commit.
"""

import logging
import secrets
from typing import Any, Callable, Dict, List, Optional

import bcrypt
from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError

from student_records.database import SessionLocal
from student_records.errors import DUPLICATE_KEY_CODE, BackendError
from student_records.models.student import Student
from student_records.models.user import User
from student_records.services.backend import (
    AuthSession,
    AuthUser,
    ChangeCallback,
    ChangeEvent,
    Page,
    SessionCallback,
)

logger = logging.getLogger(__name__)

TABLES = {"students": Student}


class ChangeFeed:
    """Diffusion des changements de table entre tous les backends locaux du processus."""

    def __init__(self):
        self._subscribers: Dict[str, List[ChangeCallback]] = {}

    def subscribe(self, table: str, callback: ChangeCallback) -> "LocalSubscription":
        self._subscribers.setdefault(table, []).append(callback)
        return LocalSubscription(self, table, callback)

    def remove(self, table: str, callback: ChangeCallback) -> None:
        callbacks = self._subscribers.get(table, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def subscriber_count(self, table: str) -> int:
        return len(self._subscribers.get(table, []))

    def publish(self, event: ChangeEvent) -> None:
        for callback in list(self._subscribers.get(event.table, [])):
            try:
                callback(event)
            except Exception as exc:
                logger.error("Abonné %s en échec sur %s : %s", event.table, event.event_type, exc)


class LocalSubscription:
    def __init__(self, feed: ChangeFeed, table: str, callback: ChangeCallback):
        self._feed = feed
        self._table = table
        self._callback = callback

    async def unsubscribe(self) -> None:
        self._feed.remove(self._table, self._callback)


default_feed = ChangeFeed()


def _to_user(user: User) -> AuthUser:
    return AuthUser(id=user.id, email=user.email, user_metadata=dict(user.user_metadata or {}))


class LocalBackend:
    def __init__(self, session_factory=SessionLocal, feed: ChangeFeed = default_feed, bcrypt_rounds: int = 12):
        self._session_factory = session_factory
        self._feed = feed
        self._rounds = bcrypt_rounds
        self._session: Optional[AuthSession] = None
        self._listeners: List[SessionCallback] = []

    def _emit(self, event: str) -> None:
        for callback in list(self._listeners):
            callback(event, self._session)

    def _require_session(self) -> AuthSession:
        if self._session is None:
            raise BackendError("Auth session missing!")
        return self._session

    @staticmethod
    def _model(table: str):
        model = TABLES.get(table)
        if model is None:
            raise BackendError(f'relation "public.{table}" does not exist', code="42P01")
        return model

    # --- Auth ---

    async def get_session(self) -> Optional[AuthSession]:
        return self._session

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def sign_up(
        self, email: str, password: str, profile: Dict[str, Any], redirect_to: Optional[str] = None
    ) -> Optional[AuthSession]:
        """Crée le compte sans ouvrir de session (comme avec la confirmation par e-mail)."""
        password_hash = bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt(rounds=self._rounds))
        db = self._session_factory()
        try:
            db.add(User(email=email.lower(), password_hash=password_hash.decode("utf-8"), user_metadata=dict(profile)))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise BackendError("User already registered", code="user_already_exists")
        finally:
            db.close()
        logger.info("Compte local créé pour %s", email)
        return None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        db = self._session_factory()
        try:
            user = db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()
            valid = user is not None and bcrypt.checkpw(
                password.encode("utf-8")[:72], user.password_hash.encode("utf-8")
            )
            if not valid:
                raise BackendError("Invalid login credentials", code="invalid_credentials")
            self._session = AuthSession(user=_to_user(user), access_token=secrets.token_urlsafe(32))
        finally:
            db.close()
        self._emit("SIGNED_IN")
        return self._session

    async def sign_out(self) -> None:
        self._session = None
        self._emit("SIGNED_OUT")

    async def update_password(self, new_password: str) -> AuthUser:
        session = self._require_session()
        db = self._session_factory()
        try:
            user = db.get(User, session.user.id)
            if user is None:
                raise BackendError("User not found", code="user_not_found")
            hashed = bcrypt.hashpw(new_password.encode("utf-8")[:72], bcrypt.gensalt(rounds=self._rounds))
            user.password_hash = hashed.decode("utf-8")
            db.commit()
            result = _to_user(user)
        finally:
            db.close()
        self._emit("USER_UPDATED")
        return result

    # --- Données (réservées aux utilisateurs connectés) ---

    async def select_page(
        self, table: str, order_column: str, descending: bool, offset: int, limit: int
    ) -> Page:
        self._require_session()
        model = self._model(table)
        column = getattr(model, order_column, None)
        if column is None:
            raise BackendError(f"column {table}.{order_column} does not exist", code="42703")
        db = self._session_factory()
        try:
            total = db.execute(select(func.count()).select_from(model)).scalar() or 0
            rows = db.execute(
                select(model)
                .order_by(desc(column) if descending else column)
                .offset(offset)
                .limit(limit)
            ).scalars().all()
            return Page(rows=[r.to_row() for r in rows], total_count=total)
        finally:
            db.close()

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self._require_session()
        model = self._model(table)
        db = self._session_factory()
        try:
            try:
                record = model(**row)
            except TypeError as exc:
                raise BackendError(str(exc), code="42703") from exc
            db.add(record)
            self._commit(db, table)
            db.refresh(record)
            result = record.to_row()
        finally:
            db.close()
        self._feed.publish(ChangeEvent(table=table, event_type="INSERT", record=result))
        return result

    async def update(self, table: str, id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._require_session()
        model = self._model(table)
        db = self._session_factory()
        try:
            record = db.get(model, id)
            if record is None:
                return None
            old = record.to_row()
            for column, value in patch.items():
                if column in model.EDITABLE:
                    setattr(record, column, value)
            self._commit(db, table)
            db.refresh(record)
            result = record.to_row()
        finally:
            db.close()
        self._feed.publish(ChangeEvent(table=table, event_type="UPDATE", record=result, old_record=old))
        return result

    async def delete(self, table: str, id: str) -> None:
        self._require_session()
        model = self._model(table)
        db = self._session_factory()
        try:
            record = db.get(model, id)
            if record is None:
                return
            old = record.to_row()
            db.delete(record)
            db.commit()
        finally:
            db.close()
        self._feed.publish(ChangeEvent(table=table, event_type="DELETE", old_record=old))

    async def subscribe_to_table_changes(self, table: str, callback: ChangeCallback) -> LocalSubscription:
        self._model(table)
        return self._feed.subscribe(table, callback)

    async def close(self) -> None:
        self._listeners.clear()

    @staticmethod
    def _commit(db, table: str) -> None:
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            detail = str(exc.orig)
            if "unique" in detail.lower() or "duplicate" in detail.lower():
                raise BackendError(
                    f'duplicate key value violates unique constraint on "{table}"', code=DUPLICATE_KEY_CODE
                ) from exc
            raise BackendError(detail, code="23000") from exc
