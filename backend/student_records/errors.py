"""
Taxonomie des erreurs de l'application.

BackendError est la seule exception : elle est levée par les implémentations
du backend puis convertie en Err par `attempt`. Les autres erreurs sont des
valeurs portées par Err et affichées à l'utilisateur (premier message uniquement).
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, NamedTuple, Optional

from fastapi import HTTPException

DUPLICATE_KEY_CODE = "23505"


class BackendError(Exception):
    """Échec d'un appel au backend géré (transport, politique d'accès, contrainte)."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def is_duplicate_key(self) -> bool:
        return self.code == DUPLICATE_KEY_CODE or "duplicate key" in (self.message or "")


class FieldError(NamedTuple):
    field: str
    message: str


@dataclass(frozen=True)
class AppError:
    message: str
    status_code: ClassVar[int] = 500


@dataclass(frozen=True)
class ValidationError(AppError):
    """Saisie invalide ; jamais envoyée au backend."""
    errors: List[FieldError] = field(default_factory=list)
    status_code: ClassVar[int] = 422

    @classmethod
    def from_fields(cls, errors: List[FieldError]) -> "ValidationError":
        return cls(message=errors[0].message if errors else "", errors=list(errors))

    @property
    def first_field(self) -> Optional[str]:
        return self.errors[0].field if self.errors else None


@dataclass(frozen=True)
class AuthError(AppError):
    status_code: ClassVar[int] = 401


@dataclass(frozen=True)
class ConstraintError(AppError):
    status_code: ClassVar[int] = 409


@dataclass(frozen=True)
class NotFoundError(AppError):
    status_code: ClassVar[int] = 404


@dataclass(frozen=True)
class BusyError(AppError):
    status_code: ClassVar[int] = 409


@dataclass(frozen=True)
class TransportError(AppError):
    status_code: ClassVar[int] = 502


def to_http_exception(error: AppError) -> HTTPException:
    """Traduit une erreur applicative en réponse HTTP (detail = message affichable)."""
    return HTTPException(status_code=error.status_code, detail=error.message)
