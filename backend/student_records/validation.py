"""
Validation des formulaires : fonctions pures, sans effet de bord.

Chaque fonction reçoit la saisie brute (champ → chaîne) et retourne
Ok(modèle normalisé) ou Err(ValidationError) avec la liste ordonnée des
erreurs (champ, message). L'interface n'affiche que le premier message.
"""

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from student_records.errors import FieldError, ValidationError
from student_records.results import Err, Ok, Result
from student_records.schemas.auth import LoginForm, PasswordChangeForm, SignupForm
from student_records.schemas.student import StudentForm

M = TypeVar("M", bound=BaseModel)


def _field_errors(exc: PydanticValidationError) -> list:
    errors = []
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "__root__"
        ctx_error = (err.get("ctx") or {}).get("error")
        # Les ValueError levées par nos validateurs portent déjà le message affichable
        message = str(ctx_error) if err["type"] == "value_error" and ctx_error else err["msg"]
        errors.append(FieldError(field, message))
    return errors


def _validate(model: Type[M], raw: Mapping[str, Any]) -> Result[M, ValidationError]:
    try:
        return Ok(model.model_validate(dict(raw or {})))
    except PydanticValidationError as exc:
        return Err(ValidationError.from_fields(_field_errors(exc)))


def validate_login(raw: Mapping[str, Any]) -> Result[LoginForm, ValidationError]:
    return _validate(LoginForm, raw)


def validate_signup(raw: Mapping[str, Any]) -> Result[SignupForm, ValidationError]:
    return _validate(SignupForm, raw)


def validate_student(raw: Mapping[str, Any]) -> Result[StudentForm, ValidationError]:
    return _validate(StudentForm, raw)


def validate_password_change(raw: Mapping[str, Any]) -> Result[PasswordChangeForm, ValidationError]:
    return _validate(PasswordChangeForm, raw)
