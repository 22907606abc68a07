"""
Schémas Pydantic pour l'authentification et le changement de mot de passe.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from student_records.schemas.student import check_email

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


def check_password_strength(value: str, label: str = "Senha") -> str:
    """Mot de passe fort : 8 caractères minimum, au moins un chiffre et un caractère spécial."""
    if len(value) < 8:
        raise ValueError(f"{label} deve ter no mínimo 8 caracteres")
    if not re.search(r"[0-9]", value):
        raise ValueError(f"{label} deve conter pelo menos 1 número")
    if not _SPECIAL_RE.search(value):
        raise ValueError(f"{label} deve conter pelo menos 1 caractere especial")
    return value


class LoginForm(BaseModel):
    """Connexion : le mot de passe existe déjà, seule sa présence est vérifiée."""
    model_config = ConfigDict(validate_default=True)

    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def check_email_field(cls, v: str) -> str:
        return check_email(v)

    @field_validator("password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Senha é obrigatória")
        return v


class SignupForm(BaseModel):
    """Inscription : profil (nom, matricule) joint au compte."""
    model_config = ConfigDict(validate_default=True)

    full_name: str = ""
    email: str = ""
    matricula: str = ""
    password: str = ""
    confirm_password: str = ""

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Nome deve ter no mínimo 3 caracteres")
        if len(v) > 100:
            raise ValueError("Nome deve ter no máximo 100 caracteres")
        return v

    @field_validator("email")
    @classmethod
    def check_email_field(cls, v: str) -> str:
        return check_email(v)

    @field_validator("matricula")
    @classmethod
    def check_matricula(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 5:
            raise ValueError("Matrícula deve ter no mínimo 5 caracteres")
        if len(v) > 20:
            raise ValueError("Matrícula deve ter no máximo 20 caracteres")
        return v

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("confirm_password")
    @classmethod
    def matches_password(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("As senhas não coincidem")
        return v


class PasswordChangeForm(BaseModel):
    """Changement de mot de passe depuis le tableau de bord."""
    model_config = ConfigDict(validate_default=True)

    current_password: str = ""
    new_password: str = ""
    confirm_password: str = ""

    @field_validator("current_password")
    @classmethod
    def current_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Senha atual é obrigatória")
        return v

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v, label="Nova senha")

    @field_validator("confirm_password")
    @classmethod
    def matches_new_password(cls, v: str, info: ValidationInfo) -> str:
        if not v:
            raise ValueError("Confirmação é obrigatória")
        if "new_password" in info.data and v != info.data["new_password"]:
            raise ValueError("As senhas não coincidem")
        return v


class SessionInfo(BaseModel):
    """Session courante telle qu'exposée au navigateur."""
    authenticated: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    matricula: Optional[str] = None


class NoticeResponse(BaseModel):
    """Message transitoire affiché après une action, avec redirection éventuelle."""
    message: str
    redirect: Optional[str] = None
