"""
Schémas Pydantic pour les élèves.
"""

from datetime import datetime
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, field_validator


def check_email(value: str) -> str:
    """Adresse e-mail : espaces retirés, syntaxe RFC, 255 caractères maximum."""
    value = value.strip()
    if len(value) > 255:
        raise ValueError("E-mail deve ter no máximo 255 caracteres")
    try:
        # test_environment : accepte aussi les domaines réservés comme .test
        validate_email(value, check_deliverability=False, test_environment=True)
    except EmailNotValidError:
        raise ValueError("E-mail inválido")
    return value


class StudentForm(BaseModel):
    """Saisie du formulaire élève (création et modification)."""
    model_config = ConfigDict(validate_default=True)

    full_name: str = ""
    email: str = ""
    matricula: str = ""

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


class StudentResponse(BaseModel):
    """Ligne du tableau des élèves. user_id n'est jamais exposé."""
    id: str
    full_name: str
    email: str
    matricula: str
    created_at: datetime


class StudentPage(BaseModel):
    """Page courante du panneau de liste, avec l'état de la pagination."""
    page: int
    page_size: int
    total_count: int
    page_count: int
    has_previous: bool
    has_next: bool
    range_start: int
    range_end: int
    summary: str
    rows: List[StudentResponse]
    editing_id: Optional[str] = None
    deleting_id: Optional[str] = None


class StudentFormState(BaseModel):
    """Valeurs courantes d'un formulaire élève (pré-remplies en modification)."""
    student_id: Optional[str] = None
    full_name: str = ""
    email: str = ""
    matricula: str = ""
    busy: bool = False


class DeleteConfirmation(BaseModel):
    """Étape de confirmation avant suppression définitive."""
    student_id: str
    full_name: str
    prompt: str
