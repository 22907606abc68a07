"""
Schémas Pydantic des écrans (accueil, authentification, tableau de bord).
"""

from typing import Dict

from pydantic import BaseModel

from student_records.schemas.auth import SessionInfo
from student_records.schemas.student import StudentPage


class LandingResponse(BaseModel):
    title: str
    subtitle: str
    cta_label: str
    cta_href: str


class AuthScreenResponse(BaseModel):
    """Valeurs courantes des deux onglets ; les mots de passe ne sont jamais renvoyés."""
    login: Dict[str, str]
    signup: Dict[str, str]
    busy: bool = False


class DashboardResponse(BaseModel):
    user: SessionInfo
    students: StudentPage
