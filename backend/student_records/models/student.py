"""
Modèle SQLAlchemy pour la table students du backend local.
Même colonnes que la table Supabase : id, full_name, email, matricula, user_id, created_at.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String

from student_records.database import Base


def _now() -> datetime:
    # Résolution à la microseconde : created_at est la seule clé de tri
    return datetime.now(timezone.utc)


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    matricula = Column(String(20), unique=True, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    # Colonnes modifiables par update() ; id, user_id et created_at sont immuables
    EDITABLE = ("full_name", "email", "matricula")

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "matricula": self.matricula,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
