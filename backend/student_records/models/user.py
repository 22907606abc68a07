"""
Modèle SQLAlchemy pour les comptes du backend local.
Équivalent minimal de auth.users côté Supabase.
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, String, func

from student_records.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    user_metadata = Column(JSON, nullable=False, default=dict)  # full_name, matricula
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
