"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Backend géré : "supabase" en production, "local" pour travailler hors ligne
    BACKEND_MODE: str = "supabase"

    # Supabase : URL du projet et clé publique (anon)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Backend local (SQLite par défaut)
    LOCAL_DATABASE_URL: str = "sqlite:///./student_records.db"
    BCRYPT_ROUNDS: int = 12

    # Application
    SITE_URL: str = "http://localhost:8000"
    STUDENTS_TABLE: str = "students"
    STUDENTS_PAGE_SIZE: int = 10

    # Espaces de travail (un par navigateur, identifié par cookie)
    WORKSPACE_COOKIE_NAME: str = "sga_workspace"
    WORKSPACE_IDLE_MINUTES: int = 30
    WORKSPACE_PURGE_INTERVAL_MINUTES: int = 5

    # Environnement
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
