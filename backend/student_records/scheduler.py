"""
Planificateur APScheduler : purge périodique des espaces de travail inactifs.

Un espace purgé se désabonne du flux de changements et ferme son handle de
backend ; le navigateur correspondant repart d'un espace neuf.
"""

import asyncio
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from student_records.config import settings
from student_records.workspace import registry

logger = logging.getLogger(__name__)

scheduler: Optional[AsyncIOScheduler] = None


async def _purge_idle_workspaces() -> None:
    """Tâche planifiée : ferme les espaces sans activité récente."""
    try:
        purged = await registry.purge_idle()
        logger.debug("Purge des espaces inactifs : %d fermé(s), %d actif(s)", purged, len(registry))
    except Exception as exc:
        logger.error("Erreur lors de la purge des espaces de travail : %s", exc)


def start_scheduler() -> None:
    """Démarre le planificateur sur la boucle courante (appelé au démarrage de l'API)."""
    global scheduler
    # Nouvelle instance à chaque démarrage : elle reste liée à la boucle qui l'a lancée
    scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())
    scheduler.add_job(
        _purge_idle_workspaces,
        trigger="interval",
        minutes=settings.WORKSPACE_PURGE_INTERVAL_MINUTES,
        id="workspace_idle_purge",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré : purge des espaces inactifs toutes les %d minutes.",
        settings.WORKSPACE_PURGE_INTERVAL_MINUTES,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
