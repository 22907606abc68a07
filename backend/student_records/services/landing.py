"""
Page d'accueil : redirige un visiteur déjà connecté vers le tableau de bord.
"""

from typing import Callable

from student_records.results import attempt
from student_records.services.backend import Backend

CALL_TO_ACTION = {
    "title": "Sistema de Gerenciamento de Alunos",
    "subtitle": "Plataforma completa para gestão acadêmica com segurança e eficiência",
    "cta_label": "Acessar Sistema",
    "cta_href": "/auth",
}


class LandingPage:
    def __init__(self, backend: Backend, navigate: Callable[[str], None]):
        self.backend = backend
        self.navigate = navigate

    async def mount(self) -> bool:
        result = await attempt(self.backend.get_session())
        if result.ok and result.value is not None and result.value.user is not None:
            self.navigate("/dashboard")
            return True
        return False

    @staticmethod
    def call_to_action() -> dict:
        return dict(CALL_TO_ACTION)
