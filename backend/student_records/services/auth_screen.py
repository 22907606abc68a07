"""
Écran d'authentification : onglets connexion et inscription.

Une session active (au montage ou signalée par le backend) renvoie vers le
tableau de bord. L'inscription ne redirige pas : le backend peut exiger une
confirmation par e-mail avant la première connexion.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from student_records import messages
from student_records.errors import AuthError, TransportError
from student_records.results import Err, Ok, Result, attempt
from student_records.services.backend import AuthSession, Backend
from student_records.services.forms import FormState, single_flight
from student_records.validation import validate_login, validate_signup

logger = logging.getLogger(__name__)

DASHBOARD = "/dashboard"
AUTH = "/auth"


class LoginFormState(FormState):
    fields = ("email", "password")


class SignupFormState(FormState):
    fields = ("full_name", "email", "matricula", "password", "confirm_password")


class AuthScreen:
    def __init__(self, backend: Backend, navigate: Callable[[str], None], site_url: str = ""):
        self.backend = backend
        self.navigate = navigate
        self.site_url = site_url.rstrip("/")
        self.login_form = LoginFormState()
        self.signup_form = SignupFormState()
        self.busy = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    def _on_session_change(self, event: str, session: Optional[AuthSession]) -> None:
        if session is not None and session.user is not None:
            self.navigate(DASHBOARD)

    async def mount(self) -> bool:
        """Écoute les changements de session puis vérifie la session courante. Retourne True si redirigé."""
        if self._unsubscribe is None:
            self._unsubscribe = self.backend.on_session_change(self._on_session_change)
        result = await attempt(self.backend.get_session())
        if result.ok and result.value is not None and result.value.user is not None:
            self.navigate(DASHBOARD)
            return True
        return False

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @single_flight
    async def login(self, raw: Mapping[str, Any]) -> Result[AuthSession, Any]:
        self.login_form.load(raw)
        validated = validate_login(self.login_form.values)
        if not validated.ok:
            return validated
        form = validated.value

        result = await attempt(self.backend.sign_in_with_password(form.email, form.password))
        if not result.ok:
            if "Invalid login credentials" in result.error.message:
                return Err(AuthError(messages.INVALID_CREDENTIALS))
            return Err(TransportError(result.error.message))

        logger.info("Connexion réussie pour %s", form.email)
        self.login_form.reset()
        self.navigate(DASHBOARD)
        return Ok(result.value)

    @single_flight
    async def signup(self, raw: Mapping[str, Any]) -> Result[str, Any]:
        self.signup_form.load(raw)
        validated = validate_signup(self.signup_form.values)
        if not validated.ok:
            return validated
        form = validated.value

        result = await attempt(self.backend.sign_up(
            form.email,
            form.password,
            profile={"full_name": form.full_name, "matricula": form.matricula},
            redirect_to=f"{self.site_url}{DASHBOARD}",
        ))
        if not result.ok:
            if "already registered" in result.error.message:
                return Err(AuthError(messages.ALREADY_REGISTERED))
            return Err(TransportError(result.error.message))

        logger.info("Inscription enregistrée pour %s", form.email)
        self.signup_form.reset()
        return Ok(messages.SIGNUP_OK)

    async def sign_out(self) -> Result[str, Any]:
        result = await attempt(self.backend.sign_out())
        if not result.ok:
            return Err(TransportError(result.error.message))
        self.navigate(AUTH)
        return Ok(messages.SIGNED_OUT)
