"""
Panneau de changement de mot de passe.

Le backend n'offre pas de vérification du mot de passe sans ouvrir de
session : le mot de passe actuel est donc vérifié par une nouvelle connexion,
puis le nouveau mot de passe est enregistré. Chaque étape en échec
interrompt la suite.
"""

import logging
from typing import Any, Mapping

from student_records import messages
from student_records.errors import AuthError, TransportError
from student_records.results import Err, Ok, Result, attempt
from student_records.services.backend import Backend
from student_records.services.forms import FormState, single_flight
from student_records.validation import validate_password_change

logger = logging.getLogger(__name__)


class PasswordFormState(FormState):
    fields = ("current_password", "new_password", "confirm_password")


class PasswordChangePanel:
    def __init__(self, backend: Backend):
        self.backend = backend
        self.form = PasswordFormState()
        self.busy = False

    @single_flight
    async def submit(self, raw: Mapping[str, Any]) -> Result[str, Any]:
        self.form.load(raw)
        validated = validate_password_change(self.form.values)
        if not validated.ok:
            return validated
        form = validated.value

        session = await attempt(self.backend.get_session())
        if not session.ok:
            return Err(TransportError(session.error.message))
        if session.value is None or not session.value.user.email:
            return Err(AuthError(messages.USER_NOT_FOUND))
        email = session.value.user.email

        reauth = await attempt(self.backend.sign_in_with_password(email, form.current_password))
        if not reauth.ok:
            logger.info("Changement de mot de passe refusé pour %s : mot de passe actuel incorrect", email)
            return Err(AuthError(messages.CURRENT_PASSWORD_INCORRECT))

        updated = await attempt(self.backend.update_password(form.new_password))
        if not updated.ok:
            return Err(TransportError(updated.error.message or messages.PASSWORD_CHANGE_FAILED))

        logger.info("Mot de passe modifié pour %s", email)
        self.form.reset()
        return Ok(messages.PASSWORD_CHANGED)
