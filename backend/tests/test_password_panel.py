"""
Tests du panneau de changement de mot de passe.
"""

from unittest.mock import AsyncMock

from conftest import PASSWORD
from student_records import messages
from student_records.errors import AuthError, BackendError, TransportError
from student_records.services.backend import AuthSession, AuthUser
from student_records.services.password_panel import PasswordChangePanel

NEW = {"current_password": PASSWORD, "new_password": "Nova@1234", "confirm_password": "Nova@1234"}


# ============================================================
# Soumission du panneau
# ============================================================

async def test_changement_reussi(signed_in):
    """Changement réussi → formulaire vidé, nouveau mot de passe actif."""
    panel = PasswordChangePanel(signed_in)

    result = await panel.submit(NEW)

    assert result.ok
    assert result.value == messages.PASSWORD_CHANGED
    assert panel.form.values == {"current_password": "", "new_password": "", "confirm_password": ""}
    await signed_in.sign_out()
    session = await signed_in.sign_in_with_password("ana@inst.edu", "Nova@1234")
    assert session.user.email == "ana@inst.edu"


async def test_mot_de_passe_actuel_incorrect(signed_in):
    """Mot de passe actuel incorrect → aucune mise à jour, saisie conservée."""
    panel = PasswordChangePanel(signed_in)
    signed_in.update_password = AsyncMock()

    result = await panel.submit({**NEW, "current_password": "Errada@123"})

    assert isinstance(result.error, AuthError)
    assert result.error.message == messages.CURRENT_PASSWORD_INCORRECT
    signed_in.update_password.assert_not_called()
    assert panel.form.values["new_password"] == "Nova@1234"


async def test_sans_session(backend):
    """Sans session → « Usuário não encontrado »."""
    result = await PasswordChangePanel(backend).submit(NEW)
    assert result.error.message == messages.USER_NOT_FOUND


async def test_validation_avant_tout_appel():
    """Confirmation différente → refus avant tout appel au backend."""
    backend = AsyncMock()
    result = await PasswordChangePanel(backend).submit({**NEW, "confirm_password": "Nova@9999"})

    assert result.error.message == "As senhas não coincidem"
    backend.get_session.assert_not_called()


async def test_echec_mise_a_jour():
    """Échec de la mise à jour → message brut du backend."""
    user = AuthUser(id="u1", email="ana@inst.edu")
    backend = AsyncMock()
    backend.get_session.return_value = AuthSession(user=user, access_token="t")
    backend.update_password.side_effect = BackendError("New password should be different from the old password.")

    result = await PasswordChangePanel(backend).submit(NEW)

    assert isinstance(result.error, TransportError)
    assert result.error.message == "New password should be different from the old password."
    backend.sign_in_with_password.assert_awaited_once_with("ana@inst.edu", PASSWORD)
