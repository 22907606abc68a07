"""
Tests unitaires du module de validation des formulaires.
"""

import pytest

from student_records.errors import FieldError, ValidationError
from student_records.validation import (
    validate_login,
    validate_password_change,
    validate_signup,
    validate_student,
)

SIGNUP = {
    "full_name": "João da Silva",
    "email": "joao@inst.edu",
    "matricula": "2024001",
    "password": "Senha@123",
    "confirm_password": "Senha@123",
}


# ============================================================
# Force du mot de passe
# ============================================================

@pytest.mark.parametrize("password, message", [
    ("Ab@1", "Senha deve ter no mínimo 8 caracteres"),
    ("Senha@abc", "Senha deve conter pelo menos 1 número"),
    ("Senha1234", "Senha deve conter pelo menos 1 caractere especial"),
])
def test_signup_mot_de_passe_faible(password, message):
    """Mot de passe faible → première règle non respectée."""
    result = validate_signup({**SIGNUP, "password": password, "confirm_password": password})
    assert not result.ok
    assert isinstance(result.error, ValidationError)
    assert result.error.first_field == "password"
    assert result.error.message == message


@pytest.mark.parametrize("password", ["Senha@123", "abcdefg1!", "12345678{", 'x"y1zzzzz'])
def test_signup_mot_de_passe_fort(password):
    """Mots de passe conformes acceptés."""
    result = validate_signup({**SIGNUP, "password": password, "confirm_password": password})
    assert result.ok


def test_signup_confirmation_differente():
    """Confirmation différente → erreur rattachée au champ de confirmation."""
    result = validate_signup({**SIGNUP, "confirm_password": "Senha@124"})
    assert not result.ok
    assert result.error.errors == [FieldError("confirm_password", "As senhas não coincidem")]


def test_signup_valeurs_normalisees():
    """Nom et e-mail débarrassés des espaces."""
    result = validate_signup({**SIGNUP, "full_name": "  João da Silva ", "email": " joao@inst.edu "})
    assert result.ok
    assert result.value.full_name == "João da Silva"
    assert result.value.email == "joao@inst.edu"


# ============================================================
# Connexion
# ============================================================

def test_login_mot_de_passe_existant_sans_controle_de_force():
    """Connexion : pas de contrôle de force du mot de passe."""
    result = validate_login({"email": "joao@inst.edu", "password": "abc"})
    assert result.ok


def test_login_mot_de_passe_vide():
    """Mot de passe vide → « Senha é obrigatória »."""
    result = validate_login({"email": "joao@inst.edu", "password": ""})
    assert not result.ok
    assert result.error.message == "Senha é obrigatória"


def test_login_email_invalide():
    """E-mail invalide → erreur sur le champ email."""
    result = validate_login({"email": "pas-un-email", "password": "abc"})
    assert not result.ok
    assert result.error.first_field == "email"
    assert result.error.message == "E-mail inválido"


# ============================================================
# Formulaire élève
# ============================================================

def test_student_valide_et_trimme():
    """Élève valide → valeurs débarrassées des espaces."""
    result = validate_student({"full_name": "  Maria Lima ", "email": "maria@inst.edu ", "matricula": " 20245 "})
    assert result.ok
    assert result.value.model_dump() == {
        "full_name": "Maria Lima",
        "email": "maria@inst.edu",
        "matricula": "20245",
    }


def test_student_champs_manquants_dans_l_ordre():
    """Champs absents : une erreur par champ, dans l'ordre du formulaire."""
    result = validate_student({})
    assert not result.ok
    assert [e.field for e in result.error.errors] == ["full_name", "email", "matricula"]
    assert result.error.message == "Nome deve ter no mínimo 3 caracteres"


@pytest.mark.parametrize("field, value, message", [
    ("full_name", "Jo", "Nome deve ter no mínimo 3 caracteres"),
    ("full_name", "x" * 101, "Nome deve ter no máximo 100 caracteres"),
    ("email", "joao@", "E-mail inválido"),
    ("matricula", "1234", "Matrícula deve ter no mínimo 5 caracteres"),
    ("matricula", "1" * 21, "Matrícula deve ter no máximo 20 caracteres"),
])
def test_student_bornes(field, value, message):
    """Chaque borne de longueur a son message."""
    data = {"full_name": "Maria Lima", "email": "maria@inst.edu", "matricula": "20245", field: value}
    result = validate_student(data)
    assert not result.ok
    assert result.error.errors == [FieldError(field, message)]


# ============================================================
# Changement de mot de passe
# ============================================================

def test_password_change_valide():
    """Changement de mot de passe valide."""
    result = validate_password_change({
        "current_password": "ancien",
        "new_password": "Nova@1234",
        "confirm_password": "Nova@1234",
    })
    assert result.ok


def test_password_change_confirmation_differente():
    """Confirmation différente → erreur sur confirm_password."""
    result = validate_password_change({
        "current_password": "ancien",
        "new_password": "Nova@1234",
        "confirm_password": "Nova@9999",
    })
    assert not result.ok
    assert result.error.first_field == "confirm_password"


def test_password_change_nouveau_faible():
    """Nouveau mot de passe faible → message propre au nouveau mot de passe."""
    result = validate_password_change({
        "current_password": "ancien",
        "new_password": "fraca",
        "confirm_password": "fraca",
    })
    assert not result.ok
    assert result.error.errors == [FieldError("new_password", "Nova senha deve ter no mínimo 8 caracteres")]


def test_password_change_actuel_obligatoire():
    """Mot de passe actuel absent → « Senha atual é obrigatória »."""
    result = validate_password_change({"new_password": "Nova@1234", "confirm_password": "Nova@1234"})
    assert not result.ok
    assert result.error.message == "Senha atual é obrigatória"


# ============================================================
# E-mail de l'élève
# ============================================================

def test_student_email_domaine_reserve_accepte():
    """Domaine réservé (.test) → adresse acceptée comme toute adresse syntaxiquement valide."""
    result = validate_student({"full_name": "João da Silva", "email": "joao@escola.test", "matricula": "2024001"})
    assert result.ok


def test_student_email_trop_long():
    """E-mail de plus de 255 caractères → message de longueur maximale."""
    email = "a" * 64 + "@" + ".".join(["b" * 63] * 3) + ".com"
    assert len(email) > 255
    result = validate_student({"full_name": "João da Silva", "email": email, "matricula": "2024001"})
    assert result.error.errors == [FieldError("email", "E-mail deve ter no máximo 255 caracteres")]
