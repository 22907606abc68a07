"""
Tests du backend local (SQLite en mémoire) : auth, données, flux de changements.
"""

import pytest

from conftest import PASSWORD, seed_students
from student_records.errors import BackendError


# ============================================================
# Auth
# ============================================================

async def test_sign_up_sans_session(backend):
    """L'inscription crée le compte sans ouvrir de session."""
    assert await backend.sign_up("bia@inst.edu", PASSWORD, {"full_name": "Bia"}) is None
    assert await backend.get_session() is None


async def test_sign_up_compte_existant(backend):
    """Compte existant → « User already registered »."""
    await backend.sign_up("bia@inst.edu", PASSWORD, {})
    with pytest.raises(BackendError, match="User already registered"):
        await backend.sign_up("bia@inst.edu", PASSWORD, {})


async def test_sign_in_profil_et_evenement(backend):
    """Connexion → profil de l'inscription et événement SIGNED_IN."""
    events = []
    backend.on_session_change(lambda event, session: events.append((event, session)))
    await backend.sign_up("bia@inst.edu", PASSWORD, {"full_name": "Bia Reis", "matricula": "20249"})

    session = await backend.sign_in_with_password("bia@inst.edu", PASSWORD)

    assert session.user.email == "bia@inst.edu"
    assert session.user.user_metadata == {"full_name": "Bia Reis", "matricula": "20249"}
    assert events == [("SIGNED_IN", session)]


async def test_sign_in_mauvais_mot_de_passe(backend):
    """Mauvais mot de passe ou compte inconnu → même erreur."""
    await backend.sign_up("bia@inst.edu", PASSWORD, {})
    with pytest.raises(BackendError, match="Invalid login credentials"):
        await backend.sign_in_with_password("bia@inst.edu", "Errada@123")
    with pytest.raises(BackendError, match="Invalid login credentials"):
        await backend.sign_in_with_password("inconnu@inst.edu", PASSWORD)


async def test_update_password(signed_in):
    """Nouveau mot de passe → l'ancien est refusé."""
    await signed_in.update_password("Nova@1234")
    await signed_in.sign_out()
    with pytest.raises(BackendError):
        await signed_in.sign_in_with_password("ana@inst.edu", PASSWORD)
    session = await signed_in.sign_in_with_password("ana@inst.edu", "Nova@1234")
    assert session.user.email == "ana@inst.edu"


async def test_update_password_sans_session(backend):
    """Changement sans session → « Auth session missing »."""
    with pytest.raises(BackendError, match="Auth session missing"):
        await backend.update_password("Nova@1234")


# ============================================================
# Données
# ============================================================

async def test_donnees_reservees_aux_utilisateurs_connectes(backend):
    """Lecture sans session refusée."""
    with pytest.raises(BackendError):
        await backend.select_page("students", "created_at", True, 0, 10)


async def test_table_inconnue(signed_in):
    """Table inconnue → erreur « does not exist »."""
    with pytest.raises(BackendError, match="does not exist"):
        await signed_in.select_page("teachers", "created_at", True, 0, 10)


async def test_select_page_ordre_et_total(signed_in):
    """Plage 20-29 sur 25 lignes → les 5 plus anciennes, total exact."""
    await seed_students(signed_in, 25)

    page = await signed_in.select_page("students", "created_at", True, 20, 10)

    assert page.total_count == 25
    assert [r["full_name"] for r in page.rows] == ["Aluno 04", "Aluno 03", "Aluno 02", "Aluno 01", "Aluno 00"]


async def test_insert_email_duplique(signed_in):
    """E-mail dupliqué → erreur de clé dupliquée."""
    rows = await seed_students(signed_in, 1)
    with pytest.raises(BackendError) as exc_info:
        await signed_in.insert("students", {
            "full_name": "Outro",
            "email": rows[0]["email"],
            "matricula": "99999",
            "user_id": rows[0]["user_id"],
        })
    assert exc_info.value.is_duplicate_key


async def test_update_inchange_conserve_id_et_date(signed_in):
    """Mise à jour sans changement : id et created_at inchangés."""
    [row] = await seed_students(signed_in, 1)
    patch = {k: row[k] for k in ("full_name", "email", "matricula")}

    updated = await signed_in.update("students", row["id"], patch)

    assert updated == row


async def test_update_ignore_colonnes_immuables(signed_in):
    """user_id n'est jamais modifié par une mise à jour."""
    [row] = await seed_students(signed_in, 1)
    updated = await signed_in.update("students", row["id"], {"full_name": "Novo Nome", "user_id": "x"})
    assert updated["full_name"] == "Novo Nome"
    assert updated["user_id"] == row["user_id"]


async def test_delete(signed_in):
    """Suppression → total à zéro."""
    [row] = await seed_students(signed_in, 1)
    await signed_in.delete("students", row["id"])
    page = await signed_in.select_page("students", "created_at", True, 0, 10)
    assert page.total_count == 0


# ============================================================
# Flux de changements
# ============================================================

async def test_flux_insert_update_delete(signed_in, feed):
    """Le flux notifie INSERT, UPDATE puis DELETE ; le désabonnement libère la table."""
    events = []
    subscription = await signed_in.subscribe_to_table_changes("students", events.append)

    [row] = await seed_students(signed_in, 1)
    await signed_in.update("students", row["id"], {"full_name": "Renomeado"})
    await signed_in.delete("students", row["id"])

    assert [e.event_type for e in events] == ["INSERT", "UPDATE", "DELETE"]
    assert events[1].record["full_name"] == "Renomeado"
    assert events[2].old_record["id"] == row["id"]

    await subscription.unsubscribe()
    assert feed.subscriber_count("students") == 0


async def test_flux_partage_entre_backends(signed_in, make_backend):
    """Un changement fait par un autre navigateur est notifié à tous les abonnés."""
    other = make_backend()
    events = []
    await other.subscribe_to_table_changes("students", events.append)

    await seed_students(signed_in, 1)

    assert len(events) == 1
