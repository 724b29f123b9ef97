from datetime import datetime, timedelta

API = "/api/v1"


def _create(client, **overrides):
    payload = {"nome": "Ana Silva", "email": "ana@x.com", "area_atuacao": "TI", "nivel_carreira": "Pleno"}
    payload.update(overrides)
    return client.post(f"{API}/usuarios", json=payload)


def test_create_and_fetch_user(client):
    r = _create(client)
    assert r.status_code == 201
    body = r.json()
    assert body["id"] > 0
    assert body["nome"] == "Ana Silva"
    assert body["email"] == "ana@x.com"
    assert body["area_atuacao"] == "TI"
    assert body["nivel_carreira"] == "Pleno"
    assert body["data_cadastro"]

    fetched = client.get(f"{API}/usuarios/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


def test_duplicate_email_returns_conflict(client):
    assert _create(client).status_code == 201
    r = _create(client, nome="Outra Ana")
    assert r.status_code == 409
    assert "ana@x.com" in r.json()["message"]
    assert len(client.get(f"{API}/usuarios").json()) == 1


def test_invalid_payload_returns_400_with_envelope(client):
    r = client.post(f"{API}/usuarios", json={"nome": "Al", "email": "not-an-email"})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Dados de entrada inválidos."
    assert "email" in body["details"]
    assert "nome" in body["details"]


def test_missing_required_fields_returns_400(client):
    r = client.post(f"{API}/usuarios", json={"email": "ana@x.com"})
    assert r.status_code == 400


def test_list_users_ordered_by_id(client):
    assert client.get(f"{API}/usuarios").json() == []
    _create(client, email="a@x.com")
    _create(client, email="b@x.com")
    ids = [u["id"] for u in client.get(f"{API}/usuarios").json()]
    assert ids == sorted(ids)
    assert len(ids) == 2


def test_update_overlays_only_given_fields(client):
    user = _create(client).json()
    r = client.put(f"{API}/usuarios/{user['id']}", json={"nivel_carreira": "Senior"})
    assert r.status_code == 200
    body = r.json()
    assert body["nivel_carreira"] == "Senior"
    assert body["nome"] == user["nome"]
    assert body["area_atuacao"] == user["area_atuacao"]
    assert body["email"] == user["email"]


def test_delete_user(client):
    user = _create(client).json()
    r = client.delete(f"{API}/usuarios/{user['id']}")
    assert r.status_code == 204
    assert client.get(f"{API}/usuarios/{user['id']}").status_code == 404


def test_missing_user_returns_404(client):
    for r in (
        client.get(f"{API}/usuarios/999"),
        client.put(f"{API}/usuarios/999", json={"nome": "Ninguém"}),
        client.delete(f"{API}/usuarios/999"),
    ):
        assert r.status_code == 404
        assert r.json()["message"] == "Usuário não encontrado(a)."
        assert "999" in r.json()["details"]


def test_non_integer_id_returns_400(client):
    r = client.get(f"{API}/usuarios/abc")
    assert r.status_code == 400
    assert r.json()["message"] == "ID inválido."


def test_storage_failure_returns_generic_500(client):
    from upskilling.errors import StorageError
    from upskilling.main import app, get_user_service
    from upskilling.services import UserService

    class BrokenUserStore:
        def find_all(self):
            raise StorageError("erro ao buscar todos os usuários: disk I/O error")

    app.dependency_overrides[get_user_service] = lambda: UserService(BrokenUserStore())
    r = client.get(f"{API}/usuarios")
    assert r.status_code == 500
    assert r.json() == {"message": "Ocorreu um erro interno no servidor.", "details": ""}


def test_null_optional_fields_are_accepted(client):
    r = client.post(f"{API}/usuarios", json={"nome": "Ana", "email": "ana@x.com", "area_atuacao": None, "nivel_carreira": None})
    assert r.status_code == 201
    user = r.json()
    assert (user["area_atuacao"], user["nivel_carreira"]) == ("", "")

    r = client.put(f"{API}/usuarios/{user['id']}", json={"nome": None, "area_atuacao": "Dados", "nivel_carreira": None})
    assert r.status_code == 200
    assert (r.json()["nome"], r.json()["area_atuacao"]) == ("Ana", "Dados")


def test_out_of_range_ids_return_400(client):
    for path in ("/usuarios/99999999999999999999", "/usuarios/0", "/usuarios/-3"):
        r = client.get(f"{API}{path}")
        assert r.status_code == 400
        assert r.json()["message"] == "ID inválido."
    assert client.delete(f"{API}/usuarios/99999999999999999999").status_code == 400
    assert client.put(f"{API}/usuarios/99999999999999999999", json={"nome": "Ninguém"}).status_code == 400


def test_registration_date_carries_utc_offset(client):
    stamp = _create(client).json()["data_cadastro"]
    parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
    assert parsed.utcoffset() == timedelta(0)
    fetched = client.get(f"{API}/usuarios").json()[0]["data_cadastro"]
    assert datetime.fromisoformat(fetched.replace("Z", "+00:00")).utcoffset() == timedelta(0)


def test_duplicate_email_found_only_at_insert_returns_conflict(client):
    from upskilling.errors import ConflictError
    from upskilling.main import app, get_user_service
    from upskilling.services import UserService

    class LateDuplicateUserStore:
        def find_by_email(self, email):
            return None

        def create(self, user):
            raise ConflictError("Email já cadastrado.")

    app.dependency_overrides[get_user_service] = lambda: UserService(LateDuplicateUserStore())
    r = _create(client)
    assert r.status_code == 409
    assert r.json()["message"] == "Email já cadastrado."
