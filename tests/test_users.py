from tests.conftest import PANIDA_ID


def test_get_profile(client):
    res = client.get(f"/users/{PANIDA_ID}/profile")
    assert res.status_code == 200
    body = res.json()
    assert body["username"] == "panida"
    assert body["firstName"] == "Panida"
    assert "password" not in body
    assert "passwordHash" not in body


def test_get_profile_missing(client):
    res = client.get("/users/1/profile")
    assert res.status_code == 404
    assert res.json()["message"]


def test_profile_read_is_idempotent(client):
    first = client.get(f"/users/{PANIDA_ID}/profile").json()
    second = client.get(f"/users/{PANIDA_ID}/profile").json()
    assert first == second


def test_update_profile_merges_fields(client):
    res = client.put(f"/users/{PANIDA_ID}/profile", json={"bio": "new bio", "location": "ภูเก็ต"})
    assert res.status_code == 200
    body = res.json()
    assert body["bio"] == "new bio"
    assert body["location"] == "ภูเก็ต"
    assert body["username"] == "panida"
    assert body["message"]
    assert "passwordHash" not in body

    profile = client.get(f"/users/{PANIDA_ID}/profile").json()
    assert profile["bio"] == "new bio"
    assert "message" not in profile


def test_update_profile_can_overwrite_id(client):
    res = client.put(f"/users/{PANIDA_ID}/profile", json={"id": 42})
    assert res.status_code == 200
    assert client.get("/users/42/profile").status_code == 200
    assert client.get(f"/users/{PANIDA_ID}/profile").status_code == 404


def test_update_profile_password_is_hashed(client, store):
    client.put(f"/users/{PANIDA_ID}/profile", json={"password": "newpass99"})
    user = store.get_users()[store.find_user(PANIDA_ID)]
    assert user["passwordHash"] != "newpass99"
    assert "password" not in user
    assert client.post("/auth/signin", json={"username": "panida", "password": "newpass99"}).status_code == 200
    assert client.post("/auth/signin", json={"username": "panida", "password": "12345qazAZ"}).status_code == 401


def test_update_profile_ignores_raw_hash(client, store):
    original = store.get_users()[store.find_user(PANIDA_ID)]["passwordHash"]
    client.put(f"/users/{PANIDA_ID}/profile", json={"passwordHash": "plain"})
    assert store.get_users()[store.find_user(PANIDA_ID)]["passwordHash"] == original


def test_update_profile_missing(client):
    res = client.put("/users/1/profile", json={"bio": "x"})
    assert res.status_code == 404


def test_update_profile_rejects_non_object(client):
    res = client.put(f"/users/{PANIDA_ID}/profile", json=["bio"])
    assert res.status_code == 400


def test_count_users(client):
    res = client.get("/users/count")
    assert res.status_code == 200
    assert res.json() == {"count": 3}
    assert client.get("/users/count").json() == {"count": 3}
