def test_theme_status(client):
    res = client.get("/theme")
    assert res.status_code == 200
    body = res.json()
    assert body["currentTheme"]["id"] == 1
    assert [t["name"] for t in body["availableThemes"]] == [
        "Classic Blue", "Sunset Orange", "Forest Green", "Purple Dreams",
    ]
    assert body["currentTheme"]["messageBackgroundSelf"] == "#3b82f6"


def test_select_theme_by_id(client):
    res = client.post("/theme", json={"themeId": 2})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"]
    assert body["currentTheme"]["id"] == 2
    assert len(body["availableThemes"]) == 4
    assert client.get("/theme").json()["currentTheme"]["id"] == 2


def test_select_theme_by_name_with_put(client):
    res = client.put("/theme", json={"themeId": "Forest Green"})
    assert res.status_code == 200
    assert client.get("/theme").json()["currentTheme"]["id"] == 3


def test_select_theme_by_name_field(client):
    res = client.post("/theme", json={"name": "Purple Dreams"})
    assert res.status_code == 200
    assert res.json()["currentTheme"]["id"] == 4


def test_select_unknown_theme_keeps_active(client):
    client.post("/theme", json={"themeId": 2})
    res = client.post("/theme", json={"themeId": "nonexistent"})
    assert res.status_code == 404
    assert res.json()["message"]
    assert client.get("/theme").json()["currentTheme"]["id"] == 2


def test_select_theme_requires_value(client):
    res = client.post("/theme", json={})
    assert res.status_code == 400
