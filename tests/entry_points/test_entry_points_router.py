def test_list_entry_points_includes_links(client):
    response = client.get("/admin/entry-points")

    assert response.status_code == 200
    assert response.json()[0] == {
        "id": "ep_table_1",
        "label": "Table 1",
        "src": "table_1",
        "link": "https://reviews.example.com/bistro-co?src=table_1",
    }


def test_create_entry_point(client):
    response = client.post(
        "/admin/entry-points", json={"label": "Front Door", "src": "front door"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["persisted"] is True
    assert body["entryPoint"]["src"] == "front_door"
    assert body["entryPoint"]["link"].endswith("/bistro-co?src=front_door")
    assert client.get("/admin/entry-points").json()[0]["label"] == "Front Door"


def test_create_entry_point_with_blank_fields_returns_400(client):
    response = client.post("/admin/entry-points", json={"label": " ", "src": "x"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide both a label and a source value."


def test_put_entry_point_updates_in_place(client):
    response = client.put(
        "/admin/entry-points/ep_email", json={"label": "Newsletter", "src": "news"}
    )

    assert response.status_code == 200
    entry_points = client.get("/admin/entry-points").json()
    assert [ep["id"] for ep in entry_points] == ["ep_table_1", "ep_email"]
    assert entry_points[1]["label"] == "Newsletter"


def test_delete_entry_point(client):
    response = client.delete("/admin/entry-points/ep_table_1")

    assert response.status_code == 200
    assert [ep["id"] for ep in client.get("/admin/entry-points").json()] == [
        "ep_email"
    ]
