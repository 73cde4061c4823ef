from concurrent.futures import ThreadPoolExecutor


def _create_item(client, headers, name: str, **fields) -> dict:
    payload = {"name": name, "effect": fields.pop("effect", "Does something"), **fields}
    response = client.post("/api/v1/items", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


def test_item_crud(client, register):
    headers = register("items-admin@example.com")

    created = _create_item(client, headers, "Healing Potion", type="potion", value=25)
    assert created["type"] == "potion"
    assert created["value"] == 25

    fetched = client.get(f"/api/v1/items/{created['id']}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Healing Potion"

    updated = client.put(
        f"/api/v1/items/{created['id']}",
        json={"value": 30},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["value"] == 30
    assert updated.json()["effect"] == "Does something"

    duplicate = client.post(
        "/api/v1/items",
        json={"name": "healing potion", "effect": "Copy"},
        headers=headers,
    )
    assert duplicate.status_code == 409

    deleted = client.delete(f"/api/v1/items/{created['id']}", headers=headers)
    assert deleted.status_code == 204
    assert client.get(f"/api/v1/items/{created['id']}", headers=headers).status_code == 404


def test_item_listing_filters_and_paginates(client, register):
    headers = register("items-list@example.com")
    _create_item(client, headers, "Axe", type="weapon", value=50)
    _create_item(client, headers, "Bow", type="weapon", value=80)
    _create_item(client, headers, "Cloak", type="armor", value=40)
    _create_item(client, headers, "Dagger", type="weapon", value=10)

    weapons = client.get("/api/v1/items?type=weapon&limit=2&page=1", headers=headers)
    assert weapons.status_code == 200
    payload = weapons.json()
    assert payload["total"] == 3
    assert payload["pages"] == 2
    assert payload["count"] == 2
    assert [item["name"] for item in payload["items"]] == ["Axe", "Bow"]

    second_page = client.get("/api/v1/items?type=weapon&limit=2&page=2", headers=headers).json()
    assert [item["name"] for item in second_page["items"]] == ["Dagger"]

    priced = client.get("/api/v1/items?min_value=40&max_value=60", headers=headers).json()
    assert sorted(item["name"] for item in priced["items"]) == ["Axe", "Cloak"]

    bad_range = client.get("/api/v1/items?min_value=60&max_value=40", headers=headers)
    assert bad_range.status_code == 422


def test_quest_crud_and_reward_item_validation(client, register):
    headers = register("quests-admin@example.com")
    relic = _create_item(client, headers, "Old Relic", type="quest_item")

    missing_item = client.post(
        "/api/v1/quests",
        json={
            "title": "Broken Quest",
            "description": "Points at nothing",
            "reward_item_id": "does-not-exist",
        },
        headers=headers,
    )
    assert missing_item.status_code == 400

    created = client.post(
        "/api/v1/quests",
        json={
            "title": "Find the Relic",
            "description": "Search the crypt",
            "level": 2,
            "reward_experience": 150,
            "reward_item_id": relic["id"],
        },
        headers=headers,
    )
    assert created.status_code == 201
    quest = created.json()
    assert quest["reward_item_id"] == relic["id"]

    duplicate = client.post(
        "/api/v1/quests",
        json={"title": "Find the Relic", "description": "Again"},
        headers=headers,
    )
    assert duplicate.status_code == 409

    cleared = client.put(
        f"/api/v1/quests/{quest['id']}",
        json={"reward_item_id": None, "reward_experience": 200},
        headers=headers,
    )
    assert cleared.status_code == 200
    assert cleared.json()["reward_item_id"] is None
    assert cleared.json()["reward_experience"] == 200

    listing = client.get("/api/v1/quests?max_level=1", headers=headers).json()
    assert listing["total"] == 0
    listing = client.get("/api/v1/quests", headers=headers).json()
    assert listing["total"] == 1

    assert client.delete(f"/api/v1/quests/{quest['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/quests/{quest['id']}", headers=headers).status_code == 404


def test_simultaneous_item_creation_conflicts_cleanly(client, register):
    headers = register("items-race@example.com")
    payload = {"name": "Contested Blade", "type": "weapon", "effect": "Sharp"}

    with ThreadPoolExecutor(max_workers=4) as pool:
        responses = list(
            pool.map(
                lambda _: client.post("/api/v1/items", json=payload, headers=headers),
                range(4),
            )
        )

    codes = sorted(response.status_code for response in responses)
    assert codes == [201, 409, 409, 409]
    listing = client.get("/api/v1/items", headers=headers).json()
    assert listing["total"] == 1
