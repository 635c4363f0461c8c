import pytest

ALL_DAYS = {day: True for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")}


async def _create(client, headers, **overrides):
    payload = {"title": "Metformin", "type": "Medication", "time": "08:00"}
    payload.update(overrides)
    return await client.post("/api/reminders", json=payload, headers=headers)


@pytest.mark.asyncio
async def test_create_without_days_means_every_day(client, register):
    _, headers = await register()

    resp = await _create(client, headers, notes="after breakfast")

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["type"] == "Medication"
    assert body["time"] == "08:00"
    assert body["days"] == ALL_DAYS
    assert body["isActive"] is True
    assert body["notes"] == "after breakfast"
    assert "createdAt" in body


@pytest.mark.asyncio
async def test_create_with_some_days_turns_others_off(client, register):
    _, headers = await register()

    resp = await _create(client, headers, days={"monday": True, "friday": True})

    days = resp.json()["days"]
    assert [d for d, on in days.items() if on] == ["monday", "friday"]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [{"time": "25:00"}, {"time": "8:00"}, {"type": "Yoga"}, {"title": ""}])
async def test_create_rejects_invalid_input(client, register, overrides):
    _, headers = await register()
    resp = await _create(client, headers, **overrides)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_only_mine(client, register):
    _, mine = await register(email="me@example.com")
    _, theirs = await register(email="them@example.com")
    await _create(client, mine, title="Mine")
    await _create(client, theirs, title="Theirs")

    resp = await client.get("/api/reminders", headers=mine)

    assert resp.status_code == 200
    assert [r["title"] for r in resp.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_update_partial(client, register):
    _, headers = await register()
    reminder_id = (await _create(client, headers)).json()["id"]

    resp = await client.put(
        f"/api/reminders/{reminder_id}",
        json={"time": "09:15", "days": {"sunday": False}, "isActive": False},
        headers=headers,
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["time"] == "09:15"
    assert body["days"]["sunday"] is False
    assert body["days"]["monday"] is True
    assert body["isActive"] is False
    assert body["title"] == "Metformin"


@pytest.mark.asyncio
async def test_update_rejects_bad_time(client, register):
    _, headers = await register()
    reminder_id = (await _create(client, headers)).json()["id"]

    resp = await client.put(f"/api/reminders/{reminder_id}", json={"time": "9am"}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_toggle_and_delete(client, register):
    _, headers = await register()
    reminder_id = (await _create(client, headers)).json()["id"]

    resp = await client.patch(f"/api/reminders/{reminder_id}/toggle", headers=headers)
    assert resp.json()["isActive"] is False
    resp = await client.patch(f"/api/reminders/{reminder_id}/toggle", headers=headers)
    assert resp.json()["isActive"] is True

    resp = await client.delete(f"/api/reminders/{reminder_id}", headers=headers)
    assert resp.status_code == 200
    assert (await client.get("/api/reminders", headers=headers)).json() == []


@pytest.mark.asyncio
async def test_foreign_reminder_is_not_found(client, register):
    _, owner = await register(email="owner@example.com")
    _, stranger = await register(email="stranger@example.com")
    reminder_id = (await _create(client, owner)).json()["id"]

    for method, url in (
        ("put", f"/api/reminders/{reminder_id}"),
        ("patch", f"/api/reminders/{reminder_id}/toggle"),
        ("delete", f"/api/reminders/{reminder_id}"),
    ):
        kwargs = {"json": {"title": "stolen"}} if method == "put" else {}
        resp = await getattr(client, method)(url, headers=stranger, **kwargs)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Reminder not found."

    # У владельца ничего не изменилось
    (reminder,) = (await client.get("/api/reminders", headers=owner)).json()
    assert reminder["title"] == "Metformin"
    assert reminder["isActive"] is True
