def test_song_crud_and_search(client, song):
    client.post("/api/songs", json={"title": "Rain Check", "artist": "Jo Kim", "genre": "indie"})

    assert len(client.get("/api/songs").json()) == 2
    found = client.get("/api/songs", params={"search": "ava"}).json()
    assert [s["title"] for s in found] == ["Golden Hour"]
    assert [s["title"] for s in client.get("/api/songs", params={"genre": "indie"}).json()] == ["Rain Check"]

    updated = client.put(f"/api/songs/{song['id']}", json={"mood": "warm", "description": "<i>sunset</i>"}).json()
    assert updated["mood"] == "warm"
    assert updated["title"] == "Golden Hour"
    assert updated["description"] == "&lt;i&gt;sunset&lt;/i&gt;"

    assert client.delete(f"/api/songs/{song['id']}").json() == {"success": True}
    assert client.get(f"/api/songs/{song['id']}").json() == {"error": "Song not found"}


def test_song_requires_title_and_artist(client):
    response = client.post("/api/songs", json={"title": "No Artist"})
    assert response.status_code == 400
    assert response.json()["error"] == [{"field": "artist", "message": "Field required"}]


def test_song_rejects_out_of_range_ownership(client):
    response = client.post(
        "/api/songs",
        json={"title": "T", "artist": "A", "composerPublishers": [{"composer": "C", "publishingOwnership": 140}]},
    )
    assert response.status_code == 400
    assert response.json()["error"][0]["field"].startswith("composerPublishers.0")


def test_contact_email_is_validated_and_normalized(client):
    bad = client.post("/api/contacts", json={"name": "Dana", "email": "not-an-email"})
    assert bad.status_code == 400
    assert bad.json()["error"][0]["field"] == "email"

    contact = client.post("/api/contacts", json={"name": "Dana", "email": "Dana@Example.com", "company": "Brightside"}).json()
    assert contact["email"] == "dana@example.com"

    updated = client.patch(f"/api/contacts/{contact['id']}", json={"role": "Music Supervisor"}).json()
    assert updated["role"] == "Music Supervisor"
    assert updated["company"] == "Brightside"
    assert len(client.get("/api/contacts", params={"search": "bright"}).json()) == 1


def test_pitch_needs_a_deal_or_custom_name(client):
    response = client.post("/api/pitches", json={"notes": "sent reel"})
    assert response.status_code == 400
    assert response.json() == {"error": "Either dealId or customDealName is required"}


def test_pitch_lifecycle(client):
    deal = client.post("/api/deals", json={"projectName": "Late Summer", "projectType": "film"}).json()

    pitch = client.post("/api/pitches", json={"dealId": deal["id"], "followUpDate": "2025-07-01T09:00:00"}).json()
    assert pitch["status"] == "pending"
    assert pitch["projectName"] == "Late Summer"

    custom = client.post("/api/pitches", json={"customDealName": "Coffee ad", "status": "no_response"}).json()
    assert custom["projectName"] is None

    updated = client.patch(f"/api/pitches/{pitch['id']}", json={"status": "responded"}).json()
    assert updated["status"] == "responded"

    by_deal = client.get("/api/pitches", params={"dealId": deal["id"]}).json()
    assert [p["id"] for p in by_deal] == [pitch["id"]]

    bad = client.patch(f"/api/pitches/{pitch['id']}", json={"status": "won"})
    assert bad.status_code == 400


def test_moving_air_date_event_moves_deal(client):
    deal = client.post("/api/deals", json={"projectName": "Late Summer", "projectType": "film", "airDate": "2025-06-01"}).json()
    event = client.get("/api/calendar-events", params={"entityType": "deal", "entityId": deal["id"]}).json()[0]

    response = client.patch(f"/api/calendar-events/{event['id']}", json={"startDate": "2025-08-15T00:00:00"})

    assert response.status_code == 200
    assert client.get(f"/api/deals/{deal['id']}").json()["airDate"] == "2025-08-15"


def test_other_events_leave_deal_alone(client):
    deal = client.post("/api/deals", json={"projectName": "Late Summer", "projectType": "film", "airDate": "2025-06-01"}).json()
    event = client.post(
        "/api/calendar-events",
        json={"title": "Follow up call", "startDate": "2025-05-01T10:00:00", "entityType": "deal", "entityId": deal["id"]},
    )
    assert event.status_code == 201

    client.patch(f"/api/calendar-events/{event.json()['id']}", json={"startDate": "2025-05-02T10:00:00"})

    assert client.get(f"/api/deals/{deal['id']}").json()["airDate"] == "2025-06-01"


def test_calendar_event_validation_and_delete(client):
    bad = client.post(
        "/api/calendar-events",
        json={"title": "X", "startDate": "2025-05-01T10:00:00", "entityType": "invoice", "entityId": 1},
    )
    assert bad.status_code == 400

    event = client.post(
        "/api/calendar-events",
        json={"title": "Call", "startDate": "2025-05-01T10:00:00", "entityType": "pitch", "entityId": 1},
    ).json()
    assert client.delete(f"/api/calendar-events/{event['id']}").status_code == 204
    assert client.get(f"/api/calendar-events/{event['id']}").status_code == 404


def test_calendar_date_range_filter(client):
    for day in ("2025-01-10", "2025-02-10", "2025-03-10"):
        client.post(
            "/api/calendar-events",
            json={"title": day, "startDate": f"{day}T09:00:00", "entityType": "pitch", "entityId": 1},
        )

    events = client.get(
        "/api/calendar-events", params={"startDate": "2025-02-01T00:00:00", "endDate": "2025-02-28T23:59:59"}
    ).json()

    assert [e["title"] for e in events] == ["2025-02-10"]


def test_templates_crud(client):
    created = client.post("/api/templates", json={"name": "Standard sync", "type": "contract", "content": "Terms"})
    assert created.status_code == 201
    template = created.json()

    client.post("/api/templates", json={"name": "Quote", "type": "quote", "content": "Q"})
    assert [t["name"] for t in client.get("/api/templates", params={"type": "contract"}).json()] == ["Standard sync"]

    updated = client.patch(f"/api/templates/{template['id']}", json={"content": "New terms"}).json()
    assert updated["content"] == "New terms"
    assert client.delete(f"/api/templates/{template['id']}").json() == {"success": True}
    assert client.get(f"/api/templates/{template['id']}").json() == {"error": "Template not found"}


def test_email_template_variables_and_render(client):
    template = client.post(
        "/api/email-templates",
        json={
            "name": "First pitch",
            "stage": "initial_pitch",
            "subject": "{{songTitle}} for {{projectName}}",
            "body": "Hi {{ clientName }}, here is {{songTitle}}.",
        },
    ).json()
    assert template["variables"] == ["songTitle", "projectName", "clientName"]

    rendered = client.post(
        f"/api/email-templates/{template['id']}/render",
        json={"values": {"songTitle": "Golden Hour", "clientName": "Dana"}},
    ).json()

    assert rendered["subject"] == "Golden Hour for {{projectName}}"
    assert rendered["body"] == "Hi Dana, here is Golden Hour."
    assert rendered["missing"] == ["projectName"]

    updated = client.patch(f"/api/email-templates/{template['id']}", json={"body": "Thanks {{clientName}}"}).json()
    assert updated["variables"] == ["songTitle", "projectName", "clientName"]


def test_playlist_songs_keep_order(client, song):
    other = client.post("/api/songs", json={"title": "Rain Check", "artist": "Jo Kim"}).json()
    playlist = client.post("/api/playlists", json={"name": "Summer ads"}).json()

    client.post(f"/api/playlists/{playlist['id']}/songs", json={"songId": song["id"]})
    added = client.post(f"/api/playlists/{playlist['id']}/songs", json={"songId": other["id"]})
    assert added.status_code == 201
    assert added.json()["position"] == 1

    songs = client.get(f"/api/playlist-songs/{playlist['id']}").json()
    assert [s["title"] for s in songs] == ["Golden Hour", "Rain Check"]
    assert client.get(f"/api/playlists/{playlist['id']}").json()["songCount"] == 2

    client.delete(f"/api/playlists/{playlist['id']}/songs/{song['id']}")
    assert [s["songId"] for s in client.get(f"/api/playlist-songs/{playlist['id']}").json()] == [other["id"]]
    missing = client.delete(f"/api/playlists/{playlist['id']}/songs/{song['id']}")
    assert missing.status_code == 404


def test_saved_searches(client):
    created = client.post("/api/saved-searches", json={"name": "Open quotes", "entityType": "Deals", "query": {"status": "quoted"}})
    assert created.status_code == 201
    assert created.json()["entityType"] == "deals"

    client.post("/api/saved-searches", json={"name": "Indie", "entityType": "songs", "query": {"genre": "indie"}})
    deals_only = client.get("/api/saved-searches", params={"entityType": "deals"}).json()
    assert [s["name"] for s in deals_only] == ["Open quotes"]

    assert client.post("/api/saved-searches", json={"name": "X", "entityType": "invoices"}).status_code == 400
    assert client.delete(f"/api/saved-searches/{created.json()['id']}").json() == {"success": True}


def test_workflow_automation_crud(client):
    created = client.post(
        "/api/workflow-automation",
        json={"name": "Chase payment", "trigger": {"type": "payment_overdue"}, "actions": [{"type": "email"}]},
    )
    assert created.status_code == 201
    automation = created.json()
    assert automation["isActive"] is True

    updated = client.patch(f"/api/workflow-automation/{automation['id']}", json={"isActive": False}).json()
    assert updated["isActive"] is False
    assert updated["trigger"] == {"type": "payment_overdue"}

    assert len(client.get("/api/workflow-automation").json()) == 1
    assert client.delete(f"/api/workflow-automation/{automation['id']}").json() == {"success": True}
    assert client.delete(f"/api/workflow-automation/{automation['id']}").status_code == 404
