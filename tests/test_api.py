from rollcall.models import generate_id


def _headers(tenant_id):
    return {"X-Tenant-ID": tenant_id}


def _create(client, tenant_id, **overrides):
    payload = {
        "title": "Spring practice",
        "candidates": [
            {"date": "2026-05-10", "startTime": "18:00", "endTime": "20:00"},
            {"date": "2026-05-11"},
        ],
    }
    payload.update(overrides)
    response = client.post("/schedules", json=payload, headers=_headers(tenant_id))
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_admin_endpoints_need_tenant(client):
    assert client.get("/schedules").status_code == 401
    assert client.get("/schedules", headers={"X-Tenant-ID": "acme"}).status_code == 401


def test_create_and_read_schedule(client, tenant_id):
    created = _create(client, tenant_id)

    assert created["status"] == "open"
    assert [c["date"] for c in created["candidates"]] == ["2026-05-10", "2026-05-11"]
    assert created["candidates"][0]["startTime"] == "18:00:00"
    assert created["candidates"][1]["startTime"] is None

    fetched = client.get(f"/schedules/{created['scheduleId']}", headers=_headers(tenant_id))
    assert fetched.status_code == 200
    assert fetched.json()["publicToken"] == created["publicToken"]

    listed = client.get("/schedules", headers=_headers(tenant_id)).json()
    assert [s["scheduleId"] for s in listed] == [created["scheduleId"]]


def test_create_requires_candidates(client, tenant_id):
    response = client.post(
        "/schedules", json={"title": "Empty", "candidates": []}, headers=_headers(tenant_id)
    )
    assert response.status_code == 422


def test_schedule_of_another_tenant_is_404(client, tenant_id, other_tenant_id):
    created = _create(client, tenant_id)
    response = client.get(f"/schedules/{created['scheduleId']}", headers=_headers(other_tenant_id))
    assert response.status_code == 404
    assert client.get(f"/schedules/{generate_id()}", headers=_headers(tenant_id)).status_code == 404


def test_public_flow_and_removal_conflict(client, tenant_id, make_member):
    member = make_member(tenant_id, "Alice")
    created = _create(client, tenant_id)
    token = created["publicToken"]
    second = created["candidates"][1]["candidateId"]

    public = client.get(f"/schedules/public/{token}")
    assert public.status_code == 200
    assert "tenantId" not in public.json()

    submitted = client.post(
        f"/schedules/public/{token}/responses",
        json={"memberId": member.id, "responses": [{"candidateId": second, "availability": "maybe"}]},
    )
    assert submitted.status_code == 200, submitted.text
    assert submitted.json()["scheduleId"] == created["scheduleId"]

    table = client.get(f"/schedules/public/{token}/responses").json()["responses"]
    assert table[0]["memberName"] == "Alice"

    patch = {"candidates": [{"date": "2026-05-10", "startTime": "18:00", "endTime": "20:00"}]}
    conflict = client.patch(
        f"/schedules/{created['scheduleId']}", json=patch, headers=_headers(tenant_id)
    )
    assert conflict.status_code == 409
    assert "2026-05-11" in conflict.json()["detail"]

    patch["forceDeleteCandidateResponses"] = True
    forced = client.patch(f"/schedules/{created['scheduleId']}", json=patch, headers=_headers(tenant_id))
    assert forced.status_code == 200
    assert len(forced.json()["candidates"]) == 1

    responses = client.get(
        f"/schedules/{created['scheduleId']}/responses", headers=_headers(tenant_id)
    ).json()
    assert responses["responses"] == []


def test_unknown_public_token_is_404(client):
    assert client.get(f"/schedules/public/{generate_id()}").status_code == 404
    response = client.post(
        "/schedules/public/garbage/responses", json={"memberId": generate_id(), "responses": []}
    )
    assert response.status_code == 404


def test_invalid_availability_is_400(client, tenant_id, make_member):
    member = make_member(tenant_id)
    created = _create(client, tenant_id)
    response = client.post(
        f"/schedules/public/{created['publicToken']}/responses",
        json={
            "memberId": member.id,
            "responses": [
                {"candidateId": created["candidates"][0]["candidateId"], "availability": "sure"}
            ],
        },
    )
    assert response.status_code == 400


def test_lifecycle_endpoints(client, tenant_id):
    created = _create(client, tenant_id)
    schedule_id = created["scheduleId"]
    candidate_id = created["candidates"][0]["candidateId"]

    closed = client.post(f"/schedules/{schedule_id}/close", headers=_headers(tenant_id))
    assert closed.json()["status"] == "closed"
    assert client.post(f"/schedules/{schedule_id}/close", headers=_headers(tenant_id)).status_code == 409

    decided = client.post(
        f"/schedules/{schedule_id}/decide",
        json={"candidateId": candidate_id},
        headers=_headers(tenant_id),
    )
    assert decided.status_code == 200
    assert decided.json()["decidedCandidateId"] == candidate_id

    deleted = client.delete(f"/schedules/{schedule_id}", headers=_headers(tenant_id))
    assert deleted.status_code == 200
    assert deleted.json()["status"] == "deleted"
    assert client.get(f"/schedules/{schedule_id}", headers=_headers(tenant_id)).status_code == 404


def test_convert_to_attendance(client, tenant_id, make_member, make_group):
    alice = make_member(tenant_id, "Alice")
    bob = make_member(tenant_id, "Bob")
    group = make_group(tenant_id, [alice, bob])
    created = _create(client, tenant_id, groupIds=[group.id])
    token = created["publicToken"]
    first = created["candidates"][0]["candidateId"]

    client.post(
        f"/schedules/public/{token}/responses",
        json={"memberId": alice.id, "responses": [{"candidateId": first, "availability": "available"}]},
    )

    converted = client.post(
        f"/schedules/{created['scheduleId']}/convert-to-attendance",
        json={"candidateIds": [first], "title": "Practice"},
        headers=_headers(tenant_id),
    )
    assert converted.status_code == 201, converted.text
    body = converted.json()
    assert body["title"] == "Practice"

    collection = client.get(f"/attendance/{body['collectionId']}", headers=_headers(tenant_id))
    assert collection.status_code == 200
    target_dates = collection.json()["targetDates"]
    assert [(t["date"], t["startTime"], t["endTime"]) for t in target_dates] == [
        ("2026-05-10", "18:00", "20:00")
    ]

    responses = client.get(
        f"/attendance/{body['collectionId']}/responses", headers=_headers(tenant_id)
    ).json()["responses"]
    assert {(r["memberId"], r["response"]) for r in responses} == {
        (alice.id, "attending"),
        (bob.id, "undecided"),
    }


def test_convert_unknown_candidate_is_400(client, tenant_id):
    created = _create(client, tenant_id)
    response = client.post(
        f"/schedules/{created['scheduleId']}/convert-to-attendance",
        json={"candidateIds": [generate_id()]},
        headers=_headers(tenant_id),
    )
    assert response.status_code == 400


def test_tenant_header_is_case_insensitive(client, tenant_id):
    created = _create(client, tenant_id.upper())
    assert created["tenantId"] == tenant_id

    fetched = client.get(f"/schedules/{created['scheduleId']}", headers=_headers(tenant_id))
    assert fetched.status_code == 200
    listed = client.get("/schedules", headers=_headers(tenant_id.upper())).json()
    assert [s["scheduleId"] for s in listed] == [created["scheduleId"]]


def test_offset_aware_candidate_time_is_422(client, tenant_id):
    response = client.post(
        "/schedules",
        json={"title": "Practice", "candidates": [{"date": "2026-05-10", "startTime": "10:00+09:00"}]},
        headers=_headers(tenant_id),
    )
    assert response.status_code == 422
