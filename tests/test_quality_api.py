API = "/api/v1/quality"


def _check_body(batch, inspector, **overrides):
    body = {
        "batch_id": batch.id,
        "inspector_id": inspector.id,
        "check_type": "visual_inspection",
        "passed": True,
        "parameters": {"clarity": "Clear"},
        "notes": "Looks bright",
    }
    body.update(overrides)
    return body


async def test_root_and_health(client):
    root = await client.get("/")
    assert root.status_code == 200
    assert root.json()["api"] == "/api/v1"

    health = await client.get("/api/v1/health")
    assert health.status_code == 200
    assert health.json()["database"] == "healthy"

    assert (await client.get("/api/v1/health/live")).json() == {"status": "alive"}
    assert (await client.get("/api/v1/health/ready")).json() == {"status": "ready"}


async def test_create_and_fetch_check(client, batch, inspector):
    created = await client.post(f"{API}/checks", json=_check_body(batch, inspector))
    assert created.status_code == 201
    body = created.json()
    assert body["check_type"] == "visual_inspection"
    assert "updated_at" not in body

    fetched = await client.get(f"{API}/checks/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


async def test_create_check_unknown_batch_is_404(client, batch, inspector):
    response = await client.post(
        f"{API}/checks", json=_check_body(batch, inspector, batch_id="missing")
    )
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["params"] == {"entity": "Batch", "id": "missing"}


async def test_invalid_payload_is_400(client, batch, inspector):
    response = await client.post(
        f"{API}/checks", json=_check_body(batch, inspector, check_type="x")
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

    bad_bag = await client.post(
        f"{API}/checks",
        json=_check_body(batch, inspector, check_type="ph_manual", parameters={"ph": "sour"}),
    )
    assert bad_bag.status_code == 400


async def test_patch_and_delete_check(client, batch, inspector):
    created = (await client.post(f"{API}/checks", json=_check_body(batch, inspector))).json()

    patched = await client.patch(f"{API}/checks/{created['id']}", json={"notes": "x"})
    assert patched.status_code == 200
    assert patched.json()["notes"] == "x"
    assert patched.json()["passed"] is True

    deleted = await client.delete(f"{API}/checks/{created['id']}")
    assert deleted.status_code == 200

    missing = await client.get(f"{API}/checks/{created['id']}")
    assert missing.status_code == 404


async def test_list_batch_checks_envelope(client, batch, inspector):
    for check_type in ("visual_inspection", "taste_test", "aroma_assessment"):
        await client.post(
            f"{API}/checks", json=_check_body(batch, inspector, check_type=check_type)
        )

    response = await client.get(
        f"{API}/batches/{batch.id}/checks", params={"page": 2, "limit": 2}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 2
    assert body["page_size"] == 2
    assert body["pages"] == 2
    assert len(body["items"]) == 1

    bad_sort = await client.get(
        f"{API}/batches/{batch.id}/checks", params={"sort_by": "notes"}
    )
    assert bad_sort.status_code == 400


async def test_metrics_null_then_scored(client, batch, inspector):
    empty = await client.get(f"{API}/batches/{batch.id}/metrics")
    assert empty.status_code == 200
    assert empty.json() is None

    await client.post(f"{API}/checks", json=_check_body(batch, inspector))
    scored = await client.get(f"{API}/batches/{batch.id}/metrics")
    assert scored.json()["visual_score"] == 100.0
    assert scored.json()["overall_score"] == 100.0


async def test_automated_assessment_end_to_end(client, batch, inspector):
    response = await client.post(
        f"{API}/checks/automated",
        json={
            "batch_id": batch.id,
            "inspector_id": inspector.id,
            "sensor_data": {"temperature": 18.5},
        },
    )
    assert response.status_code == 201
    checks = response.json()
    assert len(checks) == 1
    assert checks[0]["passed"] is True
    assert checks[0]["parameters"]["deviation"] == 0


async def test_checklist_and_templates(client, batch, inspector):
    await client.post(f"{API}/checks", json=_check_body(batch, inspector))

    checklist = (await client.get(f"{API}/batches/{batch.id}/checklist")).json()
    assert "visual_inspection" not in checklist["required"]
    assert len(checklist["automated"]) == 3

    templates = (await client.get(f"{API}/templates")).json()
    assert templates["ph"]["name"] == "pH Measurement"


async def test_create_from_template(client, batch, inspector):
    response = await client.post(
        f"{API}/checks/from-template",
        json={
            "template": "microbiological",
            "batch_id": batch.id,
            "inspector_id": inspector.id,
            "parameters": {"wild_yeast": False, "bacteria": False, "contamination": False},
        },
    )
    assert response.status_code == 201
    assert response.json()["passed"] is True

    unknown = await client.post(
        f"{API}/checks/from-template",
        json={
            "template": "sparkle",
            "batch_id": batch.id,
            "inspector_id": inspector.id,
            "parameters": {},
        },
    )
    assert unknown.status_code == 400


async def test_reports(client, batch, inspector):
    await client.post(f"{API}/checks", json=_check_body(batch, inspector, passed=False))
    await client.post(f"{API}/checks", json=_check_body(batch, inspector))

    stats = (await client.get(f"{API}/statistics")).json()
    assert stats["total_checks"] == 2
    assert stats["pass_rate"] == 50.0

    trends = (await client.get(f"{API}/trends", params={"days": 7})).json()
    assert trends[0]["metric"] == "visual_inspection"
    assert trends[0]["trend"] == "stable"

    failed = (await client.get(f"{API}/checks/failed")).json()
    assert len(failed) == 1

    dashboard = (await client.get(f"{API}/dashboard", params={"period": "day"})).json()
    assert dashboard["summary"]["period"] == "day"
    assert dashboard["alerts"]["low_pass_rate"] is True

    bad_period = await client.get(f"{API}/dashboard", params={"period": "year"})
    assert bad_period.status_code == 400


async def test_export_download(client, batch, inspector):
    await client.post(f"{API}/checks", json=_check_body(batch, inspector))

    csv_response = await client.get(f"{API}/batches/{batch.id}/export")
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    assert f"quality-checks-{batch.id}.csv" in csv_response.headers["content-disposition"]
    assert csv_response.text.startswith("timestamp,check_type,passed")

    json_response = await client.get(
        f"{API}/batches/{batch.id}/export", params={"format": "json"}
    )
    assert json_response.json()[0]["notes"] == "Looks bright"
