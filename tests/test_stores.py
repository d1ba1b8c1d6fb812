from datetime import datetime, timedelta, timezone

from brewqc.stores import CheckFilter, SqlBatchStore, SqlQualityCheckStore, SqlUserStore


async def test_batch_store_loads_recipe(db, batch, recipe):
    found = await SqlBatchStore(db).find_by_id(batch.id)
    assert found.recipe.fermentation_temp == 18.5
    assert await SqlBatchStore(db).find_by_id("missing") is None


async def test_user_store_find_by_ids(db, inspector):
    users = SqlUserStore(db)
    assert [u.id for u in await users.find_by_ids([inspector.id, "missing"])] == [
        inspector.id
    ]
    assert await users.find_by_ids([]) == []


async def test_check_store_filters(db, batch, make_check):
    store = SqlQualityCheckStore(db)
    now = datetime.now(timezone.utc)
    await make_check(batch, "visual_inspection", True, timestamp=now - timedelta(days=10))
    await make_check(batch, "visual_inspection", False, timestamp=now - timedelta(days=1))
    await make_check(batch, "taste_test", False, timestamp=now)

    assert await store.count() == 3
    assert await store.count(CheckFilter(passed=False)) == 2
    assert await store.count(CheckFilter(check_type="taste_test")) == 1
    assert await store.count(CheckFilter(since=now - timedelta(days=2))) == 2
    assert await store.count(CheckFilter(recipe_id=batch.recipe_id)) == 3
    assert await store.count(CheckFilter(recipe_id="other")) == 0

    oldest_first = await store.find_many(sort_by="timestamp", sort_order="asc", limit=2)
    assert [c.passed for c in oldest_first] == [True, False]


async def test_records_get_uuid_and_audit_timestamps(db, batch, make_check):
    check = await make_check(batch, "visual_inspection", True)
    stored = await SqlQualityCheckStore(db).find_by_id(check.id)
    assert len(stored.id) == 36
    assert stored.created_at is not None
    assert stored.updated_at is not None


async def test_inspector_full_name(db, inspector):
    user = await SqlUserStore(db).find_by_id(inspector.id)
    assert user.full_name == "Dana Brewer"
