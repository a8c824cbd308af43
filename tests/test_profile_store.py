"""Profile store: recovery of missing rows, per-user serialization, column widths."""
import asyncio
import gc
from datetime import datetime, timedelta, timezone

from sqlalchemy import BigInteger, delete, select

from teachsim.db.session import AsyncSessionLocal
from teachsim.models.progress import Progress
from teachsim.models.training_session import TrainingSession
from teachsim.services import profile_store
from teachsim.services.progress import SessionResult

T = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


async def _drop_progress_row(user_id):
    async with AsyncSessionLocal() as db:
        await db.execute(delete(Progress).where(Progress.user_id == user_id))
        await db.commit()


async def _count_progress_rows(user_id):
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Progress).where(Progress.user_id == user_id))
        return len(result.scalars().all())


async def _save_concurrently(user_id, count):
    async def save_one(i):
        async with AsyncSessionLocal() as db:
            return await profile_store.save_session_results(
                db, user_id, SessionResult(score=50 + i, duration=1000),
                clock=lambda: T + timedelta(minutes=i),
            )

    return await asyncio.gather(*(save_one(i) for i in range(count)))


async def _load(user_id):
    async with AsyncSessionLocal() as db:
        return await profile_store.load_snapshot(db, user_id)


async def _session_count(user_id):
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(TrainingSession).where(TrainingSession.user_id == user_id))
        return len(result.scalars().all())


class TestMissingProgressRow:

    def test_registration_creates_progress_row(self, client, register):
        user = register()
        assert client.portal.call(_count_progress_rows, user["id"]) == 1

    def test_profile_recreated_when_row_missing(self, client, register):
        user = register()
        client.portal.call(_drop_progress_row, user["id"])

        resp = client.get("/api/profile")
        assert resp.status_code == 200, resp.text
        assert resp.json()["progress"]["total_sessions"] == 0
        assert resp.json()["skills"]["empathy"] == 0
        assert client.portal.call(_count_progress_rows, user["id"]) == 1

    def test_session_saved_when_row_missing(self, client, register, set_clock):
        user = register()
        client.portal.call(_drop_progress_row, user["id"])

        set_clock(T)
        resp = client.post("/api/sessions", json={"score": 70, "duration": 500})
        assert resp.status_code == 201, resp.text
        assert resp.json()["progress"]["total_sessions"] == 1
        assert resp.json()["progress"]["streak"] == 1


class TestConcurrentSaves:

    def test_no_lost_updates(self, client, register):
        user = register()
        count = 20
        results = client.portal.call(_save_concurrently, user["id"], count)

        assert len({session_id for session_id, _ in results}) == count
        snapshot = client.portal.call(_load, user["id"])
        assert snapshot.progress.total_sessions == count
        assert snapshot.progress.completed_scenarios == count
        assert snapshot.progress.total_time_spent == count * 1000
        assert client.portal.call(_session_count, user["id"]) == count
        assert list(snapshot.achievements) == ["first_session"]


class TestUserLocks:

    def test_same_lock_while_referenced(self):
        lock = profile_store.get_user_lock(424242)
        assert profile_store.get_user_lock(424242) is lock
        assert profile_store.get_user_lock(424243) is not lock

    def test_entry_dropped_when_unreferenced(self):
        lock = profile_store.get_user_lock(525252)
        assert 525252 in profile_store._user_locks
        del lock
        gc.collect()
        assert 525252 not in profile_store._user_locks


class TestDuration:

    def test_time_columns_are_64_bit(self):
        assert isinstance(Progress.__table__.c.total_time_spent.type, BigInteger)
        assert isinstance(TrainingSession.__table__.c.duration.type, BigInteger)

    def test_huge_duration_rejected(self, client, register):
        register()
        assert client.post("/api/sessions", json={"score": 50, "duration": 10**20}).status_code == 422
        assert client.post("/api/sessions", json={"score": 50, "duration": 24 * 60 * 60 * 1000 + 1}).status_code == 422
        assert client.get("/api/profile").json()["progress"]["total_sessions"] == 0

    def test_full_day_duration_accepted(self, client, register):
        register()
        resp = client.post("/api/sessions", json={"score": 50, "duration": 24 * 60 * 60 * 1000})
        assert resp.status_code == 201, resp.text
        assert resp.json()["progress"]["total_time_spent"] == 24 * 60 * 60 * 1000
