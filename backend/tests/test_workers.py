import pytest

from campjournal.workers import campground_worker


@pytest.mark.asyncio
async def test_run_backfill_uses_given_database(database, make_campground, places):
    campground = await make_campground("Unplaced", latitude=None, longitude=None)
    places.add(campground.google_place_id, "Unplaced", latitude=36.1, longitude=-115.2)

    counts = await campground_worker.run_backfill(database, places, delay=0)

    assert counts == {"updated": 1, "skipped": 0, "failed": 0}


def test_backfill_task_defaults_delay_from_settings(monkeypatch):
    seen = []

    async def fake_backfill(delay):
        seen.append(delay)
        return {"updated": 0, "skipped": 0, "failed": 0}

    monkeypatch.setattr(campground_worker, "_backfill", fake_backfill)
    monkeypatch.setattr(campground_worker.settings, "BACKFILL_DELAY_SECONDS", 0.5)

    assert campground_worker.backfill_coordinates() == {"updated": 0, "skipped": 0, "failed": 0}
    assert campground_worker.backfill_coordinates(delay=0) == {"updated": 0, "skipped": 0, "failed": 0}
    assert seen == [0.5, 0]
