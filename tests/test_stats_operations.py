from tracker.data_models.snapshot import IngestKind, SnapshotRecord


def record(governor_id="1", power=1000, deaths=10, kill_points=100, resources=5, username="Alpha", kingdom="100"):
    return SnapshotRecord(
        governor_id=governor_id,
        username=username,
        kingdom=kingdom,
        power=power,
        deaths=deaths,
        kill_points=kill_points,
        resources=resources
    )


async def test_creation_sets_current_and_baseline(db, stats_ops):
    assert await stats_ops.apply_creation(record()) is True

    stat = await db.get_member_stat("1")
    assert (stat.current_power, stat.current_kills, stat.current_deaths) == (1000, 100, 10)
    assert (stat.baseline_power, stat.baseline_kills, stat.baseline_deaths) == (1000, 100, 10)
    assert stat.resources_gathered == 5


async def test_second_creation_overwrites_baseline(db, stats_ops):
    await stats_ops.apply_creation(record())
    assert await stats_ops.apply_creation(record(power=2000, kill_points=300, deaths=40, username="Renamed")) is False

    stat = await db.get_member_stat("1")
    assert (stat.baseline_power, stat.baseline_kills, stat.baseline_deaths) == (2000, 300, 40)
    assert (stat.current_power, stat.current_kills, stat.current_deaths) == (2000, 300, 40)
    assert stat.username == "Renamed"
    assert await db.count_member_stats() == 1


async def test_update_never_touches_baseline(db, stats_ops):
    await stats_ops.apply_creation(record())
    assert await stats_ops.apply_update(record(power=1500, kill_points=900, deaths=70, kingdom="200")) is False

    stat = await db.get_member_stat("1")
    assert (stat.baseline_power, stat.baseline_kills, stat.baseline_deaths) == (1000, 100, 10)
    assert (stat.current_power, stat.current_kills, stat.current_deaths) == (1500, 900, 70)
    assert stat.kingdom == "200"


async def test_update_seeds_baseline_for_new_governor(db, stats_ops):
    assert await stats_ops.apply_update(record(governor_id="9", power=800, kill_points=50, deaths=4)) is True

    stat = await db.get_member_stat("9")
    assert (stat.baseline_power, stat.baseline_kills, stat.baseline_deaths) == (800, 50, 4)
    assert (stat.current_power, stat.current_kills, stat.current_deaths) == (800, 50, 4)


async def test_update_is_idempotent(db, stats_ops):
    await stats_ops.apply_creation(record())
    await stats_ops.apply_update(record(kill_points=500))
    first = (await db.get_member_stat("1")).to_dict()

    await stats_ops.apply_update(record(kill_points=500))
    assert (await db.get_member_stat("1")).to_dict() == first


async def test_apply_only_touches_its_own_governor(db, stats_ops):
    await stats_ops.apply_all(IngestKind.CREATION, [record("1"), record("2", power=5000)])
    await stats_ops.apply_update(record("1", kill_points=999))

    other = await db.get_member_stat("2")
    assert other.current_kills == 100
    assert other.current_power == 5000


async def test_apply_all_counts_and_last_row_wins(db, stats_ops):
    inserted, updated = await stats_ops.apply_all(
        IngestKind.UPDATE,
        [record("1"), record("2"), record("1", kill_points=777)]
    )
    assert (inserted, updated) == (2, 1)
    assert (await db.get_member_stat("1")).current_kills == 777
    assert [s.governor_id for s in await db.get_all_member_stats()] == ["1", "2"]
