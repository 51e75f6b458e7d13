import pytest

from tracker.utils.exceptions import NotFoundError, ValidationError


async def test_create_with_human_formatted_bounds(tier_ops):
    tier = await tier_ops.save_tier("Whales", "20m", "1.5b", "0.35", "0.02")
    assert tier.min_power == 20_000_000
    assert tier.max_power == 1_500_000_000
    assert tier.kill_multiplier == 0.35
    assert tier.death_multiplier == 0.02


async def test_update_by_id(tier_ops):
    tier = await tier_ops.save_tier("T1", 0, 1000, 1, 0.5)
    await tier_ops.save_tier("T1 renamed", 0, 2000, 2, 0.5, tier_id=tier.id)

    tiers = await tier_ops.list_tiers()
    assert len(tiers) == 1
    assert tiers[0].name == "T1 renamed"
    assert tiers[0].max_power == 2000


async def test_list_is_ordered_by_lower_bound(tier_ops):
    await tier_ops.save_tier("High", "50m", "100m", 1, 1)
    await tier_ops.save_tier("Low", "0", "50m", 1, 1)
    assert [t.name for t in await tier_ops.list_tiers()] == ["Low", "High"]


@pytest.mark.parametrize("min_power, max_power, kill, death, field", [
    ("abc", "10m", "1", "1", "min_power"),
    ("", "10m", "1", "1", "min_power"),
    ("-5", "10m", "1", "1", "min_power"),
    ("0", None, "1", "1", "max_power"),
    ("10m", "5m", "1", "1", "max_power"),
    ("5m", "5m", "1", "1", "max_power"),
    ("0", "10m", "lots", "1", "kill_multiplier"),
    ("0", "10m", "1", "-0.5", "death_multiplier"),
])
async def test_invalid_input_is_rejected(tier_ops, min_power, max_power, kill, death, field):
    with pytest.raises(ValidationError) as exc_info:
        await tier_ops.save_tier("Bad", min_power, max_power, kill, death)
    assert exc_info.value.field == field
    assert await tier_ops.list_tiers() == []


async def test_blank_name_is_rejected(tier_ops):
    with pytest.raises(ValidationError):
        await tier_ops.save_tier("  ", "0", "10m", "1", "1")


async def test_update_unknown_tier(tier_ops):
    with pytest.raises(NotFoundError):
        await tier_ops.save_tier("Ghost", "0", "10m", "1", "1", tier_id=404)


async def test_delete(tier_ops):
    tier = await tier_ops.save_tier("T1", 0, 1000, 1, 1)
    await tier_ops.delete_tier(tier.id)
    assert await tier_ops.list_tiers() == []

    with pytest.raises(NotFoundError) as exc_info:
        await tier_ops.delete_tier(tier.id)
    assert exc_info.value.entity == 'tier'
