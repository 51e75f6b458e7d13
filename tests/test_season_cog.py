from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from tracker.cogs.season import SeasonCog
from tracker.constants import ConfigKeys


def make_interaction(user_id=424242):
    interaction = MagicMock()
    interaction.user.id = user_id
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def cog(reporting, config_service):
    return SeasonCog(SimpleNamespace(reporting=reporting, config_service=config_service))


async def test_hidden_stats_reply_is_private_and_never_deferred(cog, config_service):
    await config_service.set(ConfigKeys.PUBLIC_STATS_VISIBLE, 'false')
    interaction = make_interaction()

    await cog.season_top.callback(cog, interaction, None)

    interaction.response.defer.assert_not_awaited()
    interaction.followup.send.assert_not_awaited()
    interaction.response.send_message.assert_awaited_once()
    assert interaction.response.send_message.await_args.kwargs['ephemeral'] is True


async def test_visible_stats_defer_then_answer(cog, config_service):
    await config_service.set(ConfigKeys.PUBLIC_STATS_VISIBLE, 'true')
    interaction = make_interaction()

    await cog.season_overview.callback(cog, interaction)

    interaction.response.send_message.assert_not_awaited()
    interaction.response.defer.assert_awaited_once()
    interaction.followup.send.assert_awaited_once()
