"""
Season tracker commands.

SeasonAdminCog: owner-only hybrid commands for uploads, season reset, tiers,
backups and public stats visibility.
SeasonCog: public slash commands for the leaderboard, the non-compliance list,
a single governor's progress and the season overview.
"""

import io
from typing import Literal, Optional

import discord
from discord.ext import commands
from discord import app_commands

from tracker.config import Config
from tracker.data_models.snapshot import IngestKind
from tracker.utils.embeds import SeasonEmbeds, format_compact
from tracker.utils.exceptions import TrackerException
from tracker.utils.logger import setup_logger

logger = setup_logger(__name__)


def is_owner(user_id: int) -> bool:
    return user_id == Config.OWNER_DISCORD_ID


class SeasonAdminCog(commands.Cog):
    """Owner-only season management commands"""

    def __init__(self, bot):
        self.bot = bot
        self.season_ops = bot.season_ops
        self.tier_ops = bot.tier_ops
        self.backup_ops = bot.backup_ops
        self.logger = logger

    def cog_check(self, ctx):
        """Check if user is the bot owner"""
        return is_owner(ctx.author.id)

    @commands.hybrid_command(name='admin-upload', description="Upload a governor snapshot spreadsheet")
    @app_commands.describe(
        kind="creation starts a new season baseline, update refreshes current values",
        file="Spreadsheet (.xlsx, .xlsm or .csv); name it <kingdom>-<start>-<end> to enable continuity checks",
        force="Apply an update even if the kingdom or scan dates do not line up"
    )
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def upload(
        self,
        ctx,
        kind: Literal['creation', 'update'],
        file: discord.Attachment,
        force: bool = False
    ):
        """
        Ingest a snapshot spreadsheet.

        Usage:
        !admin-upload creation   (with the file attached)
        !admin-upload update True
        """
        if ctx.interaction:
            await ctx.defer(ephemeral=True)

        if file.size > Config.MAX_UPLOAD_BYTES:
            await ctx.send(
                f"❌ File is too large ({file.size:,} bytes, limit {Config.MAX_UPLOAD_BYTES:,}).",
                ephemeral=True
            )
            return

        try:
            data = await file.read()
            result = await self.season_ops.ingest(
                IngestKind(kind),
                data,
                filename=file.filename,
                override_continuity=force
            )
        except TrackerException as e:
            self.logger.warning(f"Upload of '{file.filename}' by {ctx.author} failed: {e}")
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return

        if not result.accepted:
            await ctx.send(embed=SeasonEmbeds.continuity_warning(result.warning), ephemeral=True)
            return

        await ctx.send(embed=SeasonEmbeds.ingest_result(result, file.filename), ephemeral=True)

    @commands.hybrid_command(name='admin-reset-season', description="Back up and clear all member stats, then start a new season")
    @app_commands.describe(
        new_label="Name of the new season",
        reason="Optional reason, stored with the backup"
    )
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def reset_season(self, ctx, new_label: str, *, reason: Optional[str] = None):
        """Reset the season (Owner only)"""
        if ctx.interaction:
            await ctx.defer(ephemeral=True)
        try:
            result = await self.season_ops.reset_season(new_label, reason=reason)
        except TrackerException as e:
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await ctx.send(embed=SeasonEmbeds.reset_result(result), ephemeral=True)

    @commands.hybrid_command(name='admin-rename-season', description="Rename the current season without clearing stats")
    @app_commands.describe(new_label="New season name")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def rename_season(self, ctx, *, new_label: str):
        try:
            await self.season_ops.rename_season(new_label)
        except TrackerException as e:
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await ctx.send(f"✅ Season renamed to **{new_label.strip()}**.", ephemeral=True)

    @commands.hybrid_command(name='admin-tier-set', description="Create a tier, or update one by id")
    @app_commands.describe(
        name="Tier name",
        min_power="Lower power bound, inclusive (e.g. 20m)",
        max_power="Upper power bound, exclusive (e.g. 40m)",
        kill_multiplier="Kill points required per point of power",
        death_multiplier="Deaths required per point of power",
        tier_id="Existing tier id to update"
    )
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def tier_set(
        self,
        ctx,
        name: str,
        min_power: str,
        max_power: str,
        kill_multiplier: str,
        death_multiplier: str,
        tier_id: Optional[int] = None
    ):
        try:
            tier = await self.tier_ops.save_tier(
                name, min_power, max_power, kill_multiplier, death_multiplier, tier_id=tier_id
            )
        except TrackerException as e:
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await ctx.send(
            f"✅ Tier #{tier.id} **{tier.name}** saved: {format_compact(tier.min_power)} – "
            f"{format_compact(tier.max_power)}, kills ×{tier.kill_multiplier:g}, deaths ×{tier.death_multiplier:g}",
            ephemeral=True
        )

    @commands.hybrid_command(name='admin-tier-delete', description="Delete a tier")
    @app_commands.describe(tier_id="Tier id (see /admin-tiers)")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def tier_delete(self, ctx, tier_id: int):
        try:
            await self.tier_ops.delete_tier(tier_id)
        except TrackerException as e:
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await ctx.send(f"🗑️ Tier #{tier_id} deleted.", ephemeral=True)

    @commands.hybrid_command(name='admin-tiers', description="List configured tiers")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def tiers(self, ctx):
        await ctx.send(embed=SeasonEmbeds.tiers(await self.tier_ops.list_tiers()), ephemeral=True)

    @commands.hybrid_command(name='admin-backup', description="Take a manual backup of the current member stats")
    @app_commands.describe(name="Optional backup name")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def backup_create(self, ctx, *, name: Optional[str] = None):
        backup = await self.season_ops.create_backup(name=name, source=f"Manual ({ctx.author})")
        if backup is None:
            await ctx.send("ℹ️ Nothing to back up: no member stats this season.", ephemeral=True)
            return
        await ctx.send(
            f"💾 Backup #{backup.id} **{backup.name}** created ({backup.member_count:,} members).",
            ephemeral=True
        )

    @commands.hybrid_command(name='admin-backups', description="List backups, newest first")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def backup_list(self, ctx):
        await ctx.send(embed=SeasonEmbeds.backups(await self.backup_ops.list_backups()), ephemeral=True)

    @commands.hybrid_command(name='admin-backup-export', description="Download a backup as JSON")
    @app_commands.describe(backup_id="Backup id (see /admin-backups)")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def backup_export(self, ctx, backup_id: int):
        if ctx.interaction:
            await ctx.defer(ephemeral=True)
        try:
            filename, document = await self.backup_ops.export_backup(backup_id)
        except TrackerException as e:
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await ctx.send(
            file=discord.File(io.BytesIO(document.encode('utf-8')), filename=filename),
            ephemeral=True
        )

    @commands.hybrid_command(name='admin-backup-delete', description="Delete a backup")
    @app_commands.describe(backup_id="Backup id (see /admin-backups)")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def backup_delete(self, ctx, backup_id: int):
        try:
            await self.backup_ops.delete_backup(backup_id)
        except TrackerException as e:
            await ctx.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await ctx.send(f"🗑️ Backup #{backup_id} deleted.", ephemeral=True)

    @commands.hybrid_command(name='admin-toggle-public-stats', description="Show or hide the public season commands")
    @app_commands.check(lambda interaction: is_owner(interaction.user.id))
    async def toggle_public_stats(self, ctx):
        visible = await self.season_ops.toggle_public_stats()
        await ctx.send(
            f"👁️ Public stats are now **{'visible' if visible else 'hidden'}**.",
            ephemeral=True
        )


class SeasonCog(commands.Cog):
    """Public season progress commands"""

    def __init__(self, bot):
        self.bot = bot
        self.reporting = bot.reporting
        self.config_service = bot.config_service

    async def _stats_hidden(self, interaction: discord.Interaction) -> bool:
        """Answer privately and return True when public stats are off for this user.

        Must run before the interaction is deferred.
        """
        if self.config_service.snapshot().public_stats_visible or is_owner(interaction.user.id):
            return False
        await interaction.response.send_message(
            embed=discord.Embed(
                title="🔒 Stats Hidden",
                description="Season stats are currently not public.",
                color=discord.Color.dark_grey()
            ),
            ephemeral=True
        )
        return True

    @app_commands.command(name="season-top", description="Top governors by kills plus weighted deaths gained")
    @app_commands.describe(limit="Number of governors to show (default 10)")
    async def season_top(self, interaction: discord.Interaction, limit: Optional[app_commands.Range[int, 1, 25]] = None):
        if await self._stats_hidden(interaction):
            return
        await interaction.response.defer()
        try:
            rows = await self.reporting.top_n(limit)
        except TrackerException as e:
            await interaction.followup.send(embed=SeasonEmbeds.error(e), ephemeral=True)
            return
        await interaction.followup.send(
            embed=SeasonEmbeds.leaderboard(rows, "🏆 Season Leaderboard", self.config_service.snapshot())
        )

    @app_commands.command(name="season-noncompliant", description="Governors who have not met their tier requirements")
    @app_commands.describe(include_unranked="Also list governors whose power matches no tier")
    async def season_noncompliant(self, interaction: discord.Interaction, include_unranked: bool = True):
        if await self._stats_hidden(interaction):
            return
        await interaction.response.defer()
        rows = await self.reporting.non_compliant(include_unranked=include_unranked)
        embed = SeasonEmbeds.leaderboard(rows[:25], "⚠️ Below Requirements", self.config_service.snapshot())
        if len(rows) > 25:
            embed.add_field(name="More", value=f"{len(rows) - 25} more governor(s) not shown", inline=False)
        await interaction.followup.send(embed=embed)

    @app_commands.command(name="season-progress", description="Progress of one governor this season")
    @app_commands.describe(governor_id="In-game governor (character) id")
    async def season_progress(self, interaction: discord.Interaction, governor_id: str):
        if await self._stats_hidden(interaction):
            return
        await interaction.response.defer()
        progress = await self.reporting.member_progress(governor_id.strip())
        if progress is None:
            await interaction.followup.send(
                f"❌ Governor `{governor_id}` is not tracked this season.", ephemeral=True
            )
            return
        await interaction.followup.send(embed=SeasonEmbeds.member_progress(progress))

    @app_commands.command(name="season-overview", description="Season dates, member count and kingdom totals")
    async def season_overview(self, interaction: discord.Interaction):
        if await self._stats_hidden(interaction):
            return
        await interaction.response.defer()
        overview = await self.reporting.overview()
        config = overview.config

        embed = discord.Embed(
            title=f"📊 {config.season_label or 'Current Season'}",
            color=discord.Color.blue()
        )
        embed.add_field(name="Started", value=config.season_start_date or "N/A", inline=True)
        embed.add_field(
            name="Last Scan",
            value=f"{config.last_scan_kingdom} until {config.last_scan_end_date}" if config.last_scan_kingdom else "N/A",
            inline=True
        )
        embed.add_field(name="Governors", value=f"{overview.member_count:,}", inline=True)
        for totals in overview.kingdoms[:10]:
            embed.add_field(
                name=f"Kingdom {totals.kingdom or '?'} ({totals.members:,})",
                value=(
                    f"Power {format_compact(totals.power)} · KP {format_compact(totals.kill_points)}\n"
                    f"Deaths {format_compact(totals.deaths)} · RSS {format_compact(totals.resources)}"
                ),
                inline=False
            )
        await interaction.followup.send(embed=embed)


async def setup(bot):
    await bot.add_cog(SeasonAdminCog(bot))
    await bot.add_cog(SeasonCog(bot))
