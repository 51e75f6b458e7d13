"""
Embed factory for the season tracker bot.

Keeps titles, colors and number formatting consistent between the admin and
public commands.
"""

import discord
from typing import List, Optional, Sequence

from tracker.data_models.progress import MemberProgress
from tracker.data_models.season import ContinuityWarning, IngestResult, ResetResult, SeasonConfig
from tracker.database.models import Backup, Tier
from tracker.utils.exceptions import TrackerException


def format_compact(value: int) -> str:
    """Short human format matching the upload notation: 1.5K, 2.3M, 4.1B"""
    sign = '-' if value < 0 else ''
    value = abs(value)
    for threshold, suffix in ((1_000_000_000, 'B'), (1_000_000, 'M'), (1_000, 'K')):
        if value >= threshold:
            return f"{sign}{value / threshold:.1f}{suffix}"
    return f"{sign}{value}"


def progress_line(progress: MemberProgress) -> str:
    """One-line progress summary: kills and deaths gained against requirement"""
    if not progress.is_ranked:
        return "Unranked (no tier for this power)"
    status = "✅" if progress.is_compliant else "❌"
    return (
        f"{status} Kills {format_compact(progress.kills_gained)}/{format_compact(progress.kill_requirement)} "
        f"({progress.kill_progress}%) · Deaths {format_compact(progress.deaths_gained)}/"
        f"{format_compact(progress.death_requirement)} ({progress.death_progress}%)"
    )


class SeasonEmbeds:
    """Centralized embed factory."""

    @staticmethod
    def error(exc: TrackerException) -> discord.Embed:
        return discord.Embed(
            title="Request Failed",
            description=exc.user_message,
            color=discord.Color.red()
        )

    @staticmethod
    def continuity_warning(warning: ContinuityWarning) -> discord.Embed:
        embed = discord.Embed(
            title="⚠️ Upload Not Applied",
            description=warning.message,
            color=discord.Color.orange()
        )
        embed.add_field(name="Previous", value=warning.previous, inline=True)
        embed.add_field(name="File", value=warning.incoming, inline=True)
        embed.set_footer(text="Re-run the upload with force=True to apply it anyway.")
        return embed

    @staticmethod
    def ingest_result(result: IngestResult, filename: str) -> discord.Embed:
        embed = discord.Embed(
            title=f"✅ {result.kind.capitalize()} Upload Completed",
            description=f"`{filename}`",
            color=discord.Color.green()
        )
        embed.add_field(name="Processed", value=f"{result.processed:,}", inline=True)
        embed.add_field(name="New", value=f"{result.inserted:,}", inline=True)
        embed.add_field(name="Updated", value=f"{result.updated:,}", inline=True)
        if result.backup_id is not None:
            embed.add_field(name="Backup", value=f"#{result.backup_id}", inline=True)
        return embed

    @staticmethod
    def reset_result(result: ResetResult) -> discord.Embed:
        embed = discord.Embed(
            title="🔄 Season Reset",
            description=f"**{result.previous_label or 'Unnamed'}** → **{result.new_label}**",
            color=discord.Color.blue()
        )
        embed.add_field(name="Members Cleared", value=f"{result.members_cleared:,}", inline=True)
        embed.add_field(
            name="Backup",
            value=f"#{result.backup_id}" if result.backup_id is not None else "Skipped (no members)",
            inline=True
        )
        return embed

    @staticmethod
    def leaderboard(
        rows: Sequence[MemberProgress],
        title: str,
        config: SeasonConfig,
        start_rank: int = 1
    ) -> discord.Embed:
        embed = discord.Embed(title=title, color=discord.Color.gold())
        if config.season_label:
            started = f" · started {config.season_start_date}" if config.season_start_date else ""
            embed.set_footer(text=f"{config.season_label}{started}")

        if not rows:
            embed.description = "No members to show."
            return embed

        lines: List[str] = []
        for offset, row in enumerate(rows):
            lines.append(
                f"**{start_rank + offset}.** {row.username} (`{row.governor_id}`) · "
                f"score {format_compact(row.ranking_score)}\n{progress_line(row)}"
            )
        # Discord caps descriptions at 4096 characters
        description = "\n".join(lines)
        embed.description = description if len(description) <= 4096 else description[:4093] + "..."
        return embed

    @staticmethod
    def member_progress(progress: MemberProgress) -> discord.Embed:
        embed = discord.Embed(
            title=f"{progress.username} ({progress.governor_id})",
            description=progress_line(progress),
            color=discord.Color.green() if progress.is_compliant else discord.Color.orange()
        )
        embed.add_field(name="Tier", value=progress.tier.name if progress.tier else "Unranked", inline=True)
        embed.add_field(name="Power", value=format_compact(progress.ranking_power), inline=True)
        embed.add_field(name="Kingdom", value=progress.kingdom or "N/A", inline=True)
        return embed

    @staticmethod
    def tiers(tiers: Sequence[Tier]) -> discord.Embed:
        embed = discord.Embed(title="Tiers", color=discord.Color.blue())
        if not tiers:
            embed.description = "No tiers configured. Every member is unranked."
            return embed
        for tier in tiers:
            embed.add_field(
                name=f"#{tier.id} {tier.name}",
                value=(
                    f"{format_compact(tier.min_power)} – {format_compact(tier.max_power)}\n"
                    f"Kills ×{tier.kill_multiplier:g} · Deaths ×{tier.death_multiplier:g}"
                ),
                inline=False
            )
        return embed

    @staticmethod
    def backups(backups: Sequence[Backup], limit: Optional[int] = 10) -> discord.Embed:
        embed = discord.Embed(title="Backups", color=discord.Color.blue())
        if not backups:
            embed.description = "No backups yet."
            return embed
        for backup in backups[:limit]:
            created = backup.created_at.strftime('%Y-%m-%d %H:%M') if backup.created_at else "unknown"
            embed.add_field(
                name=f"#{backup.id} {backup.name}",
                value=f"{backup.season or 'N/A'} · {backup.member_count:,} members · {created}",
                inline=False
            )
        return embed
