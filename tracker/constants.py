"""
Tracker-wide constants.

Column aliases for spreadsheet ingestion, season configuration keys and
ranking weights live here so every module resolves them the same way.
"""

class ConfigKeys:
    """Keys of the season_config table."""
    
    CURRENT_SEASON = 'current_season'
    SEASON_START_DATE = 'season_start_date'
    LAST_SCAN_KINGDOM = 'last_scan_kingdom'
    LAST_SCAN_END_DATE = 'last_scan_end_date'
    PUBLIC_STATS_VISIBLE = 'public_stats_visible'

class FieldAliases:
    """Priority-ordered header names accepted for each canonical snapshot field."""
    
    GOVERNOR_ID = ['Character ID', 'Governor ID', 'ID']
    USERNAME = ['Username', 'Name', 'Player']
    KINGDOM = ['Kingdom', 'Origin', 'Server']
    POWER = ['Power', 'Current Power']
    POWER_FALLBACK = ['Highest Power', 'Max Power']
    T5_DEATHS = ['T5 Deaths', 'T5 Dead']
    T4_DEATHS = ['T4 Deaths', 'T4 Dead']
    KILL_POINTS = ['Total Kill Points', 'Kill Points', 'Kills']
    RESOURCES = ['Resources Gathered', 'Resources', 'RSS']

class RankingConstants:
    """Weights used to order leaderboards and compliance reports."""
    
    KILL_WEIGHT = 1
    DEATH_WEIGHT = 2
    
    # Display precision for progress percentages
    PROGRESS_DECIMALS = 1
    PROGRESS_CAP = 100.0

# Filename prefix: <kingdom>-<period start>-<period end>
SCAN_FILENAME_PATTERN = r'^(\d+)-(\d{4}-\d{2}-\d{2})-(\d{4}-\d{2}-\d{2})'

SUPPORTED_UPLOAD_EXTENSIONS = ('.xlsx', '.xlsm', '.csv')
