"""
Operations Layer

Business logic operations that compose database methods into season workflows.
Operations handle multi-step transactions, validation and business rules.

Architecture:
- Database layer: Stats store accessor (member stats, tiers, config, backups)
- Operations layer: Business logic composition and workflows
- Command layer: Discord integration and user interface

Modules:
- StatsOperations: Baseline/delta merge of snapshot records
- SeasonOperations: Ingestion, continuity checks, reset and backups
- TierOperations: Tier table management
- BackupOperations: Backup listing, export and deletion
"""
