"""
Services package for the season tracker.

Long-lived, mostly read-side services shared by the bot and scripts.
"""

from .configuration import ConfigurationService
from .reporting import ReportingService

__all__ = ['ConfigurationService', 'ReportingService']
