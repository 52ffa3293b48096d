"""
View model data sources.
"""

from .service import DataService
