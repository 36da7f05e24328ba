"""
Analyzer package: project validation and ORM/database detection.
"""

from .project_detector import ProjectDetector, detect_project
from .orm_detector import detect_database, detect_orm

__all__ = ["ProjectDetector", "detect_project", "detect_database", "detect_orm"]
