"""
Template rendering and file generation for the auth module.
"""

from .generator import Generator
from .plan import applicable_plan, build_generation_plan
from .template_engine import TemplateEngine, feature_flags, placeholders, process_template

__all__ = [
    "Generator",
    "TemplateEngine",
    "applicable_plan",
    "build_generation_plan",
    "feature_flags",
    "placeholders",
    "process_template",
]
