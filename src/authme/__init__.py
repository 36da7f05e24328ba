"""
authme - add production-ready authentication to a NestJS project.

Generates an auth module from templates and wires it into the project by
editing app.module.ts and main.ts through their syntax trees, with every
write backed up and rolled back on failure.
"""

__version__ = "1.3.0"

__all__ = ["__version__"]
