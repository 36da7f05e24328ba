"""
Configuration for the safe-mutation subsystem.

Contains backup settings, formatter commands and indentation defaults.
"""


def get_mutation_config():
    """
    Get the default mutation configuration.

    Components merge caller overrides on top of this dict.
    """
    return {
        "backup_suffix": ".backup",
        "auto_format_enabled": False,
        "encoding": "utf-8",
    }


MUTATION_CONFIG = get_mutation_config()

FORMATTERS = {
    "typescript": {
        "command": "prettier",
        "args": ["--parser", "typescript", "--write"],
        "extensions": [".ts", ".tsx"],
    },
    "json": {
        "command": "prettier",
        "args": ["--parser", "json", "--write"],
        "extensions": [".json"],
    },
}

INDENT_DETECTION = {
    "default_indent": "  ",    # NestJS projects use 2 spaces
    "max_sample_lines": 100,   # Lines to sample for indent detection
}
