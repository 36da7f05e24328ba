"""
CodeFormatter: Indentation detection, block re-indentation and optional
external formatting.
"""

import subprocess
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from authme.logging_config import logger
from .config import FORMATTERS, INDENT_DETECTION


class CodeFormatter:
    """
    Handle code indentation and formatting.

    Features:
    - Detect a source's indentation unit (spaces vs tabs)
    - Reindent code blocks to a target prefix
    - Shell out to prettier for full file formatting (opt-in)
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize formatter with optional config.

        Args:
            config: Optional config overrides
        """
        self.config = config or {}

    def reindent_block(self, lines: List[str], indent: str) -> str:
        """
        Reindent a block of lines so its least-indented line sits at ``indent``.

        Relative indentation inside the block is preserved and blank lines stay
        blank.

        Args:
            lines: Block lines (without trailing newlines)
            indent: Target indentation prefix

        Returns:
            Reindented block, every line terminated by a newline
        """
        min_indent = None
        for line in lines:
            if line.strip():
                width = len(self._get_indent(line))
                min_indent = width if min_indent is None else min(min_indent, width)
        min_indent = min_indent or 0

        out = []
        for line in lines:
            if not line.strip():
                out.append("\n")
            else:
                out.append(indent + line[min_indent:].rstrip() + "\n")
        return "".join(out)

    def detect_indentation(self, source: str) -> str:
        """
        Detect the indentation unit used by ``source``.

        Args:
            source: File content

        Returns:
            Indent unit string (e.g., "  " or "\t")
        """
        sample_lines = source.splitlines()[:INDENT_DETECTION["max_sample_lines"]]

        tab_count = 0
        space_widths = {}

        for line in sample_lines:
            if not line.strip():
                continue

            indent = self._get_indent(line)
            if '\t' in indent:
                tab_count += 1
            elif indent:
                width = len(indent)
                space_widths[width] = space_widths.get(width, 0) + 1

        if tab_count > sum(space_widths.values()):
            return "\t"
        if space_widths:
            smallest = min(space_widths)
            if smallest >= 4:
                return "    "
            if smallest >= 2:
                return "  "
        return INDENT_DETECTION["default_indent"]

    def format_file(
        self,
        file_path: str,
        language: str = "typescript",
    ) -> Tuple[bool, Optional[str]]:
        """
        Format an entire file in place using an external formatter.

        A missing formatter is not an error; the file is left as written.

        Args:
            file_path: Path to file
            language: Key into FORMATTERS

        Returns:
            (success, error_message)
        """
        formatter_config = FORMATTERS.get(language)
        if not formatter_config:
            logger.warning(f"No formatter configured for {language}")
            return True, None

        command = formatter_config["command"]
        if not shutil.which(command):
            logger.debug(f"Formatter '{command}' not found in PATH, skipping auto-format")
            return True, None

        full_command = [command] + formatter_config["args"] + [file_path]

        try:
            result = subprocess.run(
                full_command,
                capture_output=True,
                text=True,
                timeout=30,
                cwd=str(Path(file_path).parent),
            )
        except subprocess.TimeoutExpired:
            error_msg = "Formatter timeout after 30s"
            logger.error(error_msg)
            return False, error_msg

        if result.returncode != 0:
            error_msg = result.stderr or result.stdout
            logger.error(f"Formatter failed: {error_msg}")
            return False, error_msg

        logger.debug(f"Formatted {file_path} with {command}")
        return True, None

    def _get_indent(self, line: str) -> str:
        """Extract indentation from a line."""
        return line[:len(line) - len(line.lstrip())]
