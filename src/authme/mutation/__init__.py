"""
Mutation package: the safe-mutation subsystem.

Provides tree-sitter based editing of TypeScript sources (imports, decorator
arrays, bootstrap bodies) and the backup/rollback protocol that wraps every
write of a generation run.
"""

from .facade import MutationFacade
from .ledger import BackupLedger
from .writer import ConflictCheckedWriter, atomic_write
from .source_model import SourceModel, load_source_model
from .formatter import CodeFormatter
from .import_manager import ImportManager
from .array_editor import ArrayEntry, DecoratorArrayEditor, leading_identifier, merge_into_decorator_array
from .bootstrap_injector import BootstrapInjector, inject_before_anchor, listen_call_matcher
from .config import (
    MUTATION_CONFIG,
    FORMATTERS,
    INDENT_DETECTION,
)

__all__ = [
    # Main facade
    "MutationFacade",

    # Backup / write protocol
    "BackupLedger",
    "ConflictCheckedWriter",
    "atomic_write",

    # Source model and editors
    "SourceModel",
    "load_source_model",
    "CodeFormatter",
    "ImportManager",
    "ArrayEntry",
    "DecoratorArrayEditor",
    "leading_identifier",
    "merge_into_decorator_array",
    "BootstrapInjector",
    "inject_before_anchor",
    "listen_call_matcher",

    # Configuration
    "MUTATION_CONFIG",
    "FORMATTERS",
    "INDENT_DETECTION",
]
