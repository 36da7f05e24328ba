"""
ImportManager: Idempotently ensure named imports exist in a source file.
"""

from typing import List, Optional

from tree_sitter import Node

from authme.logging_config import logger
from .source_model import SourceModel


class ImportManager:
    """
    Edit the import section of a SourceModel.

    Rules:
    - An existing ``import { ... } from '<module>'`` gains the missing names
    - A default-only import becomes ``import Default, { Names } from ...``
    - ``import type`` and namespace imports are never extended
    - Otherwise a new declaration is appended after the last import
    """

    def ensure_import(self, model: SourceModel, module_path: str, names: List[str]) -> List[str]:
        """
        Make sure ``names`` are imported from ``module_path``.

        Calling this twice with the same arguments is a no-op the second time.

        Args:
            model: Loaded source model
            module_path: Module specifier, e.g. ``@nestjs/config``
            names: Named bindings to import

        Returns:
            Names that were added
        """
        wanted = list(dict.fromkeys(names))
        declaration = self._find_extendable_import(model, module_path)

        if declaration is None:
            self._append_declaration(model, module_path, wanted)
            logger.debug(f"Added import {{ {', '.join(wanted)} }} from '{module_path}'")
            return wanted

        present = self.named_imports(model, declaration)
        missing = [name for name in wanted if name not in present]
        if missing:
            self._extend_declaration(model, declaration, missing)
            logger.debug(f"Extended import from '{module_path}' with {missing}")
        return missing

    def module_of(self, model: SourceModel, declaration: Node) -> str:
        source = declaration.child_by_field_name("source")
        if source is None:
            return ""
        return model.text_of(source)[1:-1]

    def named_imports(self, model: SourceModel, declaration: Node) -> List[str]:
        """Imported names (``name`` side of ``name as alias``) of a declaration."""
        named = self._named_imports_node(declaration)
        if named is None:
            return []
        names = []
        for specifier in named.named_children:
            if specifier.type == "import_specifier":
                names.append(model.text_of(specifier.child_by_field_name("name")))
        return names

    def _find_extendable_import(self, model: SourceModel, module_path: str) -> Optional[Node]:
        for declaration in model.imports():
            if self.module_of(model, declaration) != module_path:
                continue
            if any(child.type == "type" for child in declaration.children):
                continue
            clause = self._clause(declaration)
            if clause is None:
                continue
            if any(child.type == "namespace_import" for child in clause.named_children):
                continue
            return declaration
        return None

    def _clause(self, declaration: Node) -> Optional[Node]:
        for child in declaration.named_children:
            if child.type == "import_clause":
                return child
        return None

    def _named_imports_node(self, declaration: Node) -> Optional[Node]:
        clause = self._clause(declaration)
        if clause is None:
            return None
        for child in clause.named_children:
            if child.type == "named_imports":
                return child
        return None

    def _extend_declaration(self, model: SourceModel, declaration: Node, missing: List[str]) -> None:
        named = self._named_imports_node(declaration)
        if named is None:
            # default-only import: import Foo from 'x'
            clause = self._clause(declaration)
            model.insert_text(clause.end_byte, ", { " + ", ".join(missing) + " }")
            return

        specifiers = [c for c in named.named_children if c.type == "import_specifier"]
        if not specifiers:
            model.replace_range(named.start_byte, named.end_byte, "{ " + ", ".join(missing) + " }")
            return

        model.insert_text(specifiers[-1].end_byte, ", " + ", ".join(missing))

    def _append_declaration(self, model: SourceModel, module_path: str, names: List[str]) -> None:
        quote = self._quote_style(model)
        statement = f"import {{ {', '.join(names)} }} from {quote}{module_path}{quote};"

        imports = model.imports()
        if imports:
            # After the whole line, so a trailing comment stays with its import
            model.insert_text(model.line_end(imports[-1].end_byte), "\n" + statement)
        else:
            model.insert_text(0, statement + "\n")

    def _quote_style(self, model: SourceModel) -> str:
        for declaration in model.imports():
            source = declaration.child_by_field_name("source")
            if source is not None:
                return model.text_of(source)[0]
        return "'"
