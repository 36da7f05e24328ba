"""
DecoratorArrayEditor: Merge entries into an array property of a class
decorator's configuration object, e.g. ``@Module({ imports: [...] })``.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from tree_sitter import Node

from authme.exceptions import StructureError
from authme.logging_config import logger
from .source_model import SourceModel

_LEADING_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")


def leading_identifier(source_text: str) -> Optional[str]:
    """
    First bare name token of an expression.

    ``ConfigModule.forRoot({...})`` -> ``ConfigModule``; ``...shared`` -> None.
    """
    match = _LEADING_IDENTIFIER.match(source_text.strip())
    return match.group(0) if match else None


@dataclass(frozen=True)
class ArrayEntry:
    """Candidate array element: its identity key and the exact source to insert."""
    leading_identifier: str
    source_text: str

    @classmethod
    def from_source(cls, source_text: str) -> "ArrayEntry":
        ident = leading_identifier(source_text)
        if ident is None:
            raise ValueError(f"Array entry has no leading identifier: {source_text!r}")
        return cls(leading_identifier=ident, source_text=source_text)


class DecoratorArrayEditor:
    """
    Merge new entries into a decorator's array property.

    Presence is decided by leading identifier only: an existing
    ``ConfigModule.forRoot({ isGlobal: true })`` blocks a candidate
    ``ConfigModule.forRoot({ isGlobal: false })``. Existing entries are never
    replaced or reordered.
    """

    def merge(
        self,
        model: SourceModel,
        class_name: str,
        decorator_name: str,
        property_name: str,
        new_entries: Sequence[ArrayEntry],
    ) -> List[ArrayEntry]:
        """
        Merge ``new_entries`` into ``@decorator_name({ property_name: [...] })`` on ``class_name``.

        Args:
            model: Loaded source model
            class_name: Decorated class, e.g. ``AppModule``
            decorator_name: Decorator, e.g. ``Module``
            property_name: Array property, e.g. ``imports``
            new_entries: Candidates in the order they should be appended

        Returns:
            Entries that were appended (empty when everything was present)

        Raises:
            StructureError: If the class, decorator, object argument or array is missing or malformed
        """
        obj = self._locate_object(model, class_name, decorator_name)
        array = model.get_or_create_array_property(obj, property_name)

        elements = [c for c in array.named_children if c.type != "comment"]
        present = set()
        for element in elements:
            ident = leading_identifier(model.text_of(element))
            if ident:
                present.add(ident)

        appended = []
        for entry in new_entries:
            if entry.leading_identifier in present:
                logger.debug(f"{entry.leading_identifier} already in {property_name}, skipping")
                continue
            present.add(entry.leading_identifier)
            appended.append(entry)

        if not appended:
            return []

        self._rewrite_array(model, array, [e.source_text for e in appended])
        logger.debug(
            f"Merged {[e.leading_identifier for e in appended]} into "
            f"@{decorator_name}.{property_name} of {class_name}"
        )
        return appended

    def _locate_object(self, model: SourceModel, class_name: str, decorator_name: str) -> Node:
        class_node = model.find_class(class_name)
        if class_node is None:
            raise StructureError(f"{class_name} class not found")

        decorator = model.find_decorator(class_node, decorator_name)
        if decorator is None:
            raise StructureError(f"@{decorator_name} decorator not found")

        arguments = model.decorator_arguments(decorator)
        if len(arguments) != 1 or arguments[0].type != "object":
            raise StructureError(f"Invalid @{decorator_name} decorator structure")
        return arguments[0]

    def _rewrite_array(self, model: SourceModel, array: Node, appended: List[str]) -> None:
        """Rewrite ``array`` one entry per line: original items, then ``appended``."""
        base_indent = model.line_indent(array.start_byte)
        entry_indent = base_indent + model.indent_unit

        lines = ["["]
        for child in array.named_children:
            text = model.text_of(child)
            if child.type == "comment":
                lines.append(entry_indent + text)
                continue
            original_indent = model.line_indent(child.start_byte)
            lines.append(self._shift(text, original_indent, entry_indent) + ",")
        for text in appended:
            lines.append(self._shift(text, "", entry_indent) + ",")
        lines.append(base_indent + "]")

        model.replace_range(array.start_byte, array.end_byte, "\n".join(lines))

    def _shift(self, text: str, original_indent: str, entry_indent: str) -> str:
        """Place a possibly multi-line element at ``entry_indent``, keeping its inner layout."""
        first, *rest = text.split("\n")
        out = [entry_indent + first.strip()]
        for line in rest:
            if line.startswith(original_indent):
                line = line[len(original_indent):]
            out.append(entry_indent + line if line.strip() else "")
        return "\n".join(out)


def merge_into_decorator_array(
    model: SourceModel,
    class_name: str,
    decorator_name: str,
    property_name: str,
    new_entries: Sequence[ArrayEntry],
) -> List[ArrayEntry]:
    """Functional form of DecoratorArrayEditor.merge."""
    return DecoratorArrayEditor().merge(model, class_name, decorator_name, property_name, new_entries)
