"""
SourceModel: Mutable tree-sitter view of one TypeScript source file.

The model keeps the file's bytes and the parsed tree side by side. Every
mutation splices bytes and reparses, so lookups made after an edit always
see the new tree. Editors only talk to the small interface below (find_*,
get_or_create_array_property, insert_statements_before, print), which keeps
the parser engine swappable.
"""

from pathlib import Path
from typing import Dict, List, Optional

from tree_sitter import Language, Node, Parser, Tree
import tree_sitter_typescript as tstypescript

from authme.exceptions import SourceNotFoundError, SourceParseError, StructureError
from authme.logging_config import logger
from .formatter import CodeFormatter

# Global cache for parsers to avoid rebuilding languages per file
_parser_cache: Dict[str, Parser] = {}

CLASS_TYPES = ("class_declaration", "abstract_class_declaration")
FUNCTION_TYPES = ("function_declaration", "generator_function_declaration", "function_signature")


def get_parser(language: str = "typescript") -> Parser:
    """
    Return a cached tree-sitter parser for ``typescript`` or ``tsx``.
    """
    if language in _parser_cache:
        return _parser_cache[language]

    if language == "tsx":
        lang = Language(tstypescript.language_tsx())
    else:
        lang = Language(tstypescript.language_typescript())

    parser = Parser()
    parser.language = lang
    _parser_cache[language] = parser
    logger.debug(f"Initialized tree-sitter parser for {language}")
    return parser


def _language_for(path: Path) -> str:
    return "tsx" if path.suffix.lower() == ".tsx" else "typescript"


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def load_source_model(file_path, encoding: str = "utf-8") -> "SourceModel":
    """
    Parse ``file_path`` into a SourceModel.

    Args:
        file_path: TypeScript file to load
        encoding: Source encoding

    Returns:
        Loaded SourceModel

    Raises:
        SourceNotFoundError: If the path does not exist
        SourceParseError: If the file is not valid TypeScript
    """
    path = Path(file_path)
    if not path.is_file():
        raise SourceNotFoundError(str(path))

    model = SourceModel(path, path.read_bytes(), language=_language_for(path), encoding=encoding)
    model.check_syntax()
    logger.debug(f"Loaded source model for {path}")
    return model


class SourceModel:
    """
    In-memory syntax tree of one source file, written back to the same path.
    """

    def __init__(self, file_path, source: bytes, language: str = "typescript", encoding: str = "utf-8"):
        self.file_path = Path(file_path)
        self.language = language
        self.encoding = encoding
        self.original = source
        self.source = source
        self._parser = get_parser(language)
        self.tree: Tree = self._parser.parse(self.source)
        self._formatter = CodeFormatter()

    # ------------------------------------------------------------------
    # Basic access
    # ------------------------------------------------------------------

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def modified(self) -> bool:
        return self.source != self.original

    @property
    def indent_unit(self) -> str:
        return self._formatter.detect_indentation(self.print())

    def print(self) -> str:
        """Current source text."""
        return self.source.decode(self.encoding)

    def text_of(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode(self.encoding)

    def check_syntax(self) -> None:
        """
        Raise SourceParseError if the current source does not parse cleanly.
        """
        if not self.root.has_error:
            return
        bad = _first_error(self.root)
        if bad is not None:
            line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
            what = f"missing '{bad.type}'" if bad.is_missing else "syntax error"
            raise SourceParseError(str(self.file_path), f"{what} at line {line}, column {column}")
        raise SourceParseError(str(self.file_path), "syntax error")

    # ------------------------------------------------------------------
    # Byte-level editing primitives
    # ------------------------------------------------------------------

    def replace_range(self, start: int, end: int, text: str) -> None:
        """Replace bytes ``[start, end)`` with ``text`` and reparse."""
        self.source = self.source[:start] + text.encode(self.encoding) + self.source[end:]
        self.tree = self._parser.parse(self.source)

    def insert_text(self, offset: int, text: str) -> None:
        self.replace_range(offset, offset, text)

    def line_start(self, offset: int) -> int:
        return self.source.rfind(b"\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        """Offset of the newline ending the line containing ``offset`` (or end of file)."""
        end = self.source.find(b"\n", offset)
        return len(self.source) if end == -1 else end

    def line_indent(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""
        start = self.line_start(offset)
        end = start
        while end < len(self.source) and self.source[end:end + 1] in (b" ", b"\t"):
            end += 1
        return self.source[start:end].decode(self.encoding)

    def starts_line(self, node: Node) -> bool:
        """True if only whitespace precedes ``node`` on its line."""
        prefix = self.source[self.line_start(node.start_byte):node.start_byte]
        return not prefix.strip()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def imports(self) -> List[Node]:
        """Top-level import declarations, in source order."""
        return [child for child in self.root.named_children if child.type == "import_statement"]

    def _top_level_declarations(self) -> List[Node]:
        declarations = []
        for child in self.root.named_children:
            if child.type == "export_statement":
                declaration = child.child_by_field_name("declaration")
                if declaration is not None:
                    declarations.append(declaration)
            else:
                declarations.append(child)
        return declarations

    def find_class(self, name: str) -> Optional[Node]:
        for node in self._top_level_declarations():
            if node.type in CLASS_TYPES:
                name_node = node.child_by_field_name("name")
                if name_node is not None and self.text_of(name_node) == name:
                    return node
        return None

    def find_function(self, name: str) -> Optional[Node]:
        for node in self._top_level_declarations():
            if node.type in FUNCTION_TYPES:
                name_node = node.child_by_field_name("name")
                if name_node is not None and self.text_of(name_node) == name:
                    return node
        return None

    def decorators_of(self, class_node: Node) -> List[Node]:
        """
        Decorators attached to a class.

        ``@Module({...}) export class AppModule {}`` attaches the decorator to
        the export statement rather than the class, so both are checked.
        """
        decorators = [c for c in class_node.children if c.type == "decorator"]
        parent = class_node.parent
        if parent is not None and parent.type == "export_statement":
            decorators = [c for c in parent.children if c.type == "decorator"] + decorators
        return decorators

    def decorator_name(self, decorator: Node) -> str:
        expression = self._significant_children(decorator)[0]
        if expression.type == "call_expression":
            expression = expression.child_by_field_name("function")
        if expression.type == "member_expression":
            expression = expression.child_by_field_name("property")
        return self.text_of(expression)

    def find_decorator(self, class_node: Node, name: str) -> Optional[Node]:
        for decorator in self.decorators_of(class_node):
            if self.decorator_name(decorator) == name:
                return decorator
        return None

    def decorator_arguments(self, decorator: Node) -> List[Node]:
        expression = self._significant_children(decorator)[0]
        if expression.type != "call_expression":
            return []
        arguments = expression.child_by_field_name("arguments")
        if arguments is None:
            return []
        return self._significant_children(arguments)

    def statements_of(self, block: Node) -> List[Node]:
        """Top-level statements of a statement block, comments excluded."""
        return self._significant_children(block)

    def property_key(self, pair: Node) -> str:
        key = pair.child_by_field_name("key")
        text = self.text_of(key)
        if key.type == "string":
            text = text[1:-1]
        return text

    def find_property(self, obj: Node, name: str) -> Optional[Node]:
        for child in self._significant_children(obj):
            if child.type == "pair" and self.property_key(child) == name:
                return child
            if child.type == "shorthand_property_identifier" and self.text_of(child) == name:
                return child
        return None

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def get_or_create_array_property(self, obj: Node, name: str) -> Node:
        """
        Return the array value of property ``name`` on object literal ``obj``.

        A missing property is created as ``name: []`` after the last existing
        property. The returned node belongs to the current tree.

        Raises:
            StructureError: If the property exists but is not an array literal
        """
        prop = self.find_property(obj, name)
        if prop is None:
            obj_start = obj.start_byte
            self._append_property(obj, f"{name}: []")
            obj = self._object_at(obj_start)
            prop = self.find_property(obj, name)

        if prop is None or prop.type != "pair":
            raise StructureError(f"Invalid {name} property")

        value = prop.child_by_field_name("value")
        if value is None or value.type != "array":
            raise StructureError(f"{name} is not an array")
        return value

    def insert_statements_before(self, block: Node, anchor: Optional[Node], lines: List[str]) -> None:
        """
        Insert ``lines`` as new statements of ``block`` before ``anchor``.

        With no anchor the lines go at the end of the block. The lines are
        re-indented to match the neighbouring statements.
        """
        unit = self.indent_unit
        statements = self.statements_of(block)

        if anchor is not None:
            indent = self.line_indent(anchor.start_byte)
            code = self._formatter.reindent_block(lines, indent)
            if self.starts_line(anchor):
                self.insert_text(self.line_start(anchor.start_byte), code)
            else:
                self.insert_text(anchor.start_byte, "\n" + code + indent)
            return

        close = block.children[-1]
        outer_indent = self.line_indent(block.start_byte)
        if statements and self.starts_line(statements[0]):
            indent = self.line_indent(statements[0].start_byte)
        else:
            indent = outer_indent + unit

        code = self._formatter.reindent_block(lines, indent)
        if self.starts_line(close):
            self.insert_text(self.line_start(close.start_byte), code)
        else:
            self.insert_text(close.start_byte, "\n" + code + outer_indent)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _significant_children(self, node: Node) -> List[Node]:
        return [c for c in node.named_children if c.type != "comment"]

    def _object_at(self, start: int) -> Node:
        node = self.root.descendant_for_byte_range(start, start + 1)
        while node is not None and not (node.type == "object" and node.start_byte == start):
            node = node.parent
        if node is None:
            raise StructureError("Object literal lost after edit")
        return node

    def _append_property(self, obj: Node, text: str) -> None:
        members = self._significant_children(obj)
        obj_indent = self.line_indent(obj.start_byte)
        unit = self.indent_unit

        if not members:
            self.replace_range(
                obj.start_byte,
                obj.end_byte,
                "{\n" + obj_indent + unit + text + ",\n" + obj_indent + "}",
            )
            return

        last = members[-1]
        if self.starts_line(last):
            indent = self.line_indent(last.start_byte)
        else:
            indent = obj_indent + unit

        follower = last.next_sibling
        if follower is not None and follower.type == ",":
            self.insert_text(follower.end_byte, "\n" + indent + text + ",")
        else:
            self.insert_text(last.end_byte, ",\n" + indent + text)
