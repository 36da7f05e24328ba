"""
BootstrapInjector: Insert a block of statements into a bootstrap function,
right before its "start listening" call.
"""

from typing import Callable, List, Optional, Sequence

from authme.exceptions import StructureError
from authme.logging_config import logger
from .source_model import SourceModel

AnchorMatcher = Callable[[str], bool]


def listen_call_matcher(statement_text: str) -> bool:
    """Anchor predicate: the statement calls ``<something>.listen(...)``."""
    return ".listen(" in statement_text or ".listen (" in statement_text


class BootstrapInjector:
    """
    Inject statements into a function body before an anchor statement.

    Idempotency is textual: if the body already contains any marker string
    the body is left alone. A user's own code mentioning a marker therefore
    also suppresses injection; this approximation is intentional.
    """

    def inject(
        self,
        model: SourceModel,
        function_name: str,
        statements: List[str],
        anchor_matcher: Optional[AnchorMatcher] = None,
        markers: Sequence[str] = (),
    ) -> bool:
        """
        Insert ``statements`` before the first statement matching ``anchor_matcher``.

        With no matching statement the block is appended at the end of the body.

        Args:
            model: Loaded source model
            function_name: Function to edit, e.g. ``bootstrap``
            statements: Lines of the block to insert
            anchor_matcher: Predicate over a statement's source text
            markers: Substrings whose presence means the block is already there

        Returns:
            True if the body was changed

        Raises:
            StructureError: If the function is missing or has no body
        """
        anchor_matcher = anchor_matcher or listen_call_matcher

        function = model.find_function(function_name)
        if function is None:
            raise StructureError(f"{function_name} function not found")

        body = function.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            raise StructureError(f"{function_name} function has no body")

        body_text = model.text_of(body)
        if any(marker in body_text for marker in markers):
            logger.debug(f"{function_name} already contains injected block, skipping")
            return False

        anchor = None
        for statement in model.statements_of(body):
            if anchor_matcher(model.text_of(statement)):
                anchor = statement
                break

        if anchor is None:
            logger.debug(f"No anchor statement in {function_name}, appending at end of body")

        model.insert_statements_before(body, anchor, statements)
        return True


def inject_before_anchor(
    model: SourceModel,
    function_name: str,
    anchor_matcher: Optional[AnchorMatcher],
    statements: List[str],
    markers: Sequence[str] = (),
) -> bool:
    """Functional form of BootstrapInjector.inject."""
    return BootstrapInjector().inject(
        model, function_name, statements, anchor_matcher=anchor_matcher, markers=markers
    )
