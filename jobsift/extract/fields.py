"""
Field extractor: turns a field schema into crawler match callbacks.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TYPE_CHECKING

from jobsift.errors import EmptyFieldSchemaError
from jobsift.extract.accumulator import Accumulator
from jobsift.extract.barrier import CompletionBarrier
from jobsift.models import FieldSchema

if TYPE_CHECKING:
    from jobsift.crawler import Crawler


MatchCallback = Callable[[str], None]


class FieldExtractor:
    """
    One registration per schema field.

    Each callback appends the matched node text to the accumulator under its
    field's key, bracketed by the completion barrier.
    """

    def __init__(
        self,
        schema: FieldSchema,
        accumulator: Accumulator,
        barrier: CompletionBarrier,
        logger: Optional[logging.Logger] = None,
    ):
        self.schema = schema
        self.accumulator = accumulator
        self.barrier = barrier
        self.logger = logger or logging.getLogger(__name__)

    def register(self, field_name: str, selector: str) -> MatchCallback:
        """Build the match callback for one field."""

        def on_match(text: str) -> None:
            self.barrier.begin()
            try:
                self.accumulator.append(field_name, text)
            finally:
                self.barrier.end()

        on_match.__name__ = f"on_match_{field_name}"
        on_match.__qualname__ = on_match.__name__
        self.logger.debug("registered field %s -> %s", field_name, selector)
        return on_match

    def callbacks(self) -> List[tuple]:
        """(selector, callback) for every schema field, in schema order."""
        if len(self.schema) < 1:
            raise EmptyFieldSchemaError()
        return [(f.selector, self.register(f.name, f.selector)) for f in self.schema]

    def attach(self, crawler: "Crawler") -> None:
        """Register every schema field with the crawler."""
        for selector, callback in self.callbacks():
            crawler.on_html(selector, callback)
