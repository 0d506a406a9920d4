"""
Aggregate library: maps aggregate product names to specifications.

In-memory counterpart of the aggregate tables in storage.py, seeded with
the built-in aggregates. Specifications are frozen, so handing them out
never exposes library state.
"""

import logging
from typing import Dict, List

from ..config import settings
from ..errors import MissingAggregateSpecification
from ..schemas import AggregateSpecification
from .sieves import default_aggregates

logger = logging.getLogger(__name__)

DEFAULT_SELECTION = ["Concrete Sand", "Keystone #7"]


class AggregateLibrary:
    """Named aggregate specifications plus the short list shown as defaults."""

    def __init__(self, aggregates: Dict[str, AggregateSpecification] = None,
                 defaults: List[str] = None):
        self._aggregates = dict(aggregates) if aggregates is not None else default_aggregates()
        if defaults is None:
            defaults = [n for n in DEFAULT_SELECTION if n in self._aggregates]
        self._defaults = []
        self.set_defaults(defaults)

    def get(self, name: str) -> AggregateSpecification:
        """Returns the specification for a name, or raises MissingAggregateSpecification."""
        if name not in self._aggregates:
            raise MissingAggregateSpecification(name, self.names())
        return self._aggregates[name]

    def has(self, name: str) -> bool:
        return name in self._aggregates

    def names(self) -> List[str]:
        return list(self._aggregates.keys())

    def add(self, spec: AggregateSpecification) -> None:
        """Add a new aggregate. Names are unique."""
        if spec.name in self._aggregates:
            raise ValueError(f"An aggregate named {spec.name} already exists")
        self._aggregates[spec.name] = spec
        logger.info("Added aggregate %s (%s)", spec.name, spec.aggregate_class.value)

    def update(self, spec: AggregateSpecification) -> None:
        if spec.name not in self._aggregates:
            raise MissingAggregateSpecification(spec.name, self.names())
        self._aggregates[spec.name] = spec
        logger.info("Updated aggregate %s", spec.name)

    def delete(self, name: str) -> None:
        if name not in self._aggregates:
            raise MissingAggregateSpecification(name, self.names())
        del self._aggregates[name]
        self._defaults = [n for n in self._defaults if n != name]
        logger.info("Deleted aggregate %s", name)

    @property
    def defaults(self) -> List[str]:
        return list(self._defaults)

    def set_defaults(self, names: List[str]) -> None:
        """Select the default aggregates. Unknown names are rejected; extras past the limit are dropped."""
        for name in names:
            if name not in self._aggregates:
                raise MissingAggregateSpecification(name, self.names())
        limit = settings.MAX_DEFAULT_AGGREGATES
        if len(names) > limit:
            logger.warning("Only the first %d default aggregates are kept", limit)
        self._defaults = list(names)[:limit]
