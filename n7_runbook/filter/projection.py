from typing import Iterator, Optional, Tuple

from ..catalog.catalog import StepCatalog
from ..schemas.step import StepDefinition


def matches(step: StepDefinition, needle: str) -> bool:
    """Case-insensitive substring match on title, details or category name."""
    return (
        needle in step.title.lower()
        or needle in step.details.lower()
        or needle in step.category.value.lower()
    )


class FilterView:
    """
    Steps of a catalog visible under a search query, in catalog order.

    Evaluated lazily on every iteration, so a view can be iterated any number
    of times and always reflects (query, catalog) and nothing else.
    """

    def __init__(self, catalog: StepCatalog, query: str = ""):
        self.catalog = catalog
        self.query = query
        self._needle = query.strip().lower()

    @property
    def is_filtered(self) -> bool:
        return bool(self._needle)

    def __iter__(self) -> Iterator[StepDefinition]:
        if not self._needle:
            yield from self.catalog
            return
        for step in self.catalog:
            if matches(step, self._needle):
                yield step

    def __contains__(self, step_id: object) -> bool:
        return any(step.id == step_id for step in self)

    def ids(self) -> Tuple[str, ...]:
        return tuple(step.id for step in self)

    def first(self) -> Optional[StepDefinition]:
        return next(iter(self), None)
