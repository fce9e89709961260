"""
Step Catalog.

The ordered, immutable list of runbook steps. Catalog order is the default
navigation order and also the category grouping. Loaded once at startup from
a YAML document (the bundled AWS incident rescue runbook unless
settings.CATALOG_PATH points elsewhere) and never mutated afterwards.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from ..errors import CatalogError, UnknownStepError
from ..schemas.step import StepDefinition

logger = logging.getLogger("n7-runbook.catalog")

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "incident_rescue.yaml"


class StepCatalog:
    """Ordered, read-only collection of StepDefinitions with unique identities."""

    def __init__(self, steps: Iterable[StepDefinition]):
        self._steps: Tuple[StepDefinition, ...] = tuple(steps)
        self._index: Dict[str, int] = {}
        for position, step in enumerate(self._steps):
            if step.id in self._index:
                raise CatalogError(f"Duplicate step id '{step.id}' in catalog")
            self._index[step.id] = position

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[StepDefinition]:
        return iter(self._steps)

    def __getitem__(self, position: int) -> StepDefinition:
        return self._steps[position]

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._index

    @property
    def steps(self) -> Tuple[StepDefinition, ...]:
        return self._steps

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(step.id for step in self._steps)

    def index_of(self, step_id: str) -> int:
        try:
            return self._index[step_id]
        except KeyError:
            raise UnknownStepError(step_id) from None


def load_catalog(path: Optional[Union[str, Path]] = None) -> StepCatalog:
    """
    Parse a YAML catalog document into a StepCatalog.

    The document is a list of step mappings:
        - id: rotate-keys
          title: Rotate/Disable IAM Access Keys
          category: Containment
          critical: true
          details: ...
          commands: [{label: ..., cmd: ...}]
          links: [{label: ..., href: ...}]

    Raises CatalogError when the file is unreadable or malformed. There is no
    fallback here: a broken catalog is a deployment error.
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH

    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Cannot read catalog {catalog_path}: {e}") from e

    if not isinstance(document, list):
        raise CatalogError(f"Catalog {catalog_path} must be a list of steps")

    steps = []
    for position, entry in enumerate(document):
        try:
            steps.append(StepDefinition.model_validate(entry))
        except ValidationError as e:
            raise CatalogError(f"Invalid step #{position} in {catalog_path}: {e}") from e

    catalog = StepCatalog(steps)
    logger.info(f"Loaded {len(catalog)} runbook steps from {catalog_path.name}")
    return catalog
