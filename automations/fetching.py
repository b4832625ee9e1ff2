"""
Concurrent loading of the six entity lists.

The candidate, job, company, recruiter, interview and application lists are
independent, so they are requested in parallel and joined before resolution.
A failing list does not discard the others: its error is kept next to the
lists that did load.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from django.conf import settings

from .catalog import EntityKind
from .entities import EntitySnapshot, same_id
from .exceptions import EntityFetchError
from .ports import EntityProvider
from .resolver import TriggerContext

logger = logging.getLogger(__name__)


@dataclass
class EntityLists:
    lists: Dict[EntityKind, List[EntitySnapshot]] = field(default_factory=dict)
    errors: Dict[EntityKind, EntityFetchError] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.errors

    def get(self, kind: EntityKind) -> List[EntitySnapshot]:
        return self.lists.get(kind, [])

    def find(self, kind: EntityKind, entity_id) -> Optional[EntitySnapshot]:
        for snapshot in self.get(kind):
            if same_id(snapshot.id, entity_id):
                return snapshot
        return None

    def unresolved(self, context: TriggerContext) -> Dict[EntityKind, str]:
        """
        Entities the context names that are not available, with the reason:
        the list failed to load, or it loaded without that id.
        """
        problems = {}
        for kind in context.requested_kinds():
            entity_id = context.entity_id(kind)
            if kind in self.errors:
                problems[kind] = f'{kind.value} list could not be loaded: {self.errors[kind].message}'
            elif self.find(kind, entity_id) is None:
                problems[kind] = f'No {kind.value} with id {entity_id}'
        return problems

    def select(self, context: TriggerContext) -> Dict[EntityKind, EntitySnapshot]:
        """Pick the snapshots a trigger context refers to. Unknown ids are skipped."""
        selected = {}
        for kind in context.requested_kinds():
            snapshot = self.find(kind, context.entity_id(kind))
            if snapshot is not None:
                selected[kind] = snapshot
            else:
                logger.info(f"No {kind.value} with id {context.entity_id(kind)!r} in loaded data")
        return selected


def _fetch_one(provider: EntityProvider, kind: EntityKind) -> List[EntitySnapshot]:
    try:
        return list(provider.fetch_entity_list(kind))
    except EntityFetchError:
        raise
    except Exception as e:
        raise EntityFetchError(str(e), kind=kind) from e


def load_entity_lists(
    provider: EntityProvider,
    kinds: Optional[Iterable[EntityKind]] = None,
    max_workers: Optional[int] = None,
) -> EntityLists:
    """
    Fetch the requested entity lists concurrently and join on all of them.

    Returns whatever loaded, with a per-kind error for each failed fetch.
    """
    kinds = list(kinds) if kinds is not None else list(EntityKind)
    result = EntityLists()
    if not kinds:
        return result

    workers = max_workers or getattr(settings, 'AUTOMATIONS_FETCH_WORKERS', len(kinds))
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(kinds)))) as executor:
        futures = {kind: executor.submit(_fetch_one, provider, kind) for kind in kinds}

    for kind, future in futures.items():
        try:
            result.lists[kind] = future.result()
        except EntityFetchError as e:
            logger.warning(f"Failed to load {kind.value} list: {e.message}")
            result.errors[kind] = e

    return result
