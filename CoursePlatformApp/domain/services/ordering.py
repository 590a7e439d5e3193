"""Ordering engine for module and material sequences.

Within one parent scope (a course's modules, a module's materials) the
``order_index`` values are always a permutation of ``0..count-1``. Indices are
computed here only; callers never supply them.

Every operation expects to run inside ``transaction.atomic`` and locks the parent
row first so concurrent writers on the same scope are serialized. Writes are
ordered so the (parent, order_index) unique constraint never sees a duplicate:
swaps go through a temporary out-of-range slot and compaction runs ascending.
"""

import logging
from dataclasses import dataclass

from django.db import models, transaction

from CoursePlatformApp.core.choices import MoveDirection
from CoursePlatformApp.courses.models import Course, Module, Material

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """A parent → ordered children relation."""
    model: type[models.Model]
    parent_model: type[models.Model]
    parent_field: str

    def parent_id_of(self, item: models.Model) -> int:
        return getattr(item, f"{self.parent_field}_id")

    def siblings(self, parent_id: int) -> models.QuerySet:
        return self.model.objects.filter(**{f"{self.parent_field}_id": parent_id}).order_by("order_index")

    def lock_parent(self, parent_id: int) -> models.Model:
        return self.parent_model.objects.select_for_update().get(pk=parent_id)


MODULES = Scope(model=Module, parent_model=Course, parent_field="course")
MATERIALS = Scope(model=Material, parent_model=Module, parent_field="module")


def next_index(scope: Scope, parent_id: int) -> int:
    """Append position for a new child of ``parent_id``."""
    return scope.siblings(parent_id).count()


def indices(scope: Scope, parent_id: int) -> list[int]:
    return list(scope.siblings(parent_id).values_list("order_index", flat=True))


def is_contiguous(scope: Scope, parent_id: int) -> bool:
    values = indices(scope, parent_id)
    return values == list(range(len(values)))


def compact(scope: Scope, parent_id: int) -> int:
    """Rewrite indices of ``parent_id``'s children to 0..n-1 keeping their order.

    After deleting the child at index k this decrements every sibling above k by one.
    Returns the number of rows rewritten.
    """
    rewritten = 0
    for position, (pk, current) in enumerate(scope.siblings(parent_id).values_list("pk", "order_index")):
        if current != position:
            scope.model.objects.filter(pk=pk).update(order_index=position)
            rewritten += 1
    if rewritten:
        logger.debug("Compacted %s scope %s: %d rows", scope.model.__name__, parent_id, rewritten)
    return rewritten


@transaction.atomic
def move(scope: Scope, item: models.Model, direction: MoveDirection | str) -> models.Model:
    """Swap ``item`` with its neighbour in ``direction``; no-op at the boundary."""
    direction = MoveDirection(direction)
    parent_id = scope.parent_id_of(item)
    scope.lock_parent(parent_id)

    ordered = list(scope.siblings(parent_id).values_list("pk", flat=True))
    position = ordered.index(item.pk)
    target = position - 1 if direction == MoveDirection.UP else position + 1
    if target < 0 or target >= len(ordered):
        item.refresh_from_db()
        return item

    neighbour_pk = ordered[target]
    parking_slot = len(ordered)
    scope.model.objects.filter(pk=item.pk).update(order_index=parking_slot)
    scope.model.objects.filter(pk=neighbour_pk).update(order_index=position)
    scope.model.objects.filter(pk=item.pk).update(order_index=target)
    logger.info(
        "Moved %s %s %s: %d -> %d",
        scope.model.__name__, item.pk, direction.label.lower(), position, target,
    )
    item.refresh_from_db()
    return item


def move_up(scope: Scope, item: models.Model) -> models.Model:
    return move(scope, item, MoveDirection.UP)


def move_down(scope: Scope, item: models.Model) -> models.Model:
    return move(scope, item, MoveDirection.DOWN)
