"""Domain service functions for the module/material content tree.

Rules:
- Only the course owner, its tutor of record, or an admin mutate content.
- New children are appended at the end of their parent's sequence; callers never
  pass an order index.
- Deleting a child compacts its siblings in the same transaction.
- Stored files tied to deleted or replaced content are removed after commit.
"""
import logging
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import Prefetch

from CoursePlatformApp.core.access import can_manage_content, ensure
from CoursePlatformApp.core.choices import MaterialType, MoveDirection
from CoursePlatformApp.core.exceptions import ConflictError, NotFoundError, ValidationError
from CoursePlatformApp.core.storage import delete_files_on_commit, file_storage
from CoursePlatformApp.core.validators import validate_file_size, validate_material_mime
from CoursePlatformApp.courses.models import Course, Material, Module, User
from CoursePlatformApp.domain.services import ordering

logger = logging.getLogger(__name__)

MODULE_FIELDS = frozenset({"title", "description"})
MATERIAL_FIELDS = frozenset({"title", "description", "content", "file_url"})


def _get(model, pk: int, lock: bool = False, label: str | None = None):
    qs = model.objects.select_for_update() if lock else model.objects.all()
    try:
        return qs.get(pk=pk)
    except model.DoesNotExist:
        raise NotFoundError(f"{label or model.__name__} not found.") from None


def _check_fields(data: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}.")


@transaction.atomic
def create_module(actor: User, course_id: int, title: str, description: str = "") -> Module:
    """Append a module to the course.

    Args:
        actor: Owner, tutor of record, or admin.
        course_id: Parent course.
        title: Module title (required).
        description: Optional text.

    Returns:
        The created Module, placed after the existing modules.
    """
    course = _get(Course, course_id, lock=True, label="Course")
    ensure(can_manage_content(actor, course), "Not allowed to manage content of this course.")
    if not title:
        raise ValidationError("Module title is required.")
    try:
        module = Module.objects.create(
            course=course,
            title=title,
            description=description or "",
            order_index=ordering.next_index(ordering.MODULES, course.pk),
        )
    except IntegrityError:
        raise ConflictError("Module order changed concurrently; retry.") from None
    logger.info("Module %s created in course %s at index %d", module.pk, course.pk, module.order_index)
    return module


@transaction.atomic
def update_module(actor: User, module_id: int, data: dict[str, Any]) -> Module:
    module = _get(Module, module_id, lock=True)
    ensure(can_manage_content(actor, module.course), "Not allowed to manage content of this course.")
    _check_fields(data, MODULE_FIELDS)
    for field, value in data.items():
        setattr(module, field, value)
    module.save()
    return module


@transaction.atomic
def delete_module(actor: User, module_id: int) -> None:
    """Delete a module with its materials and close the gap in the course's sequence."""
    module = _get(Module, module_id)
    course = module.course
    ensure(can_manage_content(actor, course), "Not allowed to manage content of this course.")
    ordering.MODULES.lock_parent(course.pk)

    file_urls = list(module.materials.exclude(file_url="").values_list("file_url", flat=True))
    module.delete()
    ordering.compact(ordering.MODULES, course.pk)
    delete_files_on_commit(file_urls)
    logger.info("Module %s deleted from course %s by user %s", module_id, course.pk, actor.pk)


def _has_payload(file_obj: Any, file_url: str | None, content: str | None) -> bool:
    return bool(file_obj or file_url or content)


@transaction.atomic
def create_material(
    actor: User,
    module_id: int,
    type: MaterialType | str,
    payload: dict[str, Any],
) -> Material:
    """Append a material to the module.

    ``payload`` carries ``title`` and optionally ``description``, ``content``,
    ``file_url`` and an uploaded ``file``. Non-link materials need a file, a
    file URL, or inline content. An uploaded file is validated and stored; its
    URL becomes ``file_url``.

    Raises:
        ValidationError: Missing title or payload, or an invalid file.
    """
    try:
        material_type = MaterialType(type)
    except ValueError:
        raise ValidationError(f"Unknown material type: {type}.") from None

    module = _get(Module, module_id)
    ensure(can_manage_content(actor, module.course), "Not allowed to manage content of this course.")
    ordering.MATERIALS.lock_parent(module.pk)

    title = payload.get("title")
    if not title:
        raise ValidationError("Material title is required.")
    file_obj = payload.get("file")
    file_url = payload.get("file_url") or ""
    content = payload.get("content") or ""
    if material_type != MaterialType.LINK and not _has_payload(file_obj, file_url, content):
        raise ValidationError("A file, file URL, or inline content is required for this material type.")
    if material_type == MaterialType.LINK and not file_url:
        raise ValidationError("Link materials require a URL.")

    if file_obj:
        validate_file_size(file_obj)
        validate_material_mime(file_obj, material_type)
        file_url = file_storage.upload(file_obj, f"materials/{module.course_id}")

    try:
        with transaction.atomic():
            material = Material.objects.create(
                module=module,
                title=title,
                description=payload.get("description") or "",
                type=material_type,
                file_url=file_url,
                content=content,
                order_index=ordering.next_index(ordering.MATERIALS, module.pk),
            )
    except IntegrityError:
        if file_obj:
            file_storage.delete_quietly(file_url)
        raise ConflictError("Material order changed concurrently; retry.") from None
    logger.info("Material %s (%s) created in module %s", material.pk, material_type, module.pk)
    return material


@transaction.atomic
def update_material(actor: User, material_id: int, data: dict[str, Any]) -> Material:
    """Update title, description, content or file URL of a material.

    A replaced stored file is deleted after commit.
    """
    material = _get(Material, material_id, lock=True)
    ensure(can_manage_content(actor, material.module.course), "Not allowed to manage content of this course.")
    _check_fields(data, MATERIAL_FIELDS)

    old_url = material.file_url
    for field, value in data.items():
        setattr(material, field, value if value is not None else "")
    if material.type == MaterialType.LINK and not material.file_url:
        raise ValidationError("A link material requires a URL.")
    if material.type != MaterialType.LINK and not _has_payload(None, material.file_url, material.content):
        raise ValidationError("A file URL or inline content is required for this material type.")
    material.save()
    if old_url and old_url != material.file_url:
        delete_files_on_commit([old_url])
    return material


@transaction.atomic
def delete_material(actor: User, material_id: int) -> None:
    """Delete a material and close the gap in its module's sequence."""
    material = _get(Material, material_id)
    module_id = material.module_id
    ensure(can_manage_content(actor, material.module.course), "Not allowed to manage content of this course.")
    ordering.MATERIALS.lock_parent(module_id)

    file_url = material.file_url
    material.delete()
    ordering.compact(ordering.MATERIALS, module_id)
    delete_files_on_commit([file_url])
    logger.info("Material %s deleted from module %s by user %s", material_id, module_id, actor.pk)


@transaction.atomic
def move_module(actor: User, module_id: int, direction: MoveDirection | str) -> Module:
    module = _get(Module, module_id)
    ensure(can_manage_content(actor, module.course), "Not allowed to manage content of this course.")
    try:
        return ordering.move(ordering.MODULES, module, direction)
    except IntegrityError:
        raise ConflictError("Module order changed concurrently; retry.") from None


@transaction.atomic
def move_material(actor: User, material_id: int, direction: MoveDirection | str) -> Material:
    material = _get(Material, material_id)
    ensure(can_manage_content(actor, material.module.course), "Not allowed to manage content of this course.")
    try:
        return ordering.move(ordering.MATERIALS, material, direction)
    except IntegrityError:
        raise ConflictError("Material order changed concurrently; retry.") from None


def course_tree(course: Course):
    """Modules of ``course`` in order with their materials prefetched in order."""
    return course.modules.in_order().prefetch_related(
        Prefetch("materials", queryset=Material.objects.in_order())
    )

