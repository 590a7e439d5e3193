import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from CoursePlatformApp.core.choices import MaterialType, MoveDirection
from CoursePlatformApp.core.exceptions import AuthorizationError
from CoursePlatformApp.courses.models import Module
from CoursePlatformApp.domain.services import content_service, course_service, ordering

pytestmark = pytest.mark.django_db


def titles(course):
    return list(course.modules.in_order().values_list("title", flat=True))


@pytest.fixture
def three_modules(tutor, course):
    return [content_service.create_module(tutor, course.pk, name) for name in ("A", "B", "C")]


def test_modules_are_appended(course, three_modules):
    assert [m.order_index for m in three_modules] == [0, 1, 2]
    assert ordering.next_index(ordering.MODULES, course.pk) == 3


def test_move_swaps_with_neighbour(tutor, course, three_modules):
    b = content_service.move_module(tutor, three_modules[1].pk, MoveDirection.UP)
    assert b.order_index == 0
    assert titles(course) == ["B", "A", "C"]

    b = content_service.move_module(tutor, b.pk, MoveDirection.DOWN)
    assert b.order_index == 1
    assert titles(course) == ["A", "B", "C"]


def test_moves_at_boundaries_are_noops(tutor, course, three_modules):
    first, _, last = three_modules
    assert content_service.move_module(tutor, first.pk, MoveDirection.UP).order_index == 0
    assert content_service.move_module(tutor, last.pk, MoveDirection.DOWN).order_index == 2
    assert titles(course) == ["A", "B", "C"]


def test_engine_move_helpers(course, three_modules):
    a, b, c = three_modules
    assert ordering.move_down(ordering.MODULES, a).order_index == 1
    assert ordering.move_up(ordering.MODULES, c).order_index == 1
    assert titles(course) == ["B", "C", "A"]


def material_titles(module):
    return list(module.materials.in_order().values_list("title", flat=True))


@pytest.fixture
def module_with_materials(tutor, course):
    module = content_service.create_module(tutor, course.pk, "M")
    for title in ("x", "y", "z"):
        content_service.create_material(tutor, module.pk, MaterialType.DOCUMENT, {"title": title, "content": "."})
    return module


def test_material_moves_swap_within_module(tutor, module_with_materials):
    z = module_with_materials.materials.get(title="z")
    z = content_service.move_material(tutor, z.pk, MoveDirection.UP)
    assert z.order_index == 1
    assert material_titles(module_with_materials) == ["x", "z", "y"]

    x = module_with_materials.materials.get(title="x")
    assert content_service.move_material(tutor, x.pk, MoveDirection.UP).order_index == 0
    y = module_with_materials.materials.get(title="y")
    assert content_service.move_material(tutor, y.pk, MoveDirection.DOWN).order_index == 2
    assert material_titles(module_with_materials) == ["x", "z", "y"]


def test_material_move_endpoints(tutor, module_with_materials, login):
    client = login(tutor)
    x = module_with_materials.materials.get(title="x")
    resp = client.post(f"/api/v1/materials/{x.id}/move-down/")
    assert resp.status_code == 200
    assert resp.data["order_index"] == 1
    resp = client.post(f"/api/v1/materials/{x.id}/move-up/")
    assert resp.data["order_index"] == 0
    assert material_titles(module_with_materials) == ["x", "y", "z"]


def test_delete_compacts_following_siblings(tutor, course, three_modules):
    content_service.delete_module(tutor, three_modules[0].pk)
    assert list(course.modules.in_order().values_list("title", "order_index")) == [("B", 0), ("C", 1)]


def test_delete_material_compacts_module(tutor, course):
    module = content_service.create_module(tutor, course.pk, "M")
    materials = [
        content_service.create_material(tutor, module.pk, MaterialType.DOCUMENT, {"title": t, "content": "x"})
        for t in ("m0", "m1", "m2", "m3")
    ]
    content_service.delete_material(tutor, materials[1].pk)
    assert list(module.materials.in_order().values_list("title", "order_index")) == [
        ("m0", 0), ("m2", 1), ("m3", 2),
    ]


def test_materials_are_scoped_per_module(tutor, course):
    m1 = content_service.create_module(tutor, course.pk, "M1")
    m2 = content_service.create_module(tutor, course.pk, "M2")
    a = content_service.create_material(tutor, m1.pk, MaterialType.DOCUMENT, {"title": "a", "content": "x"})
    b = content_service.create_material(tutor, m2.pk, MaterialType.DOCUMENT, {"title": "b", "content": "x"})
    assert a.order_index == 0
    assert b.order_index == 0


def test_outsider_cannot_move(other_tutor, three_modules):
    with pytest.raises(AuthorizationError):
        content_service.move_module(other_tutor, three_modules[0].pk, MoveDirection.DOWN)


def test_compact_repairs_gaps(tutor, course, three_modules):
    Module.objects.filter(pk=three_modules[2].pk).update(order_index=7)
    assert not ordering.is_contiguous(ordering.MODULES, course.pk)
    assert ordering.compact(ordering.MODULES, course.pk) == 1
    assert ordering.indices(ordering.MODULES, course.pk) == [0, 1, 2]


operations = st.lists(
    st.tuples(st.sampled_from(["create", "delete", "up", "down"]), st.integers(min_value=0, max_value=9)),
    max_size=25,
)


@settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(ops=operations)
def test_indices_stay_a_permutation(tutor, ops):
    """Any sequence of create/delete/move keeps order_index equal to 0..count-1."""
    course = course_service.create_course(tutor, {"title": "Prop"})
    for op, pick in ops:
        modules = list(course.modules.in_order())
        if op == "create" or not modules:
            content_service.create_module(tutor, course.pk, f"m{pick}")
        else:
            target = modules[pick % len(modules)]
            if op == "delete":
                content_service.delete_module(tutor, target.pk)
            else:
                direction = MoveDirection.UP if op == "up" else MoveDirection.DOWN
                content_service.move_module(tutor, target.pk, direction)
        assert ordering.indices(ordering.MODULES, course.pk) == list(range(course.modules.count()))


@settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(ops=operations)
def test_material_indices_stay_a_permutation(tutor, course, ops):
    module = content_service.create_module(tutor, course.pk, "Prop")
    for op, pick in ops:
        materials = list(module.materials.in_order())
        if op == "create" or not materials:
            content_service.create_material(
                tutor, module.pk, MaterialType.DOCUMENT, {"title": f"m{pick}", "content": "."}
            )
        else:
            target = materials[pick % len(materials)]
            if op == "delete":
                content_service.delete_material(tutor, target.pk)
            else:
                direction = MoveDirection.UP if op == "up" else MoveDirection.DOWN
                content_service.move_material(tutor, target.pk, direction)
        assert ordering.indices(ordering.MATERIALS, module.pk) == list(range(module.materials.count()))
