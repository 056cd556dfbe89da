import pytest
import math
from grabkit.core.handles import HandleKind
from grabkit.core.item import ItemMode, SceneItem
from grabkit.core.scene import Scene
from grabkit.core.transform import TransformState
from grabkit.engine.camera import OrthoCamera
from grabkit.engine.cursor import Cursor
from grabkit.engine.modifiers import Modifiers
from grabkit.engine.outcome import Outcome
from grabkit.engine.picking import PickResult
from grabkit.engine.session import begin, restore_all_handles

VIEW = "geometry"
PROPORTIONAL = Modifiers(proportional=True)
DISCRETIZE = Modifiers(discretize=True)


@pytest.fixture
def camera():
    return OrthoCamera(800, 800)


def make_item(aspect_ratio=1.0, **transform):
    return SceneItem(
        "photo", aspect_ratio=aspect_ratio,
        transform=TransformState(**transform),
    )


def start(camera, item, kind=None, local=(0.0, 0.0), at=(0.0, 0.0),
          selection_size=1):
    """Begins a drag of `item` at scene point `at`."""
    if kind is None:
        node = item.locker
    else:
        node = item.handles_for(VIEW)[kind].ref
    pick = PickResult(item, node, local, Outcome.OK)
    return begin(pick, camera.project(at), camera, VIEW, selection_size)


def drag(session, camera, to, modifiers=Modifiers()):
    return session.update(camera.project(to), modifiers)


def corner_in_scene(item, corner):
    x, y = corner
    return item.transform.matrix().transform_point(
        (x * item.aspect_ratio, y)
    )


class TestBegin:
    def test_empty_pick_gives_ended_session(self, camera):
        session = begin(PickResult.empty(), (0, 0), camera)
        assert session.ended
        grab = session.update((10, 10))
        assert grab.cursor is Cursor.ARROW
        assert grab.info == ""
        assert grab.outcome is Outcome.NO_TARGET
        assert session.end() is None

    def test_handle_hides_others_and_marks_corner(self, camera):
        item = make_item()
        session = start(camera, item, HandleKind.RESIZE, local=(0.9, 1.1))
        handles = item.handles_for(VIEW)
        assert session.corner == (1.0, 1.0)
        assert session.active_handle is HandleKind.RESIZE
        assert [h.kind for h in handles.visible_handles()] == [
            HandleKind.RESIZE
        ]
        assert handles[HandleKind.RESIZE].active_corner == (-1.0, -1.0)

    def test_plain_drag_hides_nothing(self, camera):
        item = make_item()
        session = start(camera, item)
        assert session.active_handle is None
        assert all(h.visible for h in item.handles_for(VIEW))

    def test_multi_selection_is_suppressed(self, camera):
        item = make_item(translation=(1, 1, 0))
        session = start(camera, item, HandleKind.SCALE, selection_size=2)
        assert session.suppressed
        assert item.mode is ItemMode.SELECTED
        assert all(h.visible for h in item.handles_for(VIEW))

        grab = drag(session, camera, (3, 3))
        assert grab.outcome is Outcome.MULTI_SELECTION_SUPPRESSED
        assert grab.cursor is Cursor.ARROW
        assert grab.info == ""
        assert item.transform == TransformState(translation=(1, 1, 0))
        assert session.end() is None
        assert item.mode is ItemMode.NORMAL


class TestEnd:
    def test_end_restores_handles_and_is_idempotent(self, camera):
        item = make_item()
        session = start(camera, item, HandleKind.RESIZE_H, local=(1, 0),
                        at=(1, 0))
        drag(session, camera, (3, 0))
        action = session.end()
        assert action == "photo: Size 2.000 x 1.000"
        handles = item.handles_for(VIEW)
        assert all(h.visible for h in handles)
        assert handles[HandleKind.RESIZE_H].active_corner == (0.0, 0.0)
        assert session.end() is None
        assert drag(session, camera, (3, 0)).info == ""

    def test_end_without_update_has_no_action(self, camera):
        session = start(camera, make_item())
        assert session.end() is None

    def test_restore_all_handles(self):
        scene = Scene()
        items = [scene.add(make_item()) for _ in range(2)]
        for item in items:
            item.handles_for(VIEW).hide_all_but(HandleKind.MENU)
        restore_all_handles(scene, VIEW)
        assert all(
            h.visible for item in items for h in item.handles_for(VIEW)
        )


class TestNonDrift:
    @pytest.mark.parametrize("kind, local", [
        (None, (0, 0)),
        (HandleKind.RESIZE, (1, 1)),
        (HandleKind.RESIZE_V, (0, -1)),
        (HandleKind.SCALE, (1.2, -1.2)),
        (HandleKind.CROP, (-1.2, -1.2)),
        (HandleKind.ROTATE, (1.2, 1.2)),
    ])
    def test_result_depends_only_on_current_point(self, camera, kind, local):
        item = make_item(1.5, translation=(0.5, -0.5, 0), rotation_z=0.3,
                         scale=(1.2, 0.8, 1), crop=(0.8, 0.9))
        origin = corner_in_scene(item, local)
        session = start(camera, item, kind, local=local, at=origin)

        drag(session, camera, (1.7, 0.4))
        first = item.transform.copy()
        drag(session, camera, (-2.0, 2.5))
        drag(session, camera, (0.3, 3.3))
        drag(session, camera, (1.7, 0.4))
        assert item.transform.isclose(first, abs_tol=1e-6)

        drag(session, camera, origin)
        assert item.transform.isclose(session.snapshot, abs_tol=1e-6)

    def test_snapshot_is_not_mutated(self, camera):
        item = make_item(translation=(1, 2, 0))
        session = start(camera, item)
        drag(session, camera, (3, 3))
        assert session.snapshot == TransformState(translation=(1, 2, 0))
        assert item.transform.translation == pytest.approx((4, 5, 0))


class TestResize:
    def test_proportional_resize_scenario(self, camera):
        item = make_item(scale=(2, 1, 1))
        session = start(camera, item, HandleKind.RESIZE, local=(1, 1),
                        at=(2, 1))
        grab = drag(session, camera, (6, 3), PROPORTIONAL)
        assert item.transform.scale == pytest.approx((4, 2, 1))
        assert item.transform.translation == pytest.approx((2, 1, 0))
        assert grab.info == "Size 4.000 x 2.000"
        assert grab.cursor is Cursor.RESIZE_NESW
        assert session.action == "photo: Size 4.000 x 2.000"

    @pytest.mark.parametrize("corner", [(1, 1), (-1, 1), (1, -1), (-1, -1)])
    def test_opposite_corner_stays_in_place(self, camera, corner):
        item = make_item(2.0, translation=(1, -1, 0), rotation_z=0.3,
                         scale=(1.5, 0.8, 1))
        opposite = (-corner[0], -corner[1])
        anchor = corner_in_scene(item, opposite)
        start_point = corner_in_scene(item, corner)
        session = start(camera, item, HandleKind.RESIZE, local=corner,
                        at=start_point)
        for target in [(3.1, 2.2), (-0.5, 0.7), (4.0, -3.0)]:
            drag(session, camera, target)
            assert corner_in_scene(item, opposite) == pytest.approx(
                anchor, abs=1e-6
            )

    def test_proportional_keeps_aspect(self, camera):
        item = make_item(1.5, rotation_z=-0.7, scale=(1.2, 0.6, 1))
        session = start(camera, item, HandleKind.RESIZE, local=(-1, 1),
                        at=corner_in_scene(item, (-1, 1)))
        for target in [(-4, 1), (-1, 3), (0.5, 0.5)]:
            drag(session, camera, target, PROPORTIONAL)
            sx, sy, _sz = item.transform.scale
            assert sx / sy == pytest.approx(2.0)

    def test_discretize_snaps_width(self, camera):
        item = make_item(scale=(1, 1, 1))
        session = start(camera, item, HandleKind.RESIZE, local=(1, 1),
                        at=(1, 1))
        drag(session, camera, (2.234, 1.7), DISCRETIZE)
        sx, sy, _sz = item.transform.scale
        # corner frame ratios are (3.234/2, 2.7/2)
        assert sx == pytest.approx(1.6)
        assert sy == pytest.approx(1.35 * 1.6 / 1.617)

    def test_cursor_follows_flip(self, camera):
        item = make_item(scale=(-1, 1, 1))
        session = start(camera, item, HandleKind.RESIZE, local=(1, 1),
                        at=corner_in_scene(item, (1, 1)))
        grab = drag(session, camera, (-2, 2))
        assert grab.cursor is Cursor.RESIZE_NWSE


class TestResizeAxis:
    def test_horizontal_resize_keeps_opposite_edge(self, camera):
        item = make_item()
        session = start(camera, item, HandleKind.RESIZE_H, local=(1, 0),
                        at=(1, 0))
        grab = drag(session, camera, (3, 0.5))
        assert item.transform.scale == pytest.approx((2, 1, 1))
        assert item.transform.translation == pytest.approx((1, 0, 0))
        assert grab.cursor is Cursor.RESIZE_EW
        assert grab.info == "Size 2.000 x 1.000"

    def test_proportional_restores_aspect_of_snapshot(self, camera):
        item = make_item(scale=(-1.5, 0.5, 1))
        session = start(camera, item, HandleKind.RESIZE_H, local=(1, 0),
                        at=corner_in_scene(item, (1, 0)))
        drag(session, camera, (3, 3), PROPORTIONAL)
        assert item.transform.scale == pytest.approx((-0.5, 0.5, 1))

    def test_vertical_resize_on_rotated_item(self, camera):
        item = make_item(rotation_z=math.pi / 2)
        start_point = corner_in_scene(item, (0, 1))
        session = start(camera, item, HandleKind.RESIZE_V, local=(0, 1),
                        at=start_point)
        grab = drag(session, camera, (-3, 0))
        assert item.transform.scale == pytest.approx((1, 2, 1))
        assert grab.cursor is Cursor.RESIZE_EW

    def test_discretize_snaps_active_axis_only(self, camera):
        item = make_item(scale=(1, 0.77, 1))
        session = start(camera, item, HandleKind.RESIZE_V, local=(0, 1),
                        at=corner_in_scene(item, (0, 1)))
        drag(session, camera, (0.4, 1.2), DISCRETIZE)
        sx, sy, _sz = item.transform.scale
        assert sx == pytest.approx(1.0)
        assert sy == pytest.approx(1.0)

    def test_discretize_snaps_width_only(self, camera):
        item = make_item(1.7, rotation_z=0.9, scale=(0.73, 1.3, 1))
        start_point = corner_in_scene(item, (1, 0))
        target = corner_in_scene(item, (1.5, 0.3))
        session = start(camera, item, HandleKind.RESIZE_H, local=(1, 0),
                        at=start_point)
        drag(session, camera, target, DISCRETIZE)
        sx, sy, _sz = item.transform.scale
        # Raw width factor is 2.5 / 2 in the corner frame.
        assert sx == pytest.approx(0.9)
        assert sx / 0.1 == pytest.approx(round(sx / 0.1))
        assert sy == pytest.approx(1.3)

class TestScale:
    def test_scale_is_relative_to_center(self, camera):
        item = make_item(translation=(1, 1, 0))
        session = start(camera, item, HandleKind.SCALE, local=(1.2, -1.2),
                        at=(2, 0))
        grab = drag(session, camera, (4, 0.5))
        assert item.transform.scale == pytest.approx((3, 0.5, 1))
        assert item.transform.translation == pytest.approx((1, 1, 0))
        assert grab.cursor is Cursor.RESIZE_NWSE

    def test_discretize(self, camera):
        item = make_item()
        session = start(camera, item, HandleKind.SCALE, at=(1, -1))
        drag(session, camera, (1.234, -2.96), DISCRETIZE)
        assert item.transform.scale == pytest.approx((1.2, 3.0, 1))

    def test_proportional(self, camera):
        item = make_item(scale=(2, 1, 1))
        session = start(camera, item, HandleKind.SCALE, at=(2, -1))
        drag(session, camera, (6, -3), PROPORTIONAL)
        assert item.transform.scale == pytest.approx((6, 3, 1))

    def test_flipped_cursor(self, camera):
        item = make_item(scale=(-1, 1, 1))
        session = start(camera, item, HandleKind.SCALE, at=(-1, -1))
        assert drag(session, camera, (-2, -2)).cursor is Cursor.RESIZE_NESW

    def test_degenerate_transform_is_reported(self, camera):
        item = make_item(scale=(1e-7, 1e-7, 1), min_scale=1e-8)
        before = item.transform.copy()
        session = start(camera, item, HandleKind.SCALE, at=(1, 1))
        grab = drag(session, camera, (2, 2))
        assert grab.outcome is Outcome.DEGENERATE_TRANSFORM
        assert grab.cursor is Cursor.ARROW
        assert item.transform == before
        assert session.end() is None


class TestCrop:
    def test_crop_scenario(self, camera):
        item = make_item()
        session = start(camera, item, HandleKind.CROP, local=(-1.2, -1.2),
                        at=(2, 2))
        grab = drag(session, camera, (0.1, 0.6))
        assert item.transform.crop == pytest.approx((0.1, 0.3))
        assert item.transform.scale == pytest.approx((0.1, 0.3, 1))
        assert grab.info == "Crop 0.100 x 0.300"
        assert grab.cursor is Cursor.RESIZE_NESW

    @pytest.mark.parametrize("target", [
        (5, 5), (0.01, 0.01), (-3, 2), (0, 0), (4, -0.2)
    ])
    def test_crop_stays_in_bounds(self, camera, target):
        item = make_item(crop=(0.5, 0.5))
        session = start(camera, item, HandleKind.CROP, at=(1, 1))
        drag(session, camera, target)
        for value in item.transform.crop:
            assert 0.1 <= value <= 1.0

    def test_discretize(self, camera):
        item = make_item(crop=(0.5, 0.5), scale=(0.5, 0.5, 1))
        session = start(camera, item, HandleKind.CROP, at=(1, 1))
        drag(session, camera, (0.86, 1.56), DISCRETIZE)
        assert item.transform.crop == pytest.approx((0.4, 0.8))
        assert item.transform.scale == pytest.approx((0.4, 0.8, 1))


class TestRotate:
    def test_rotation_with_scaling(self, camera):
        item = make_item(translation=(1, 0, 0))
        session = start(camera, item, HandleKind.ROTATE, at=(2, 0))
        grab = drag(session, camera, (1, 2))
        assert item.transform.rotation_z == pytest.approx(math.pi / 2)
        assert item.transform.scale == pytest.approx((2, 2, 1))
        assert grab.cursor is Cursor.HAND
        assert grab.info == "Angle 90.0°\n   Size 2.000 x 2.000"

    def test_proportional_rotates_only(self, camera):
        item = make_item(translation=(1, 0, 0))
        session = start(camera, item, HandleKind.ROTATE, at=(2, 0))
        grab = drag(session, camera, (1, 2), PROPORTIONAL)
        assert item.transform.rotation_z == pytest.approx(math.pi / 2)
        assert item.transform.scale == pytest.approx((1, 1, 1))
        assert grab.info == "Angle 90.0°"

    def test_discretize_snaps_to_ten_degrees(self, camera):
        item = make_item(rotation_z=math.radians(5))
        session = start(camera, item, HandleKind.ROTATE, at=(1, 0))
        a = math.radians(32)
        grab = drag(session, camera, (math.cos(a), math.sin(a)),
                    Modifiers(proportional=True, discretize=True))
        assert math.degrees(item.transform.rotation_z) == pytest.approx(30)
        assert grab.info == "Angle 30°"


class TestTranslate:
    def test_plain_drag(self, camera):
        item = make_item(translation=(0.5, 0.5, 0))
        session = start(camera, item, at=(0.5, 0.5))
        grab = drag(session, camera, (1.5, 2.5))
        assert item.transform.translation == pytest.approx((1.5, 2.5, 0))
        assert grab.cursor is Cursor.RESIZE_ALL
        assert grab.info == "Position 1.500, 2.500"

    def test_discretize(self, camera):
        item = make_item()
        session = start(camera, item)
        drag(session, camera, (1.234, -0.77), DISCRETIZE)
        assert item.transform.translation == pytest.approx((1.2, -0.8, 0))

    def test_single_axis_lock(self, camera):
        item = make_item(translation=(1, 1, 0))
        session = start(camera, item, at=(1, 1))

        grab = drag(session, camera, (4, 2), PROPORTIONAL)
        assert item.transform.translation == pytest.approx((4, 1, 0))
        assert grab.cursor is Cursor.RESIZE_EW

        grab = drag(session, camera, (2, -2), PROPORTIONAL)
        assert item.transform.translation == pytest.approx((1, -2, 0))
        assert grab.cursor is Cursor.RESIZE_NS

    def test_transform_changed_is_sent(self, camera):
        item = make_item()
        calls = []
        item.transform_changed.connect(
            lambda sender: calls.append(sender), weak=False
        )
        session = start(camera, item)
        drag(session, camera, (1, 0))
        assert calls == [item]
