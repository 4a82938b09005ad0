import numpy as np
import pytest

from field_vision.fv_types import ColorClass, LandmarkKind
from field_vision.strategies.landmarks import LandmarkDetector


@pytest.fixture
def detector():
    return LandmarkDetector()


def _post(classes, x, color=ColorClass.BLUE, top=40, bottom=120, width=6):
    classes[top:bottom, x:x + width] = color


def test_orange_blob_is_reported_as_ball(detector, field_map):
    classes = field_map()
    classes[50:60, 100:120] = ColorClass.ORANGE

    found = detector.detect(classes)

    assert list(found) == [LandmarkKind.BALL]
    ball = found[LandmarkKind.BALL]
    assert ball.left_top == (100, 50)
    assert ball.right_top == (120, 50)
    assert ball.left_bottom == (100, 60)
    assert ball.right_bottom == (120, 60)
    assert (ball.width, ball.height) == (20.0, 10.0)
    assert ball.center == (110.0, 55.0)
    assert ball.radius == 10.0


def test_undefined_map_yields_nothing(detector, field_map):
    assert detector.detect(field_map(ColorClass.UNDEFINED)) == {}


def test_largest_ball_candidate_wins(detector, field_map):
    classes = field_map()
    classes[10:14, 10:14] = ColorClass.ORANGE
    classes[100:120, 200:220] = ColorClass.ORANGE_RED

    ball = detector.find_ball(classes)

    assert ball.left_top == (200, 100)


def test_tiny_orange_speck_is_ignored(detector, field_map):
    classes = field_map()
    classes[10:12, 10:12] = ColorClass.ORANGE
    assert detector.find_ball(classes) is None


def test_two_posts_are_split_left_and_right(detector, field_map):
    classes = field_map()
    _post(classes, 250)
    _post(classes, 60)

    found = detector.detect(classes)

    assert set(found) == {LandmarkKind.BLUE_GOAL_LEFT_POST, LandmarkKind.BLUE_GOAL_RIGHT_POST}
    assert found[LandmarkKind.BLUE_GOAL_LEFT_POST].left_top == (60, 40)
    assert found[LandmarkKind.BLUE_GOAL_RIGHT_POST].left_top == (250, 40)
    assert found[LandmarkKind.BLUE_GOAL_LEFT_POST].height == 80.0


def test_lone_post_without_crossbar_collapses_to_generic(detector, field_map):
    classes = field_map()
    _post(classes, 150, color=ColorClass.YELLOW)

    found = detector.detect(classes)

    assert set(found) == {LandmarkKind.YELLOW_GOAL_POST}
    assert LandmarkKind.YELLOW_GOAL_LEFT_POST not in found
    assert LandmarkKind.YELLOW_GOAL_RIGHT_POST not in found


def test_crossbar_decides_side_of_lone_post(detector, field_map):
    classes = field_map()
    _post(classes, 60)
    classes[40:44, 60:200] = ColorClass.BLUE

    found = detector.detect(classes)

    assert set(found) == {LandmarkKind.BLUE_GOAL_LEFT_POST, LandmarkKind.BLUE_CROSSBAR}
    bar = found[LandmarkKind.BLUE_CROSSBAR]
    assert bar.left_top[1] == 40
    assert bar.height == 4.0
    assert bar.right_top[0] == 200


def test_crossbar_left_of_post_makes_right_post(detector, field_map):
    classes = field_map()
    _post(classes, 250, color=ColorClass.YELLOW)
    classes[40:44, 100:256] = ColorClass.YELLOW

    found = detector.detect(classes)

    assert LandmarkKind.YELLOW_GOAL_RIGHT_POST in found
    assert LandmarkKind.YELLOW_CROSSBAR in found


def test_center_cross_on_green(detector, field_map):
    classes = field_map()
    classes[176:185, 159:162] = ColorClass.WHITE
    classes[179:182, 156:165] = ColorClass.WHITE

    found = detector.detect(classes)

    assert set(found) == {LandmarkKind.CENTER_CROSS}
    cross = found[LandmarkKind.CENTER_CROSS]
    assert cross.left_top == (156, 176)
    assert (cross.width, cross.height) == (9.0, 9.0)


def test_white_square_is_not_a_center_cross(detector, field_map):
    classes = field_map()
    classes[100:109, 100:109] = ColorClass.WHITE
    assert detector.find_center_cross(classes) is None


def test_detect_draws_boxes_on_debug_map(detector, field_map):
    classes = field_map()
    classes[50:60, 100:120] = ColorClass.ORANGE
    debug = np.zeros_like(classes)

    detector.detect(classes, debug)

    assert debug[50, 100] == ColorClass.RED
    assert debug[59, 119] == ColorClass.RED
    assert debug[55, 110] == 0
