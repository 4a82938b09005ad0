import math

import numpy as np
import pytest

from field_vision.errors import InvalidSensorArity
from field_vision.fv_types import CalibrationParams, Estimate
from field_vision.kinematics import HEAD_PITCH, HEAD_YAW, NUM_JOINTS, NUM_SENSORS
from field_vision.pose import PoseModel


def _joints(**angles):
    j = [0.0] * NUM_JOINTS
    if "pitch" in angles:
        j[HEAD_PITCH] = angles["pitch"]
    if "yaw" in angles:
        j[HEAD_YAW] = angles["yaw"]
    return j


def test_short_sensor_vector_is_zero_filled(config):
    pose = PoseModel(config)
    state = pose.update_sensors(_joints(), [0.1, 0.2])

    assert len(state.sensors) == NUM_SENSORS
    assert state.sensors[:2] == (0.1, 0.2)
    assert all(v == 0.0 for v in state.sensors[2:])


def test_wrong_arity_leaves_state_untouched(config, looking_down_pose, zero_sensors):
    before = looking_down_pose.state

    with pytest.raises(InvalidSensorArity):
        looking_down_pose.update_sensors([0.0] * (NUM_JOINTS - 1), zero_sensors)
    with pytest.raises(InvalidSensorArity):
        looking_down_pose.update_sensors(_joints(), [0.0] * (NUM_SENSORS + 1))

    assert looking_down_pose.state == before


def test_level_camera_horizon_crosses_image_center(config, zero_sensors):
    pose = PoseModel(config)
    pose.update_sensors(_joints(), zero_sensors)

    h = pose.horizon()

    assert h.left[0] == 0 and h.right[0] == config.image_width - 1
    assert h.left[1] in (119, 120)
    assert h.right[1] == h.left[1]
    assert h.vision_horizon == h.left[1]


def test_pitched_down_horizon_leaves_image(looking_down_pose):
    h = looking_down_pose.horizon()
    assert h.left[1] < 0
    assert h.vision_horizon == 0


def test_pitched_up_horizon_clamps_to_image_height(config, zero_sensors):
    pose = PoseModel(config)
    pose.update_sensors(_joints(pitch=-0.6), zero_sensors)
    assert pose.horizon().vision_horizon == config.image_height


def test_pixel_above_horizon_yields_null_estimate(config, zero_sensors):
    pose = PoseModel(config)
    pose.update_sensors(_joints(), zero_sensors)

    est = pose.pixel_to_estimate(160, 10)

    assert est == Estimate.null()
    assert not est.valid


def test_object_plane_above_camera_yields_null_estimate(looking_down_pose):
    assert not looking_down_pose.pixel_to_estimate(160, 200, object_height=1000.0).valid


def test_estimate_below_center_is_straight_ahead(config, zero_sensors):
    pose = PoseModel(config)
    pose.update_sensors(_joints(pitch=0.4), zero_sensors)

    est = pose.pixel_to_estimate(pose.cx, 200)

    assert est.valid
    assert est.x > 0
    assert est.y == pytest.approx(0.0, abs=1e-6)
    assert est.bearing == pytest.approx(0.0, abs=1e-6)
    assert est.elevation < 0


@pytest.mark.parametrize("point", [(150.0, 30.0, 0.0), (90.0, -40.0, 0.0), (120.0, -10.0, 4.0)])
def test_projection_and_inverse_projection_agree(config, zero_sensors, point):
    pose = PoseModel(config)
    pose.update_sensors(_joints(pitch=0.4, yaw=0.1), zero_sensors)

    pixel = pose.project(point)
    assert pixel is not None

    est = pose.pixel_to_estimate(pixel[0], pixel[1], object_height=point[2])
    assert est.valid
    assert est.x == pytest.approx(point[0], abs=1e-6)
    assert est.y == pytest.approx(point[1], abs=1e-6)
    assert est.distance == pytest.approx(math.hypot(point[0], point[1]), abs=1e-6)
    assert est.bearing == pytest.approx(math.atan2(point[1], point[0]), abs=1e-9)


def test_point_behind_camera_does_not_project(looking_down_pose):
    assert looking_down_pose.project((-100.0, 0.0, 0.0)) is None


def test_calibration_head_pitch_matches_joint_pitch(config, zero_sensors):
    by_joint = PoseModel(config)
    by_joint.update_sensors(_joints(pitch=0.3), zero_sensors)

    calibration = CalibrationParams(head_pitch=0.3)
    by_calib = PoseModel(config, calibration)
    by_calib.update_sensors(_joints(), zero_sensors)

    assert by_calib.horizon() == by_joint.horizon()
    assert np.allclose(by_calib.camera_to_robot, by_joint.camera_to_robot)


def test_set_calibration_round_trips_nine_values(config):
    pose = PoseModel(config)
    values = [0.01, 0.02, 0.03, 1.0, 2.0, 3.0, 0.04, 0.05, 0.5]

    pose.set_calibration(values)

    assert pose.calibration().as_list() == pytest.approx(values)
    with pytest.raises(ValueError):
        pose.set_calibration(values[:8])
    assert pose.calibration().as_list() == pytest.approx(values)


def test_camera_height_follows_leg_chain(config, zero_sensors):
    pose = PoseModel(config)
    pose.update_sensors(_joints(), zero_sensors)
    assert pose.camera_to_robot[2, 3] == pytest.approx(33.1 + 12.65 + 6.79)


def test_predict_visual_lines_is_restartable(config, looking_down_pose):
    lines = looking_down_pose.predict_visual_lines(500.0, 270.0, 0.0)

    assert lines
    for line in lines:
        assert line.start == line.points[0]
        assert line.end == line.points[-1]
        for p in line.points:
            assert 0 <= p.x < config.image_width
            assert 0 <= p.y < config.image_height
            assert p.line_width > 0

    looking_down_pose.predict_visual_lines(100.0, 100.0, 1.0)
    assert looking_down_pose.predict_visual_lines(500.0, 270.0, 0.0) == lines
