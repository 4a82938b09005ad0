import numpy as np
import pytest

from field_vision.errors import InvalidFrameSize, InvalidSensorArity, InvalidTableSize
from field_vision.factory import PipelineFactory
from field_vision.fv_types import ColorClass, Frame, Horizon, LandmarkKind


@pytest.fixture
def pipeline(config, table_buffer):
    p = PipelineFactory.from_config(config)
    p.reload_table(table_buffer)
    yield p
    p.close()


@pytest.fixture
def ball_scene(field_map):
    classes = field_map()
    classes[50:60, 100:120] = ColorClass.ORANGE
    return classes


def test_ball_frame(pipeline, make_frame, ball_scene, looking_down_joints, zero_sensors):
    result = pipeline.process_frame(make_frame(ball_scene, idx=7), looking_down_joints, zero_sensors)

    assert result.frame_idx == 7
    assert result.process_time_us >= 0
    assert np.array_equal(result.classified, ball_scene)
    assert isinstance(result.horizon, Horizon)
    assert result.ball is not None
    assert result.ball.center == (110.0, 55.0)
    assert result.ball.radius == 10.0
    assert result.field_objects == {}
    assert result.lines == []
    assert [lm.kind for lm in result.landmarks] == [LandmarkKind.BALL]


def test_ball_gets_ground_estimate(pipeline, make_frame, ball_scene, looking_down_joints, zero_sensors):
    result = pipeline.process_frame(make_frame(ball_scene), looking_down_joints, zero_sensors)

    est = result.ball.estimate
    assert est is not None and est.valid
    assert est.distance > 0
    # ball sits left of the image center
    assert est.bearing > 0


def test_undefined_frame_yields_empty_scene(pipeline, make_frame, field_map, looking_down_joints, zero_sensors):
    result = pipeline.process_frame(make_frame(field_map(ColorClass.UNDEFINED)), looking_down_joints, zero_sensors)

    assert result.ball is None
    assert result.field_objects == {}
    assert result.lines == []
    assert result.unused_points == []
    assert result.corners == []


def test_bad_frame_is_rejected_and_pipeline_keeps_working(
    pipeline, make_frame, ball_scene, looking_down_joints, zero_sensors
):
    with pytest.raises(InvalidFrameSize):
        pipeline.process_frame(Frame(1, b"\x00" * 10, 320, 240), looking_down_joints, zero_sensors)

    result = pipeline.process_frame(make_frame(ball_scene), looking_down_joints, zero_sensors)
    assert result.ball is not None


def test_bad_frame_leaves_pose_untouched(pipeline, make_frame, ball_scene, looking_down_joints, zero_sensors):
    pipeline.process_frame(make_frame(ball_scene), looking_down_joints, zero_sensors)
    before = pipeline.pose.state

    with pytest.raises(InvalidFrameSize):
        pipeline.process_frame(Frame(2, b"\x00" * 10, 320, 240), [0.0] * 22, zero_sensors)

    assert pipeline.pose.state is before
    assert pipeline.pose.state.joints == tuple(looking_down_joints)


def test_bad_joint_vector_is_rejected(pipeline, make_frame, ball_scene, zero_sensors):
    with pytest.raises(InvalidSensorArity):
        pipeline.process_frame(make_frame(ball_scene), [0.0] * 3, zero_sensors)


def test_failed_table_reload_keeps_old_table(pipeline, make_frame, ball_scene, looking_down_joints, zero_sensors):
    with pytest.raises(InvalidTableSize):
        pipeline.reload_table(bytes(100))

    result = pipeline.process_frame(make_frame(ball_scene), looking_down_joints, zero_sensors)
    assert result.ball is not None


def test_parallel_detection_matches_sequential(config, table_buffer, make_frame, field_map, looking_down_joints, zero_sensors):
    classes = field_map()
    classes[50:60, 100:120] = ColorClass.ORANGE
    classes[150:153, 40:200] = ColorClass.WHITE
    classes[60:153, 40:43] = ColorClass.WHITE
    frame = make_frame(classes)

    results = []
    for parallel in (False, True):
        config.parallel_detection = parallel
        config.debug_overlay = True
        p = PipelineFactory.from_config(config)
        p.reload_table(table_buffer)
        try:
            results.append(p.process_frame(frame, looking_down_joints, zero_sensors))
        finally:
            p.close()

    sequential, parallel = results
    assert parallel.ball == sequential.ball
    assert parallel.lines == sequential.lines
    assert parallel.corners == sequential.corners
    assert np.array_equal(parallel.debug, sequential.debug)


def test_odd_width_yuyv_config_is_rejected(config):
    config.image_width = 321
    with pytest.raises(InvalidFrameSize):
        PipelineFactory.from_config(config)


def test_set_calibration_moves_horizon(pipeline, make_frame, ball_scene, zero_sensors):
    joints = [0.0] * 22
    before = pipeline.process_frame(make_frame(ball_scene), joints, zero_sensors).horizon

    pipeline.set_calibration([0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.2, 0.0])
    after = pipeline.process_frame(make_frame(ball_scene), joints, zero_sensors).horizon

    assert pipeline.calibration().head_pitch == 0.2
    assert after.vision_horizon < before.vision_horizon


def test_results_do_not_share_buffers(pipeline, make_frame, ball_scene, field_map, looking_down_joints, zero_sensors):
    first = pipeline.process_frame(make_frame(ball_scene), looking_down_joints, zero_sensors)
    kept = first.classified.copy()

    pipeline.process_frame(make_frame(field_map(ColorClass.UNDEFINED)), looking_down_joints, zero_sensors)

    assert np.array_equal(first.classified, kept)
