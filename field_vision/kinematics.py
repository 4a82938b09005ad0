"""Joint/sensor layout and body dimensions of the robot (lengths in cm)."""

import math
from typing import Sequence

# Joint order of the joint-angle vector.
JOINT_NAMES = (
    "HeadYaw",
    "HeadPitch",
    "LShoulderPitch",
    "LShoulderRoll",
    "LElbowYaw",
    "LElbowRoll",
    "LHipYawPitch",
    "LHipRoll",
    "LHipPitch",
    "LKneePitch",
    "LAnklePitch",
    "LAnkleRoll",
    "RHipYawPitch",
    "RHipRoll",
    "RHipPitch",
    "RKneePitch",
    "RAnklePitch",
    "RAnkleRoll",
    "RShoulderPitch",
    "RShoulderRoll",
    "RElbowYaw",
    "RElbowRoll",
)
NUM_JOINTS = len(JOINT_NAMES)

HEAD_YAW = 0
HEAD_PITCH = 1
L_HIP_PITCH = 8
L_KNEE_PITCH = 9
R_HIP_PITCH = 14
R_KNEE_PITCH = 15

# Canonical sensor vector. Older frame logs carry a prefix of this list.
SENSOR_NAMES = (
    "LFsrFL",
    "LFsrFR",
    "LFsrRL",
    "LFsrRR",
    "RFsrFL",
    "RFsrFR",
    "RFsrRL",
    "RFsrRR",
    "LFootBumperLeft",
    "LFootBumperRight",
    "RFootBumperLeft",
    "RFootBumperRight",
    "AccX",
    "AccY",
    "AccZ",
    "GyrX",
    "GyrY",
    "AngleX",
    "AngleY",
    "UltraSoundDistance",
    "UltraSoundMode",
    "BatteryCharge",
)
NUM_SENSORS = len(SENSOR_NAMES)

ANGLE_X = SENSOR_NAMES.index("AngleX")
ANGLE_Y = SENSOR_NAMES.index("AngleY")

THIGH_LENGTH = 10.0
TIBIA_LENGTH = 10.0
HIP_OFFSET_Z = 8.5
FOOT_HEIGHT = 4.6
NECK_OFFSET_Z = 12.65
CAMERA_OFFSET_X = 5.39
CAMERA_OFFSET_Z = 6.79
CAMERA_PITCH = 0.0  # top camera looks straight out of the head


def leg_extent(hip_pitch: float, knee_pitch: float) -> float:
    """Vertical hip-to-ankle distance of one leg in the sagittal plane."""
    return THIGH_LENGTH * math.cos(hip_pitch) + TIBIA_LENGTH * math.cos(hip_pitch + knee_pitch)


def torso_height(joints: Sequence[float]) -> float:
    """Torso origin height above the ground, standing on the longer leg."""
    left = leg_extent(joints[L_HIP_PITCH], joints[L_KNEE_PITCH])
    right = leg_extent(joints[R_HIP_PITCH], joints[R_KNEE_PITCH])
    return FOOT_HEIGHT + max(left, right) + HIP_OFFSET_Z
