"""Homogeneous transform utilities for the camera kinematic chain."""

import numpy as np
import cv2
from typing import Tuple


X_AXIS = (1.0, 0.0, 0.0)
Y_AXIS = (0.0, 1.0, 0.0)
Z_AXIS = (0.0, 0.0, 1.0)


def rvec_tvec_to_matrix(rvec: np.ndarray, tvec: np.ndarray) -> np.ndarray:
    """
    Convert rotation vector and translation vector to 4x4 transformation matrix.

    Args:
        rvec: Rotation vector (3,) or (3,1)
        tvec: Translation vector (3,) or (3,1)

    Returns:
        4x4 homogeneous transformation matrix
    """
    rvec = np.asarray(rvec, dtype=np.float64).reshape(3)
    tvec = np.asarray(tvec, dtype=np.float64).reshape(3)

    R, _ = cv2.Rodrigues(rvec)

    T = np.eye(4)
    T[:3, :3] = R
    T[:3, 3] = tvec

    return T


def rotation_about(axis: Tuple[float, float, float], angle: float) -> np.ndarray:
    """4x4 rotation by `angle` radians about a unit axis (right-handed)."""
    rvec = np.asarray(axis, dtype=np.float64) * float(angle)
    return rvec_tvec_to_matrix(rvec, np.zeros(3))


def translation(x: float, y: float, z: float) -> np.ndarray:
    T = np.eye(4)
    T[:3, 3] = (x, y, z)
    return T


def chain(*transforms: np.ndarray) -> np.ndarray:
    """Compose transforms left to right (parent first)."""
    T = np.eye(4)
    for step in transforms:
        T = T @ step
    return T


def invert_transform(T: np.ndarray) -> np.ndarray:
    """
    Invert a 4x4 homogeneous transformation matrix.

    For SE(3): T^-1 = [R^T, -R^T * t; 0, 1]
    """
    T_inv = np.eye(4)
    R = T[:3, :3]
    t = T[:3, 3]

    R_T = R.T
    T_inv[:3, :3] = R_T
    T_inv[:3, 3] = -R_T @ t

    return T_inv


def apply_transform(T: np.ndarray, point) -> np.ndarray:
    p = np.ones(4)
    p[:3] = np.asarray(point, dtype=np.float64).reshape(3)
    return (T @ p)[:3]
