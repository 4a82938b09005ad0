import cv2

from ..fv_types import CalibrationParams


def load_calibration(path: str) -> CalibrationParams:
    fs = cv2.FileStorage(path, cv2.FILE_STORAGE_READ)
    if not fs.isOpened():
        raise FileNotFoundError(f"Calibration not found: {path}")
    values = []
    for name in CalibrationParams.FIELDS:
        node = fs.getNode(name)
        values.append(0.0 if node.empty() else float(node.real()))
    fs.release()
    return CalibrationParams.from_sequence(values)


def save_calibration(path: str, params: CalibrationParams) -> None:
    fs = cv2.FileStorage(path, cv2.FILE_STORAGE_WRITE)
    for name, value in zip(CalibrationParams.FIELDS, params.as_list()):
        fs.write(name, float(value))
    fs.release()
