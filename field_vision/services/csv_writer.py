import csv
import io


class CsvWriter:
    HEADER = [
        "frame_idx", "process_time_us",
        "kind", "code",
        "left_top_x", "left_top_y",
        "right_bottom_x", "right_bottom_y",
        "width", "height",
        "center_x", "center_y", "radius",
        "distance", "bearing",
    ]

    def __init__(self, csv_path: str):
        self.csv_path = csv_path
        self._opened = False
        self._fh = None
        self._w = None

    def open(self):
        self._fh = open(self.csv_path, "w", newline="")
        self._w = csv.writer(self._fh)
        self._w.writerow(self.HEADER)
        self._opened = True

    @staticmethod
    def _row(frame_idx, process_time_us, landmark):
        nan = float("nan")
        cx, cy = landmark.center if landmark.center is not None else (nan, nan)
        est = landmark.estimate
        if est is not None and est.valid:
            dist, bearing = est.distance, est.bearing
        else:
            dist, bearing = nan, nan
        return [
            frame_idx, process_time_us,
            landmark.kind.name, landmark.code,
            *landmark.left_top,
            *landmark.right_bottom,
            landmark.width, landmark.height,
            cx, cy, landmark.radius,
            f"{dist:.2f}", f"{bearing:.4f}",
        ]

    def append(self, frame_idx, process_time_us, landmark):
        self._w.writerow(self._row(frame_idx, process_time_us, landmark))

    @classmethod
    def to_csv_line(cls, frame_idx, process_time_us, landmark):
        buf = io.StringIO()
        w = csv.writer(buf)
        w.writerow(cls._row(frame_idx, process_time_us, landmark))
        return buf.getvalue().strip()

    def close(self):
        if self._opened and self._fh:
            self._fh.close()
            self._opened = False
            self._fh = None
            self._w = None
