import cv2
import numpy as np

from .fv_types import SceneResult

# BGR per ColorClass value
PALETTE = np.array(
    [
        (128, 128, 128),  # UNDEFINED
        (255, 255, 255),  # WHITE
        (0, 160, 0),  # GREEN
        (255, 80, 0),  # BLUE
        (0, 230, 255),  # YELLOW
        (0, 140, 255),  # ORANGE
        (180, 255, 255),  # YELLOW_WHITE
        (160, 160, 0),  # BLUE_GREEN
        (0, 60, 255),  # ORANGE_RED
        (0, 190, 255),  # ORANGE_YELLOW
        (0, 0, 255),  # RED
        (90, 0, 0),  # NAVY
    ],
    dtype=np.uint8,
)


def colorize(classified: np.ndarray) -> np.ndarray:
    return PALETTE[np.minimum(classified, len(PALETTE) - 1)]


def annotate(scene: SceneResult) -> np.ndarray:
    draw = colorize(scene.classified)

    h = scene.horizon
    cv2.line(draw, h.left, h.right, (255, 0, 255), 1, cv2.LINE_AA)

    for line in scene.lines:
        cv2.line(
            draw,
            (int(line.start.x), int(line.start.y)),
            (int(line.end.x), int(line.end.y)),
            (255, 0, 0),
            1,
        )
    for p in scene.unused_points:
        cv2.circle(draw, (int(p.x), int(p.y)), 1, (0, 0, 255), -1)
    for c in scene.corners:
        cv2.putText(
            draw,
            c.shape.name,
            (int(c.x) + 2, int(c.y) - 2),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.3,
            (0, 255, 255),
            1,
            cv2.LINE_AA,
        )

    for lm in scene.landmarks:
        cv2.rectangle(draw, lm.left_top, lm.right_bottom, (0, 0, 0), 1)
        cv2.putText(
            draw,
            lm.kind.name,
            (lm.left_top[0], max(8, lm.left_top[1] - 2)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.3,
            (0, 0, 0),
            1,
            cv2.LINE_AA,
        )

    txt = f"#{scene.frame_idx} {scene.process_time_us}us"
    cv2.putText(draw, txt, (4, 12), cv2.FONT_HERSHEY_SIMPLEX, 0.35, (255, 255, 255), 1, cv2.LINE_AA)
    return draw
