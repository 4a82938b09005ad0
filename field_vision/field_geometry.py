"""
Static field layout, in centimeters on the carpet.

The origin is the carpet corner behind the blue goal on the right-hand side;
x runs along the field towards the yellow goal, y across it. A robot heading
of 0 faces +x.
"""

CARPET_LENGTH = 740.0
CARPET_WIDTH = 540.0
GREEN_PAD_X = 70.0
GREEN_PAD_Y = 70.0
FIELD_WHITE_LENGTH = 600.0
FIELD_WHITE_WIDTH = 400.0
LINE_WIDTH = 5.0

GOAL_BOX_DEPTH = 60.0
GOAL_BOX_WIDTH = 300.0

BLUE_GOAL_X = GREEN_PAD_X
YELLOW_GOAL_X = GREEN_PAD_X + FIELD_WHITE_LENGTH
MIDFIELD_X = CARPET_LENGTH / 2.0
MIDFIELD_Y = CARPET_WIDTH / 2.0

SIDELINE_NEAR_Y = GREEN_PAD_Y
SIDELINE_FAR_Y = GREEN_PAD_Y + FIELD_WHITE_WIDTH

_BOX_NEAR_Y = MIDFIELD_Y - GOAL_BOX_WIDTH / 2.0
_BOX_FAR_Y = MIDFIELD_Y + GOAL_BOX_WIDTH / 2.0
_BLUE_BOX_X = BLUE_GOAL_X + GOAL_BOX_DEPTH
_YELLOW_BOX_X = YELLOW_GOAL_X - GOAL_BOX_DEPTH

FIELD_LINES = (
    # sidelines
    ((BLUE_GOAL_X, SIDELINE_NEAR_Y), (YELLOW_GOAL_X, SIDELINE_NEAR_Y)),
    ((BLUE_GOAL_X, SIDELINE_FAR_Y), (YELLOW_GOAL_X, SIDELINE_FAR_Y)),
    # goal lines
    ((BLUE_GOAL_X, SIDELINE_NEAR_Y), (BLUE_GOAL_X, SIDELINE_FAR_Y)),
    ((YELLOW_GOAL_X, SIDELINE_NEAR_Y), (YELLOW_GOAL_X, SIDELINE_FAR_Y)),
    # midfield
    ((MIDFIELD_X, SIDELINE_NEAR_Y), (MIDFIELD_X, SIDELINE_FAR_Y)),
    # blue goal box
    ((_BLUE_BOX_X, _BOX_NEAR_Y), (_BLUE_BOX_X, _BOX_FAR_Y)),
    ((BLUE_GOAL_X, _BOX_NEAR_Y), (_BLUE_BOX_X, _BOX_NEAR_Y)),
    ((BLUE_GOAL_X, _BOX_FAR_Y), (_BLUE_BOX_X, _BOX_FAR_Y)),
    # yellow goal box
    ((_YELLOW_BOX_X, _BOX_NEAR_Y), (_YELLOW_BOX_X, _BOX_FAR_Y)),
    ((_YELLOW_BOX_X, _BOX_NEAR_Y), (YELLOW_GOAL_X, _BOX_NEAR_Y)),
    ((_YELLOW_BOX_X, _BOX_FAR_Y), (YELLOW_GOAL_X, _BOX_FAR_Y)),
)
