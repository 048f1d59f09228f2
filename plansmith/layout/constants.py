"""
Layout constants for the builder diagram.
All sizes are in diagram units (pixels at 100% zoom).
"""

# Task card
NODE_WIDTH = 220
NODE_HEIGHT = 90

# Drop zones between and around tasks
DROP_ZONE_HEIGHT = 24

# Vertical spacing between stacked items, horizontal spacing between lanes
VERTICAL_GAP = 12
LANE_GAP = 20

# Inner padding of a container (top leaves room for the container header)
CONTAINER_PADDING_X = 20
CONTAINER_PADDING_TOP = 50
CONTAINER_PADDING_BOTTOM = 20

# Start / end markers
START_END_WIDTH = 140
START_END_HEIGHT = 40

# Trailing "add lane" zone of a concurrent container
EMPTY_LANE_WIDTH = 50

# Marker between the main and cleanup phases
PHASE_DIVIDER_WIDTH = 220
PHASE_DIVIDER_HEIGHT = 48

# Named-slot lanes
SLOT_DIVIDER_WIDTH = 2
SLOT_LABEL_HEIGHT = 20
