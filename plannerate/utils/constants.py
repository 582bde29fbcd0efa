"""System-wide constants"""

# Hole grid / distribution
MIN_BASE_HEIGHT = 0  # lowest hole a distributed shelf may use

# Default fixture geometry (fixture units, cm)
DEFAULT_BASE_HEIGHT = 17.0
DEFAULT_HOLE_SPACING = 25.0
DEFAULT_THICKNESS = 25.0
DEFAULT_SCALE_FACTOR = 1.0

# Shelf defaults
DEFAULT_SHELF_HEIGHT = 4.0
DEFAULT_SHELF_DEPTH = 40.0
DEFAULT_SHELF_GAP = 40.0  # auto position step when no position is given

# Interaction
SHELF_DIRECTIONS = ('top', 'bottom')
POSITION_NOISE_THRESHOLD = 1.0  # units of movement ignored on release
SNAP_DELAY_SECONDS = 0.2
DRAG_LEAVE_DELAY_SECONDS = 0.05
PRIMARY_BUTTON = 0
NOTIFICATION_DURATION_SECONDS = 3.0
POSITION_TOLERANCE = 1e-6  # float slack when comparing positions against the hole pitch

# Segment defaults for product drops
NEW_SEGMENT_QUANTITY = 1
NEW_SEGMENT_SPACING = 0.0

# Messages
SHELF_FULL_MESSAGE = "The maximum number of products for this layer has been reached."
