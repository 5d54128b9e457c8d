GRID_ROWS = 6
GRID_COLS = 6

# Colors used when a caller does not supply a palette.
DEFAULT_PALETTE = ("red", "green", "yellow", "blue")

MIN_RUN_LENGTH = 3

# Upper bound on scrub passes over a generated matrix.
REROLL_PASSES = 8

DEFAULT_BLOCK_HEALTH = 5

# Grid layout defaults (pixels).
LAYOUT_COLS = 6
LAYOUT_CELL_WIDTH = 64
LAYOUT_CELL_HEIGHT = 64
LAYOUT_GAP_X = 8
LAYOUT_GAP_Y = 8
