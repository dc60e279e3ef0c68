# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They describe the swarm's fixed geometry, motion tuning and rendering
properties. Anything the user is expected to tweak lives in config.json.
"""
import math

# Visualization settings
FPS = 60
DEFAULT_WINDOW_SIZE = (1280, 800)
BACKGROUND_COLOR = (0, 0, 0)
WINDOW_TITLE = "Firefly Swarm"

# A curated palette of glow colors. Each firefly draws one at creation.
FIREFLY_PALETTE = [
    (255, 255, 51),   # Lemon
    (204, 255, 0),    # Lime
    (0, 255, 255),    # Cyan
    (255, 170, 0),    # Amber
    (0, 255, 204),    # Aqua
    (255, 102, 204),  # Pink
    (255, 255, 255),  # White
]

# --- Shape Generation ---
SHAPE_POINT_COUNT = 500
SHAPE_SCALE_RATIO = 0.35   # Fraction of min(width, height) used as the glyph scale.
SHAPE_JITTER = 0.01 * 2 * math.pi  # Max parameter jitter on the heart curve (radians).
ARROW_HEART_RATIO = 0.65   # Share of points spent on the heart in "arrow_heart".
SHAPE_LABELS = {
    "heart": "Heart",
    "arrow_heart": "Arrow Heart",
}
SCATTER_ID = "scatter"

# --- Population ---
SPAWN_EDGE_BUFFER = 150.0   # Pixels outside the viewport where new fireflies appear.
OFFSCREEN_MARGIN = 200.0    # Retiring fireflies are removed past this margin.
WRAP_BUFFER = 100.0         # Wandering fireflies wrap once this far outside.
GATHER_DELAY_MAX_MS = 5000.0
INITIAL_GATHER_DELAY_MAX_MS = 3000.0

# --- Motion Tuning ---
DOCK_DISTANCE = 10.0
WING_PHASE_STEP = 0.2
FLICKER_PHASE_STEP = 0.06
WANDER_RETARGET_CHANCE = 0.01
WANDER_RETARGET_SPREAD = 1.5
WANDER_TURN_SMOOTHING = 0.02
WANDER_WOBBLE_FREQ = 0.01
WANDER_WOBBLE_AMPLITUDE = 0.5
RETIRE_PUSH_BASE = 1.0      # Multiples of speed; >= 1 keeps radial velocity outward.
APPROACH_WOBBLE_FREQ = 0.003
APPROACH_WOBBLE_AMPLITUDE = 1.5
APPROACH_WOBBLE_RANGE = 300.0
APPROACH_VELOCITY_SMOOTHING = 0.04
DOCK_HOVER_RADIUS = 10.0
DOCK_HOVER_SPEED = 0.002
DOCK_RETARGET_CHANCE = 0.02
DOCK_TURN_SMOOTHING = 0.05

# --- Controller ---
SETTLE_DELAY_MS = 1500.0

# --- Star Field ---
DEFAULT_STAR_COUNT = 200
STAR_MAX_RADIUS = 1.2
STAR_MIN_OPACITY = 0.1
STAR_MAX_OPACITY = 1.0
STAR_TWINKLE_MIN = 0.005
STAR_TWINKLE_SPREAD = 0.01

# --- Firefly Sprite ---
GLOW_MIN_RADIUS = 9
GLOW_FLICKER_RADIUS = 18
GLOW_SIZE_STEPS = 12        # Number of pre-rendered glow sizes per color.
GLOW_CORE_OFFSET = 4.5      # Tail offset of the glow from the body center.
CORE_DOT_RADIUS = 1.5
BODY_COLOR = (17, 17, 17)
BODY_RADII = (1.8, 3.75)
WING_COLOR = (255, 255, 255, 38)
WING_RADII = (4.2, 0.9)
WING_OFFSET = (2.25, -0.75)
WING_SPREAD_AMPLITUDE = 0.8
WING_REST_ANGLE = 0.3
ELLIPSE_SEGMENTS = 12

# --- HUD ---
HUD_TEXT_ALPHA = 90
HUD_BOTTOM_MARGIN = 40
