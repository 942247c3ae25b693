"""Global configuration: constants shared by the viewport, graph and storage layers."""

# Zoom limits applied on every viewport mutation
MIN_SCALE = 0.1
MAX_SCALE = 10.0

# Wheel zoom speed, and the step used by the toolbar zoom buttons
ZOOM_SENSITIVITY = 0.001
ZOOM_STEP = 0.2

# Pointer button index of the middle mouse button
MIDDLE_BUTTON = 1

# Rounding applied to percentage coordinates and computed distances
PERCENT_DECIMALS = 2
DISTANCE_DECIMALS = 2

# Defaults for a freshly created FloorPlan
DEFAULT_FLOOR_NAME = "Ground floor"
DEFAULT_FLOOR_LEVEL = 0
DEFAULT_PROJECT_NAME = "Untitled Project"

# Structured-tier keys
PROJECTS_KEY = "floor_map_projects"
FLOOR_DATA_PREFIX = "floor_map_data_"
TRANSFORM_PREFIX = "floor_map_transform_"

# Blob-tier table holding one image per project
IMAGE_TABLE = "images"


def floor_data_key(project_id: str) -> str:
    return f"{FLOOR_DATA_PREFIX}{project_id}"


def transform_key(project_id: str) -> str:
    return f"{TRANSFORM_PREFIX}{project_id}"
