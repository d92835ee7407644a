STANDARD_EXTENSIONS = {".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp", ".webp"}
HEIF_EXTENSIONS = {".heic", ".heif", ".hif"}
SUPPORTED_EXTENSIONS = STANDARD_EXTENSIONS | HEIF_EXTENSIONS

CANVAS_WIDTH = 900
CANVAS_HEIGHT = 1100
PHOTO_HEIGHT = 720

CATEGORY_TREE = "tree"
CATEGORY_FLOWER = "flower"
CATEGORY_FLOWER_BED = "flower-bed"
ASSET_CATEGORIES = (CATEGORY_TREE, CATEGORY_FLOWER, CATEGORY_FLOWER_BED)

GRAIN_MODE_CHROMATIC = "chromatic"
GRAIN_MODE_LUMINANCE = "luminance"
VALID_GRAIN_MODES = {GRAIN_MODE_CHROMATIC, GRAIN_MODE_LUMINANCE}

DATE_FORMAT = "%Y.%m.%d"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"
