"""
Fixed filtering and export rules.

These are build-time constants, not runtime configuration. Pass a
FilterConfig to the pipeline to substitute them.
"""

INCLUDED_CATEGORIES = ("Pet", "House Floor", "House Wallpaper", "House", "NPC Skin")
EXCLUDED_NAME_TERMS = ("Quest", "DONT", "Don't", "Bug")

ID_COLUMN = "Item ID"
NAME_COLUMN = "Name"
CATEGORY_COLUMN = "Category"

AGGREGATE_FILENAME = "allitems.json"
DEFAULT_OUTPUT_DIR = "output"
JSON_INDENT = 2

# bytes inspected by charset-normalizer when no encoding is given
ENCODING_SAMPLE_SIZE = 64 * 1024
FALLBACK_ENCODING = "utf-8-sig"
