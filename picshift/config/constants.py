"""Constants for Picshift."""

from pathlib import Path

from picshift import __version__

# Application constants
APP_NAME = "picshift"
APP_VERSION = __version__

# Configuration namespaces, read by name from the host
PLUGIN_NAME = "picshift"
LEGACY_PLUGIN_NAME = "picgo-plugin-sharp"
CODEC_CONFIG_NAME = "sharp"

# Name the transformer is registered under with an upload host
TRANSFORMER_NAME = "sharp"

# Applied when no output type is stored. The schema advertises a different
# default to the user; both values are intentional.
DEFAULT_OUTPUT_FORMAT = "webp"
SCHEMA_DEFAULT_OUTPUT_FORMAT = "avif"
OUTPUT_TYPE_LABEL = "压缩格式"

# Default paths
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_LOG_DIR = ".logs"
DEFAULT_CONFIG_FILE = "picshift.yaml"

# Config file locations (in order of priority)
CONFIG_LOCATIONS = [
    Path.cwd() / DEFAULT_CONFIG_FILE,
    Path.home() / ".config" / APP_NAME / "config.yaml",
]

# HTTP
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"{APP_NAME}/{APP_VERSION}"
