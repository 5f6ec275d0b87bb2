"""Default configuration values."""

from dom314.config.schema import GlobalConfig

DEFAULT_GLOBAL_CONFIG = GlobalConfig()

DEFAULT_CONFIG_CONTENT = """\
# dom314 configuration
version: "1"

# Logging level: DEBUG, INFO, WARNING, ERROR
log_level: WARNING

# Seconds a single feed fetch may take (null disables the limit)
fetch_timeout_seconds: 30.0

# Feeds fetched at the same time when opening a group
max_concurrent_feeds: 10

# What a group view does when a feed fails:
#   strict  - show an error instead of the episode list
#   partial - show the episodes that were fetched plus a warning
failure_policy: strict

# Show already listened episodes in group views
show_listened: false

player:
  command: mpv
  gui_args:
    - --force-window

# Per-backend settings, e.g.
# backends:
#   rss:
#     config:
#       timeout_seconds: 15
backends: {}
"""


def get_default_config_content() -> str:
    """Get default config.yaml content."""
    return DEFAULT_CONFIG_CONTENT
