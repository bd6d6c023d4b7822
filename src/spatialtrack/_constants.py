"""Internal constants shared across the library."""

# Code-fence style markers keep the block from being rendered as HTML in chat.
TAG_OPEN = "```spatial_json"
TAG_CLOSE = "```"

COORDINATE_LIMIT: float = 1000.0
DEFAULT_STATUS = "unknown"

#: Number of characters of an undecodable payload kept in diagnostics.
PREVIEW_CHARS = 100
