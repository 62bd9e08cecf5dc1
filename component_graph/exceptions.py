class GraphStateError(RuntimeError):
    """A persistence step was requested out of order."""


class GraphWriteError(Exception):
    """A single node or relationship could not be written."""
