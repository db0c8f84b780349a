"""callboard - scheduling core for audition and production calendars.

This package turns already-fetched casting records (auditions, slots, rehearsal
events, production events, personal events) into a single deduplicated calendar
and exports it as ICS or PDF. It intentionally keeps imports light so the
package can be inspected without pulling in the PDF/ICS libraries.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Install the colour console handler on the root logger and set its level.

    Unknown level names fall back to INFO. CALLBOARD_DEBUG forces DEBUG.
    """
    import logging

    from .logging_config import console_handler, debug_requested

    if debug_requested():
        level_name = "DEBUG"

    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(console_handler())

    level = getattr(logging, (level_name or "").upper(), None)
    root.setLevel(level if isinstance(level, int) else logging.INFO)
    logging.getLogger(__name__).debug("Logging initialized at level %s", logging.getLevelName(root.level))
