import logging

from kupong.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | None = None):
    """Configure root logging once; repeated calls (Streamlit reruns) are no-ops."""
    root = logging.getLogger()
    if getattr(setup_logging, "_configured", False):
        return root
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
    setup_logging._configured = True
    return root
