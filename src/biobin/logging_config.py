import logging
import os
from typing import Optional

def configure_logging(level: Optional[str] = None) -> int:
    """Set up root logging for the service. ``LOG_LEVEL`` picks the level when none is given."""
    name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    resolved = getattr(logging, name, logging.INFO)
    logging.basicConfig(
        level=resolved,
        format='[%(asctime)s] [%(process)d] [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.getLogger('biobin').setLevel(resolved)
    # every backend request is already logged by the gateway
    logging.getLogger('urllib3').setLevel(max(logging.WARNING, resolved))
    # uvicorn's server and access lines go out through the root handler and format
    for uv_name in ('uvicorn', 'uvicorn.access'):
        uv = logging.getLogger(uv_name)
        uv.handlers = []
        uv.propagate = True
    return resolved
