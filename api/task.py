# Worker entry point: `dramatiq api.task`
import logging

import api  # noqa: F401  configures the broker before any actor is declared
from db.config import settings

logging.basicConfig(
    format="%(levelname)s::%(asctime)s::%(pathname)s::%(lineno)d - %(message)s",
    datefmt="%d-%b-%y %H:%M:%S",
    level=settings.logging_level,
)

# import background actors
from analytics import tasks  # noqa: E402, F401
