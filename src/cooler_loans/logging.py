"""
The package logger. Modules log through `cooler_loans.logging.logger`; callers may adjust its level
or attach handlers without affecting the root logger.
"""

import logging

logger = logging.getLogger("cooler_loans")
logger.propagate = False
logger.setLevel(logging.INFO)

_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
logger.addHandler(_handler)
