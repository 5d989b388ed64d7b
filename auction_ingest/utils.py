# auction_ingest/utils.py
"""Shared logging setup and the retry decorator used by the HTTP clients."""
import os
import logging
import time
from functools import wraps
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("auction-ingest")

def retry(exceptions, tries=3, delay=1, backoff=1, logger=logger):
    """Call the wrapped function up to `tries` times while it raises `exceptions`.

    The last attempt is made outside the handler so its exception reaches the caller.
    """
    def deco_retry(f):
        @wraps(f)
        def f_retry(*args, **kwargs):
            mtries, mdelay = tries, delay
            attempt = 1
            while mtries > 1:
                try:
                    return f(*args, **kwargs)
                except exceptions as e:
                    logger.warning("%s attempt %d/%d failed: %s, retrying in %s sec",
                                   f.__name__, attempt, tries, e, mdelay)
                    attempt += 1
                    time.sleep(mdelay)
                    mtries -= 1
                    mdelay *= backoff
            return f(*args, **kwargs)
        return f_retry
    return deco_retry
