from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from unittest.mock import patch


@contextmanager
def notice_workers(max_workers=2):
    """Run disabled-app sends on a private pool and wait for them on exit."""
    executor = ThreadPoolExecutor(max_workers=max_workers)
    try:
        with patch("app_store.notifications.notice_executor", executor):
            yield executor
    finally:
        executor.shutdown(wait=True)
