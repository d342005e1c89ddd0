"""
    Decorators that add logging and Prometheus metrics around the photo
    pipeline and the vision client. They expose the wrapped object's interface
    unchanged and let every exception through as is.
"""
from contextlib import contextmanager
import logging
import os
import time

from photobook.exceptions import APIException
from photobook.monitoring import metrics

log = logging.getLogger(__name__)

def outcome_of(exc: Exception) -> str:
    if isinstance(exc, APIException):
        return str(exc.status_code)
    return "error"

class InstrumentedPhotoService:
    def __init__(self, inner):
        self.inner = inner

    @contextmanager
    def _track(self, operation: str, photo_id: str = None):
        start = time.perf_counter()
        log.debug("%s started (photo=%s)", operation, photo_id)
        outcome = "ok"
        try:
            yield
        except Exception as e:
            outcome = outcome_of(e)
            raise
        finally:
            elapsed = time.perf_counter() - start
            metrics.operation_count.labels(operation=operation, outcome=outcome).inc()
            metrics.operation_duration.labels(operation=operation).observe(elapsed)
            log.info("%s finished in %.3fs (photo=%s, outcome=%s)", operation, elapsed, photo_id, outcome)

    def create(self, filename, content_type, fileobj):
        with self._track("create"):
            return self.inner.create(filename, content_type, fileobj)

    def fetch_content(self, photo_id):
        with self._track("fetch", photo_id):
            return self.inner.fetch_content(photo_id)

    def delete(self, photo_id):
        with self._track("delete", photo_id):
            return self.inner.delete(photo_id)

class InstrumentedVisionService:
    """Records payload size, request count and caption confidence."""

    def __init__(self, inner):
        self.inner = inner

    @property
    def enabled(self):
        return self.inner.enabled

    def describe(self, fileobj):
        if not self.inner.enabled:
            return self.inner.describe(fileobj)

        fileobj.seek(0, os.SEEK_END)
        metrics.analysis_payload_bytes.inc(fileobj.tell())

        caption = self.inner.describe(fileobj)
        if caption is None:
            metrics.analysis_requests.labels(outcome="no_caption").inc()
        else:
            metrics.analysis_requests.labels(outcome="caption").inc()
            metrics.caption_confidence.observe(caption.confidence)
        return caption

    def close(self):
        self.inner.close()
