"""Computer Vision client that captions uploaded photos."""
import logging
from typing import List, Optional

import httpx

from photobook.photos.models import Caption
from photobook.settings import settings

log = logging.getLogger(__name__)


class VisionService:
    """
    Calls the Computer Vision "analyze" endpoint with the Description feature.

    `analyze` is the raw call and raises on any transport or protocol error.
    `describe` is what the upload pipeline uses: captioning is an enhancement,
    so it turns every failure into "no caption" and never raises.
    """

    def __init__(self, client: Optional[httpx.Client] = None):
        self.enabled = client is not None or bool(settings.vision_endpoint)
        self.client = client
        if self.client is None and self.enabled:
            self.client = httpx.Client(
                base_url=settings.vision_endpoint,
                timeout=settings.vision_timeout_seconds,
                headers={"Ocp-Apim-Subscription-Key": settings.vision_api_key or ""},
            )
        if not self.enabled:
            log.warning("VISION_ENDPOINT not configured, photos will be stored without a description")
        else:
            log.info("Initialized Computer Vision client")

    def analyze(self, payload: bytes) -> List[Caption]:
        """
        Sends the image bytes and returns the caption candidates, best first.

        Raises:
            httpx.HTTPError: the service is unreachable or answered non-2xx
            ValueError: the response body is not the expected JSON
        """
        resp = self.client.post(
            f"/vision/{settings.vision_api_version}/analyze",
            params={"visualFeatures": "Description", "language": settings.vision_language},
            content=payload,
            headers={"Content-Type": "application/octet-stream"},
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError("Unexpected analyze response")

        description = body.get("description") or {}
        if not isinstance(description, dict):
            raise ValueError("Unexpected description in analyze response")
        raw = description.get("captions") or []
        if not isinstance(raw, list) or not all(isinstance(c, dict) for c in raw):
            raise ValueError("Unexpected captions in analyze response")

        captions = [
            Caption(text=c["text"], confidence=float(c.get("confidence", 0.0)))
            for c in raw
            if c.get("text")
        ]
        captions.sort(key=lambda c: c.confidence, reverse=True)
        return captions

    def describe(self, fileobj) -> Optional[Caption]:
        """Best caption for the stream, or None. The stream is read from its start."""
        if not self.enabled:
            return None

        fileobj.seek(0)
        payload = fileobj.read()
        fileobj.seek(0)

        try:
            captions = self.analyze(payload)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            log.warning(f"Image analysis failed, continuing without description: {e}")
            return None

        if not captions:
            log.info("Image analysis returned no captions")
            return None
        return captions[0]

    def close(self):
        if self.client is not None:
            self.client.close()
            log.info("Closed Computer Vision client")
