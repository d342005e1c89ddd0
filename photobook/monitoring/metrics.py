from prometheus_client import Counter, Histogram, CONTENT_TYPE_LATEST, generate_latest
from fastapi import APIRouter, Response

router = APIRouter()

# Pipeline operations
operation_count = Counter(
    'photobook_operations_total',
    'Photo operations by outcome',
    ['operation', 'outcome']
)

operation_duration = Histogram(
    'photobook_operation_duration_seconds',
    'Photo operation duration',
    ['operation'],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

# Computer Vision usage
analysis_payload_bytes = Counter(
    'photobook_analysis_payload_bytes_total',
    'Bytes sent for image analysis'
)

analysis_requests = Counter(
    'photobook_analysis_requests_total',
    'Image analysis requests',
    ['outcome']
)

caption_confidence = Histogram(
    'photobook_caption_confidence',
    'Confidence of the caption kept for a photo',
    buckets=(0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0)
)


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Prometheus metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
