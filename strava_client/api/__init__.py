"""
Strava API request pipeline.

- Route / Router: endpoint descriptions and the well-known OAuth routes
- RequestsTransport: HTTP execution on a requests.Session
- ResponseSerializer / ArrayResponseSerializer: body decoding
- RequestDispatcher: request, request_array and upload
"""

from .classifier import classify_status
from .dispatcher import RequestDispatcher
from .router import RequestDescriptor, Route, Router
from .serializers import ArrayResponseSerializer, ResponseSerializer
from .transport import RequestsTransport, TransportResponse
from .upload import DataType, UploadData

__all__ = [
    "Route",
    "Router",
    "RequestDescriptor",
    "RequestsTransport",
    "TransportResponse",
    "ResponseSerializer",
    "ArrayResponseSerializer",
    "classify_status",
    "RequestDispatcher",
    "UploadData",
    "DataType",
]
