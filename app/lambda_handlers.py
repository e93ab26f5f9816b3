"""
AWS Lambda entry points.

- collect_handler: invoked by the scheduled (EventBridge) rule; runs one
  collection event and returns the summary. Nothing consumes the result
  beyond the invocation log.
- history_handler: API Gateway proxy integration for the history endpoint.

Services are built when the module is imported, so a container with missing
configuration fails its cold start instead of accepting invocations. The
cached instances are reused for the lifetime of the container.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from logging_config import configure_logging
from services.collector import build_default_collector
from services.history import HistoryRequest, build_default_history_service

configure_logging()
logger = logging.getLogger(__name__)

build_default_history_service()
build_default_collector()


def collect_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("Collector invoked", extra={"reason": (event or {}).get("detail-type")})
    summary = build_default_collector().collect()
    return summary.model_dump(mode="json", by_alias=True, exclude_none=True)


def history_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    request = HistoryRequest(
        method=event.get("httpMethod") or "",
        headers=event.get("headers") or {},
        query=event.get("queryStringParameters") or {},
    )
    response = build_default_history_service().handle(request)
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.body,
    }
