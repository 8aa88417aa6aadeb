"""Structured JSON logger shared by the connector.

Messages are dicts, e.g. ``logger.info({"esputnik": "contact_added", "id": 1})``.
"""

from __future__ import annotations

from aws_lambda_powertools import Logger

from .config import settings

logger = Logger(service="esputnik", level=settings.log_level)
