"""
SwachhSathi - Service wiring
Collaborators are built once per process and handed to each component.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

import httpx

from swachhsathi.alerts.dispatcher import NotificationDispatcher
from swachhsathi.alerts.push_notification import get_push_service
from swachhsathi.core.config import Settings, get_settings
from swachhsathi.database.store import get_document_store
from swachhsathi.dispatch.assignment import AssignmentEngine
from swachhsathi.triggers import TriggerHandlers
from swachhsathi.vision.classifier import ClassificationEngine
from swachhsathi.vision.comparison import ComparisonEngine
from swachhsathi.vision.gemini_client import GeminiClient
from swachhsathi.vision.vision_client import VisionClient
from swachhsathi.vision.waste_scanner import WasteScanner

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide components used by the API."""
    store: Any
    push_service: Any
    classifier: ClassificationEngine
    comparator: ComparisonEngine
    waste_scanner: WasteScanner
    triggers: TriggerHandlers


def create_context(
    config: Optional[Settings] = None,
    store: Any = None,
    push_service: Any = None
) -> AppContext:
    """
    Build every component from settings.

    Args:
        config: Settings; the cached global settings when omitted
        store: Document store override
        push_service: Push service override

    Returns:
        AppContext
    """
    config = config or get_settings()
    http_client = httpx.Client(timeout=config.http_timeout_seconds)

    vision = VisionClient(
        api_key=config.google_vision_api_key,
        api_url=config.vision_api_url,
        max_labels=config.vision_max_labels,
        client=http_client,
    )
    gemini = GeminiClient(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        api_url=config.gemini_api_url,
        client=http_client,
    )

    store = store if store is not None else get_document_store()
    push_service = push_service if push_service is not None else get_push_service()

    logger.info(f"Services initialized (env={config.app_env})")

    return AppContext(
        store=store,
        push_service=push_service,
        classifier=ClassificationEngine(vision, gemini, http_client=http_client),
        comparator=ComparisonEngine(vision),
        waste_scanner=WasteScanner(vision, store),
        triggers=TriggerHandlers(
            AssignmentEngine(store),
            NotificationDispatcher(store, push_service),
        ),
    )


@lru_cache()
def get_context() -> AppContext:
    """Get cached application context."""
    return create_context()
