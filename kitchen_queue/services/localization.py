"""
Localization

Maps the structured values produced by the queue engine (status badge
keys, wait estimates) to display text. The engine never emits localized
strings itself.

Unknown languages fall back to English; unknown keys come back unchanged
so a missing translation is visible on screen rather than fatal.
"""

import logging
from typing import Optional

from kitchen_queue.services.queue.estimator import WaitEstimate, WaitKind

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = "en"

CATALOGUES: dict[str, dict[str, str]] = {
    "en": {
        "order_queue_list": "Order Queue",
        "order_number": "Order #",
        "status": "Status",
        "waiting_time_minutes": "Waiting time (minutes)",
        "order_time": "Order time",
        "no_current_orders": "No current orders",
        "ready": "Ready",
        "in_progress": "In progress",
        "new": "New",
        "pending": "Pending",
        "ready_to_pickup": "Ready for pickup",
        "soon": "Soon",
        "not_specified": "Not specified",
        "minutes_value": "{minutes} min",
    },
    "ar": {
        "order_queue_list": "قائمة الطلبات",
        "order_number": "رقم الطلب",
        "status": "الحالة",
        "waiting_time_minutes": "وقت الانتظار (دقائق)",
        "order_time": "وقت الطلب",
        "no_current_orders": "لا توجد طلبات حالية",
        "ready": "جاهز",
        "in_progress": "قيد التحضير",
        "new": "جديد",
        "pending": "قيد الانتظار",
        "ready_to_pickup": "جاهز للاستلام",
        "soon": "قريباً",
        "not_specified": "غير محدد",
        "minutes_value": "{minutes} دقيقة",
    },
}

RTL_LANGUAGES = frozenset({"ar"})

_WAIT_KEYS = {
    WaitKind.READY: "ready_to_pickup",
    WaitKind.SOON: "soon",
    WaitKind.UNSPECIFIED: "not_specified",
}


class Localizer:
    """Catalogue lookup with English fallback."""

    def __init__(
        self,
        default_language: str = FALLBACK_LANGUAGE,
        catalogues: Optional[dict[str, dict[str, str]]] = None,
    ):
        self.catalogues = catalogues or CATALOGUES
        self.default_language = self.resolve_language(default_language)

    def resolve_language(self, lang: Optional[str]) -> str:
        """Pick a supported language, falling back to English."""
        if lang:
            code = lang.lower().split("-")[0]
            if code in self.catalogues:
                return code
            logger.debug(f"No catalogue for language {lang!r}, using {FALLBACK_LANGUAGE}")
            return FALLBACK_LANGUAGE
        return getattr(self, "default_language", FALLBACK_LANGUAGE)

    def is_rtl(self, lang: Optional[str] = None) -> bool:
        return self.resolve_language(lang) in RTL_LANGUAGES

    def text(self, key: str, lang: Optional[str] = None) -> str:
        catalogue = self.catalogues[self.resolve_language(lang)]
        if key in catalogue:
            return catalogue[key]
        return self.catalogues.get(FALLBACK_LANGUAGE, {}).get(key, key)

    def describe_wait(self, estimate: WaitEstimate, lang: Optional[str] = None) -> str:
        """Display text for a wait estimate."""
        key = _WAIT_KEYS.get(estimate.kind)
        if key is not None:
            return self.text(key, lang)
        return self.text("minutes_value", lang).format(minutes=estimate.minutes)

    def labels(self, lang: Optional[str] = None) -> dict[str, str]:
        """Full catalogue for templates."""
        merged = dict(self.catalogues.get(FALLBACK_LANGUAGE, {}))
        merged.update(self.catalogues[self.resolve_language(lang)])
        return merged
