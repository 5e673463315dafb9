from monolith_kit.sources.base import TemplateSource
from monolith_kit.sources.local import BUNDLED_TEMPLATES_DIR, LocalTemplateSource
from monolith_kit.sources.remote import RemoteTemplateSource

__all__ = [
    "BUNDLED_TEMPLATES_DIR",
    "LocalTemplateSource",
    "RemoteTemplateSource",
    "TemplateSource",
]
