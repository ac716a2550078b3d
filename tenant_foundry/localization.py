# tenant_foundry/localization.py
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AbstractMessageLocalizer(ABC):
    """Builds user facing messages from a template and positional arguments."""

    @abstractmethod
    def format(self, template: str, *args: Any) -> str:
        """
        Look up ``template`` and substitute ``{0}``, ``{1}``, ... with ``args``.

        The template itself doubles as the lookup key, so an unknown
        template still produces a readable message.
        """
        pass


class DefaultMessageLocalizer(AbstractMessageLocalizer):
    """Dictionary backed localizer. Without a catalog the templates are used as-is."""

    def __init__(self, catalog: Optional[Dict[str, str]] = None):
        self.catalog = catalog or {}

    def format(self, template: str, *args: Any) -> str:
        resolved = self.catalog.get(template, template)
        try:
            return resolved.format(*args)
        except (IndexError, KeyError) as e:
            logger.warning(f"Localizer: could not format template '{resolved}' with {args}: {e}")
            return resolved
