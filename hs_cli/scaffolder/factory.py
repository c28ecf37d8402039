"""Registry mapping template family names to their handlers."""

from __future__ import annotations

from pathlib import Path

from hs_cli.scaffolder.handler import TemplateHandler, TemplateNotFoundError
from hs_cli.scaffolder.nuxt3 import Nuxt3Handler
from hs_cli.scaffolder.vue3 import Vue3Handler


class TemplateFactory:
    """Creates and hands out one handler per template family.

    Usage::

        factory = TemplateFactory(templates_dir)
        handler = factory.get_handler("vue3")
    """

    def __init__(self, templates_dir: str | Path) -> None:
        self.templates_dir = Path(templates_dir)
        self._handlers: dict[str, TemplateHandler] = {}
        self.register(Vue3Handler(self.templates_dir))
        self.register(Nuxt3Handler(self.templates_dir))

    def register(self, handler: TemplateHandler) -> None:
        """Add (or replace) the handler for ``handler.get_name()``."""
        self._handlers[handler.get_name()] = handler

    def get_handler(self, name: str) -> TemplateHandler:
        """Return the handler registered under *name*.

        Raises:
            TemplateNotFoundError: If no handler is registered under *name*.
        """
        try:
            return self._handlers[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def has_template(self, name: str) -> bool:
        return name in self._handlers

    def get_available_templates(self) -> list[str]:
        return list(self._handlers)
