"""Unit tests for the template registry (hs_cli.scaffolder.factory)."""

from __future__ import annotations

from pathlib import Path

import pytest

from hs_cli.scaffolder.factory import TemplateFactory
from hs_cli.scaffolder.features import Feature, FeatureRule
from hs_cli.scaffolder.handler import TemplateHandler, TemplateNotFoundError
from hs_cli.scaffolder.nuxt3 import Nuxt3Handler
from hs_cli.scaffolder.vue3 import Vue3Handler

pytestmark = pytest.mark.unit


class _PlainHandler(TemplateHandler):
    def __init__(self, templates_dir: Path) -> None:
        super().__init__(templates_dir, "plain")

    def get_features(self) -> list[Feature]:
        return []

    def get_rules(self) -> dict[str, FeatureRule]:
        return {}


class TestTemplateFactory:
    def test_builtin_templates(self, factory: TemplateFactory):
        assert factory.get_available_templates() == ["vue3", "nuxt3"]
        assert isinstance(factory.get_handler("vue3"), Vue3Handler)
        assert isinstance(factory.get_handler("nuxt3"), Nuxt3Handler)

    def test_has_template(self, factory: TemplateFactory):
        assert factory.has_template("vue3")
        assert not factory.has_template("react")

    def test_unknown_template_raises(self, factory: TemplateFactory):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            factory.get_handler("react")
        assert exc_info.value.name == "react"
        assert "react" in str(exc_info.value)

    def test_handlers_share_templates_dir(self, factory: TemplateFactory, templates_dir: Path):
        handler = factory.get_handler("nuxt3")
        assert handler.templates_dir == templates_dir
        assert handler.template_path == templates_dir / "nuxt3"

    def test_register(self, tmp_path: Path):
        factory = TemplateFactory(tmp_path)
        factory.register(_PlainHandler(tmp_path))
        assert factory.has_template("plain")
        assert factory.get_handler("plain").get_name() == "plain"

    def test_commands(self, factory: TemplateFactory):
        commands = factory.get_handler("vue3").get_commands()
        assert commands.install_command == "npm install"
        assert commands.start_command == "npm run dev"
