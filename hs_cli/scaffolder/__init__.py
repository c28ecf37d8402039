"""hs-cli scaffolder -- template families and the feature-removal engine.

Quick usage::

    from hs_cli.scaffolder import TemplateFactory

    factory = TemplateFactory(templates_dir)
    handler = factory.get_handler("vue3")
    result = await handler.process_template("./demo-app", {"typescript": True}, "demo-app")
"""

from hs_cli.scaffolder.factory import TemplateFactory
from hs_cli.scaffolder.features import EditStep, Feature, FeatureRule, build_feature_selection
from hs_cli.scaffolder.handler import (
    TemplateCommands,
    TemplateHandler,
    TemplateNotFoundError,
    TemplateResult,
)
from hs_cli.scaffolder.nuxt3 import Nuxt3Handler
from hs_cli.scaffolder.vue3 import Vue3Handler

__all__ = [
    "EditStep",
    "Feature",
    "FeatureRule",
    "Nuxt3Handler",
    "TemplateCommands",
    "TemplateFactory",
    "TemplateHandler",
    "TemplateNotFoundError",
    "TemplateResult",
    "Vue3Handler",
    "build_feature_selection",
]
