"""Vue 3 + Vite template family."""

from __future__ import annotations

from pathlib import Path

from hs_cli.scaffolder.features import EditStep, Feature, FeatureRule
from hs_cli.scaffolder.handler import TemplateHandler

VITE_CONFIG = "vite.config.*"
MAIN = "src/main.*"

VUE3_FEATURES = [
    Feature(name="typescript", display_message="TypeScript"),
    Feature(name="jsx", display_message="JSX support"),
    Feature(name="router", display_message="Vue Router (single-page application)"),
    Feature(name="pinia", display_message="Pinia (state management)"),
    Feature(name="unocss", display_message="UnoCSS (atomic CSS)"),
    Feature(name="vitest", display_message="Vitest (unit testing)"),
    Feature(name="auto-import", display_message="Auto Import (API auto-import)"),
    Feature(name="components", display_message="Components (component auto-registration)"),
]

VUE3_RULES = {
    "typescript": FeatureRule(
        scripts=("type", "type-check"),
        paths=(
            "tsconfig.json",
            "tsconfig.app.json",
            "tsconfig.node.json",
            "tsconfig.vitest.json",
            "env.d.ts",
            "components.d.ts",
            "src/auto-import.d.ts",
        ),
        transpile=True,
    ),
    "jsx": FeatureRule(
        dev_dependencies=("@vitejs/plugin-vue-jsx",),
        edits=(
            EditStep("remove_import", VITE_CONFIG, ("@vitejs/plugin-vue-jsx",)),
            EditStep("remove_vite_plugin", VITE_CONFIG, ("vueJsx",)),
        ),
    ),
    "router": FeatureRule(
        dependencies=("vue-router",),
        paths=("src/router", "src/views"),
        edits=(
            EditStep("remove_import", MAIN, ("./router",)),
            EditStep("remove_function_call", MAIN, ("app.use", "router")),
        ),
    ),
    "pinia": FeatureRule(
        dependencies=("pinia",),
        paths=("src/stores",),
        edits=(
            EditStep("remove_import", MAIN, ("pinia",)),
            EditStep("remove_function_call", MAIN, ("app.use", "createPinia")),
        ),
    ),
    "unocss": FeatureRule(
        dev_dependencies=("unocss", "@unocss/reset"),
        paths=("uno.config.*",),
        edits=(
            EditStep("remove_import", VITE_CONFIG, ("unocss/vite",)),
            EditStep("remove_vite_plugin", VITE_CONFIG, ("UnoCSS",)),
            EditStep("remove_import", MAIN, ("uno.css",)),
            EditStep("remove_import", MAIN, ("virtual:uno.css",)),
            EditStep("remove_import", MAIN, ("@unocss/reset/tailwind.css",)),
        ),
    ),
    "vitest": FeatureRule(
        dev_dependencies=("vitest", "@vue/test-utils", "jsdom", "@types/jsdom"),
        scripts=("test:unit",),
        paths=("vitest.config.*", "tsconfig.vitest.json"),
    ),
    "auto-import": FeatureRule(
        dev_dependencies=("unplugin-auto-import",),
        paths=("src/auto-import.d.ts",),
        edits=(
            EditStep("remove_import", VITE_CONFIG, ("unplugin-auto-import/vite",)),
            EditStep("remove_vite_plugin", VITE_CONFIG, ("AutoImport",)),
        ),
    ),
    "components": FeatureRule(
        dev_dependencies=("unplugin-vue-components",),
        paths=("components.d.ts",),
        edits=(
            EditStep("remove_import", VITE_CONFIG, ("unplugin-vue-components/vite",)),
            EditStep("remove_vite_plugin", VITE_CONFIG, ("Components",)),
        ),
    ),
}


class Vue3Handler(TemplateHandler):
    """Handler for the ``vue3`` template."""

    config_files = ("vite.config", "uno.config", "vitest.config")

    def __init__(self, templates_dir: str | Path) -> None:
        super().__init__(templates_dir, "vue3")

    def get_features(self) -> list[Feature]:
        return list(VUE3_FEATURES)

    def get_rules(self) -> dict[str, FeatureRule]:
        return VUE3_RULES
