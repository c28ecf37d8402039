"""Tests for the vue3 template family (hs_cli.scaffolder.vue3).

Each test disables a single feature of the packaged vue3 template and checks
that every trace of it is gone while the rest of the project is intact.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import read_manifest
from hs_cli.scaffolder.factory import TemplateFactory
from hs_cli.scaffolder.handler import TemplateHandler
from hs_cli.scaffolder.vue3 import VUE3_RULES, Vue3Handler

pytestmark = pytest.mark.unit

ALL_FEATURES = ["typescript", "jsx", "router", "pinia", "unocss", "vitest", "auto-import", "components"]


@pytest.fixture
def handler(factory: TemplateFactory) -> TemplateHandler:
    return factory.get_handler("vue3")


async def generate_without(handler: TemplateHandler, target: Path, *disabled: str):
    features = {name: name not in disabled for name in ALL_FEATURES}
    return await handler.process_template(target, features, "demo-app")


class TestFeatureList:
    def test_features_in_display_order(self, handler: TemplateHandler):
        assert [f.name for f in handler.get_features()] == ALL_FEATURES
        assert all(f.default_enabled for f in handler.get_features())

    def test_every_feature_has_a_rule(self, handler: TemplateHandler):
        assert set(handler.get_rules()) == set(ALL_FEATURES)
        assert handler.get_rules() is VUE3_RULES

    def test_name(self, handler: TemplateHandler):
        assert isinstance(handler, Vue3Handler)
        assert handler.get_name() == "vue3"


class TestAllEnabled:
    @pytest.mark.asyncio
    async def test_template_is_copied_intact(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "demo-app"
        result = await generate_without(handler, target)

        assert result.removed_features == []
        assert result.warnings == []
        assert (target / "src" / "main.ts").exists()
        assert (target / "vite.config.ts").exists()
        manifest = read_manifest(target)
        assert manifest["name"] == "demo-app"
        assert manifest["scripts"]["build"] == "vue-tsc -b && vite build"
        assert "<title>demo-app</title>" in (target / "index.html").read_text()
        assert (target / "README.md").read_text().startswith("# demo-app\n")


class TestFeatureRemoval:
    @pytest.mark.asyncio
    async def test_jsx(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "jsx")

        vite = (target / "vite.config.ts").read_text()
        assert "vueJsx" not in vite
        assert "@vitejs/plugin-vue-jsx" not in vite
        assert "    vue(),\n    UnoCSS(),\n" in vite
        assert "@vitejs/plugin-vue-jsx" not in read_manifest(target)["devDependencies"]

    @pytest.mark.asyncio
    async def test_router(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "router")

        main = (target / "src" / "main.ts").read_text()
        assert "./router" not in main
        assert "app.use(router)" not in main
        assert "app.use(createPinia())" in main
        assert not (target / "src" / "router").exists()
        assert not (target / "src" / "views").exists()
        assert "vue-router" not in read_manifest(target)["dependencies"]

    @pytest.mark.asyncio
    async def test_pinia(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "pinia")

        main = (target / "src" / "main.ts").read_text()
        assert "pinia" not in main.lower()
        assert "app.use(router)" in main
        assert not (target / "src" / "stores").exists()
        assert "pinia" not in read_manifest(target)["dependencies"]

    @pytest.mark.asyncio
    async def test_unocss(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "unocss")

        main = (target / "src" / "main.ts").read_text()
        assert "uno.css" not in main
        assert "@unocss/reset" not in main
        assert "import './assets/main.css'" in main
        vite = (target / "vite.config.ts").read_text()
        assert "UnoCSS" not in vite
        assert "unocss/vite" not in vite
        assert not (target / "uno.config.ts").exists()
        dev = read_manifest(target)["devDependencies"]
        assert "unocss" not in dev
        assert "@unocss/reset" not in dev

    @pytest.mark.asyncio
    async def test_vitest(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "vitest")

        manifest = read_manifest(target)
        assert "test:unit" not in manifest["scripts"]
        for name in ("vitest", "@vue/test-utils", "jsdom", "@types/jsdom"):
            assert name not in manifest["devDependencies"]
        assert not (target / "vitest.config.ts").exists()
        assert not (target / "tsconfig.vitest.json").exists()
        assert (target / "tsconfig.app.json").exists()

    @pytest.mark.asyncio
    async def test_auto_import(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "auto-import")

        vite = (target / "vite.config.ts").read_text()
        assert "AutoImport" not in vite
        assert "Components({" in vite
        assert not (target / "src" / "auto-import.d.ts").exists()
        assert "unplugin-auto-import" not in read_manifest(target)["devDependencies"]

    @pytest.mark.asyncio
    async def test_components(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        await generate_without(handler, target, "components")

        vite = (target / "vite.config.ts").read_text()
        assert "Components" not in vite
        assert "unplugin-vue-components" not in vite
        assert "    })\n  ],\n" in vite
        assert not (target / "components.d.ts").exists()
        assert "unplugin-vue-components" not in read_manifest(target)["devDependencies"]

    @pytest.mark.asyncio
    async def test_typescript(self, handler: TemplateHandler, tmp_path: Path):
        target = tmp_path / "app"
        result = await generate_without(handler, target, "typescript")

        assert result.warnings == []
        for name in ("main.js", "router/index.js", "stores/counter.js", "utils/format.js"):
            assert (target / "src" / name).exists(), name
        assert not list(target.rglob("*.ts"))
        for name in ("vite.config.js", "uno.config.js", "vitest.config.js"):
            assert (target / name).exists(), name
        for name in ("tsconfig.json", "tsconfig.app.json", "tsconfig.node.json", "env.d.ts", "components.d.ts"):
            assert not (target / name).exists(), name

        assert 'src="/src/main.js"' in (target / "index.html").read_text()
        manifest = read_manifest(target)
        assert manifest["scripts"]["build"] == "vite build"
        assert manifest["scripts"]["test:unit"] == "vitest --config vitest.config.js"
        assert "type-check" not in manifest["scripts"]
        assert "typescript" not in manifest["devDependencies"]
        assert "vue-tsc" not in manifest["devDependencies"]

        format_js = (target / "src" / "utils" / "format.js").read_text()
        assert "interface" not in format_js
        assert "export var Precision;" in format_js
        assert "function formatPrice(value, options = {}) {" in format_js
        counter = (target / "src" / "stores" / "counter.js").read_text()
        assert "function increment(step = 1) {" in counter
        router = (target / "src" / "router" / "index.js").read_text()
        assert "RouteRecordRaw" not in router
        assert "const routes = [" in router
