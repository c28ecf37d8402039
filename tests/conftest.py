"""Shared pytest fixtures for the hs-cli test suite.

Provides reusable fixtures for:
- Temporary project directories
- The packaged template trees and a factory bound to them
- Small hand-written projects for exercising individual removal rules
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any

import pytest

from hs_cli.config import PACKAGED_TEMPLATES_DIR
from hs_cli.scaffolder.factory import TemplateFactory


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def write(path: Path, content: str) -> Path:
    """Write dedented *content* to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return path


def read_manifest(project: Path) -> dict[str, Any]:
    return json.loads((project / "package.json").read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory for generated projects (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def templates_dir() -> Path:
    """The template families shipped with the package."""
    assert PACKAGED_TEMPLATES_DIR.is_dir(), f"Templates not found at {PACKAGED_TEMPLATES_DIR}"
    return PACKAGED_TEMPLATES_DIR


@pytest.fixture
def factory(templates_dir: Path) -> TemplateFactory:
    return TemplateFactory(templates_dir)


# ---------------------------------------------------------------------------
# Hand-written projects
# ---------------------------------------------------------------------------


@pytest.fixture
def manifest_file(tmp_project_dir: Path) -> Path:
    """A package.json with dependencies, devDependencies and scripts."""
    data = {
        "name": "sample",
        "version": "0.0.0",
        "scripts": {
            "dev": "vite",
            "build": "vue-tsc -b && vite build",
            "type-check": "vue-tsc --build --force",
            "test:unit": "vitest --config vitest.config.ts",
        },
        "dependencies": {"pinia": "^2.1.7", "vue": "^3.4.29", "vue-router": "^4.3.3"},
        "devDependencies": {"typescript": "~5.4.0", "vite": "^5.3.1", "vue-tsc": "^2.0.21"},
    }
    path = tmp_project_dir / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def vite_config(tmp_project_dir: Path) -> Path:
    return write(
        tmp_project_dir / "vite.config.ts",
        """
        import { defineConfig } from 'vite'
        import vue from '@vitejs/plugin-vue'
        import vueJsx from '@vitejs/plugin-vue-jsx'
        import UnoCSS from 'unocss/vite'
        import AutoImport from 'unplugin-auto-import/vite'

        export default defineConfig({
          plugins: [
            vue(),
            vueJsx(),
            UnoCSS(),
            AutoImport({
              imports: ['vue'],
              dts: 'src/auto-import.d.ts'
            })
          ]
        })
        """,
    )


@pytest.fixture
def main_file(tmp_project_dir: Path) -> Path:
    return write(
        tmp_project_dir / "src" / "main.ts",
        """
        import 'uno.css'
        import { createApp } from 'vue'
        import { createPinia } from 'pinia'

        import App from './App.vue'
        import router from './router'

        const app = createApp(App)

        app.use(createPinia())
        app.use(router)

        app.mount('#app')
        """,
    )
