from __future__ import annotations

import json
from pathlib import Path

from conftest import write_files
from deadfiles.config_loader import AnalysisConfig
from deadfiles.file_catalog import FileCatalog
from deadfiles.implicit_usage import ImplicitUsageClassifier, ManifestInfo


def _classify(tmp_path: Path, files: dict, config: AnalysisConfig | None = None) -> dict:
    config = config or AnalysisConfig()
    write_files(tmp_path, files)
    catalog = FileCatalog.build(tmp_path, config)
    manifest = ManifestInfo.load(catalog.root, config, catalog)
    classifier = ImplicitUsageClassifier(config, manifest)
    return {rec.rel_path: classifier.classify(rec) for rec in catalog}


def test_config_and_declaration_files(tmp_path):
    out = _classify(
        tmp_path,
        {"vite.config.ts": "", "src/env.d.ts": "", "jsconfig.json": "{}", "src/config.ts": ""},
    )
    assert out["vite.config.ts"] == "config-file"
    assert out["src/env.d.ts"] == "config-file"
    assert out["jsconfig.json"] == "config-file"
    assert out["src/config.ts"] is None


def test_state_module_requires_marker_and_script_extension(tmp_path):
    out = _classify(
        tmp_path,
        {
            "src/stores/cart.ts": "export const useCart = defineStore('cart', {})",
            "src/stores/pinia.js": "export default createPinia()",
            "src/stores/helpers.ts": "export const x = 1",
            "src/stores/Store.vue": "defineStore",
            "src/other/cart.ts": "defineStore",
        },
    )
    assert out["src/stores/cart.ts"] == "state-module"
    assert out["src/stores/pinia.js"] == "state-module"
    assert out["src/stores/helpers.ts"] is None
    assert out["src/stores/Store.vue"] is None
    assert out["src/other/cart.ts"] is None


def test_style_resources(tmp_path):
    out = _classify(
        tmp_path,
        {
            "src/theme/assets/css/buttons.css": "",
            "lib/assets/tailwind/base.css": "",
            "src/main.css": "",
            "tailwind.config.js": "",
            "src/theme.css": "",
        },
    )
    assert out["src/theme/assets/css/buttons.css"] == "style-resource"
    assert out["lib/assets/tailwind/base.css"] == "style-resource"
    assert out["src/main.css"] == "style-resource"
    assert out["tailwind.config.js"] == "style-resource"
    assert out["src/theme.css"] is None


def test_implicit_directories_and_platform_files(tmp_path):
    out = _classify(
        tmp_path,
        {"src/locales/de.json": "{}", "src/assets/icons.js": "", "404.html": "", "docs/404.html": ""},
    )
    assert out["src/locales/de.json"] == "implicit-directory"
    assert out["src/assets/icons.js"] == "implicit-directory"
    assert out["404.html"] == "platform-file"
    assert out["docs/404.html"] is None


def test_manifest_and_manifest_scripts(tmp_path):
    manifest = {
        "scripts": {
            "seed": "node scripts/seed.js --force",
            "both": "node ./scripts/a.js && node scripts/missing.js",
            "dev": "vite",
        }
    }
    out = _classify(
        tmp_path,
        {
            "package.json": json.dumps(manifest),
            "scripts/seed.js": "",
            "scripts/a.js": "",
            "scripts/unused.js": "",
        },
    )
    assert out["package.json"] == "manifest"
    assert out["scripts/seed.js"] == "manifest-script"
    assert out["scripts/a.js"] == "manifest-script"
    assert out["scripts/unused.js"] is None


def test_manifest_parse_failure_only_disables_scripts(tmp_path, caplog):
    with caplog.at_level("WARNING", logger="deadfiles.implicit_usage"):
        out = _classify(
            tmp_path,
            {"package.json": "{ not json", "scripts/seed.js": "", "vite.config.ts": ""},
        )
    assert out["package.json"] == "manifest"
    assert out["scripts/seed.js"] is None
    assert out["vite.config.ts"] == "config-file"
    assert any("could not parse manifest" in r.getMessage() for r in caplog.records)


def test_classification_is_order_independent(tmp_path):
    files = {
        "src/stores/a.ts": "defineStore",
        "src/assets/x.css": "",
        "src/views/V.vue": "",
        "vite.config.ts": "",
    }
    forward = _classify(tmp_path, files)
    config = AnalysisConfig()
    catalog = FileCatalog.build(tmp_path, config)
    classifier = ImplicitUsageClassifier(config, ManifestInfo.load(catalog.root, config, catalog))
    backward = {rec.rel_path: classifier.classify(rec) for rec in reversed(list(catalog))}
    assert forward == backward


def test_manifest_absent():
    info = ManifestInfo.load(Path("/nowhere"), AnalysisConfig(), set())
    assert info == ManifestInfo()


def test_manifest_without_scripts(tmp_path):
    out = _classify(tmp_path, {"package.json": json.dumps({"name": "x"}), "scripts/a.js": ""})
    assert out["package.json"] == "manifest"
    assert out["scripts/a.js"] is None
