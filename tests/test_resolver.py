from __future__ import annotations

import pytest

from deadfiles.config_loader import AnalysisConfig
from deadfiles.resolver import ReferenceResolver, component_name

CATALOG = {
    "src/stores/user.ts",
    "src/components/B.vue",
    "src/components/userCard.vue",
    "src/components/Modal/Modal.vue",
    "src/views/HomeView.vue",
    "src/layouts/HomeView.vue",
    "src/services/api/index.ts",
    "src/utils/date.js",
    "src/utils/date.ts",
    "src/data/pages.json",
    "scripts/build.js",
    "index.html",
}


@pytest.fixture
def resolver() -> ReferenceResolver:
    return ReferenceResolver(CATALOG, AnalysisConfig())


def test_alias_resolution(resolver):
    assert resolver.resolve("@/stores/user", "src/views") == "src/stores/user.ts"


def test_alias_requires_separator(resolver):
    # scoped packages are not the "@" alias
    assert resolver.resolve("@vue/runtime-core", "src") is None


def test_relative_resolution(resolver):
    assert resolver.resolve("./B", "src/components") == "src/components/B.vue"
    assert resolver.resolve("../components/B.vue", "src/views") == "src/components/B.vue"
    assert resolver.resolve("../../index.html", "src/views") == "index.html"


def test_relative_path_escaping_root(resolver):
    assert resolver.resolve("../../../etc/passwd", "src/views") is None


def test_extension_priority_follows_configuration(resolver):
    assert resolver.resolve("@/utils/date", "src") == "src/utils/date.js"
    ts_first = ReferenceResolver(CATALOG, AnalysisConfig(extensions=(".ts", ".js", ".vue")))
    assert ts_first.resolve("@/utils/date", "src") == "src/utils/date.ts"


def test_index_probing(resolver):
    assert resolver.resolve("@/services/api", "src") == "src/services/api/index.ts"


def test_component_name_convention(resolver):
    assert resolver.resolve("user-card", "src/views") == "src/components/userCard.vue"
    assert resolver.resolve("Modal", "src/views") == "src/components/Modal/Modal.vue"


def test_component_dirs_searched_in_order(resolver):
    assert resolver.resolve("HomeView", "src/router") == "src/views/HomeView.vue"
    layouts_first = ReferenceResolver(
        CATALOG, AnalysisConfig(component_dirs=("src/layouts", "src/views"))
    )
    assert layouts_first.resolve("HomeView", "src/router") == "src/layouts/HomeView.vue"


def test_component_convention_not_used_for_relative_or_alias(resolver):
    assert resolver.resolve("./user-card", "src/views") is None
    assert resolver.resolve("@/user-card", "src/views") is None


def test_bare_paths_are_root_relative(resolver):
    assert resolver.resolve("src/data/pages.json", "config") == "src/data/pages.json"
    assert resolver.resolve("/scripts/build.js", "src") == "scripts/build.js"


def test_single_name_with_extension_is_root_relative(resolver):
    assert resolver.resolve("index.html", "src/views") == "index.html"
    assert resolver.resolve("missing.js", "src") is None


def test_package_names_do_not_resolve(resolver):
    assert resolver.resolve("vue", "src") is None
    assert resolver.resolve("div", "src/views") is None
    assert resolver.resolve("", "src") is None


def test_resolution_is_pure(resolver):
    for token, base in [("@/stores/user", "src"), ("./B", "src/components"), ("vue", "src")]:
        assert resolver.resolve(token, base) == resolver.resolve(token, base)


def test_longest_alias_wins():
    catalog = {"src/components/Btn.vue", "src/Btn.vue"}
    config = AnalysisConfig(aliases={"@": "src", "@c": "src/components"})
    r = ReferenceResolver(catalog, config)
    assert r.resolve("@c/Btn", "src") == "src/components/Btn.vue"
    assert r.resolve("@/Btn", "src") == "src/Btn.vue"


@pytest.mark.parametrize(
    "token, expected",
    [("user-card", "userCard"), ("a-b-c", "aBC"), ("Modal", "Modal"), ("x-1", "x-1")],
)
def test_component_name(token, expected):
    assert component_name(token) == expected
