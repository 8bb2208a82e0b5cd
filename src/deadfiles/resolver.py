"""
Map a raw reference token to at most one catalogued file.

Resolution order, first hit wins:
  1. alias prefix        "@/stores/user" -> "src/stores/user"
  2. relative path       "./B" against the referencing file's directory
  3. bare specifier      root-relative when it has a "/" or an extension
  4. verbatim hit        path already carries an extension
  5. extension probing   path + ext, in configured order
  6. index probing       path/index + ext
  7. component names     "user-card" -> <component_dir>/userCard.vue
                         or <component_dir>/userCard/userCard.vue

An unresolvable token yields None; it is not an error.
"""
from __future__ import annotations

import posixpath
import re
from typing import Container, Iterator, Optional, Tuple

from .config_loader import AnalysisConfig

_KEBAB_RE = re.compile(r"-([a-z])")


def component_name(token: str) -> str:
    """``user-card`` -> ``userCard``."""
    return _KEBAB_RE.sub(lambda m: m.group(1).upper(), token)


class ReferenceResolver:
    """Stateless after construction; safe to share between threads."""

    def __init__(self, catalog: Container[str], config: AnalysisConfig):
        self.catalog = catalog
        self.extensions: Tuple[str, ...] = tuple(config.extensions)
        self.component_dirs: Tuple[str, ...] = tuple(
            d.strip("/") for d in config.component_dirs
        )
        self.component_extensions: Tuple[str, ...] = tuple(config.component_extensions)
        # longest prefix first so "@components" wins over "@"
        self.aliases: Tuple[Tuple[str, str], ...] = tuple(
            sorted(
                ((a, t.strip("/")) for a, t in config.aliases.items()),
                key=lambda item: len(item[0]),
                reverse=True,
            )
        )

    def resolve(self, token: str, base_dir: str) -> Optional[str]:
        """
        Resolve ``token`` referenced from a file in ``base_dir``.

        Args:
            token: raw reference string
            base_dir: root-relative directory of the referencing file ('' at root)

        Returns:
            Root-relative path of the target file, or None
        """
        if not token:
            return None

        path = self._rewrite_alias(token)
        is_bare = False
        if path is None:
            if token.startswith(("./", "../")) or token in (".", ".."):
                path = posixpath.join(base_dir, token)
            elif token.startswith("/"):
                path = token.lstrip("/")
            else:
                is_bare = True
                # extensionless single names (packages, tags) are never probed as files
                if "/" in token or posixpath.splitext(token)[1]:
                    path = token

        if path is not None:
            found = self._probe(path)
            if found:
                return found

        if is_bare:
            return self._resolve_component(token)
        return None

    def _rewrite_alias(self, token: str) -> Optional[str]:
        for alias, target in self.aliases:
            if token == alias:
                return target
            if token.startswith(alias + "/"):
                remainder = token[len(alias) + 1:]
                return posixpath.join(target, remainder) if target else remainder
        return None

    def _probe(self, path: str) -> Optional[str]:
        path = posixpath.normpath(path)
        if path == ".." or path.startswith("../") or path.startswith("/"):
            return None  # escapes the project root

        if posixpath.splitext(path)[1] and path in self.catalog:
            return path
        for candidate in self._candidates(path):
            if candidate in self.catalog:
                return candidate
        return None

    def _candidates(self, path: str) -> Iterator[str]:
        for ext in self.extensions:
            yield path + ext
        for ext in self.extensions:
            yield posixpath.join(path, "index" + ext)

    def _resolve_component(self, token: str) -> Optional[str]:
        name = component_name(token)
        for directory in self.component_dirs:
            for ext in self.component_extensions:
                for candidate in (
                    posixpath.join(directory, name + ext),
                    posixpath.join(directory, name, name + ext),
                ):
                    if candidate in self.catalog:
                        return candidate
        return None
