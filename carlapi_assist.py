#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
carlapi_assist.py — Fachada usada pelo host (editor / HTTP)

Carrega o catálogo uma vez e expõe complete / signature_help / hover recebendo
o texto do documento e a posição (linha, caractere), ambos base zero.
Se a carga falhar, o erro fica em `error` e tudo devolve vazio.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional

import logging

from carlapi_context import ContextResolver, default_resolver
from carlapi_core import ApiCatalog, CatalogLoadError, catalog_info, load_catalog
from carlapi_results import build_completions, build_hover, build_signature_help

log = logging.getLogger("carlapi")


class ApiAssist:
    def __init__(
        self,
        catalog: Optional[ApiCatalog],
        error: Optional[CatalogLoadError] = None,
        api_name: str = "CARLA",
        resolver: ContextResolver = default_resolver,
    ):
        self.catalog = catalog
        self.error = error
        self.api_name = api_name
        self.resolver = resolver

    @classmethod
    def from_path(cls, path: str | Path, api_name: str = "CARLA") -> "ApiAssist":
        try:
            catalog = load_catalog(path)
        except CatalogLoadError as e:
            log.error(f"Failed to load {api_name} API definition: {e}")
            return cls(None, error=e, api_name=api_name)
        info = catalog_info(catalog)
        log.info(
            f"{api_name} API ready: {info['classes']} classes, "
            f"{info['methods']} methods, {info['properties']} properties"
        )
        return cls(catalog, api_name=api_name)

    @property
    def ready(self) -> bool:
        return self.catalog is not None

    def info(self) -> Dict[str, int]:
        if self.catalog is None:
            return {"classes": 0, "methods": 0, "properties": 0}
        return catalog_info(self.catalog)

    # ------------------
    # Pontos de entrada
    # ------------------
    def complete(self, text: str, line: int, character: int) -> List[Dict[str, Any]]:
        current = self._line(text, line)
        if self.catalog is None or current is None:
            return []
        ctx = self.resolver.dot(current, character)
        return build_completions(self.catalog, ctx, self.api_name)

    def signature_help(self, text: str, line: int, character: int) -> Optional[Dict[str, Any]]:
        current = self._line(text, line)
        if self.catalog is None or current is None:
            return None
        ctx = self.resolver.call(current, character)
        return build_signature_help(self.catalog, ctx)

    def hover(self, text: str, line: int, character: int) -> Optional[Dict[str, Any]]:
        current = self._line(text, line)
        if self.catalog is None or current is None:
            return None
        ctx = self.resolver.word(current, character)
        return build_hover(self.catalog, ctx, self.api_name)

    @staticmethod
    def _line(text: str, line: int) -> Optional[str]:
        lines = (text or "").replace("\r", "").split("\n")
        if line < 0 or line >= len(lines):
            return None
        return lines[line]
