#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
carlapi_core.py — Núcleo para ler o carla_api.json e interpretar assinaturas

- load_catalog / parse_catalog: JSON -> catálogo imutável (classes, métodos, propriedades).
- parse_signature: "spawn_actor(self, blueprint: ActorBlueprint, ...)" -> parâmetros.
- Falhas de carga viram CatalogNotFound / CatalogParseError (ambas CatalogLoadError).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import json
from pathlib import Path
import re


RECEIVER_NAMES = ("self",)


# -------------------------
# Erros
# -------------------------

class CatalogLoadError(Exception):
    """Catálogo ausente ou malformado; desliga completion/hover/signature help."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class CatalogNotFound(CatalogLoadError):
    pass


class CatalogParseError(CatalogLoadError):
    pass


# -------------------------
# Estruturas de dados leves
# -------------------------

@dataclass(frozen=True)
class MethodEntry:
    name: str
    signature: str = ""
    docstring: str = ""


@dataclass(frozen=True)
class PropertyEntry:
    name: str
    docstring: str = ""
    readable: bool = False
    writable: bool = False

    def access(self) -> str:
        flags = []
        if self.readable: flags.append("Read")
        if self.writable: flags.append("Write")
        return "/".join(flags)


@dataclass(frozen=True)
class ClassEntry:
    name: str
    docstring: str = ""
    base_classes: Tuple[str, ...] = ()
    methods: Mapping[str, MethodEntry] = field(default_factory=lambda: MappingProxyType({}))
    properties: Mapping[str, PropertyEntry] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "docstring": self.docstring,
            "base_classes": list(self.base_classes),
            "methods": {
                n: {"signature": m.signature, "docstring": m.docstring}
                for n, m in self.methods.items()
            },
            "properties": {
                n: {"docstring": p.docstring, "readable": p.readable, "writable": p.writable}
                for n, p in self.properties.items()
            },
        }


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    type: Optional[str] = None
    default: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.type is not None:
            out["type"] = self.type
        if self.default is not None:
            out["default"] = self.default
        return out


# nome_da_classe -> ClassEntry (somente leitura)
ApiCatalog = Mapping[str, ClassEntry]


# ------------
# Carregamento
# ------------

def load_catalog(source_path: str | Path) -> ApiCatalog:
    path = Path(source_path)
    try:
        with path.open("rb") as f:
            raw = f.read()
    except OSError as e:
        raise CatalogNotFound(f"catálogo não encontrado ou ilegível: {e.strerror or e}", path) from e
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise CatalogParseError(f"JSON inválido: {e}", path) from e
    try:
        return parse_catalog(data)
    except CatalogParseError as e:
        e.path = path
        raise


def parse_catalog(data: Any) -> ApiCatalog:
    if not isinstance(data, dict):
        raise CatalogParseError("documento raiz deve ser um objeto")
    if "classes" not in data:
        raise CatalogParseError("classes: campo obrigatório ausente")
    classes = _expect(data["classes"], dict, "classes")

    catalog: Dict[str, ClassEntry] = {}
    for cname, c in classes.items():
        where = f"classes.{cname}"
        c = _expect(c, dict, where)

        methods: Dict[str, MethodEntry] = {}
        for mn, m in _expect(c.get("methods", {}), dict, f"{where}.methods").items():
            m = _expect(m, dict, f"{where}.methods.{mn}")
            methods[mn] = MethodEntry(
                name=mn,
                signature=_expect(m.get("signature", ""), str, f"{where}.methods.{mn}.signature"),
                docstring=_expect(m.get("docstring", ""), str, f"{where}.methods.{mn}.docstring"),
            )

        props: Dict[str, PropertyEntry] = {}
        for pn, p in _expect(c.get("properties", {}), dict, f"{where}.properties").items():
            p = _expect(p, dict, f"{where}.properties.{pn}")
            props[pn] = PropertyEntry(
                name=pn,
                docstring=_expect(p.get("docstring", ""), str, f"{where}.properties.{pn}.docstring"),
                readable=_expect(p.get("readable", False), bool, f"{where}.properties.{pn}.readable"),
                writable=_expect(p.get("writable", False), bool, f"{where}.properties.{pn}.writable"),
            )

        bases = [
            _expect(b, str, f"{where}.base_classes[{i}]")
            for i, b in enumerate(_expect(c.get("base_classes", []), list, f"{where}.base_classes"))
        ]

        catalog[cname] = ClassEntry(
            name=cname,
            docstring=_expect(c.get("docstring", ""), str, f"{where}.docstring"),
            base_classes=tuple(b for b in bases if b),
            methods=MappingProxyType(methods),
            properties=MappingProxyType(props),
        )

    return MappingProxyType(catalog)


def _expect(value: Any, kind: type, where: str) -> Any:
    # null conta como campo ausente
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise CatalogParseError(f"{where}: esperado {kind.__name__}, veio {type(value).__name__}")
    return value


def catalog_info(catalog: ApiCatalog) -> Dict[str, int]:
    return {
        "classes": len(catalog),
        "methods": sum(len(c.methods) for c in catalog.values()),
        "properties": sum(len(c.properties) for c in catalog.values()),
    }


# ---------------------
# Parser de assinaturas
# ---------------------

_TYPED_PARAM = re.compile(r"(\w+)\s*:\s*([^=]+?)(?:\s*=\s*(.+))?$")


def parse_signature(raw: str) -> List[ParameterDescriptor]:
    inner = _param_list(raw or "")
    if inner is None:
        return []

    out: List[ParameterDescriptor] = []
    for token in split_parameters(inner):
        token = token.strip()
        if not token or _param_name(token) in RECEIVER_NAMES:
            continue
        p = _parse_param(token)
        if p is not None and p.name not in RECEIVER_NAMES:
            out.append(p)
    return out


def split_parameters(inner: str) -> List[str]:
    """Divide a lista de parâmetros em vírgulas, sem olhar profundidade.

    `Dict[str, int] = {}` quebra em dois tokens; quem precisar disso troca esta função.
    """
    return inner.split(",")


def _param_list(raw: str) -> Optional[str]:
    start = raw.find("(")
    if start < 0:
        return None
    depth = 0
    for i in range(start, len(raw)):
        ch = raw[i]
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return raw[start + 1:i]
    return None


def _param_name(token: str) -> str:
    return token.split("=", 1)[0].split(":", 1)[0].strip()


def _parse_param(token: str) -> Optional[ParameterDescriptor]:
    m = _TYPED_PARAM.search(token)
    if m:
        return ParameterDescriptor(
            name=m.group(1),
            type=m.group(2).strip(),
            default=(m.group(3) or "").strip() or None,
        )
    # sem anotação (ou anotação quebrada)
    name_part, sep, default = token.partition("=")
    name = name_part.split(":", 1)[0].strip()
    if not name:
        return None
    if not sep:
        return ParameterDescriptor(name=name)
    return ParameterDescriptor(name=name, default=default.strip() or None)
