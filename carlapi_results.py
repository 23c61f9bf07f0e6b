#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
carlapi_results.py — Monta completion, signature help e hover a partir do catálogo

Funções puras: recebem o catálogo e um contexto já resolvido, devolvem dicts
no formato que o editor espera (LSP-like). Nada é guardado entre chamadas.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from carlapi_context import BareWordContext, CallContext, Context, DotContext
from carlapi_core import (
    ApiCatalog,
    ClassEntry,
    MethodEntry,
    ParameterDescriptor,
    PropertyEntry,
    parse_signature,
)

NO_DOCS = "No documentation available"

KIND_CLASS = "class"
KIND_METHOD = "method"
KIND_PROPERTY = "property"

# prefixo de ordenação: classes, métodos, propriedades
RANK = {KIND_CLASS: "0", KIND_METHOD: "1", KIND_PROPERTY: "2"}


# ----------
# Completion
# ----------

def build_completions(catalog: ApiCatalog, context: Context, api_name: str = "CARLA") -> List[Dict[str, Any]]:
    if isinstance(context, DotContext):
        c = catalog.get(context.class_name)
        if c is None:
            return []
        items = [_method_item(m) for m in c.methods.values()]
        items += [_property_item(p) for p in c.properties.values()]
    else:
        items = [_class_item(c, api_name) for c in catalog.values()]
    return sorted(items, key=lambda it: it["sortText"])


def _class_item(c: ClassEntry, api_name: str) -> Dict[str, Any]:
    return {
        "label": c.name,
        "kind": KIND_CLASS,
        "documentation": _markdown(c.docstring or f"{api_name} {c.name} class"),
        "sortText": RANK[KIND_CLASS] + c.name,
    }


def _method_item(m: MethodEntry) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "label": m.name,
        "kind": KIND_METHOD,
        "detail": m.signature or f"{m.name}()",
        "documentation": _markdown(_fmt_codeblock(m.signature or f"{m.name}()") + "\n\n" + (m.docstring or NO_DOCS)),
        "insertText": m.name,
        "sortText": RANK[KIND_METHOD] + m.name,
    }
    params = parse_signature(m.signature)
    if params:
        item["insertText"] = _fmt_snippet(m.name, params)
        item["insertTextFormat"] = "snippet"
    return item


def _property_item(p: PropertyEntry) -> Dict[str, Any]:
    return {
        "label": p.name,
        "kind": KIND_PROPERTY,
        "detail": f"{p.access()} Property".strip(),
        "documentation": _markdown(f"**{p.access()} Property**\n\n" + (p.docstring or NO_DOCS)),
        "sortText": RANK[KIND_PROPERTY] + p.name,
    }


# --------------
# Signature help
# --------------

def build_signature_help(catalog: ApiCatalog, context: Context) -> Optional[Dict[str, Any]]:
    if not isinstance(context, CallContext):
        return None
    c = catalog.get(context.class_name)
    if c is None or context.method_name not in c.methods:
        return None
    m = c.methods[context.method_name]
    return {
        "signatures": [
            {
                "label": m.signature,
                "documentation": _markdown(m.docstring),
                "parameters": [_parameter_info(p) for p in parse_signature(m.signature)],
            }
        ],
        "activeSignature": 0,
        "activeParameter": max(0, context.active_parameter),
    }


def _parameter_info(p: ParameterDescriptor) -> Dict[str, Any]:
    doc = f"Parameter: `{p.name}`\n\n"
    if p.type:
        doc += f"Type: `{p.type}`\n\n"
    if p.default:
        doc += f"Default: `{p.default}`\n\n"
    return {
        "label": f"{p.name}: {p.type}" if p.type else p.name,
        "documentation": _markdown(doc),
    }


# -----
# Hover
# -----

def build_hover(catalog: ApiCatalog, context: Context, api_name: str = "CARLA") -> Optional[Dict[str, Any]]:
    if not isinstance(context, BareWordContext):
        return None
    word = context.word

    c = catalog.get(word)
    if c is not None:
        return _hover(
            f"**{api_name} Class: {word}**\n\n"
            + (c.docstring or NO_DOCS)
            + "\n\nBase classes: " + ", ".join(c.base_classes)
        )

    owner = catalog.get(context.class_guess) if context.class_guess else None
    if owner is None:
        return None

    m = owner.methods.get(word)
    if m is not None:
        return _hover(
            f"**Method: {owner.name}.{word}**\n\n"
            + _fmt_codeblock(m.signature)
            + "\n\n" + (m.docstring or NO_DOCS)
        )

    p = owner.properties.get(word)
    if p is not None:
        access = f"**{p.access()} Property**\n\n" if p.access() else ""
        return _hover(
            f"**Property: {owner.name}.{word}**\n\n"
            + access
            + (p.docstring or NO_DOCS)
        )
    return None


# -------------------
# Utilitários de formatação
# -------------------

def _markdown(value: str) -> Dict[str, str]:
    return {"kind": "markdown", "value": value}


def _hover(value: str) -> Dict[str, Any]:
    return {"contents": _markdown(value)}


def _fmt_codeblock(code: str, lang: str = "python") -> str:
    return f"```{lang}\n{code}\n```"


def _fmt_snippet(name: str, params: List[ParameterDescriptor]) -> str:
    holes = ", ".join(f"${{{i}:{p.name}}}" for i, p in enumerate(params, 1))
    return f"{name}({holes})"
