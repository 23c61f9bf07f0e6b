#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
carlapi_context.py — Heurísticas de contexto (somente a linha atual)

Não há tokenizer nem inferência de tipo: "vehicle." é tratado como se "vehicle"
fosse o nome de uma classe do catálogo. Tudo passa por resolve_context para que
um parser de verdade possa substituir esta camada sem mexer nos builders.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

import re


# -------------------------
# Contextos
# -------------------------

@dataclass(frozen=True)
class DotContext:
    class_name: str


@dataclass(frozen=True)
class CallContext:
    class_name: str
    method_name: str
    active_parameter: int = 0


@dataclass(frozen=True)
class BareWordContext:
    word: str
    class_guess: Optional[str] = None


@dataclass(frozen=True)
class NoContext:
    pass


Context = Union[DotContext, CallContext, BareWordContext, NoContext]

NO_CONTEXT = NoContext()


# -------------------------
# Resolução
# -------------------------

class ContextResolver:
    DOT = re.compile(r"(\w+)\.\s*$")
    CALL = re.compile(r"(\w+)\.(\w+)\s*\(")
    WORD = re.compile(r"\w+")
    TRAILING_IDENT = re.compile(r"(\w+)\s*$")

    def resolve(self, line: str, cursor: int) -> Context:
        for matcher in (self.dot, self.call, self.word):
            ctx = matcher(line, cursor)
            if not isinstance(ctx, NoContext):
                return ctx
        return NO_CONTEXT

    def dot(self, line: str, cursor: int) -> Context:
        m = self.DOT.search(_prefix(line, cursor))
        if not m:
            return NO_CONTEXT
        return DotContext(m.group(1))

    def call(self, line: str, cursor: int) -> Context:
        prefix = _prefix(line, cursor)
        matches = list(self.CALL.finditer(prefix))
        if not matches:
            return NO_CONTEXT
        last = matches[-1]
        active = prefix.count(",", last.end())
        return CallContext(last.group(1), last.group(2), max(0, active))

    def word(self, line: str, cursor: int) -> Context:
        cursor = _clamp(line, cursor)
        for m in self.WORD.finditer(line):
            if m.start() <= cursor <= m.end():
                return BareWordContext(m.group(0), self._class_guess(line, cursor))
            if m.start() > cursor:
                break
        return NO_CONTEXT

    def _class_guess(self, line: str, cursor: int) -> Optional[str]:
        dot = line.rfind(".", 0, cursor + 1)
        if dot <= 0:
            return None
        m = self.TRAILING_IDENT.search(line[:dot])
        return m.group(1) if m else None


def _clamp(line: str, cursor: int) -> int:
    return max(0, min(cursor, len(line)))


def _prefix(line: str, cursor: int) -> str:
    return line[:_clamp(line, cursor)]


default_resolver = ContextResolver()


def resolve_context(line: str, cursor: int) -> Context:
    return default_resolver.resolve(line, cursor)
