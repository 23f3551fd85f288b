"""Keyword tables behind the priority and duration suggestions.

Each table is an ordered list of rules evaluated top to bottom; the first rule
with a matching keyword wins, and inside a rule the first keyword in tuple
order is the one reported. Keywords match whole words of the lower-cased
"title description" text, with an optional plural "s"/"es" ("emails",
"deadlines"), so "read" does not fire on "ready" nor "call" on "recall".
Portuguese terms sit next to the English ones so tasks written in either
language are recognised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Optional, Tuple


@lru_cache(maxsize=None)
def keyword_pattern(keyword: str) -> "re.Pattern[str]":
    return re.compile(r"(?<!\w)" + re.escape(keyword) + r"(?:e?s)?(?!\w)")


@dataclass(frozen=True)
class KeywordRule:
    name: str
    keywords: Tuple[str, ...]
    value: Any
    reason: str

    def match(self, text: str) -> Optional[str]:
        for keyword in self.keywords:
            if keyword_pattern(keyword).search(text):
                return keyword
        return None

    def explain(self, keyword: str) -> str:
        return self.reason.format(keyword=keyword)


PRIORITY_RULES: List[KeywordRule] = [
    KeywordRule(
        name="high",
        keywords=(
            "urgent", "urgente", "asap", "immediate", "imediato",
            "critical", "crítico", "deadline", "prazo",
            "important", "importante", "priority", "prioridade",
            "client", "cliente", "meeting", "reunião",
            "presentation", "apresentação", "deliver", "entrega",
        ),
        value="high",
        reason='Contains high-priority keyword: "{keyword}"',
    ),
    KeywordRule(
        name="low",
        keywords=(
            "study", "estudar", "research", "pesquisar", "read", "ler",
            "learn", "aprender", "optional", "opcional",
            "when possible", "quando possível", "ideas", "ideias",
            "future", "futuro", "someday",
        ),
        value="low",
        reason='Learning or exploratory task: "{keyword}"',
    ),
]

DEFAULT_PRIORITY = "medium"
DEFAULT_PRIORITY_REASON = "Default priority based on context"


DURATION_RULES: List[KeywordRule] = [
    KeywordRule(
        name="quick",
        keywords=(
            "email", "reply", "responder", "call", "ligar",
            "schedule", "agendar", "confirm", "confirmar",
            "send", "enviar", "check", "verificar",
        ),
        value=15,
        reason='Based on complexity: "{keyword}"',
    ),
    KeywordRule(
        name="short",
        keywords=(
            "review", "revisar", "read", "ler", "update", "atualizar",
            "organize", "organizar", "clean", "limpar",
        ),
        value=30,
        reason='Based on complexity: "{keyword}"',
    ),
    KeywordRule(
        name="medium",
        keywords=(
            "prepare", "preparar", "create", "criar", "write", "escrever",
            "analyze", "analisar", "plan", "planejar", "configure", "configurar",
        ),
        value=60,
        reason='Based on complexity: "{keyword}"',
    ),
    KeywordRule(
        name="long",
        keywords=(
            "develop", "desenvolver", "implement", "implementar",
            "study", "estudar", "research", "pesquisar",
            "document", "documentar", "report", "relatório",
        ),
        value=120,
        reason='Based on complexity: "{keyword}"',
    ),
]

DEFAULT_MINUTES = 45
DEFAULT_DURATION_REASON = "Default estimate for a typical task"

LONG_DESCRIPTION_CHARS = 100
LONG_DESCRIPTION_FACTOR = 1.5
LONG_DESCRIPTION_NOTE = " (adjusted for detailed description)"


def first_match(rules: List[KeywordRule], text: str) -> Optional[Tuple[KeywordRule, str]]:
    for rule in rules:
        keyword = rule.match(text)
        if keyword is not None:
            return rule, keyword
    return None
