"""Tabela de aliases de campos de formulário (versionada).

Formulários antigos e novos usam rótulos diferentes para o mesmo dado
("E-mail", "Your Email", "email_address"...). A resolução acontece uma única
vez, na borda; tudo depois do normalizer usa só os nomes canônicos.

Ao adicionar/remover aliases, incremente FORM_ALIAS_TABLE_VERSION: a versão é
gravada no receipt para permitir reprocessamento auditável.
"""

from __future__ import annotations

import re

FORM_ALIAS_TABLE_VERSION = 3

# nome canônico -> rótulos históricos (já em forma "dobrada", ver fold_label)
FORM_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "event_id": ("eventid", "idempotency_key", "submission_id"),
    "email": ("e_mail", "email_address", "your_email", "work_email", "mail"),
    "first_name": ("firstname", "first", "fname", "given_name", "your_name"),
    "last_name": ("lastname", "last", "lname", "surname", "family_name"),
    "step": ("stage", "current_step", "form_step"),
    "company": ("company_name", "organization", "organisation", "business"),
    "phone": ("phone_number", "telephone", "tel", "mobile"),
    "website": ("url", "site", "company_website"),
    "budget": ("budget_range", "estimated_budget"),
    "timeline": ("deadline", "timeframe", "time_frame"),
    "message": ("msg", "details", "description", "comments", "notes", "body"),
    "consent": ("privacy_consent", "terms", "agree", "accept_terms", "gdpr"),
    "newsletter": ("subscribe", "marketing_opt_in", "opt_in"),
    "order_id": ("code", "order", "order_code", "order_token", "token"),
    "completed": ("done", "complete", "is_completed", "checked"),
    "plan": ("item", "package", "tier"),
    "subject": ("topic", "title", "summary"),
    "category": ("type", "kind", "support_type"),
}

# Rótulos de transporte (botões, honeypots, tokens de formulário): descartados
IGNORED_FIELD_LABELS: frozenset[str] = frozenset({
    "submit",
    "send",
    "action",
    "form_name",
    "form_id",
    "bot_field",
    "honeypot",
    "csrf_token",
    "g_recaptcha_response",
    "cf_turnstile_response",
    "referrer",
})

IGNORED_FIELD_PREFIXES: tuple[str, ...] = ("utm_", "_")

_FOLD_SEPARATORS = re.compile(r"[\s\-.]+")
_FOLD_REPEATED = re.compile(r"_+")


def fold_label(label: str) -> str:
    """Normaliza rótulo: minúsculas, espaços/hífens/pontos viram `_`."""
    folded = _FOLD_SEPARATORS.sub("_", label.strip().lower())
    return _FOLD_REPEATED.sub("_", folded).rstrip("_")


def _build_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for canonical, aliases in FORM_FIELD_ALIASES.items():
        for label in (canonical, *aliases):
            if label in lookup and lookup[label] != canonical:
                raise ValueError(f"Alias duplicado: {label}")
            lookup[label] = canonical
    return lookup


_ALIAS_LOOKUP = _build_lookup()


def is_ignored_label(label: str) -> bool:
    folded = fold_label(label)
    return folded in IGNORED_FIELD_LABELS or folded.startswith(IGNORED_FIELD_PREFIXES)


def resolve_field(label: str) -> str | None:
    """Retorna o nome canônico do rótulo, ou None se desconhecido."""
    return _ALIAS_LOOKUP.get(fold_label(label))
