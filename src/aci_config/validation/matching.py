"""Product type matching against the GetVersion ``producttypecsv``."""

from __future__ import annotations

from collections.abc import Iterable

from aci_config.models import ByEnumSet, ByRegex, IncorrectServerType, MatchRule, Validation


def split_product_types(csv: str) -> set[str]:
    """Split a ``producttypecsv`` value into its tokens."""
    return {token for token in csv.split(",") if token}


def matches(rule: MatchRule, server_product_types: Iterable[str]) -> bool:
    """Return True if the server's product types satisfy ``rule``.

    Enum sets compare token names exactly; regexes must match a whole token.
    """
    tokens = set(server_product_types)
    match rule:
        case ByRegex(pattern=pattern):
            return any(pattern.fullmatch(token) for token in tokens)
        case ByEnumSet(product_types=product_types):
            return any(p.name in tokens for p in product_types)
    raise TypeError(f"Unknown match rule: {rule!r}")


def mismatch_reason(rule: MatchRule) -> Validation | IncorrectServerType:
    """The reason to report when ``rule`` did not match."""
    if isinstance(rule, ByRegex):
        # no friendly names for a pattern
        return Validation.REGULAR_EXPRESSION_MATCH_ERROR
    return IncorrectServerType(friendly_names=tuple(p.friendly_name for p in rule.product_types))
