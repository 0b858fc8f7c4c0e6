"""Ordered rule chains for field extraction.

Each field is resolved by a chain of named rules tried in priority
order; the first rule returning a value wins, and an exhausted chain
yields the ``"Not found"`` sentinel. Rules read the recognized text of
the region labels they declare.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from idscan.models import NOT_FOUND
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

RuleFunc = Callable[[str], str | None]


@dataclass(frozen=True)
class Rule:
    """A named, pure text-to-value heuristic bound to its source regions."""

    name: str
    func: RuleFunc
    sources: tuple[str, ...]

    def apply(self, texts: Mapping[str, str]) -> str | None:
        text = "\n".join(texts.get(label, "") for label in self.sources)
        value = self.func(text)
        return value or None


@dataclass(frozen=True)
class FieldMatch:
    """Resolved value for one field and the rule that produced it."""

    field_name: str
    value: str
    rule_name: str | None

    @property
    def found(self) -> bool:
        return self.rule_name is not None


@dataclass(frozen=True)
class RuleChain:
    """Rules for a single field, in priority order."""

    field_name: str
    rules: tuple[Rule, ...]

    def resolve(self, texts: Mapping[str, str]) -> FieldMatch:
        for rule in self.rules:
            value = rule.apply(texts)
            if value is not None:
                logger.debug(
                    "Field %s resolved by rule %s: %r",
                    self.field_name,
                    rule.name,
                    value,
                )
                return FieldMatch(self.field_name, value, rule.name)
        logger.debug("Field %s not found", self.field_name)
        return FieldMatch(self.field_name, NOT_FOUND, None)


class RuleEngine:
    """Runs a set of rule chains over the texts recognized for one run."""

    def __init__(self, chains: tuple[RuleChain, ...] | list[RuleChain]) -> None:
        self.chains = tuple(chains)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(chain.field_name for chain in self.chains)

    def run(self, texts: Mapping[str, str]) -> dict[str, FieldMatch]:
        """Resolve every chain against ``texts``.

        Args:
            texts: Recognized text keyed by region label.

        Returns:
            Field name to match, in chain order.
        """
        matches = {chain.field_name: chain.resolve(texts) for chain in self.chains}
        found = sum(1 for m in matches.values() if m.found)
        logger.info("Rule extraction resolved %d/%d fields", found, len(matches))
        return matches
