"""ScrollScore — Table Classifier.

Maps a subject (usually a set of capability flags) to a tier label via an
ordered table of rules. The first matching rule wins and the last rule
must be unconditional, so classification is total.

Rules come from code (predicates) or from configuration:

    - label: full
      when: [webxr]          # every listed flag must be true
    - label: high
      min: 85                # numeric subject >= 85
    - label: none            # no condition: the default
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

from scrollscore.errors import InvalidConfiguration, TableIncomplete
from scrollscore.utils.logger import get_logger

logger = get_logger(__name__)


class CapabilityFlagSet(Mapping[str, bool]):
    """Read-only set of named booleans describing a runtime environment.

    Undeclared flags read as False.
    """

    def __init__(self, flags: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        merged = dict(flags or {})
        merged.update(kwargs)
        self._flags = MappingProxyType({k: bool(v) for k, v in merged.items()})

    def __getitem__(self, name: str) -> bool:
        return self._flags.get(name, False)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def enabled(self) -> list[str]:
        """Names of the flags that are set."""
        return [name for name, value in self._flags.items() if value]

    def __repr__(self) -> str:
        return f"CapabilityFlagSet({dict(self._flags)!r})"


@dataclass(frozen=True)
class TierRule:
    """One row of a tier table.

    Attributes:
        label: Tier label returned when the rule matches.
        requires: Flags that must all be true.
        predicate: Extra condition over the subject.
    """

    label: str
    requires: tuple[str, ...] = ()
    predicate: Optional[Callable[[Any], bool]] = None

    @property
    def is_default(self) -> bool:
        return not self.requires and self.predicate is None

    def matches(self, subject: Any) -> bool:
        if self.requires and not all(subject[flag] for flag in self.requires):
            return False
        if self.predicate is not None and not self.predicate(subject):
            return False
        return True


def _at_least(threshold: float) -> Callable[[Any], bool]:
    def predicate(value: Any) -> bool:
        return value >= threshold

    predicate.__name__ = f"at_least_{threshold}"
    return predicate


class TierTable:
    """Ordered tier rules, validated once at construction.

    Attributes:
        rules: The rules in evaluation order.
    """

    def __init__(self, rules: Iterable[TierRule]) -> None:
        """Validate and store the rules.

        Raises:
            TableIncomplete: If the table is empty or its last rule is
                conditional.
        """
        self.rules = tuple(rules)
        labels = [rule.label for rule in self.rules]
        if not self.rules or not self.rules[-1].is_default:
            raise TableIncomplete(labels)

        for index, rule in enumerate(self.rules[:-1]):
            if rule.is_default:
                logger.warning(
                    "Tier '%s' is unconditional at position %d; "
                    "rules after it are unreachable: %s",
                    rule.label, index, labels[index + 1:],
                )
                break

    @classmethod
    def from_config(cls, entries: Sequence[Mapping[str, Any]]) -> "TierTable":
        """Build a table from configuration entries.

        Each entry has a `label` and optionally `when` (list of flags that
        must all be true) and/or `min` (numeric lower bound, inclusive).

        Raises:
            InvalidConfiguration: If an entry is malformed.
            TableIncomplete: If the last entry has a condition.
        """
        rules = []
        for index, entry in enumerate(entries):
            if "label" not in entry:
                raise InvalidConfiguration(f"Tier rule #{index} has no label")
            unknown = set(entry) - {"label", "when", "min"}
            if unknown:
                raise InvalidConfiguration(
                    f"Tier rule '{entry['label']}' has unknown keys: "
                    f"{', '.join(sorted(unknown))}"
                )

            when = entry.get("when") or ()
            if isinstance(when, str):
                when = (when,)
            predicate = _at_least(entry["min"]) if "min" in entry else None

            rules.append(TierRule(
                label=str(entry["label"]),
                requires=tuple(str(flag) for flag in when),
                predicate=predicate,
            ))
        return cls(rules)

    @property
    def labels(self) -> tuple[str, ...]:
        """Declared labels in evaluation order, without repeats."""
        return tuple(dict.fromkeys(rule.label for rule in self.rules))

    @property
    def default(self) -> str:
        """Label of the terminal default rule."""
        return self.rules[-1].label

    def classify(self, subject: Any) -> str:
        """Return the label of the first rule matching subject."""
        for rule in self.rules:
            if rule.matches(subject):
                return rule.label
        # unreachable: the terminal rule always matches
        return self.default

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"TierTable({list(self.labels)!r})"


def classify(flags: Any, rules: TierTable) -> str:
    """Classify flags with a validated tier table."""
    return rules.classify(flags)
