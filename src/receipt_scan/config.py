"""Extraction rule configuration loaded from YAML."""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional

import yaml

from .exceptions import RulesConfigError

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "rules" / "extraction.yml"


@dataclass(frozen=True)
class AmountRule:
    """One row of the amount classification table."""
    name: str
    priority: int = 0
    keywords: List[str] = field(default_factory=list)
    pattern: Optional[re.Pattern] = None
    ignore: bool = False
    add_line_index: bool = False

    def matches(self, line_lower: str) -> bool:
        """Check a lower-cased line against this rule's keywords or pattern."""
        if any(keyword in line_lower for keyword in self.keywords):
            return True
        if self.pattern is not None and self.pattern.search(line_lower):
            return True
        return False

    def priority_for(self, line_idx: int) -> int:
        """Priority of an amount found on the given line."""
        if self.add_line_index:
            return self.priority + line_idx
        return self.priority


@dataclass(frozen=True)
class AmountRules:
    pattern: re.Pattern
    rules: List[AmountRule]


@dataclass(frozen=True)
class LocationRules:
    max_lines: int = 3
    min_length: int = 3
    exclude_substrings: List[str] = field(default_factory=list)
    exclude_keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DateFormat:
    name: str
    format: str


@dataclass(frozen=True)
class DateRules:
    formats: List[DateFormat]
    max_lines: int = 10
    window_years: int = 2


@dataclass(frozen=True)
class ItemRules:
    required_marker: str = "$"
    exclude_keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractionRules:
    """Complete rule set shared by all field parsers."""
    amount: AmountRules
    location: LocationRules
    date: DateRules
    items: ItemRules
    source: str = ""

    _default: ClassVar[Optional["ExtractionRules"]] = None

    @classmethod
    def default(cls) -> "ExtractionRules":
        """Packaged rules, loaded once."""
        if ExtractionRules._default is None:
            ExtractionRules._default = cls.load(DEFAULT_RULES_PATH)
        return ExtractionRules._default

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ExtractionRules":
        """
        Load extraction rules from a YAML file.

        Args:
            path: Path to the rules file, packaged defaults when omitted

        Returns:
            Parsed ExtractionRules

        Raises:
            RulesConfigError: If the file is missing or malformed
        """
        rules_path = Path(path) if path else DEFAULT_RULES_PATH
        try:
            with open(rules_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            logger.error(f"Failed to read extraction rules: {e}")
            raise RulesConfigError(f"Cannot read rules file {rules_path}: {e}") from e
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse extraction rules: {e}")
            raise RulesConfigError(f"Invalid YAML in {rules_path}: {e}") from e

        if not isinstance(data, dict):
            raise RulesConfigError(f"Rules file {rules_path} must contain a mapping")

        try:
            rules = cls(
                amount=_load_amount_rules(data['amount']),
                location=_load_location_rules(data.get('location') or {}),
                date=_load_date_rules(data['date']),
                items=_load_item_rules(data.get('items') or {}),
                source=str(rules_path),
            )
        except KeyError as e:
            raise RulesConfigError(f"Missing section {e} in {rules_path}") from e
        except (AttributeError, TypeError, ValueError, re.error) as e:
            raise RulesConfigError(f"Malformed rules in {rules_path}: {e}") from e

        logger.info(f"Loaded {len(rules.amount.rules)} amount rules and "
                    f"{len(rules.date.formats)} date formats from {rules_path.name}")
        return rules

    def describe(self) -> Dict[str, Any]:
        """Plain mapping of the active rules, for display."""
        return {
            'source': self.source,
            'amount': {
                'pattern': self.amount.pattern.pattern,
                'rules': [
                    {
                        'name': rule.name,
                        'priority': 'ignore' if rule.ignore else (
                            f"{rule.priority} + line index" if rule.add_line_index else rule.priority
                        ),
                        'match': rule.keywords or [rule.pattern.pattern if rule.pattern else ''],
                    }
                    for rule in self.amount.rules
                ],
            },
            'location': {
                'max_lines': self.location.max_lines,
                'min_length': self.location.min_length,
                'exclude': self.location.exclude_substrings + self.location.exclude_keywords,
            },
            'date': {
                'max_lines': self.date.max_lines,
                'window_years': self.date.window_years,
                'formats': [fmt.name for fmt in self.date.formats],
            },
            'items': {
                'required_marker': self.items.required_marker,
                'exclude_keywords': self.items.exclude_keywords,
            },
        }


def _load_amount_rules(section: Dict[str, Any]) -> AmountRules:
    rules = []
    for entry in section['rules']:
        pattern = entry.get('pattern')
        rule = AmountRule(
            name=entry['name'],
            priority=int(entry.get('priority', 0)),
            keywords=[str(kw).lower() for kw in entry.get('keywords') or []],
            pattern=re.compile(pattern, re.IGNORECASE) if pattern else None,
            ignore=bool(entry.get('ignore', False)),
            add_line_index=bool(entry.get('add_line_index', False)),
        )
        if not rule.keywords and rule.pattern is None:
            raise ValueError(f"amount rule '{rule.name}' has neither keywords nor pattern")
        rules.append(rule)
    compiled = re.compile(section['pattern'])
    if compiled.groups < 1:
        raise ValueError(f"amount pattern '{compiled.pattern}' has no capture group for the value")
    return AmountRules(pattern=compiled, rules=rules)


def _load_location_rules(section: Dict[str, Any]) -> LocationRules:
    return LocationRules(
        max_lines=int(section.get('max_lines', 3)),
        min_length=int(section.get('min_length', 3)),
        exclude_substrings=[str(s) for s in section.get('exclude_substrings') or []],
        exclude_keywords=[str(kw).lower() for kw in section.get('exclude_keywords') or []],
    )


def _load_date_rules(section: Dict[str, Any]) -> DateRules:
    formats = [DateFormat(name=str(f['name']), format=str(f['format'])) for f in section['formats']]
    if not formats:
        raise ValueError("at least one date format is required")
    return DateRules(
        formats=formats,
        max_lines=int(section.get('max_lines', 10)),
        window_years=int(section.get('window_years', 2)),
    )


def _load_item_rules(section: Dict[str, Any]) -> ItemRules:
    return ItemRules(
        required_marker=str(section.get('required_marker', '$')),
        exclude_keywords=[str(kw).lower() for kw in section.get('exclude_keywords') or []],
    )
