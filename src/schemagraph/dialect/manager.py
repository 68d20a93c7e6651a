"""
Dialect registry: maps database product names and versions to dialects.

The mapping is an ordered YAML resource. Each entry names a product prefix,
an optional minimum version and the dialect class; the first entry matching
the product wins and UnknownDialect is the fallback.
"""

from __future__ import annotations

import functools
import importlib
import logging
import re
import threading
from dataclasses import dataclass
from importlib import resources
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from schemagraph.dialect.base import DatabaseDialect
from schemagraph.dialect.unknown import UnknownDialect
from schemagraph.errors import ConfigurationError

logger = logging.getLogger(__name__)

REGISTRY_PACKAGE = "schemagraph.dialect.resources"
REGISTRY_FILE = "dialects.yaml"

_VERSION_PATTERN = re.compile(r"\d+(?:\.\d+)*")


@functools.total_ordering
class VersionNumber:
    """
    Numeric, dotted version number.

    Vendor version strings often carry text ('10.4 (Debian 10.4-2)' or
    'Oracle Database 11g Release 11.2.0.1.0'); the first dotted number run
    is used. Trailing zero components do not matter, so '2' equals '2.0.0'.
    """

    def __init__(self, components: Tuple[int, ...]):
        self.components = components

    @classmethod
    def parse(cls, text: Union[str, "VersionNumber", None]) -> Optional[VersionNumber]:
        if text is None or isinstance(text, VersionNumber):
            return text
        match = _VERSION_PATTERN.search(str(text))
        if match is None:
            return None
        return cls(tuple(int(part) for part in match.group().split(".")))

    def _normalized(self) -> Tuple[int, ...]:
        components = list(self.components)
        while components and components[-1] == 0:
            components.pop()
        return tuple(components)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, VersionNumber):
            return NotImplemented
        return self._normalized() == other._normalized()

    def __lt__(self, other: "VersionNumber") -> bool:
        return self._normalized() < other._normalized()

    def __hash__(self) -> int:
        return hash(self._normalized())

    def __str__(self) -> str:
        return ".".join(str(c) for c in self.components)

    def __repr__(self) -> str:
        return f"VersionNumber({str(self)!r})"


@dataclass(frozen=True)
class DialectRule:
    """One registry entry."""
    product: str
    dialect: str
    min_version: Optional[VersionNumber] = None

    def matches(self, normalized_product: str, version: Optional[VersionNumber]) -> bool:
        if self.product not in normalized_product:
            return False
        return self.min_version is None or version is None or version >= self.min_version

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DialectRule:
        try:
            product = str(data["product"]).lower()
            dialect = data["dialect"]
        except KeyError as e:
            raise ConfigurationError(f"Dialect registry entry lacks {e}: {data}") from e
        min_version = data.get("min_version")
        return cls(
            product=product,
            dialect=dialect,
            min_version=VersionNumber.parse(str(min_version)) if min_version is not None else None,
        )


_rules: Optional[List[DialectRule]] = None
_rules_lock = threading.Lock()


def load_rules() -> List[DialectRule]:
    """Read the registry resource once per process."""
    global _rules
    with _rules_lock:
        if _rules is None:
            text = resources.files(REGISTRY_PACKAGE).joinpath(REGISTRY_FILE).read_text(encoding="utf-8")
            data = yaml.safe_load(text) or {}
            _rules = [DialectRule.from_dict(entry) for entry in data.get("dialects", [])]
            logger.debug(f"Loaded {len(_rules)} dialect rules")
        return _rules


def normalize_product_name(product_name: str) -> str:
    return product_name.lower().replace(" ", "_")


def get_dialect_for_product(
    product_name: Optional[str],
    product_version: Union[str, VersionNumber, None] = None,
    rules: Optional[List[DialectRule]] = None,
) -> DatabaseDialect:
    """
    Create the dialect for a database product.

    Args:
        product_name: Product name as reported by the driver, e.g. 'HSQL Database Engine'
        product_version: Version string or VersionNumber; None matches any min_version
        rules: Rules to use instead of the packaged registry

    Returns:
        A new dialect instance, UnknownDialect if no rule matches

    Raises:
        ConfigurationError: If a matching rule names a class that cannot be loaded
    """
    if product_name is None:
        return UnknownDialect("unknown")
    normalized = normalize_product_name(product_name)
    version = VersionNumber.parse(product_version)
    for rule in rules if rules is not None else load_rules():
        if rule.matches(normalized, version):
            logger.debug(f"Using {rule.dialect} for {product_name} {product_version or ''}")
            return _load_dialect_class(rule.dialect)()
    logger.info(f"No dialect registered for {product_name}, using UnknownDialect")
    return UnknownDialect(product_name)


def _load_dialect_class(path: str) -> type:
    module_name, _, class_name = path.rpartition(".")
    try:
        module = importlib.import_module(module_name)
        dialect_class = getattr(module, class_name)
    except (ImportError, AttributeError, ValueError) as e:
        raise ConfigurationError(f"Cannot load dialect class {path}: {e}") from e
    if not (isinstance(dialect_class, type) and issubclass(dialect_class, DatabaseDialect)):
        raise ConfigurationError(f"{path} is not a DatabaseDialect")
    return dialect_class
