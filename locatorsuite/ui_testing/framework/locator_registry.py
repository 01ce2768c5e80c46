"""
================================================================================
Locator Registry
================================================================================

Loads YAML locator files, caches them per process and resolves
`(page_name, element_key)` pairs to selector expressions.

Locator file layout (`<root>/<page_name>.yaml`), any of:

    loginPage:                 login:                  usernameInput: "#username"
      usernameInput: "#u"        usernameInput: "#u"   loginButton: "text=Sign in"

Lookup order for a key: `<page>Page` -> `<page>` -> document root.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger

from locatorsuite.common.config_loader import ConfigLoader

from .exceptions import (
    ClassifiedError,
    ErrorType,
    LocatorFileNotFoundError,
    LocatorNotFoundError,
)
from .selector_resolver import Selector, classify


ROOT_NAMESPACE = ""


def namespaces_for(page_name: str) -> List[str]:
    """Namespace keys searched for a page, in priority order."""
    return [f"{page_name}Page", page_name, ROOT_NAMESPACE]


@dataclass
class LocatorDocument:
    """
    Parsed locator file for one page.

    Attributes:
        page_name: Page name the file was loaded for
        source: Absolute path of the YAML file
        data: Raw mapping as parsed from YAML
        selectors: Selectors parsed at load time, keyed by namespace then key
    """
    page_name: str
    source: Path
    data: Dict[str, Any]
    selectors: Dict[str, Dict[str, Selector]] = field(default_factory=dict)

    @classmethod
    def parse(cls, page_name: str, source: Path, data: Dict[str, Any]) -> "LocatorDocument":
        selectors: Dict[str, Dict[str, Selector]] = {}
        for namespace in namespaces_for(page_name):
            section = data if namespace == ROOT_NAMESPACE else data.get(namespace)
            if not isinstance(section, dict):
                continue
            selectors[namespace] = cls._parse_section(page_name, source, section)
        return cls(page_name=page_name, source=source, data=data, selectors=selectors)

    @staticmethod
    def _parse_section(
        page_name: str, source: Path, section: Dict[str, Any]
    ) -> Dict[str, Selector]:
        parsed: Dict[str, Selector] = {}
        for key, value in section.items():
            # Nested mappings are namespaces; blank entries count as missing
            if isinstance(value, dict) or value is None or value == "":
                continue
            if not isinstance(value, str):
                raise ClassifiedError(
                    f"Locator {page_name}.{key} must be a selector string, "
                    f"got {type(value).__name__}: {value!r}",
                    ErrorType.VALIDATION_ERROR,
                    details={"path": str(source), "key": str(key), "value": value},
                )
            parsed[str(key)] = classify(value)
        return parsed

    def find(self, element_key: str) -> Optional[Selector]:
        for namespace in namespaces_for(self.page_name):
            selector = self.selectors.get(namespace, {}).get(element_key)
            if selector is not None:
                return selector
        return None


class LocatorCache:
    """
    Page name -> LocatorDocument store.

    No TTL and no eviction; entries go away only through `clear()`.
    Construct one per test session (or per test for isolation).
    """

    def __init__(self) -> None:
        self._documents: Dict[str, LocatorDocument] = {}
        self.stats: Dict[str, int] = {"hits": 0, "misses": 0}

    def get(self, page_name: str) -> Optional[LocatorDocument]:
        document = self._documents.get(page_name)
        if document is None:
            self.stats["misses"] += 1
        else:
            self.stats["hits"] += 1
        return document

    def put(self, document: LocatorDocument) -> None:
        self._documents[document.page_name] = document

    def clear(self) -> None:
        self._documents.clear()

    def __contains__(self, page_name: str) -> bool:
        return page_name in self._documents

    def __len__(self) -> int:
        return len(self._documents)


class LocatorRegistry:
    """
    YAML locator registry backed by an explicit LocatorCache.

    Usage:
        >>> registry = LocatorRegistry("config/locators")
        >>> registry.resolve("login", "usernameInput")
        '#username'
        >>> registry.resolve_selector("login", "forgotPasswordLink").kind
        <SelectorKind.TEXT: 'text'>
    """

    def __init__(
        self,
        root: Union[str, Path],
        extension: str = "yaml",
        cache: Optional[LocatorCache] = None,
    ) -> None:
        """
        Args:
            root: Directory holding `<page_name>.<extension>` files
            extension: File extension without the dot
            cache: Cache to use; a fresh one is created when omitted
        """
        self.root = Path(root)
        self.extension = extension.lstrip(".")
        self.cache = cache if cache is not None else LocatorCache()

    @classmethod
    def from_config(
        cls,
        config: Optional[ConfigLoader] = None,
        cache: Optional[LocatorCache] = None,
    ) -> "LocatorRegistry":
        config = config or ConfigLoader()
        return cls(
            root=config.get_path("locators.root"),
            extension=config.get("locators.extension", "yaml"),
            cache=cache,
        )

    def path_for(self, page_name: str) -> Path:
        return (self.root / f"{page_name}.{self.extension}").resolve()

    def load(self, page_name: str) -> LocatorDocument:
        """
        Return the cached document, reading the file on first use.

        Raises:
            LocatorFileNotFoundError: Backing file does not exist
            ClassifiedError: VALIDATION_ERROR for invalid YAML, a non-mapping root
                or a non-string selector value
        """
        cached = self.cache.get(page_name)
        if cached is not None:
            return cached

        path = self.path_for(page_name)
        if not path.is_file():
            raise LocatorFileNotFoundError(str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ClassifiedError(
                f"Invalid YAML in locator file {path}: {e}",
                ErrorType.VALIDATION_ERROR,
                details={"path": str(path)},
            ) from e

        if not isinstance(data, dict):
            raise ClassifiedError(
                f"Locator file must contain a mapping: {path}",
                ErrorType.VALIDATION_ERROR,
                details={"path": str(path), "type": type(data).__name__},
            )

        document = LocatorDocument.parse(page_name, path, data)
        self.cache.put(document)
        logger.debug(f"Loaded locators for '{page_name}' from {path}")
        return document

    def resolve(self, page_name: str, element_key: str) -> str:
        """Return the selector expression for an element key."""
        return self.resolve_selector(page_name, element_key).raw

    def resolve_selector(self, page_name: str, element_key: str) -> Selector:
        """
        Return the parsed selector for an element key.

        Raises:
            LocatorNotFoundError: None of the three namespaces holds the key
        """
        selector = self.load(page_name).find(element_key)
        if selector is None:
            raise LocatorNotFoundError(page_name, element_key)
        return selector

    def list_all(self, page_name: str) -> Dict[str, Any]:
        """Return the whole parsed document for a page."""
        return self.load(page_name).data

    def clear_cache(self) -> None:
        """Forget every loaded document; the next lookup re-reads from disk."""
        self.cache.clear()
        logger.debug("Locator cache cleared")


__all__ = [
    "LocatorDocument",
    "LocatorCache",
    "LocatorRegistry",
    "namespaces_for",
]
