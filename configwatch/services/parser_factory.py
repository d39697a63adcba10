from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from configwatch.services.content_parser import PropertiesParser, RawContentParser, YamlParser
from configwatch.services.protocols import ContentParser


@dataclass
class ParserFactory:
    """Pick a content parser from the namespace's file extension.

    `override`, when set, wins for every namespace (see ConfigClient.set_parser).
    """

    properties_parser: ContentParser = field(default_factory=PropertiesParser)
    yaml_parser: ContentParser = field(default_factory=YamlParser)
    raw_parser: ContentParser = field(default_factory=RawContentParser)
    override: Optional[ContentParser] = None

    def get(self, namespace: str) -> ContentParser:
        if namespace is None or namespace.strip() == "":
            raise ValueError("namespace is required")
        if self.override is not None:
            return self.override
        name = namespace.strip().lower()
        if name.endswith((".yaml", ".yml")):
            return self.yaml_parser
        if name.endswith((".json", ".xml", ".txt")):
            return self.raw_parser
        return self.properties_parser

    def accepts_flat_map(self, namespace: str) -> bool:
        """True when the server's own key/value map can be used without parsing."""
        return self.get(namespace) is self.properties_parser
