from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from .pullparser import XMLNS, Attr

logger = logging.getLogger(__name__)

# Canonical prefixes for widely used RSS extension namespaces, keyed by the
# lowercased namespace URL. Feeds resolve to these whatever prefix they declare.
WELL_KNOWN_NAMESPACES: Mapping[str, str] = MappingProxyType(
    {
        "http://purl.org/dc/elements/1.1/": "dc",
        "http://purl.org/dc/terms/": "dcterms",
        "http://purl.org/rss/1.0/modules/content/": "content",
        "http://purl.org/rss/1.0/modules/syndication/": "sy",
        "http://purl.org/rss/1.0/modules/slash/": "slash",
        "http://purl.org/rss/1.0/modules/annotate/": "annotate",
        "http://purl.org/rss/1.0/modules/taxonomy/": "taxo",
        "http://purl.org/rss/1.0/modules/image/": "image",
        "http://purl.org/syndication/thread/1.0": "thr",
        "http://webns.net/mvcb/": "admin",
        "http://wellformedweb.org/commentapi/": "wfw",
        "http://www.itunes.com/dtds/podcast-1.0.dtd": "itunes",
        "http://www.google.com/schemas/play-podcasts/1.0": "googleplay",
        "https://podcastindex.org/namespace/1.0": "podcast",
        "http://search.yahoo.com/mrss/": "media",
        "http://www.w3.org/2005/atom": "atom",
        "http://www.w3.org/1999/02/22-rdf-syntax-ns#": "rdf",
        "http://www.w3.org/1999/xhtml": "xhtml",
        "http://www.georss.org/georss": "georss",
        "http://www.w3.org/2003/01/geo/wgs84_pos#": "geo",
        "http://backend.userland.com/creativecommonsrssmodule": "creativecommons",
        "http://web.resource.org/cc/": "cc",
        "http://xmlns.com/foaf/0.1/": "foaf",
    }
)


class NamespaceResolver:
    """Namespace URL to prefix bookkeeping for a single document."""

    def __init__(self) -> None:
        self.declared: dict[str, str] = {}

    def record_declarations(self, attributes: Iterable[Attr]) -> None:
        """Remember every ``xmlns:prefix="url"`` declared on a start tag."""
        for attr in attributes:
            if attr.space == XMLNS:
                self.declared[attr.value.lower()] = attr.name.lower()

    def resolve(self, space: str) -> str:
        """Prefix for a namespace URL.

        The well-known table wins over whatever prefix the feed declared.
        A space that is neither (an undeclared prefix) is returned as is.
        """
        lspace = space.lower()
        prefix = WELL_KNOWN_NAMESPACES.get(lspace)
        if prefix is not None:
            return prefix
        prefix = self.declared.get(lspace)
        if prefix is not None:
            return prefix
        logger.debug("No prefix known for namespace %r", space)
        return space
