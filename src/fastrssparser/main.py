from __future__ import annotations

import datetime
import logging
import re
from typing import Optional

from .dates import parse_date
from .exceptions import InvalidDateFormat, MissingChannel, StructuralMismatch
from .models import (
    Category,
    Cloud,
    Enclosure,
    Extension,
    Feed,
    Guid,
    Image,
    Item,
    Source,
    TextInput,
)
from .namespaces import NamespaceResolver
from .pullparser import END_TAG, START_TAG, TEXT, XMLNS, EventType, XMLPullParser

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256

_RE_XML_DECL_ENCODING = re.compile(
    r'(<\?xml[^>]*encoding=["\'])([^"\']+)(["\'][^>]*\?>)', re.IGNORECASE
)

_RDF_VERSIONS: dict[str, str] = {
    "http://channel.netscape.com/rdf/simple/0.9/": "0.9",
    "http://purl.org/rss/1.0/": "1.0",
}

# Namespaces whose elements are core RSS vocabulary rather than extensions
_RSS_NAMESPACES = frozenset(
    ("", "http://my.netscape.com/rdf/simple/0.9/", *_RDF_VERSIONS)
)

# Plain-text channel children: tag name -> Feed attribute
_CHANNEL_TEXT_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "link": "link",
    "language": "language",
    "copyright": "copyright",
    "managingEditor": "managing_editor",
    "webMaster": "web_master",
    "generator": "generator",
    "docs": "docs",
    "ttl": "ttl",
    "rating": "rating",
}

# Date channel children: tag name -> (raw attribute, parsed attribute)
_CHANNEL_DATE_FIELDS: dict[str, tuple[str, str]] = {
    "pubDate": ("pub_date", "pub_date_parsed"),
    "lastBuildDate": ("last_build_date", "last_build_date_parsed"),
}

_ITEM_TEXT_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "link": "link",
    "author": "author",
    "comments": "comments",
}

_IMAGE_FIELDS = ("url", "title", "link", "width", "height", "description")

_TEXT_INPUT_FIELDS = ("title", "description", "name", "link")

_CLOUD_ATTRIBUTES: dict[str, str] = {
    "domain": "domain",
    "port": "port",
    "path": "path",
    "registerProcedure": "register_procedure",
    "protocol": "protocol",
}


def _ensure_utf8_xml_declaration(content: str) -> str:
    """Ensure the XML declaration's encoding matches the UTF-8 bytes we emit."""
    if not content.startswith("<?xml"):
        return content
    return _RE_XML_DECL_ENCODING.sub(r"\1utf-8\3", content, count=1)


def _prepare_xml_bytes(document: str | bytes) -> bytes:
    """Turn the caller's document into bytes lxml will accept.

    Text is re-encoded as UTF-8 with a matching declaration. Bytes keep their
    declared encoding; only a UTF-8 BOM and leading whitespace are dropped.
    """
    if isinstance(document, str):
        content = document.lstrip().lstrip("\ufeff").lstrip()
        return _ensure_utf8_xml_declaration(content).encode("utf-8")

    if document.startswith((b"\xff\xfe", b"\xfe\xff")):
        return document
    content = document.lstrip()
    if content.startswith(b"\xef\xbb\xbf"):
        content = content[3:].lstrip()
    return content


class RSSParser:
    """Recursive-descent RSS/RDF parser over an XML pull event stream.

    Args:
        max_depth: Deepest extension subtree (in elements) that will be captured
        parse_dates: Fill the ``*_parsed`` datetime fields
    """

    def __init__(
        self, *, max_depth: int = DEFAULT_MAX_DEPTH, parse_dates: bool = True
    ) -> None:
        self.max_depth = max_depth
        self.parse_dates = parse_dates
        self.namespaces = NamespaceResolver()
        self._rss_spaces = _RSS_NAMESPACES

    def parse(self, document: str | bytes) -> Feed:
        """Parse one RSS 0.9x / 1.0 / 2.0 document into a Feed.

        Raises:
            StructuralMismatch: If the document shape is not RSS/RDF
            UnderlyingStreamError: If the XML itself is malformed or empty
            MissingChannel: If the root element holds no channel
        """
        self.namespaces = NamespaceResolver()
        self._rss_spaces = _RSS_NAMESPACES
        with XMLPullParser(_prepare_xml_bytes(document)) as p:
            p.next_tag()
            feed = self._parse_root(p)
        logger.debug(
            "Parsed RSS %r feed with %d items", feed.version or "unknown", len(feed.items)
        )
        return feed

    def _expect_root(self, p: XMLPullParser, event: EventType) -> None:
        try:
            p.expect(event, "rss")
            return
        except StructuralMismatch as e:
            rss_err = e
        try:
            p.expect(event, "RDF")
        except StructuralMismatch as rdf_err:
            raise StructuralMismatch(
                f"{rss_err} or {rdf_err}",
                expected=f"{rss_err.expected} or {rdf_err.expected}",
                actual=rdf_err.actual,
            ) from rdf_err

    def _parse_root(self, p: XMLPullParser) -> Feed:
        self._expect_root(p, START_TAG)
        self.namespaces.record_declarations(p.attributes)
        version = self._parse_version(p)
        if p.name == "RDF":
            # the RDF default namespace is the RSS vocabulary, recognized or not
            self._rss_spaces = _RSS_NAMESPACES | {p.attribute(XMLNS) or ""}

        feed: Optional[Feed] = None
        root_items: list[Item] = []
        root_image: Optional[Image] = None

        while p.next_tag() is START_TAG:
            self.namespaces.record_declarations(p.attributes)
            if p.space not in self._rss_spaces:
                p.skip()
            elif p.name == "channel":
                feed = self._parse_channel(p)
            elif p.name == "item":
                # RSS 0.9 and 1.0 put items beside the channel, not inside it
                root_items.append(self._parse_item(p))
            elif p.name == "image":
                root_image = self._parse_image(p)
            else:
                p.skip()

        self._expect_root(p, END_TAG)

        if feed is None:
            raise MissingChannel("No channel element found")

        feed.items.extend(root_items)
        if root_image is not None and (feed.image is None or feed.image.url is None):
            feed.image = root_image
        feed.version = version
        return feed

    def _parse_version(self, p: XMLPullParser) -> str:
        if p.name == "rss":
            return p.attribute("version") or "2.0"
        ns = p.attribute(XMLNS) or ""
        version = _RDF_VERSIONS.get(ns, "")
        if not version:
            logger.debug("Unrecognized RDF namespace %r", ns)
        return version

    def _parse_channel(self, p: XMLPullParser) -> Feed:
        p.expect(START_TAG, "channel")
        feed = Feed()

        while p.next_tag() is START_TAG:
            self.namespaces.record_declarations(p.attributes)
            name = p.name

            if p.space not in self._rss_spaces:
                space = p.space
                ext = self._parse_extension(p)
                prefix = self.namespaces.resolve(space)
                feed.extensions.setdefault(prefix, {}).setdefault(name, []).append(ext)
            elif name in _CHANNEL_TEXT_FIELDS:
                setattr(feed, _CHANNEL_TEXT_FIELDS[name], p.next_text())
            elif name in _CHANNEL_DATE_FIELDS:
                raw_field, parsed_field = _CHANNEL_DATE_FIELDS[name]
                raw, parsed = self._read_date(p)
                setattr(feed, raw_field, raw)
                setattr(feed, parsed_field, parsed)
            elif name == "item":
                feed.items.append(self._parse_item(p))
            elif name == "category":
                feed.categories.append(self._parse_category(p))
            elif name == "image":
                feed.image = self._parse_image(p)
            elif name == "cloud":
                feed.cloud = self._parse_cloud(p)
            elif name in ("textInput", "textinput"):
                feed.text_input = self._parse_text_input(p)
            elif name == "skipHours":
                feed.skip_hours = self._parse_skip_list(p, "hour")
            elif name == "skipDays":
                feed.skip_days = self._parse_skip_list(p, "day")
            else:
                logger.debug("Skipping unknown channel element <%s>", name)
                p.skip()

        p.expect(END_TAG, "channel")
        return feed

    def _parse_item(self, p: XMLPullParser) -> Item:
        p.expect(START_TAG, "item")
        item = Item()

        while p.next_tag() is START_TAG:
            self.namespaces.record_declarations(p.attributes)
            name = p.name

            if p.space not in self._rss_spaces:
                # Item-level extensions are not captured
                logger.debug("Skipping item extension <%s:%s>", p.space, name)
                p.skip()
            elif name in _ITEM_TEXT_FIELDS:
                setattr(item, _ITEM_TEXT_FIELDS[name], p.next_text())
            elif name == "pubDate":
                item.pub_date, item.pub_date_parsed = self._read_date(p)
            elif name == "source":
                item.source = self._parse_source(p)
            elif name == "enclosure":
                item.enclosure = self._parse_enclosure(p)
            elif name == "guid":
                item.guid = self._parse_guid(p)
            elif name == "category":
                item.categories.append(self._parse_category(p))
            else:
                logger.debug("Skipping item element <%s>", name)
                p.skip()

        p.expect(END_TAG, "item")
        return item

    def _read_date(
        self, p: XMLPullParser
    ) -> tuple[str, Optional[datetime.datetime]]:
        raw = p.next_text()
        if not self.parse_dates:
            return raw, None
        try:
            return raw, parse_date(raw)
        except InvalidDateFormat:
            return raw, None

    def _parse_source(self, p: XMLPullParser) -> Source:
        p.expect(START_TAG, "source")
        source = Source(url=p.attribute("url"))
        source.title = p.next_text()
        p.expect(END_TAG, "source")
        return source

    def _parse_enclosure(self, p: XMLPullParser) -> Enclosure:
        p.expect(START_TAG, "enclosure")
        enclosure = Enclosure(
            url=p.attribute("url"),
            length=p.attribute("length"),
            type=p.attribute("type"),
        )
        p.skip()
        p.expect(END_TAG, "enclosure")
        return enclosure

    def _parse_guid(self, p: XMLPullParser) -> Guid:
        p.expect(START_TAG, "guid")
        is_permalink = p.attribute("isPermaLink")
        if is_permalink is None:
            is_permalink = p.attribute("isPermalink")
        guid = Guid(is_permalink=is_permalink)
        guid.value = p.next_text()
        p.expect(END_TAG, "guid")
        return guid

    def _parse_category(self, p: XMLPullParser) -> Category:
        p.expect(START_TAG, "category")
        category = Category(domain=p.attribute("domain"))
        category.value = p.next_text()
        p.expect(END_TAG, "category")
        return category

    def _parse_image(self, p: XMLPullParser) -> Image:
        p.expect(START_TAG, "image")
        image = Image()
        while p.next_tag() is START_TAG:
            if p.name in _IMAGE_FIELDS:
                setattr(image, p.name, p.next_text())
            else:
                p.skip()
        p.expect(END_TAG, "image")
        return image

    def _parse_text_input(self, p: XMLPullParser) -> TextInput:
        p.expect(START_TAG, "*")
        tag = p.name
        text_input = TextInput()
        while p.next_tag() is START_TAG:
            if p.name in _TEXT_INPUT_FIELDS:
                setattr(text_input, p.name, p.next_text())
            else:
                p.skip()
        p.expect(END_TAG, tag)
        return text_input

    def _parse_cloud(self, p: XMLPullParser) -> Cloud:
        p.expect(START_TAG, "cloud")
        cloud = Cloud()
        for attr_name, field_name in _CLOUD_ATTRIBUTES.items():
            setattr(cloud, field_name, p.attribute(attr_name))
        p.skip()
        p.expect(END_TAG, "cloud")
        return cloud

    def _parse_skip_list(self, p: XMLPullParser, child: str) -> list[str]:
        p.expect(START_TAG, "*")
        tag = p.name
        values: list[str] = []
        while p.next_tag() is START_TAG:
            if p.name == child:
                values.append(p.next_text().strip())
            else:
                p.skip()
        p.expect(END_TAG, tag)
        return values

    def _parse_extension(self, p: XMLPullParser, depth: int = 0) -> Extension:
        p.expect(START_TAG, "*")
        if depth >= self.max_depth:
            raise StructuralMismatch(
                f"Extension element <{p.name}> nested deeper than {self.max_depth} levels",
                expected=f"depth < {self.max_depth}",
                actual=f"depth {depth}",
            )

        ext = Extension(name=p.name)
        for attr in p.attributes:
            # namespace declarations are not attributes of the element
            if attr.space == XMLNS or (not attr.space and attr.name == XMLNS):
                continue
            ext.attrs[attr.name] = attr.value

        while True:
            event = p.next()
            if event is END_TAG:
                break
            if event is START_TAG:
                child = self._parse_extension(p, depth + 1)
                ext.children.setdefault(child.name, []).append(child)
            elif event is TEXT:
                ext.value = p.text

        p.expect(END_TAG, ext.name)
        return ext


def parse_feed(
    document: str | bytes,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    parse_dates: bool = True,
) -> Feed:
    """Parse an RSS or RDF feed document.

    Args:
        document: XML content as text or bytes
        max_depth: Deepest namespaced extension subtree to capture before failing
        parse_dates: Parse pubDate/lastBuildDate values into datetimes

    Returns:
        Feed with channel metadata, items, categories and extensions

    Raises:
        ParseError: On the first structural or XML error; no partial result
    """
    return RSSParser(max_depth=max_depth, parse_dates=parse_dates).parse(document)
