"""Forward-only XML event stream over an in-memory document.

The document is parsed once with a strict lxml parser and then walked with
``etree.iterwalk``, which yields start/end events for every node. Those are
flattened into the START_TAG / TEXT / END_TAG sequence the feed parser
consumes one event at a time.
"""

from __future__ import annotations

import enum
from typing import Iterator, NamedTuple, Optional, Union, cast

from lxml import etree

from .exceptions import StructuralMismatch, UnderlyingStreamError

# Attribute space used for ``xmlns:prefix="url"`` declarations.
XMLNS = "xmlns"

_STRICT_XML_PARSER = etree.XMLParser(
    ns_clean=True,
    recover=False,
    collect_ids=False,
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
)


class EventType(enum.Enum):
    START_DOCUMENT = "StartDocument"
    START_TAG = "StartTag"
    END_TAG = "EndTag"
    TEXT = "Text"
    END_DOCUMENT = "EndDocument"


START_DOCUMENT = EventType.START_DOCUMENT
START_TAG = EventType.START_TAG
END_TAG = EventType.END_TAG
TEXT = EventType.TEXT
END_DOCUMENT = EventType.END_DOCUMENT


class Attr(NamedTuple):
    space: str
    name: str
    value: str


_Event = tuple[EventType, Union[etree._Element, str]]


def _split_tag(tag: str) -> tuple[str, str]:
    """Split an lxml tag into (namespace, local name).

    A prefix the document never declared comes back as the namespace itself.
    """
    if tag[0] == "{":
        space, _, name = tag[1:].partition("}")
        return space, name
    if ":" in tag:
        prefix, _, name = tag.partition(":")
        return prefix, name
    return "", tag


def _element_attributes(element: etree._Element) -> tuple[Attr, ...]:
    parent = element.getparent()
    parent_nsmap = parent.nsmap if parent is not None else {}
    attrs: list[Attr] = []
    for prefix, url in element.nsmap.items():
        if parent_nsmap.get(prefix) == url:
            continue
        if prefix is None:
            attrs.append(Attr("", XMLNS, url))
        else:
            attrs.append(Attr(XMLNS, prefix, url))
    for key, value in element.attrib.items():
        space, name = _split_tag(key)
        attrs.append(Attr(space, name, value))
    return tuple(attrs)


class XMLPullParser:
    """Pull-style cursor over the events of one XML document.

    Use as a context manager so the parsed tree is released deterministically:

        with XMLPullParser(data) as p:
            p.next_tag()
            p.expect(START_TAG, "rss")
    """

    def __init__(self, source: bytes) -> None:
        if not source or not source.strip():
            raise UnderlyingStreamError("Failed to parse XML: received empty content")
        try:
            self._root: Optional[etree._Element] = etree.fromstring(
                source, parser=_STRICT_XML_PARSER
            )
        except etree.XMLSyntaxError as e:
            raise UnderlyingStreamError(f"Failed to parse XML content: {e}") from e
        if self._root is None:
            raise UnderlyingStreamError("Failed to parse XML: no root element")

        self._events: Optional[Iterator[_Event]] = self._walk(self._root)
        self.event = START_DOCUMENT
        self.name: Optional[str] = None
        self.space: Optional[str] = None
        self.attributes: tuple[Attr, ...] = ()
        self.text: Optional[str] = None
        self.depth = 0

    def __enter__(self) -> XMLPullParser:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._events is not None:
            self._events.close()  # type: ignore[attr-defined]
        self._events = None
        self._root = None

    @staticmethod
    def _walk(root: etree._Element) -> Iterator[_Event]:
        for action, element in etree.iterwalk(root, events=("start", "end")):
            if not isinstance(element.tag, str):
                # entity references left unresolved; only their tail is text
                if action == "end" and element.tail:
                    yield TEXT, element.tail
                continue
            if action == "start":
                yield START_TAG, element
                if element.text:
                    yield TEXT, element.text
            else:
                yield END_TAG, element
                if element.tail and element is not root:
                    yield TEXT, element.tail

    def next(self) -> EventType:
        """Advance to the very next event, text included."""
        if self._events is None or self.event is END_DOCUMENT:
            raise UnderlyingStreamError("Unexpected end of document")

        if self.event is END_TAG:
            self.depth -= 1

        try:
            kind, payload = next(self._events)
        except StopIteration:
            self.event = END_DOCUMENT
            self.name = self.space = self.text = None
            self.attributes = ()
            return self.event

        self.event = kind
        if kind is TEXT:
            self.text = cast(str, payload)
            return kind

        element = cast(etree._Element, payload)
        self.space, self.name = _split_tag(element.tag)
        self.text = None
        if kind is START_TAG:
            self.depth += 1
            self.attributes = _element_attributes(element)
        else:
            self.attributes = ()
        return kind

    def next_tag(self) -> EventType:
        """Advance past whitespace to the next start or end tag."""
        event = self.next()
        while event is TEXT and not self.text.strip():
            event = self.next()
        if event is not START_TAG and event is not END_TAG:
            raise UnderlyingStreamError(
                f"Expected StartTag or EndTag but got {event.value}"
            )
        return event

    def next_text(self) -> str:
        """Read the text of the current element, leaving the cursor on its end tag."""
        if self.event is not START_TAG:
            raise StructuralMismatch(
                "Parser must be on StartTag to read text",
                expected=START_TAG.value,
                actual=self.event.value,
            )
        name = self.name
        parts: list[str] = []
        event = self.next()
        while event is TEXT:
            parts.append(self.text)
            event = self.next()
        if event is not END_TAG:
            raise UnderlyingStreamError(
                f"Element <{name}> must contain only text but got {event.value}"
            )
        return "".join(parts)

    def expect(self, event: EventType, name: str) -> None:
        """Raise StructuralMismatch unless the current event matches.

        ``"*"`` matches any tag name.
        """
        if self.event is event and (name == "*" or self.name == name):
            return
        expected = f"{event.value}:{name}"
        actual = f"{self.event.value}:{self.name}"
        raise StructuralMismatch(
            f"Expected {expected} but got {actual}", expected=expected, actual=actual
        )

    def skip(self) -> None:
        """Consume the subtree of the current start tag, ending on its end tag."""
        self.expect(START_TAG, "*")
        level = 1
        while level:
            event = self.next()
            if event is START_TAG:
                level += 1
            elif event is END_TAG:
                level -= 1
            elif event is END_DOCUMENT:
                raise UnderlyingStreamError("Unexpected end of document")

    def attribute(self, name: str) -> Optional[str]:
        """Value of the first attribute with this local name, or None."""
        for attr in self.attributes:
            if attr.name == name:
                return attr.value
        return None
