from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Extension:
    """Generic tree captured from an element outside the RSS vocabulary.

    ``attrs`` keeps attribute local names only. ``value`` holds the last text
    token seen directly inside the element, and ``children`` maps each child
    local name to its subtrees in document order.
    """

    name: str = ""
    value: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    children: dict[str, list[Extension]] = field(default_factory=dict)


@dataclass
class Source:
    url: Optional[str] = None
    title: Optional[str] = None


@dataclass
class Enclosure:
    url: Optional[str] = None
    length: Optional[str] = None
    type: Optional[str] = None


@dataclass
class Guid:
    value: Optional[str] = None
    # Raw attribute; None means the attribute was absent.
    is_permalink: Optional[str] = None


@dataclass
class Category:
    value: Optional[str] = None
    domain: Optional[str] = None


@dataclass
class Image:
    url: Optional[str] = None
    title: Optional[str] = None
    link: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Cloud:
    domain: Optional[str] = None
    port: Optional[str] = None
    path: Optional[str] = None
    register_procedure: Optional[str] = None
    protocol: Optional[str] = None


@dataclass
class TextInput:
    title: Optional[str] = None
    description: Optional[str] = None
    name: Optional[str] = None
    link: Optional[str] = None


@dataclass
class Item:
    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    author: Optional[str] = None
    comments: Optional[str] = None
    pub_date: Optional[str] = None
    pub_date_parsed: Optional[datetime.datetime] = None
    source: Optional[Source] = None
    enclosure: Optional[Enclosure] = None
    guid: Optional[Guid] = None
    categories: list[Category] = field(default_factory=list)


@dataclass
class Feed:
    """Channel metadata, items and namespaced extensions of one RSS/RDF feed."""

    version: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    language: Optional[str] = None
    copyright: Optional[str] = None
    managing_editor: Optional[str] = None
    web_master: Optional[str] = None
    pub_date: Optional[str] = None
    pub_date_parsed: Optional[datetime.datetime] = None
    last_build_date: Optional[str] = None
    last_build_date_parsed: Optional[datetime.datetime] = None
    generator: Optional[str] = None
    docs: Optional[str] = None
    ttl: Optional[str] = None
    rating: Optional[str] = None
    image: Optional[Image] = None
    cloud: Optional[Cloud] = None
    text_input: Optional[TextInput] = None
    skip_hours: list[str] = field(default_factory=list)
    skip_days: list[str] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    # prefix -> element name -> trees, in document order
    extensions: dict[str, dict[str, list[Extension]]] = field(default_factory=dict)
