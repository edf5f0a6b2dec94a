from fastrssparser import WELL_KNOWN_NAMESPACES, NamespaceResolver
from fastrssparser.pullparser import XMLNS, Attr


def test_well_known_namespace_wins_over_declared_prefix():
    resolver = NamespaceResolver()
    resolver.record_declarations(
        [Attr(XMLNS, "dublin", "http://purl.org/dc/elements/1.1/")]
    )
    assert resolver.resolve("http://purl.org/dc/elements/1.1/") == "dc"


def test_declared_prefix_is_lowercased():
    resolver = NamespaceResolver()
    resolver.record_declarations([Attr(XMLNS, "MyExt", "http://Example.com/NS")])
    assert resolver.resolve("http://example.com/ns") == "myext"
    assert resolver.resolve("http://Example.com/NS") == "myext"


def test_lookup_is_case_insensitive_for_well_known():
    resolver = NamespaceResolver()
    assert resolver.resolve("http://wellformedweb.org/CommentAPI/") == "wfw"


def test_unknown_space_falls_back_to_itself():
    resolver = NamespaceResolver()
    assert resolver.resolve("foo") == "foo"
    assert resolver.resolve("http://example.com/unknown") == "http://example.com/unknown"


def test_non_declaration_attributes_are_ignored():
    resolver = NamespaceResolver()
    resolver.record_declarations(
        [
            Attr("", "version", "2.0"),
            Attr("", XMLNS, "http://example.com/default"),
            Attr("http://example.com/x", "role", "editor"),
        ]
    )
    assert resolver.declared == {}


def test_well_known_table_is_read_only():
    assert WELL_KNOWN_NAMESPACES["http://www.itunes.com/dtds/podcast-1.0.dtd"] == "itunes"
    try:
        WELL_KNOWN_NAMESPACES["http://example.com/"] = "x"  # type: ignore[index]
    except TypeError:
        pass
    else:
        raise AssertionError("well-known namespace table must be immutable")
    assert all(key == key.lower() for key in WELL_KNOWN_NAMESPACES)
