import logging

from rdfkit.exceptions import RDFError, RelativeIRIError, UnknownPrefix
from rdfkit.langtag import LanguageTag
from rdfkit.primitives import PrefixMap, RDFEnvironment
from rdfkit.util import (
    decode_iriref,
    decode_literal,
    is_absolute_iri,
    read_source,
    smart_urljoin,
    unescape_local_name,
)

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200


def _at(exc, token):
    """Attach the position of a lark token (or tree meta) to ``exc``."""
    line = getattr(token, 'line', None)
    if line is not None and isinstance(exc, RDFError):
        exc.at(line, getattr(token, 'column', None))
    return exc


class BaseParser(object):
    """Common base class for all parsers

    Reads the source, creates the sink and hands the text to
    ``_parse_statements``. Statements are only added to the sink once the
    whole document has been lowered, so a failed parse leaves the sink
    untouched.
    """
    NAME = None
    FILE_EXTENSION = None
    MIME_TYPE = None
    quads = False

    def __init__(self, environment=None, max_depth=DEFAULT_MAX_DEPTH,
                 strict_language_tags=True):
        self.env = environment or RDFEnvironment()
        self.max_depth = max_depth
        self.strict_language_tags = strict_language_tags

    def parse(self, source, sink=None, base=None, graph_factory=None):
        text = read_source(source)
        if sink is None:
            sink = self._make_graph(graph_factory)
        log.debug('Parsing %s document of %d characters', self.NAME,
                  len(text))
        statements, prefixes = self._parse_statements(text, sink, base)
        sink.addAll(statements)
        if prefixes:
            sink.prefixes.update(prefixes)
        log.debug('Parsed %d %s statements', len(statements), self.NAME)
        return sink

    def parse_string(self, string, sink=None, base=None, graph_factory=None):
        return self.parse(string, sink, base, graph_factory)

    def _parse_statements(self, text, sink, base):
        raise NotImplementedError

    def _make_graph(self, graph_factory=None):
        if self.quads:
            return self.env.createDataset(graph_factory)
        return self.env.createGraph(graph_factory)


class TermFactory(object):
    """Per-parse state for building terms: blank node labels, the base IRI
    and the prefixes declared so far."""

    def __init__(self, parser, sink, base=None):
        self.env = parser.env
        self.strict_language_tags = parser.strict_language_tags
        self.scope = sink.bnodes
        self.blank_nodes = {}
        self.base_iri = base
        self.prefixes = PrefixMap()

    def make_named_node(self, iri, token=None):
        try:
            return self.env.createNamedNode(iri)
        except RDFError as exc:
            raise _at(exc, token)

    def absolute_iri(self, iri, token=None):
        if not is_absolute_iri(iri):
            raise _at(RelativeIRIError(iri), token)
        return self.make_named_node(iri, token)

    def resolve_iri(self, iri, token=None):
        if self.base_iri:
            iri = smart_urljoin(self.base_iri, iri)
        return self.absolute_iri(iri, token)

    def iri_from_token(self, token, resolve=True):
        """IRIREF token to NamedNode, resolved against the base."""
        try:
            iri = decode_iriref(token[1:-1])
        except RDFError as exc:
            raise _at(exc, token)
        if resolve:
            return self.resolve_iri(iri, token)
        return self.absolute_iri(iri, token)

    def decode_string(self, token):
        """Body of a STRING_LITERAL_* token with escapes undone."""
        quotes = 3 if token[:3] in ('"""', "'''") else 1
        try:
            return decode_literal(token[quotes:-quotes])
        except RDFError as exc:
            raise _at(exc, token)

    def expand_pname(self, token):
        prefix, _, local = token.partition(':')
        if prefix not in self.prefixes:
            raise _at(UnknownPrefix(prefix), token)
        return self.make_named_node(
            self.prefixes[prefix] + unescape_local_name(local), token)

    def make_blank_node(self, label=None):
        if label is None:
            return self.env.createBlankNode(self.scope)
        if label not in self.blank_nodes:
            self.blank_nodes[label] = self.env.createBlankNode(self.scope,
                                                               label)
        return self.blank_nodes[label]

    def make_literal(self, value, language=None, datatype=None, token=None):
        try:
            if language and self.strict_language_tags:
                LanguageTag.parse(language)
            return self.env.createLiteral(value, language, datatype)
        except RDFError as exc:
            raise _at(exc, token)

    def make_triple(self, subject, predicate, object, token=None):
        try:
            return self.env.createTriple(subject, predicate, object)
        except RDFError as exc:
            raise _at(exc, token)

    def make_quad(self, subject, predicate, object, graph, token=None):
        try:
            return self.env.createQuad(subject, predicate, object, graph)
        except RDFError as exc:
            raise _at(exc, token)
