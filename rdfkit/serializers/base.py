import io
import logging

from rdfkit.exceptions import (
    ReadWriteError,
    ResourceExhausted,
    StructuralError,
    UnsupportedFeature,
)
from rdfkit.grammars import terminal_regex
from rdfkit.primitives import (
    BlankNode,
    Dataset,
    Formula,
    Literal,
    NamedNode,
    Quad,
    Triple,
    Variable,
)
from rdfkit.util import escape_literal, text_writer

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class BlankNodeLabeler(object):
    """Hands out output labels, one per distinct blank node.

    A node keeps its own label when that is legal and not yet taken, so
    labels from different scopes never collide in one document.
    """

    def __init__(self):
        self._labels = {}
        self._taken = set()

    def __call__(self, node):
        try:
            return self._labels[node]
        except KeyError:
            pass
        label = node.label
        if not label or label in self._taken or \
                not terminal_regex('BLANK_NODE_LABEL').fullmatch('_:' + label):
            label = 'b%d' % (len(self._labels) + 1)
            while label in self._taken:
                label += '_'
        self._labels[node] = label
        self._taken.add(label)
        return label


def check_statement(statement):
    """Statements are checked on the way out as well as on construction."""
    if not isinstance(statement.predicate, NamedNode):
        raise StructuralError('Predicate must be an IRI, not %r'
                              % (statement.predicate,))
    if isinstance(statement.subject, Literal):
        raise StructuralError('Literal %r cannot be a subject'
                              % (statement.subject,))
    return statement


def default_graph(graph, format_name):
    """The triples of ``graph``; a dataset may only use its default graph."""
    if isinstance(graph, Dataset):
        if graph.named_graphs():
            raise UnsupportedFeature('%s cannot express named graphs'
                                     % format_name)
        return graph.default_graph
    return graph


def quads_of(graph):
    """Every statement of ``graph`` as a quad."""
    if isinstance(graph, Dataset):
        return list(graph)
    return [Quad(t.subject, t.predicate, t.object, graph.name)
            for t in graph]


class BaseSerializer(object):
    """Common base class for all serializers.

    ``write`` takes a graph or dataset and a text or binary stream, which is
    left open.
    """
    NAME = None
    FILE_EXTENSION = None
    MIME_TYPE = None

    def write(self, graph, stream, prefixes=None):
        if prefixes is None:
            prefixes = getattr(graph, 'prefixes', None)
        log.debug('Writing %r as %s', graph, self.NAME)
        out = text_writer(stream)
        try:
            self._write(graph, out, prefixes)
            if out is not stream:
                out.flush()
        except OSError as exc:
            raise ReadWriteError('Writing %s failed: %s'
                                 % (self.NAME, exc)) from exc

    def write_string(self, graph, prefixes=None):
        buf = io.StringIO()
        self.write(graph, buf, prefixes)
        return buf.getvalue()

    def _write(self, graph, out, prefixes):
        raise NotImplementedError


class NTriplesTerms(object):
    """N-Triples rendering of terms, shared by the line-based writers."""

    def __init__(self, star=False, max_depth=DEFAULT_MAX_DEPTH):
        self.star = star
        self.max_depth = max_depth
        self.label = BlankNodeLabeler()

    def __call__(self, term, depth=0):
        if isinstance(term, NamedNode):
            return '<%s>' % (term,)
        if isinstance(term, BlankNode):
            return '_:%s' % (self.label(term),)
        if isinstance(term, Literal):
            return literal_ntriples(term)
        if isinstance(term, Triple):
            if not self.star:
                raise UnsupportedFeature(
                    'Embedded triple %r needs the star syntax' % (term,))
            if depth >= self.max_depth:
                raise ResourceExhausted(
                    'Embedded triples nested deeper than %d' % self.max_depth)
            check_statement(term)
            return '<< %s >>' % ' '.join(self(t, depth + 1) for t in term)
        if isinstance(term, (Formula, Variable)):
            raise UnsupportedFeature('%r is only expressible in N3' % (term,))
        raise StructuralError('%r is not an RDF term' % (term,))


def literal_ntriples(literal):
    text = '"%s"' % escape_literal(literal.value)
    if literal.language:
        return '%s@%s' % (text, literal.language)
    if literal.datatype is not None:
        return '%s^^<%s>' % (text, literal.datatype)
    return text
