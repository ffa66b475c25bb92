"""The RDF data model: terms, statements, prefix maps, graphs and datasets.

Terms are immutable values. ``NamedNode`` is a ``str``; literals, blank
nodes, triples and quads are named tuples, so embedded statements (RDF-star)
are simply triples used as terms.

Blank nodes have no global identity. Each ``Graph`` or ``Dataset`` owns a
``BlankNodeScope`` that allocates them, and two blank nodes are the same node
only when both label and scope match.
"""
from collections import Counter, OrderedDict, defaultdict, namedtuple
import itertools
import logging
import uuid

from rdfkit.exceptions import (
    InvalidIRI,
    StructuralError,
    UnknownPrefix,
)
from rdfkit.grammars import terminal_regex
from rdfkit.langtag import LanguageTag
from rdfkit.util import (
    is_absolute_iri,
    smart_urljoin,
    unescape_local_name,
)

log = logging.getLogger(__name__)

ILLEGAL_IRI_CHARS = frozenset('<>"{}|^`\\' + ''.join(map(chr, range(0x21))))

RDF_NS = 'http://www.w3.org/1999/02/22-rdf-syntax-ns#'
RDFS_NS = 'http://www.w3.org/2000/01/rdf-schema#'
XSD_NS = 'http://www.w3.org/2001/XMLSchema#'
OWL_NS = 'http://www.w3.org/2002/07/owl#'
LOG_NS = 'http://www.w3.org/2000/10/swap/log#'


class NamedNode(str):
    """An IRI."""
    __slots__ = ()

    def __new__(cls, iri):
        if type(iri) is cls:
            return iri
        if not isinstance(iri, str):
            raise TypeError('IRI must be a string, not %r' % (iri,))
        for char in iri:
            if char in ILLEGAL_IRI_CHARS:
                raise InvalidIRI('Illegal character %r in IRI %r'
                                 % (char, iri))
        return super(NamedNode, cls).__new__(cls, iri)

    @property
    def value(self):
        return str(self)

    def is_absolute(self):
        return is_absolute_iri(self)

    def __repr__(self):
        return '<%s>' % (self,)


RDF_TYPE = NamedNode(RDF_NS + 'type')
RDF_FIRST = NamedNode(RDF_NS + 'first')
RDF_REST = NamedNode(RDF_NS + 'rest')
RDF_NIL = NamedNode(RDF_NS + 'nil')
RDF_LANGSTRING = NamedNode(RDF_NS + 'langString')
XSD_STRING = NamedNode(XSD_NS + 'string')
XSD_INTEGER = NamedNode(XSD_NS + 'integer')
XSD_DECIMAL = NamedNode(XSD_NS + 'decimal')
XSD_DOUBLE = NamedNode(XSD_NS + 'double')
XSD_BOOLEAN = NamedNode(XSD_NS + 'boolean')
OWL_SAMEAS = NamedNode(OWL_NS + 'sameAs')
LOG_IMPLIES = NamedNode(LOG_NS + 'implies')


class BlankNodeScope(object):
    """Allocates blank nodes for one graph or dataset.

    Labels are only hints: a hint already handed out by this scope gets a
    numeric suffix instead.
    """

    def __init__(self):
        self._labels = set()
        self._counter = itertools.count(1)

    def createBlankNode(self, hint=None):
        label = hint
        if not label or label in self._labels:
            stem = '%s_' % hint if hint else 'b'
            label = '%s%d' % (stem, next(self._counter))
            while label in self._labels:
                label = '%s%d' % (stem, next(self._counter))
        self._labels.add(label)
        return BlankNode(label, self)

    def __contains__(self, node):
        return isinstance(node, BlankNode) and node.scope is self

    def __repr__(self):
        return '<BlankNodeScope at 0x%x: %d nodes>' % (id(self),
                                                       len(self._labels))


class BlankNode(namedtuple('BlankNode', ['label', 'scope'])):
    """A blank node. Without a scope a fresh private scope is used."""
    __slots__ = ()

    def __new__(cls, label=None, scope=None):
        if scope is None:
            return BlankNodeScope().createBlankNode(label)
        return super(BlankNode, cls).__new__(cls, label, scope)

    def __repr__(self):
        return '_:%s' % (self.label,)


class Literal(namedtuple('Literal', ['value', 'language', 'datatype'])):
    """A literal: a lexical form plus either a language tag or a datatype.

    ``xsd:string`` is the implicit datatype of a plain literal and is stored
    as ``None``.
    """
    __slots__ = ()

    def __new__(cls, value, language=None, datatype=None):
        if not isinstance(value, str):
            raise TypeError('Literal value must be a string, not %r'
                            % (value,))
        if not language:
            language = None
        if language is not None and datatype is not None:
            raise StructuralError(
                'Literal %r has both a language tag and a datatype' % (value,))
        if datatype is not None:
            datatype = NamedNode(datatype)
            if datatype == XSD_STRING:
                datatype = None
        return super(Literal, cls).__new__(cls, value, language, datatype)

    @property
    def language_tag(self):
        if self.language is None:
            return None
        return LanguageTag.parse(self.language)

    @property
    def effective_datatype(self):
        if self.language is not None:
            return RDF_LANGSTRING
        return self.datatype or XSD_STRING

    def __repr__(self):
        if self.language:
            return '%r@%s' % (self.value, self.language)
        if self.datatype:
            return '%r^^%r' % (self.value, self.datatype)
        return repr(self.value)


class Variable(namedtuple('Variable', ['name'])):
    """An N3 universally quantified variable."""
    __slots__ = ()

    def __repr__(self):
        return '?%s' % (self.name,)


class Formula(object):
    """An N3 formula: a quoted set of triples.

    Two formulas are equal when their statements are isomorphic.
    """
    __slots__ = ('statements', '_hash')

    def __init__(self, statements=()):
        self.statements = tuple(OrderedDict.fromkeys(statements))
        self._hash = None

    def __iter__(self):
        return iter(self.statements)

    def __len__(self):
        return len(self.statements)

    def __eq__(self, other):
        if not isinstance(other, Formula):
            return NotImplemented
        return isomorphic(self.statements, other.statements)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        if self._hash is None:
            self._hash = hash(frozenset(
                _shape(statement) for statement in self.statements))
        return self._hash

    def __repr__(self):
        return '{ %s }' % ' . '.join(
            '%r %r %r' % tuple(statement) for statement in self.statements)


SUBJECT_TYPES = (NamedNode, BlankNode, Formula, Variable)
OBJECT_TYPES = (NamedNode, BlankNode, Literal, Formula, Variable)
GRAPH_NAME_TYPES = (NamedNode, BlankNode)


def _check_terms(subject, predicate, object):
    if not isinstance(predicate, NamedNode):
        raise StructuralError('Predicate must be an IRI, not %r'
                              % (predicate,))
    if isinstance(subject, Literal):
        raise StructuralError('Literal %r cannot be a subject' % (subject,))
    if not isinstance(subject, SUBJECT_TYPES + (Triple,)):
        raise StructuralError('%r is not a valid subject' % (subject,))
    if not isinstance(object, OBJECT_TYPES + (Triple,)):
        raise StructuralError('%r is not a valid object' % (object,))


class Triple(namedtuple('Triple', ['subject', 'predicate', 'object'])):
    """A statement. Triples can themselves be subjects and objects."""
    __slots__ = ()

    def __new__(cls, subject, predicate, object):
        _check_terms(subject, predicate, object)
        return super(Triple, cls).__new__(cls, subject, predicate, object)

    def __repr__(self):
        return '<< %r %r %r >>' % self


class Quad(namedtuple('Quad', ['subject', 'predicate', 'object', 'graph'])):
    """A triple in a named graph; ``graph`` None is the default graph."""
    __slots__ = ()

    def __new__(cls, subject, predicate, object, graph=None):
        _check_terms(subject, predicate, object)
        if graph is not None and not isinstance(graph, GRAPH_NAME_TYPES):
            raise StructuralError('%r cannot name a graph' % (graph,))
        return super(Quad, cls).__new__(cls, subject, predicate, object, graph)

    @property
    def triple(self):
        return Triple(self.subject, self.predicate, self.object)

    def __repr__(self):
        if self.graph is None:
            return '%r %r %r' % self[:3]
        return '%r %r %r %r' % self


class QName(str):
    """A prefixed name, ``prefix:local``."""
    __slots__ = ()

    def __new__(cls, qname, name=None):
        if name is not None:
            qname = '%s:%s' % (qname or '', name)
        if ':' not in qname:
            raise StructuralError('%r is not a prefixed name' % (qname,))
        return super(QName, cls).__new__(cls, qname)

    @property
    def prefix(self):
        return self.partition(':')[0]

    @property
    def name(self):
        return self.partition(':')[2]


class PrefixMap(OrderedDict):
    """Ordered mapping of prefixes to namespace IRIs.

    The empty prefix ``''`` is the default namespace.
    """

    def __setitem__(self, prefix, namespace):
        prefix = prefix or ''
        if prefix and not terminal_regex('PN_PREFIX').fullmatch(prefix):
            raise StructuralError('%r is not a valid prefix' % (prefix,))
        super(PrefixMap, self).__setitem__(prefix, NamedNode(namespace))

    @classmethod
    def common(cls):
        return cls([
            ('owl', OWL_NS),
            ('rdf', RDF_NS),
            ('rdfs', RDFS_NS),
            ('xsd', XSD_NS),
        ])

    @property
    def default_namespace(self):
        return self.get('')

    def expand(self, qname):
        qname = QName(qname)
        try:
            namespace = self[qname.prefix]
        except KeyError:
            raise UnknownPrefix(qname.prefix)
        return NamedNode(namespace + unescape_local_name(qname.name))

    def compress(self, iri):
        """Best-effort prefixed name for ``iri``, or None.

        The longest matching namespace wins, earliest declaration on ties.
        The local part must be a legal PN_LOCAL as written.
        """
        best = None
        local_name = terminal_regex('PN_LOCAL')
        for prefix, namespace in self.items():
            if not iri.startswith(namespace):
                continue
            if best is not None and len(namespace) <= len(self[best]):
                continue
            local = iri[len(namespace):]
            if local and not local_name.fullmatch(local):
                continue
            best = prefix
        if best is None:
            return None
        return QName(best, iri[len(self[best]):])


class _Any(object):

    def __repr__(self):
        return 'ANY'


ANY = _Any()


class StatementView(object):
    """A lazy view of the statements a pattern matches.

    Each iteration re-runs the match, so the view can be iterated any number
    of times; the order is stable while the graph is unchanged.
    """

    def __init__(self, produce):
        self._produce = produce

    def __iter__(self):
        return iter(self._produce())

    def __len__(self):
        return sum(1 for _ in self._produce())

    def __bool__(self):
        for _ in self._produce():
            return True
        return False

    def __repr__(self):
        return '<StatementView: %r>' % (list(self),)


def _matches(statement, subject, predicate, object):
    return (subject is None or statement.subject == subject) and \
        (predicate is None or statement.predicate == predicate) and \
        (object is None or statement.object == object)


def _map_term(term, mapping):
    if isinstance(term, BlankNode):
        return mapping(term)
    if isinstance(term, Triple):
        return Triple(*(_map_term(t, mapping) for t in term))
    if isinstance(term, Formula):
        return Formula(_map_statement(s, mapping) for s in term)
    return term


def _map_statement(statement, mapping):
    return type(statement)(*(_map_term(t, mapping) for t in statement))


class _BaseGraph(object):
    """Operations shared by the set and multiset graphs."""

    def __init__(self, name=None, prefixes=None, bnodes=None):
        self.name = name
        self.prefixes = PrefixMap(prefixes or ())
        self.bnodes = bnodes if bnodes is not None else BlankNodeScope()

    def addAll(self, triples):
        for triple in triples:
            self.add(triple)
        return self

    def match(self, subject=None, predicate=None, object=None):
        def produce():
            for triple in self._candidates(subject, predicate, object):
                if _matches(triple, subject, predicate, object):
                    yield triple
        return StatementView(produce)

    def subjects(self):
        return list(OrderedDict.fromkeys(t.subject for t in self))

    def predicates(self, subject=None):
        return list(OrderedDict.fromkeys(
            t.predicate for t in self.match(subject)))

    def objects(self, subject=None, predicate=None):
        return list(OrderedDict.fromkeys(
            t.object for t in self.match(subject, predicate)))

    def __contains__(self, triple):
        return any(True for _ in self.match(*triple))

    def __bool__(self):
        return len(self) > 0

    def merge(self, other):
        """Add every statement of ``other``, relabelling its blank nodes
        into this graph's scope."""
        relabelled = {}

        def relabel(node):
            if node.scope is self.bnodes:
                return node
            if node not in relabelled:
                relabelled[node] = self.bnodes.createBlankNode(node.label)
            return relabelled[node]

        for triple in other:
            self.add(_map_statement(triple, relabel))
        for prefix, namespace in getattr(other, 'prefixes', {}).items():
            self.prefixes.setdefault(prefix, namespace)
        return self

    def isomorphic(self, other):
        return isomorphic(self, other)

    def skolemize(self, base):
        """Return a copy with every blank node replaced by a fresh
        ``/.well-known/genid/`` IRI under ``base``."""
        genids = {}

        def genid(node):
            if node not in genids:
                genids[node] = NamedNode(smart_urljoin(
                    base, '/.well-known/genid/%s' % uuid.uuid4().hex))
            return genids[node]

        graph = type(self)(self.name, self.prefixes)
        graph.addAll(_map_statement(triple, genid) for triple in self)
        return graph

    def __repr__(self):
        return '<%s %s: %d triples>' % (
            type(self).__name__,
            '%r' % (self.name,) if self.name is not None else 'default',
            len(self))


class Graph(_BaseGraph):
    """A set of triples, kept in insertion order and indexed by position."""

    def __init__(self, name=None, prefixes=None, bnodes=None):
        super(Graph, self).__init__(name, prefixes, bnodes)
        self._triples = OrderedDict()
        self._indexes = tuple(defaultdict(OrderedDict) for _ in range(3))

    def add(self, triple):
        if not isinstance(triple, Triple):
            raise StructuralError('Graphs hold triples, not %r' % (triple,))
        if triple in self._triples:
            return False
        self._triples[triple] = None
        for index, term in zip(self._indexes, triple):
            index[term][triple] = None
        return True

    def remove(self, triple):
        if triple not in self._triples:
            return False
        del self._triples[triple]
        for index, term in zip(self._indexes, triple):
            del index[term][triple]
            if not index[term]:
                del index[term]
        return True

    def clear(self):
        self._triples.clear()
        for index in self._indexes:
            index.clear()

    def _candidates(self, subject, predicate, object):
        best = self._triples
        for index, term in zip(self._indexes, (subject, predicate, object)):
            if term is None:
                continue
            found = index.get(term)
            if not found:
                return ()
            if len(found) < len(best):
                best = found
        return list(best)

    def __contains__(self, triple):
        return triple in self._triples

    def __iter__(self):
        return iter(list(self._triples))

    def __len__(self):
        return len(self._triples)


class ListGraph(_BaseGraph):
    """A multiset of triples: ``add`` always appends."""

    def __init__(self, name=None, prefixes=None, bnodes=None):
        super(ListGraph, self).__init__(name, prefixes, bnodes)
        self._triples = []

    def add(self, triple):
        if not isinstance(triple, Triple):
            raise StructuralError('Graphs hold triples, not %r' % (triple,))
        self._triples.append(triple)
        return True

    def remove(self, triple):
        before = len(self._triples)
        self._triples = [t for t in self._triples if t != triple]
        return len(self._triples) != before

    def clear(self):
        del self._triples[:]

    def dedup(self):
        """Drop repeated triples, returning how many were removed."""
        before = len(self._triples)
        self._triples = list(OrderedDict.fromkeys(self._triples))
        return before - len(self._triples)

    def _candidates(self, subject, predicate, object):
        return list(self._triples)

    def __iter__(self):
        return iter(list(self._triples))

    def __len__(self):
        return len(self._triples)


class Dataset(object):
    """A default graph plus named graphs sharing one blank node scope and
    one prefix map."""

    def __init__(self, graph_factory=Graph):
        self.graph_factory = graph_factory
        self.bnodes = BlankNodeScope()
        self.prefixes = PrefixMap()
        self.default_graph = self._new_graph(None)
        self.graphs = OrderedDict()

    def _new_graph(self, name):
        graph = self.graph_factory()
        graph.name = name
        graph.bnodes = self.bnodes
        graph.prefixes = self.prefixes
        return graph

    def graph(self, name=None):
        """Return the graph called ``name``, creating it if needed."""
        if name is None:
            return self.default_graph
        if not isinstance(name, GRAPH_NAME_TYPES):
            raise StructuralError('%r cannot name a graph' % (name,))
        if name not in self.graphs:
            self.graphs[name] = self._new_graph(name)
        return self.graphs[name]

    def add(self, quad):
        if isinstance(quad, Triple):
            return self.default_graph.add(quad)
        if not isinstance(quad, Quad):
            raise StructuralError('Datasets hold quads, not %r' % (quad,))
        return self.graph(quad.graph).add(quad.triple)

    def addAll(self, quads):
        for quad in quads:
            self.add(quad)
        return self

    def remove(self, quad):
        if isinstance(quad, Triple):
            return self.default_graph.remove(quad)
        graph = self.default_graph if quad.graph is None \
            else self.graphs.get(quad.graph)
        if graph is None:
            return False
        return graph.remove(quad.triple)

    def clear(self):
        self.default_graph.clear()
        self.graphs.clear()

    def _graphs_for(self, graph):
        if graph is ANY:
            return [self.default_graph] + list(self.graphs.values())
        if graph is None:
            return [self.default_graph]
        if graph in self.graphs:
            return [self.graphs[graph]]
        return []

    def match(self, subject=None, predicate=None, object=None, graph=ANY):
        """Quads matching the pattern. ``graph=None`` is the default graph;
        ``ANY`` (the default) searches every graph."""
        def produce():
            for member in self._graphs_for(graph):
                for triple in member.match(subject, predicate, object):
                    yield Quad(triple.subject, triple.predicate,
                               triple.object, member.name)
        return StatementView(produce)

    def named_graphs(self):
        return [graph for graph in self.graphs.values() if len(graph)]

    def __iter__(self):
        return iter(self.match())

    def __len__(self):
        return sum(len(graph) for graph in self._graphs_for(ANY))

    def __contains__(self, quad):
        if isinstance(quad, Triple):
            return quad in self.default_graph
        return any(True for _ in self.match(*quad))

    def isomorphic(self, other):
        return isomorphic(self, other)

    def __repr__(self):
        return '<Dataset: %d quads in %d named graphs>' % (len(self),
                                                           len(self.graphs))


class RDFEnvironment(object):
    """Factory for terms, statements and graphs, after the RDF Interfaces
    ``RDFEnvironment``."""

    def __init__(self, graph_factory=Graph):
        self.graph_factory = graph_factory

    def createNamedNode(self, iri):
        return NamedNode(iri)

    def createBlankNode(self, scope=None, hint=None):
        if scope is None:
            return BlankNode(hint)
        return scope.createBlankNode(hint)

    def createLiteral(self, value, language=None, datatype=None):
        return Literal(value, language, datatype)

    def createVariable(self, name):
        return Variable(name)

    def createTriple(self, subject, predicate, object):
        return Triple(subject, predicate, object)

    def createQuad(self, subject, predicate, object, graph=None):
        return Quad(subject, predicate, object, graph)

    def createFormula(self, statements=()):
        return Formula(statements)

    def createGraph(self, graph_factory=None):
        return (graph_factory or self.graph_factory)()

    def createDataset(self, graph_factory=None):
        return Dataset(graph_factory or self.graph_factory)

    def createPrefixMap(self, empty=False):
        if empty:
            return PrefixMap()
        return PrefixMap.common()


def _blank_nodes(term, found):
    if isinstance(term, BlankNode):
        found.add(term)
    elif isinstance(term, tuple) and not isinstance(term, (Literal, Variable)):
        for part in term:
            _blank_nodes(part, found)
    elif isinstance(term, Formula):
        for statement in term:
            _blank_nodes(statement, found)
    return found


def _shape(term):
    """A hashable stand-in for ``term`` with every blank node erased."""
    if isinstance(term, BlankNode):
        return BlankNode
    if isinstance(term, (Triple, Quad)):
        return (type(term),) + tuple(_shape(t) for t in term)
    return term


def _describe(term, node, colors):
    if term == node:
        return 'self'
    if isinstance(term, BlankNode):
        return ('b', colors[term])
    if isinstance(term, (Triple, Quad)):
        return (type(term),) + tuple(_describe(t, node, colors) for t in term)
    if isinstance(term, Formula):
        return (Formula, frozenset(
            _describe(s, node, colors) for s in term))
    return ('g', term)


def _refine(statements, nodes):
    """Colour refinement: split blank nodes by what surrounds them until the
    partition stops changing."""
    touching = defaultdict(list)
    for statement in statements:
        for node in _blank_nodes(statement, set()):
            touching[node].append(statement)
    colors = dict.fromkeys(nodes, 0)
    classes = 1
    for _ in range(len(nodes) + 1):
        colors = dict(
            (node, hash(tuple(sorted(
                hash(_describe(s, node, colors)) for s in touching[node]))))
            for node in nodes)
        refined = len(set(colors.values()))
        if refined == classes:
            break
        classes = refined
    return colors


def isomorphic(first, second):
    """True when the two statement collections are equal up to a one-to-one
    renaming of blank nodes. Statements may be triples or quads, and
    embedded triples are compared structurally."""
    first = set(first)
    second = set(second)
    if len(first) != len(second):
        return False
    nodes1 = set()
    nodes2 = set()
    for statement in first:
        _blank_nodes(statement, nodes1)
    for statement in second:
        _blank_nodes(statement, nodes2)
    if len(nodes1) != len(nodes2):
        return False
    if not nodes1:
        return first == second
    if Counter(_shape(s) for s in first) != Counter(_shape(s) for s in second):
        return False

    colors1 = _refine(first, nodes1)
    colors2 = _refine(second, nodes2)
    if Counter(colors1.values()) != Counter(colors2.values()):
        return False

    by_color = defaultdict(list)
    for node, color in colors2.items():
        by_color[color].append(node)
    mapping = {}
    ambiguous = []
    for node, color in colors1.items():
        if len(by_color[color]) == 1:
            mapping[node] = by_color[color][0]
        else:
            ambiguous.append(node)
    ambiguous.sort(key=lambda node: len(by_color[colors1[node]]))

    def attempt():
        return set(_map_statement(s, mapping.__getitem__)
                   for s in first) == second

    used = set(mapping.values())
    # Depth-first search over the nodes colour refinement could not pin down.
    stack = [iter(by_color[colors1[ambiguous[0]]])] if ambiguous else []
    if not stack:
        return attempt()
    while stack:
        depth = len(stack) - 1
        node = ambiguous[depth]
        if node in mapping:
            used.discard(mapping.pop(node))
        for candidate in stack[-1]:
            if candidate not in used:
                mapping[node] = candidate
                used.add(candidate)
                break
        else:
            stack.pop()
            continue
        if depth + 1 == len(ambiguous):
            if attempt():
                return True
        else:
            stack.append(iter(by_color[colors1[ambiguous[depth + 1]]]))
    return False
