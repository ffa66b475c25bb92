from collections import Counter, OrderedDict

from rdfkit.exceptions import (
    ResourceExhausted,
    StructuralError,
    UnsupportedFeature,
)
from rdfkit.grammars import terminal_regex
from rdfkit.primitives import (
    RDF_FIRST,
    RDF_NIL,
    RDF_REST,
    RDF_TYPE,
    XSD_BOOLEAN,
    XSD_DECIMAL,
    XSD_DOUBLE,
    XSD_INTEGER,
    BlankNode,
    Formula,
    Literal,
    NamedNode,
    PrefixMap,
    Triple,
    Variable,
)
from rdfkit.serializers.base import (
    DEFAULT_MAX_DEPTH,
    BaseSerializer,
    BlankNodeLabeler,
    check_statement,
    default_graph,
)
from rdfkit.util import escape_literal, relativize

# Datatypes whose literals may be written bare, keyed to the token that
# must match the lexical form exactly.
BARE_LITERALS = {
    XSD_INTEGER: 'INTEGER',
    XSD_DECIMAL: 'DECIMAL',
    XSD_DOUBLE: 'DOUBLE',
    XSD_BOOLEAN: 'BOOLEAN',
}


def collect_blank_nodes(term, found):
    if isinstance(term, BlankNode):
        found.add(term)
    elif isinstance(term, Triple):
        for part in term:
            collect_blank_nodes(part, found)
    elif isinstance(term, Formula):
        for statement in term:
            collect_blank_nodes(statement, found)
    return found


class Layout(object):
    """Decides how the subjects of one block of triples are written.

    A blank node is written inline (``[ ... ]`` or as a collection) when it
    is the object of exactly one triple, is not ``pinned`` and does not
    occur inside an embedded triple or formula. Inline nodes that cannot be
    reached from some written subject (they form a cycle) are demoted to
    labelled subjects.
    """

    def __init__(self, triples, pinned=(), nest=True, collections=True,
                 max_nesting=None):
        self.by_subject = OrderedDict()
        self.refs = Counter()
        self.fixed = set(pinned)
        for triple in triples:
            self.by_subject.setdefault(triple.subject, []).append(triple)
            if isinstance(triple.object, BlankNode):
                self.refs[triple.object] += 1
            for term in (triple.subject, triple.object):
                if isinstance(term, (Triple, Formula)):
                    collect_blank_nodes(term, self.fixed)

        self.nest = nest
        self.inline = set()
        self.lists = OrderedDict()
        self.list_heads = {}
        self.list_cells = {}
        if nest:
            self.inline = set(node for node, count in self.refs.items()
                              if count == 1 and node not in self.fixed)
            if collections:
                self._find_lists()
            self._break_cycles()
            if max_nesting is not None:
                self._limit_nesting(max_nesting)

        named = sorted(s for s in self.by_subject if isinstance(s, NamedNode))
        self.roots = named + [
            s for s in self.by_subject
            if not isinstance(s, NamedNode) and s not in self.inline]

    def _find_lists(self):
        cells = OrderedDict()
        for node in self.by_subject:
            if node not in self.inline:
                continue
            statements = self.by_subject[node]
            links = dict((t.predicate, t.object) for t in statements)
            if len(statements) == 2 and set(links) == {RDF_FIRST, RDF_REST}:
                cells[node] = links
        continued = set(links[RDF_REST] for links in cells.values())

        for head in cells:
            if head in continued:
                continue
            chain = []
            node = head
            while node in cells and node not in chain:
                chain.append(node)
                node = cells[node][RDF_REST]
            if node != RDF_NIL:
                continue
            self.lists[head] = [cells[cell][RDF_FIRST] for cell in chain]
            self.list_cells[head] = chain
            for cell in chain:
                self.list_heads[cell] = head

    def _demote(self, node):
        self.inline.discard(node)
        head = self.list_heads.get(node)
        if head is not None:
            for cell in self.list_cells.pop(head):
                del self.list_heads[cell]
            del self.lists[head]

    def _break_cycles(self):
        visited = set()

        def walk(start):
            stack = [start]
            while stack:
                for triple in self.by_subject.get(stack.pop(), ()):
                    node = triple.object
                    if node in self.inline and node not in visited:
                        visited.add(node)
                        stack.append(node)

        for subject in list(self.by_subject):
            if subject not in self.inline:
                walk(subject)
        for subject in list(self.by_subject):
            if subject in self.inline and subject not in visited:
                self._demote(subject)
                walk(subject)

    def nested(self, node):
        """The inline nodes written inside ``node``."""
        if node in self.lists:
            return [item for item in self.lists[node] if item in self.inline]
        return [t.object for t in self.by_subject.get(node, ())
                if t.object in self.inline]

    def _limit_nesting(self, limit):
        # Nodes that would sit more than ``limit`` brackets deep start a new
        # labelled subject instead.
        stack = [(subject, 0) for subject in self.by_subject
                 if subject not in self.inline]
        while stack:
            node, level = stack.pop()
            for child in self.nested(node):
                if level >= limit:
                    self._demote(child)
                    stack.append((child, 0))
                else:
                    stack.append((child, level + 1))

    def anonymous(self, node):
        """A subject nobody refers to can be written as ``[]``."""
        return self.nest and isinstance(node, BlankNode) and \
            self.refs[node] == 0 and node not in self.fixed

    def groups(self, subject):
        by_predicate = OrderedDict()
        for triple in self.by_subject.get(subject, ()):
            by_predicate.setdefault(triple.predicate, []).append(
                triple.object)
        return [(predicate, by_predicate[predicate]) for predicate in
                sorted(by_predicate, key=lambda p: (p != RDF_TYPE, p))]


class TurtleCursor(object):
    """Renders blocks of triples for one output document.

    Blank node labels are shared by every block the cursor writes.
    """

    def __init__(self, options, prefixes):
        self.options = options
        if not isinstance(prefixes, PrefixMap):
            prefixes = PrefixMap(prefixes or ())
        self.prefixes = prefixes
        self.label = BlankNodeLabeler()
        self.indent = ' ' * options.indent_width

    def header(self):
        lines = []
        base = self.options.base
        if base:
            if self.options.sparql_style:
                lines.append('BASE <%s>' % (base,))
            else:
                lines.append('@base <%s> .' % (base,))
        for prefix, namespace in sorted(self.prefixes.items()):
            if self.options.sparql_style:
                lines.append('PREFIX %s: <%s>' % (prefix, namespace))
            else:
                lines.append('@prefix %s: <%s> .' % (prefix, namespace))
        if lines:
            lines.append('')
        return ''.join(line + '\n' for line in lines)

    def block(self, triples, pinned=(), level=0):
        layout = Layout(triples, pinned, self.options.nest_blank_nodes,
                        self.options.use_collections,
                        self.options.max_nesting)
        statements = []
        for subject in layout.roots:
            if layout.anonymous(subject):
                subject_text = '[]'
            else:
                subject_text = self.term(subject)
            statements.append('%s%s %s .\n' % (
                self.indent * level, subject_text,
                self.predicate_objects(subject, layout, level)))
        return '\n'.join(statements)

    def predicate_objects(self, subject, layout, level):
        parts = []
        for predicate, objects in layout.groups(subject):
            parts.append('%s %s' % (
                self.verb(predicate),
                ', '.join(self.object_text(o, layout, level + 1)
                          for o in objects)))
        return (' ;\n' + self.indent * (level + 1)).join(parts)

    def object_text(self, node, layout, level):
        if node in layout.lists:
            return '( %s )' % ' '.join(
                self.object_text(item, layout, level)
                for item in layout.lists[node])
        if node in layout.inline:
            if node not in layout.by_subject:
                return '[]'
            return '[\n%s%s\n%s]' % (
                self.indent * (level + 1),
                self.predicate_objects(node, layout, level),
                self.indent * level)
        return self.term(node)

    def verb(self, predicate):
        if predicate == RDF_TYPE:
            return 'a'
        return self.iri(predicate)

    def iri(self, iri):
        qname = self.prefixes.compress(iri)
        if qname is not None:
            return qname
        relative = relativize(self.options.base, iri)
        if relative is not None:
            return '<%s>' % (relative,)
        return '<%s>' % (iri,)

    def literal(self, literal):
        if literal.language:
            return '"%s"@%s' % (escape_literal(literal.value),
                                literal.language)
        token = BARE_LITERALS.get(literal.datatype)
        if token and terminal_regex(token).fullmatch(literal.value):
            return literal.value
        if literal.datatype is None:
            return '"%s"' % (escape_literal(literal.value),)
        return '"%s"^^%s' % (escape_literal(literal.value),
                             self.iri(literal.datatype))

    def term(self, term, depth=0):
        if isinstance(term, NamedNode):
            return self.iri(term)
        if isinstance(term, BlankNode):
            return '_:%s' % (self.label(term),)
        if isinstance(term, Literal):
            return self.literal(term)
        if isinstance(term, Triple):
            return self.quoted(term, depth)
        if isinstance(term, (Formula, Variable)):
            raise UnsupportedFeature('%r is only expressible in N3' % (term,))
        raise StructuralError('%r is not an RDF term' % (term,))

    def check_depth(self, depth):
        if depth >= self.options.max_depth:
            raise ResourceExhausted('Statements nested deeper than %d'
                                    % self.options.max_depth)

    def quoted(self, triple, depth):
        self.check_depth(depth)
        check_statement(triple)
        return '<< %s %s %s >>' % (self.term(triple.subject, depth + 1),
                                   self.verb(triple.predicate),
                                   self.term(triple.object, depth + 1))


class TurtleSerializer(BaseSerializer):
    NAME = 'Turtle'
    FILE_EXTENSION = 'ttl'
    MIME_TYPE = 'text/turtle'
    cursor_class = TurtleCursor

    def __init__(self, base=None, sparql_style=False, nest_blank_nodes=True,
                 use_collections=True, indent_width=4,
                 max_depth=DEFAULT_MAX_DEPTH, max_nesting=32):
        self.base = base
        self.sparql_style = sparql_style
        self.nest_blank_nodes = nest_blank_nodes
        self.use_collections = use_collections
        self.indent_width = indent_width
        self.max_depth = max_depth
        self.max_nesting = max_nesting

    def _write(self, graph, out, prefixes):
        triples = [check_statement(t)
                   for t in default_graph(graph, self.NAME)]
        cursor = self.cursor_class(self, prefixes)
        out.write(cursor.header())
        out.write(cursor.block(triples))
