"""GraphViz output: one node per distinct term, one labelled edge per
triple. Predicates are compressed with the prefix map where possible."""
from collections import OrderedDict, namedtuple

from rdfkit.exceptions import StructuralError, UnsupportedFeature
from rdfkit.primitives import BlankNode, Literal, NamedNode, PrefixMap
from rdfkit.serializers.base import (
    BaseSerializer,
    check_statement,
    default_graph,
)

DotOptions = namedtuple('DotOptions', [
    'blank_shape', 'blank_color', 'blank_labels',
    'iri_shape', 'iri_color',
    'literal_shape', 'literal_color',
    'node_prefix',
])
DotOptions.__new__.__defaults__ = (
    'circle', 'green', False,
    'ellipse', 'blue',
    'record', 'black',
    'node_',
)


def dot_escape(text):
    return text.replace('\\', '\\\\').replace('"', '\\"').replace(
        '\n', '\\n').replace('\r', '\\r')


class DotSerializer(BaseSerializer):
    NAME = 'DOT'
    FILE_EXTENSION = 'dot'
    MIME_TYPE = 'text/vnd.graphviz'

    def __init__(self, options=None):
        self.options = options or DotOptions()

    def _write(self, graph, out, prefixes):
        if not isinstance(prefixes, PrefixMap):
            prefixes = PrefixMap(prefixes or ())
        nodes = OrderedDict()

        def node_id(term):
            if term not in nodes:
                if not isinstance(term, (NamedNode, BlankNode, Literal)):
                    raise UnsupportedFeature('DOT cannot draw %r' % (term,))
                nodes[term] = '%s%d' % (self.options.node_prefix,
                                        len(nodes) + 1)
            return nodes[term]

        out.write('digraph {\n    rankdir=BT\n    charset="utf-8";\n\n')
        for triple in default_graph(graph, self.NAME):
            check_statement(triple)
            subject, object_ = node_id(triple.subject), node_id(triple.object)
            predicate = prefixes.compress(triple.predicate)
            out.write('    "%s" -> "%s" [label="%s"];\n' % (
                subject, object_, dot_escape(predicate or triple.predicate)))
        out.write('\n')
        for term, ident in nodes.items():
            out.write('    "%s" [%s];\n' % (ident, self.attributes(term, ident)))
        out.write('}\n')

    def attributes(self, term, ident):
        options = self.options
        if isinstance(term, NamedNode):
            iri = dot_escape(term)
            return 'URL="%s",label="%s",shape=%s,color=%s' % (
                iri, iri, options.iri_shape, options.iri_color)
        if isinstance(term, BlankNode):
            return 'label="%s",shape=%s,color=%s' % (
                ident if options.blank_labels else '',
                options.blank_shape, options.blank_color)
        if isinstance(term, Literal):
            return 'label="%s",shape=%s,color=%s' % (
                dot_escape(term.value), options.literal_shape,
                options.literal_color)
        raise StructuralError('%r is not an RDF term' % (term,))
