import io
import unittest

from rdfkit.exceptions import ResourceExhausted, UnsupportedFeature
from rdfkit.parsers import (
    n3_parser,
    nquads_parser,
    ntriples_parser,
    rdfjson_parser,
    trig_parser,
    turtle_parser,
)
from rdfkit.primitives import (
    XSD_BOOLEAN,
    XSD_DECIMAL,
    XSD_DOUBLE,
    XSD_INTEGER,
    Dataset,
    Formula,
    Graph,
    Literal,
    NamedNode,
    Quad,
    Triple,
    Variable,
)
from rdfkit.serializers import (
    DotOptions,
    DotSerializer,
    N3Serializer,
    NQuadsSerializer,
    NTriplesSerializer,
    RDFJSONSerializer,
    TriGSerializer,
    TurtleSerializer,
)

EX = 'http://example.org/'


def ex(name):
    return NamedNode(EX + name)


TURTLE = '''@prefix ex: <http://example.org/> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

ex:alice a ex:Person ;
    ex:name "Alice"@en, "Alicia"@es ;
    ex:age 42 ;
    ex:height 1.70 ;
    ex:score 2.5e1 ;
    ex:active true ;
    ex:note """two
lines""" ;
    ex:knows [ ex:name "Bob" ; ex:knows [ ex:name "Carol" ] ] ;
    ex:likes ( ex:tea "coffee" ( 1 2 ) ) ;
    ex:tag "a\\tb"^^xsd:token .
_:loop ex:next [ ex:next _:loop ] .
<< ex:alice ex:age 42 >> ex:source ex:census .
ex:bob ex:said << ex:alice ex:knows ex:carol >> .
ex:carol ex:empty () .
'''


class TestNTriplesSerializer(unittest.TestCase):

    def test_byte_identical_round_trip(self):
        line = '<http://ex/s> <http://ex/p> "hello"@en .\n'
        graph = ntriples_parser.parse_string(line)
        self.assertEqual(NTriplesSerializer().write_string(graph), line)

    def test_escaping(self):
        graph = Graph()
        graph.add(Triple(ex('s'), ex('p'), Literal('a\nb"c\\d\x07')))
        graph.add(Triple(ex('s'), ex('p'), Literal('1', datatype=XSD_INTEGER)))
        self.assertEqual(NTriplesSerializer().write_string(graph), (
            '<http://example.org/s> <http://example.org/p> "a\\nb\\"c\\\\d\\u0007" .\n'
            '<http://example.org/s> <http://example.org/p> '
            '"1"^^<http://www.w3.org/2001/XMLSchema#integer> .\n'))

    def test_blank_node_labels(self):
        graph = ntriples_parser.parse_string(
            '_:x <http://example.org/p> _:y .\n')
        self.assertEqual(NTriplesSerializer().write_string(graph),
                         '_:x <http://example.org/p> _:y .\n')

    def test_embedded_triples_need_star(self):
        graph = Graph()
        graph.add(Triple(Triple(ex('s'), ex('p'), ex('o')), ex('q'), ex('r')))
        with self.assertRaises(UnsupportedFeature):
            NTriplesSerializer().write_string(graph)
        self.assertEqual(NTriplesSerializer(star=True).write_string(graph), (
            '<< <http://example.org/s> <http://example.org/p> '
            '<http://example.org/o> >> <http://example.org/q> '
            '<http://example.org/r> .\n'))

    def test_depth_limit(self):
        term = ex('o')
        for _ in range(10):
            term = Triple(ex('s'), ex('p'), term)
        graph = Graph()
        graph.add(Triple(ex('s'), ex('p'), term))
        with self.assertRaises(ResourceExhausted):
            NTriplesSerializer(star=True, max_depth=5).write_string(graph)

    def test_named_graphs_rejected(self):
        dataset = Dataset()
        dataset.add(Quad(ex('s'), ex('p'), ex('o'), ex('g')))
        with self.assertRaises(UnsupportedFeature):
            NTriplesSerializer().write_string(dataset)
        dataset.remove(Quad(ex('s'), ex('p'), ex('o'), ex('g')))
        dataset.add(Triple(ex('s'), ex('p'), ex('o')))
        self.assertEqual(len(NTriplesSerializer().write_string(dataset)
                             .splitlines()), 1)

    def test_binary_stream(self):
        graph = Graph()
        graph.add(Triple(ex('s'), ex('p'), Literal('caf\xe9')))
        buf = io.BytesIO()
        NTriplesSerializer().write(graph, buf)
        self.assertEqual(
            buf.getvalue(),
            '<http://example.org/s> <http://example.org/p> "caf\xe9" .\n'
            .encode('utf-8'))


class TestNQuadsSerializer(unittest.TestCase):

    def test_quads(self):
        dataset = Dataset()
        dataset.add(Triple(ex('s'), ex('p'), ex('o')))
        dataset.add(Quad(ex('s'), ex('p'), Literal('v'), ex('g')))
        self.assertEqual(NQuadsSerializer().write_string(dataset), (
            '<http://example.org/s> <http://example.org/p> <http://example.org/o> .\n'
            '<http://example.org/s> <http://example.org/p> "v" <http://example.org/g> .\n'))

    def test_round_trip(self):
        data = ('_:a <http://example.org/p> "x"@en _:g .\n'
                '<http://example.org/s> <http://example.org/p> _:a .\n')
        dataset = nquads_parser.parse_string(data)
        again = nquads_parser.parse_string(
            NQuadsSerializer().write_string(dataset))
        self.assertTrue(dataset.isomorphic(again))


class TestTurtleSerializer(unittest.TestCase):

    def setUp(self):
        self.graph = Graph()
        self.graph.prefixes['ex'] = EX

    def test_layout(self):
        bob = self.graph.bnodes.createBlankNode()
        self.graph.addAll([
            Triple(ex('s'), ex('name'), Literal('Alice', language='en')),
            Triple(ex('s'), ex('knows'), bob),
            Triple(bob, ex('name'), Literal('Bob')),
            Triple(ex('s'), NamedNode(
                'http://www.w3.org/1999/02/22-rdf-syntax-ns#type'),
                ex('Thing')),
            Triple(ex('s'), ex('age'), Literal('42', datatype=XSD_INTEGER)),
        ])
        self.assertEqual(TurtleSerializer().write_string(self.graph), (
            '@prefix ex: <http://example.org/> .\n'
            '\n'
            'ex:s a ex:Thing ;\n'
            '    ex:age 42 ;\n'
            '    ex:knows [\n'
            '        ex:name "Bob"\n'
            '    ] ;\n'
            '    ex:name "Alice"@en .\n'))

    def test_collections(self):
        graph = turtle_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            'ex:s ex:list (1 ex:b "c") .')
        self.assertEqual(TurtleSerializer().write_string(graph), (
            '@prefix ex: <http://example.org/> .\n'
            '\n'
            'ex:s ex:list ( 1 ex:b "c" ) .\n'))

    def test_collections_can_be_disabled(self):
        graph = turtle_parser.parse_string(
            '@prefix ex: <http://example.org/> .\nex:s ex:list (1) .')
        output = TurtleSerializer(use_collections=False).write_string(graph)
        self.assertNotIn('(', output)
        self.assertIn('rdf-syntax-ns#first', output)

    def test_bare_literals_only_when_canonical_token(self):
        self.graph.addAll([
            Triple(ex('s'), ex('p'), Literal('1.0', datatype=XSD_DECIMAL)),
            Triple(ex('s'), ex('p'), Literal('1.', datatype=XSD_DECIMAL)),
            Triple(ex('s'), ex('p'), Literal('1E3', datatype=XSD_DOUBLE)),
            Triple(ex('s'), ex('p'), Literal('INF', datatype=XSD_DOUBLE)),
            Triple(ex('s'), ex('p'), Literal('false', datatype=XSD_BOOLEAN)),
            Triple(ex('s'), ex('p'), Literal('1', datatype=XSD_BOOLEAN)),
        ])
        self.assertEqual(TurtleSerializer().write_string(self.graph), (
            '@prefix ex: <http://example.org/> .\n'
            '\n'
            'ex:s ex:p 1.0, '
            '"1."^^<http://www.w3.org/2001/XMLSchema#decimal>, 1E3, '
            '"INF"^^<http://www.w3.org/2001/XMLSchema#double>, false, '
            '"1"^^<http://www.w3.org/2001/XMLSchema#boolean> .\n'))

    def test_sparql_style_and_base(self):
        graph = Graph()
        graph.add(Triple(ex('dir/a'), ex('dir/b'), NamedNode('http://other.org/c')))
        serializer = TurtleSerializer(base=EX + 'dir/', sparql_style=True)
        self.assertEqual(serializer.write_string(graph), (
            'BASE <http://example.org/dir/>\n'
            '\n'
            '<a> <b> <http://other.org/c> .\n'))

    def test_anonymous_subject(self):
        node = self.graph.bnodes.createBlankNode()
        self.graph.add(Triple(node, ex('p'), ex('o')))
        self.assertTrue(TurtleSerializer().write_string(self.graph)
                        .endswith('[] ex:p ex:o .\n'))

    def test_shared_blank_nodes_keep_labels(self):
        node = self.graph.bnodes.createBlankNode('n')
        self.graph.addAll([Triple(ex('a'), ex('p'), node),
                           Triple(ex('b'), ex('p'), node)])
        output = TurtleSerializer().write_string(self.graph)
        self.assertEqual(output.count('_:n'), 2)
        self.assertNotIn('[', output)

    def test_no_nesting(self):
        node = self.graph.bnodes.createBlankNode('n')
        self.graph.add(Triple(ex('a'), ex('p'), node))
        self.graph.add(Triple(node, ex('p'), ex('o')))
        output = TurtleSerializer(nest_blank_nodes=False).write_string(
            self.graph)
        self.assertIn('ex:a ex:p _:n .\n', output)
        self.assertIn('_:n ex:p ex:o .\n', output)

    def test_prefix_argument_overrides_graph(self):
        self.graph.add(Triple(ex('s'), ex('p'), ex('o')))
        output = TurtleSerializer().write_string(self.graph, prefixes={})
        self.assertEqual(output, '<http://example.org/s> '
                                 '<http://example.org/p> '
                                 '<http://example.org/o> .\n')

    def test_formulas_rejected(self):
        self.graph.add(Triple(Formula([Triple(ex('a'), ex('b'), ex('c'))]),
                              ex('p'), ex('o')))
        with self.assertRaises(UnsupportedFeature):
            TurtleSerializer().write_string(self.graph)

    def test_round_trip(self):
        graph = turtle_parser.parse_string(TURTLE)
        output = TurtleSerializer().write_string(graph)
        again = turtle_parser.parse_string(output)
        self.assertTrue(graph.isomorphic(again), output)
        self.assertIn('<< ex:alice ex:age 42 >> ex:source ex:census', output)

    def test_nesting_limit_starts_new_subject(self):
        graph = turtle_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            'ex:s ex:p [ ex:p [ ex:p ex:o ] ] .')
        output = TurtleSerializer(max_nesting=1).write_string(graph)
        self.assertEqual(output.count('['), 1)
        self.assertTrue(graph.isomorphic(turtle_parser.parse_string(output)),
                        output)

    def test_long_blank_node_chain(self):
        graph = ntriples_parser.parse_string('\n'.join(
            '_:b%d <http://example.org/p> _:b%d .' % (i, i + 1)
            for i in range(600)))
        output = TurtleSerializer().write_string(graph)
        self.assertTrue(graph.isomorphic(turtle_parser.parse_string(output)))
        dataset = trig_parser.parse_string(
            TriGSerializer().write_string(graph))
        self.assertTrue(graph.isomorphic(dataset.default_graph))


class TestTriGSerializer(unittest.TestCase):

    def test_graph_blocks(self):
        dataset = trig_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            'ex:s ex:p ex:o .\n'
            'ex:g { ex:s ex:p "in g" }\n')
        self.assertEqual(TriGSerializer().write_string(dataset), (
            '@prefix ex: <http://example.org/> .\n'
            '\n'
            'ex:s ex:p ex:o .\n'
            '\n'
            'ex:g {\n'
            '    ex:s ex:p "in g" .\n'
            '}\n'))

    def test_round_trip(self):
        dataset = trig_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            '_:shared ex:p [ ex:q ( 1 2 ) ] .\n'
            'ex:g { _:shared ex:in ex:g . [] ex:r ex:s }\n'
            '_:h { ex:a ex:b << ex:c ex:d ex:e >> }\n')
        output = TriGSerializer().write_string(dataset)
        again = trig_parser.parse_string(output)
        self.assertTrue(dataset.isomorphic(again), output)
        self.assertEqual(output.count('_:shared'), 2)

    def test_plain_graph(self):
        graph = Graph()
        graph.add(Triple(ex('s'), ex('p'), ex('o')))
        self.assertEqual(TriGSerializer().write_string(graph),
                         '<http://example.org/s> <http://example.org/p> '
                         '<http://example.org/o> .\n')


class TestN3Serializer(unittest.TestCase):

    def test_formulas_and_variables(self):
        graph = n3_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            '{ ?x a ex:Man } => { ?x a ex:Mortal } .')
        self.assertEqual(N3Serializer().write_string(graph), (
            '@prefix ex: <http://example.org/> .\n'
            '\n'
            '{ ?x a ex:Man } => { ?x a ex:Mortal } .\n'))

    def test_round_trip(self):
        graph = n3_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            'ex:a = ex:b .\n'
            '{ ?x ex:p [ ex:q ?y ] . ?y ex:r {} } => { ?x ex:s "done" } .\n'
            'ex:c ex:d ( ex:e 1 ) .\n')
        output = N3Serializer().write_string(graph)
        again = n3_parser.parse_string(output)
        self.assertTrue(graph.isomorphic(again), output)
        self.assertIn('ex:a = ex:b .', output)

    def test_embedded_triples_rejected(self):
        graph = Graph()
        graph.add(Triple(Triple(ex('s'), ex('p'), ex('o')), ex('q'), ex('r')))
        with self.assertRaises(UnsupportedFeature):
            N3Serializer().write_string(graph)

    def test_variable_outside_formula(self):
        graph = Graph()
        graph.add(Triple(Variable('x'), ex('p'), ex('o')))
        self.assertEqual(N3Serializer().write_string(graph),
                         '?x <http://example.org/p> <http://example.org/o> .\n')


class TestRDFJSONSerializer(unittest.TestCase):

    def test_compact(self):
        graph = Graph()
        graph.add(Triple(ex('s'), ex('p'), Literal('chat', language='fr')))
        self.assertEqual(
            RDFJSONSerializer(pretty=False).write_string(graph),
            '{"http://example.org/s": {"http://example.org/p": '
            '[{"type": "literal", "value": "chat", "lang": "fr"}]}}\n')

    def test_round_trip(self):
        graph = turtle_parser.parse_string(
            '@prefix ex: <http://example.org/> .\n'
            'ex:s ex:p [ ex:q 1, "x"@en ], ex:o .')
        output = RDFJSONSerializer().write_string(graph)
        self.assertTrue(graph.isomorphic(rdfjson_parser.parse_string(output)))

    def test_embedded_triples_rejected(self):
        graph = Graph()
        graph.add(Triple(ex('s'), ex('p'), Triple(ex('s'), ex('p'), ex('o'))))
        with self.assertRaises(UnsupportedFeature):
            RDFJSONSerializer().write_string(graph)


class TestDotSerializer(unittest.TestCase):

    def setUp(self):
        self.graph = Graph()
        self.graph.prefixes['dc'] = 'http://purl.org/dc/elements/1.1/'
        self.node = self.graph.bnodes.createBlankNode()
        self.graph.addAll([
            Triple(ex('book'), NamedNode('http://purl.org/dc/elements/1.1/title'),
                   Literal('Tony "TB" Benn')),
            Triple(ex('book'), ex('by'), self.node),
        ])

    def test_defaults(self):
        output = DotSerializer().write_string(self.graph)
        self.assertTrue(output.startswith(
            'digraph {\n    rankdir=BT\n    charset="utf-8";\n'))
        self.assertIn('"node_1" -> "node_2" [label="dc:title"];', output)
        self.assertIn('"node_1" -> "node_3" '
                      '[label="http://example.org/by"];', output)
        self.assertIn('"node_1" [URL="http://example.org/book",'
                      'label="http://example.org/book",'
                      'shape=ellipse,color=blue];', output)
        self.assertIn('"node_2" [label="Tony \\"TB\\" Benn",'
                      'shape=record,color=black];', output)
        self.assertIn('"node_3" [label="",shape=circle,color=green];', output)
        self.assertTrue(output.endswith('}\n'))

    def test_options(self):
        options = DotOptions(blank_color='red', blank_labels=True,
                             literal_shape='square', node_prefix='n')
        output = DotSerializer(options).write_string(self.graph)
        self.assertIn('"n2" [label="Tony \\"TB\\" Benn",'
                      'shape=square,color=black];', output)
        self.assertIn('"n3" [label="n3",shape=circle,color=red];', output)
