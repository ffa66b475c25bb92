from collections import namedtuple

from lark import Token

from rdfkit.parsers.lark.base import (
    LarkParser,
    RDFTransformer,
    compile_grammar,
)
from rdfkit.primitives import (
    RDF_FIRST,
    RDF_NIL,
    RDF_REST,
    RDF_TYPE,
    XSD_BOOLEAN,
    XSD_DECIMAL,
    XSD_DOUBLE,
    XSD_INTEGER,
)
from rdfkit.util import grouper

# Turtle and TriG share every rule below the statement level, so they are
# compiled together and selected by start symbol.
grammar = r"""turtle_doc: statement*
trig_doc: (directive | block)*

?statement: directive | triples "."
?directive: prefix_id | base | sparql_prefix | sparql_base
prefix_id: "@prefix" PNAME_NS IRIREF "."
base: "@base" IRIREF "."
sparql_base: "BASE"i IRIREF
sparql_prefix: "PREFIX"i PNAME_NS IRIREF

triples: subject predicate_object_list
       | blank_node_property_list predicate_object_list?
predicate_object_list: verb object_list (";" (verb object_list)?)*
object_list: annotated_object ("," annotated_object)*
?annotated_object: object annotation?
annotation: "{|" predicate_object_list "|}"
?verb: predicate | rdf_type
rdf_type: "a"
?subject: iri | blank_node | collection | quoted_triple
?predicate: iri
?object: iri | blank_node | collection | blank_node_property_list | literal
       | quoted_triple
?literal: rdf_literal | numeric_literal | boolean_literal
blank_node_property_list: "[" predicate_object_list "]"
collection: "(" object* ")"
numeric_literal: INTEGER | DECIMAL | DOUBLE
rdf_literal: string (LANGTAG | "^^" iri)?
boolean_literal: BOOLEAN
string: STRING_LITERAL_QUOTE
      | STRING_LITERAL_SINGLE_QUOTE
      | STRING_LITERAL_LONG_SINGLE_QUOTE
      | STRING_LITERAL_LONG_QUOTE
iri: IRIREF | prefixed_name
prefixed_name: PNAME_LN | PNAME_NS
blank_node: BLANK_NODE_LABEL | ANON

quoted_triple: "<<" qt_subject verb qt_object ">>"
?qt_subject: iri | blank_node | quoted_triple
?qt_object: iri | blank_node | literal | quoted_triple

?block: triples_or_graph | wrapped_graph | triples2 | named_graph
named_graph: "GRAPH"i label_or_subject wrapped_graph
triples_or_graph: label_or_subject (wrapped_graph | predicate_object_list ".")
triples2: blank_node_property_list predicate_object_list? "."
        | collection predicate_object_list "."
        | quoted_triple predicate_object_list "."
wrapped_graph: "{" (triples ("." triples)* "."?)? "}"
?label_or_subject: iri | blank_node

%import terms (IRIREF, PNAME_NS, PNAME_LN, BLANK_NODE_LABEL, LANGTAG, INTEGER, DECIMAL, DOUBLE, BOOLEAN, STRING_LITERAL_QUOTE, STRING_LITERAL_SINGLE_QUOTE, STRING_LITERAL_LONG_SINGLE_QUOTE, STRING_LITERAL_LONG_QUOTE, ANON, WS, COMMENT)

%ignore WS
%ignore COMMENT
"""

turtle_lark = compile_grammar(grammar, ['turtle_doc', 'trig_doc'])

NUMERIC_DATATYPES = {
    'INTEGER': XSD_INTEGER,
    'DECIMAL': XSD_DECIMAL,
    'DOUBLE': XSD_DOUBLE,
}

# An object carrying a Turtle-star annotation block.
Annotated = namedtuple('Annotated', ['object', 'annotation'])


class TurtleTransformer(RDFTransformer):
    """Lowers a Turtle parse tree to triples.

    Nested constructs (``[ ... ]``, collections) produce statements before
    the statement that mentions them is complete; those collect in
    ``pending`` and are claimed by the enclosing ``triples`` rule.
    """

    def __init__(self, parser, sink, base=None):
        super(TurtleTransformer, self).__init__(parser, sink, base)
        self.pending = []

    def take_pending(self):
        statements, self.pending = self.pending, []
        return statements

    def unpack_predicate_object_list(self, subject, pairs):
        statements = []
        for predicate, objects in pairs:
            for object_ in objects:
                annotation = None
                if isinstance(object_, Annotated):
                    object_, annotation = object_
                triple = self.make_triple(subject, predicate, object_)
                statements.append(triple)
                if annotation is not None:
                    statements.extend(
                        self.unpack_predicate_object_list(triple, annotation))
        return statements

    def iri(self, children):
        iriref_or_pname, = children

        if isinstance(iriref_or_pname, Token):
            return self.iri_from_token(iriref_or_pname)

        return iriref_or_pname

    def prefixed_name(self, children):
        pname, = children
        return self.expand_pname(pname)

    def prefix_id(self, children):
        ns, iriref = children[-2:]
        self.prefixes[ns[:-1]] = self.iri_from_token(iriref)  # Drop the :

        return []

    def sparql_prefix(self, children):
        return self.prefix_id(children)

    def base(self, children):
        base_iriref = children[-1]
        self.base_iri = self.iri_from_token(base_iriref)

        return []

    def sparql_base(self, children):
        return self.base(children)

    def rdf_type(self, children):
        return RDF_TYPE

    def predicate_object_list(self, children):
        return list(grouper(children, 2))

    def object_list(self, children):
        return children

    def annotated_object(self, children):
        object_, annotation = children
        return Annotated(object_, annotation)

    def annotation(self, children):
        pairs, = children
        return pairs

    def triples(self, children):
        statements = self.take_pending()
        if len(children) == 2:
            subject, pairs = children
            statements.extend(
                self.unpack_predicate_object_list(subject, pairs))
        return statements

    def blank_node(self, children):
        bn, = children

        if bn.type == 'ANON':
            return self.make_blank_node()
        return self.make_blank_node(bn[2:])

    def blank_node_property_list(self, children):
        pairs, = children
        pl_root = self.make_blank_node()
        self.pending.extend(self.unpack_predicate_object_list(pl_root, pairs))
        return pl_root

    def collection(self, children):
        prev_node = RDF_NIL
        cells = []
        for value in reversed(children):
            this_bn = self.make_blank_node()
            cells.append(self.make_triple(this_bn, RDF_FIRST, value))
            cells.append(self.make_triple(this_bn, RDF_REST, prev_node))
            prev_node = this_bn
        self.pending.extend(reversed(cells))

        return prev_node

    def quoted_triple(self, children):
        subject, predicate, object_ = children
        return self.make_triple(subject, predicate, object_)

    def numeric_literal(self, children):
        numeric, = children
        return self.make_literal(numeric.value,
                                 datatype=NUMERIC_DATATYPES[numeric.type],
                                 token=numeric)

    def rdf_literal(self, children):
        literal_string = children[0]
        langtag = None
        lang = None
        type_ = None

        if len(children) == 2 and isinstance(children[1], Token):
            langtag = children[1]
            lang = langtag[1:]  # Remove @
        elif len(children) == 2:
            type_ = children[1]

        return self.make_literal(literal_string, lang, type_, langtag)

    def boolean_literal(self, children):
        boolean, = children
        return self.make_literal(boolean.value, datatype=XSD_BOOLEAN)

    def string(self, children):
        literal, = children
        return self.decode_string(literal)

    def turtle_doc(self, children):
        return [triple for statements in children for triple in statements]


class TurtleParser(LarkParser):
    NAME = 'Turtle'
    FILE_EXTENSION = 'ttl'
    MIME_TYPE = 'text/turtle'
    lark = turtle_lark
    start = 'turtle_doc'
    lowering = TurtleTransformer


turtle_parser = TurtleParser()


def parse(string_or_stream, graph=None, base=None):
    return turtle_parser.parse(string_or_stream, graph, base)


def parse_string(string_or_bytes, graph=None, base=None):
    return parse(string_or_bytes, graph, base)
