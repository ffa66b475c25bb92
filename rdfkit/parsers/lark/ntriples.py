from lark import Token

from rdfkit.parsers.lark.base import (
    LarkParser,
    RDFTransformer,
    compile_grammar,
)

grammar = r"""ntriples_doc: (triple? _EOL)* triple?
nquads_doc: (quad? _EOL)* quad?

triple: subject predicate object "."
quad: subject predicate object graph_label? "."

?subject: iriref | blank_node | quoted_triple
?predicate: iriref
?object: iriref | blank_node | literal | quoted_triple
?graph_label: iriref | blank_node

quoted_triple: "<<" subject predicate object ">>"
literal: STRING_LITERAL_QUOTE ("^^" iriref | LANGTAG)?
iriref: IRIREF
blank_node: BLANK_NODE_LABEL

%import terms (IRIREF, BLANK_NODE_LABEL, LANGTAG, STRING_LITERAL_QUOTE, COMMENT)
%import terms.EOL -> _EOL

%ignore /[ \t]+/
%ignore COMMENT
"""

nt_lark = compile_grammar(grammar, ['ntriples_doc', 'nquads_doc'])


class NTriplesTransformer(RDFTransformer):
    """Lowers N-Triples (and N-Triples-star) lines to triples.

    IRIs must be absolute; no base IRI applies to line-based formats.
    """

    def blank_node(self, children):
        bn_label, = children
        return self.make_blank_node(bn_label[2:])

    def iriref(self, children):
        iriref, = children
        return self.iri_from_token(iriref, resolve=False)

    def literal(self, children):
        quoted_literal = children[0]
        lang = None
        type_ = None

        literal = self.decode_string(quoted_literal)

        if len(children) == 2 and isinstance(children[1], Token):
            lang = children[1][1:]  # Remove @
        elif len(children) == 2:
            type_ = children[1]

        return self.make_literal(literal, lang, type_, quoted_literal)

    def triple(self, children):
        subject, predicate, object_ = children
        return self.make_triple(subject, predicate, object_)

    def quoted_triple(self, children):
        subject, predicate, object_ = children
        return self.make_triple(subject, predicate, object_)

    def ntriples_doc(self, children):
        return children


class NTriplesParser(LarkParser):
    NAME = 'N-Triples'
    FILE_EXTENSION = 'nt'
    MIME_TYPE = 'application/n-triples'
    lark = nt_lark
    start = 'ntriples_doc'
    lowering = NTriplesTransformer


ntriples_parser = NTriplesParser()


def parse(string_or_stream, graph=None, base=None):
    return ntriples_parser.parse(string_or_stream, graph, base)


def parse_string(string, graph=None, base=None):
    return ntriples_parser.parse_string(string, graph, base)
