"""Notation3.

N3 extends Turtle with formulas (``{ ... }``), implication, path
expressions, quick variables and explicit quantification. Directives made
inside a formula only apply until it closes, so the lowering here walks the
tree top-down with a lark ``Interpreter`` instead of transforming it
bottom-up.
"""
import re

from lark import Token
from lark.visitors import Interpreter

from rdfkit.parsers.base import TermFactory
from rdfkit.parsers.lark.base import LarkParser, compile_grammar
from rdfkit.parsers.lark.turtle import NUMERIC_DATATYPES
from rdfkit.primitives import (
    LOG_IMPLIES,
    OWL_SAMEAS,
    RDF_FIRST,
    RDF_NIL,
    RDF_REST,
    RDF_TYPE,
    XSD_BOOLEAN,
)
from rdfkit.util import grouper

grammar = r"""n3_doc: (n3_statement "." | sparql_directive)*

?n3_statement: n3_directive | triples | existential | universal
?n3_directive: prefix_id | base
?sparql_directive: sparql_prefix | sparql_base
prefix_id: "@prefix" PNAME_NS IRIREF
base: "@base" IRIREF
sparql_base: "BASE"i IRIREF
sparql_prefix: "PREFIX"i PNAME_NS IRIREF
universal: "@forAll" iri_list
existential: "@forSome" iri_list
iri_list: iri ("," iri)*

triples: subject predicate_object_list?
predicate_object_list: verb object_list (";" (verb object_list)?)*
object_list: object ("," object)*
?verb: predicate | rdf_type | has | is_of | same_as | implies | implied_by
rdf_type: "a"
has: "has" expression
is_of: "is" expression "of"
same_as: "="
implies: "=>"
implied_by: "<="
?subject: expression
?predicate: expression | inverse
inverse: "<-" expression
?object: expression

?expression: path
?path: path_item | forward_path | backward_path
forward_path: path_item "!" path
backward_path: path_item "^" path
?path_item: iri | blank_node | quick_var | collection
          | blank_node_property_list | literal | formula

?literal: rdf_literal | numeric_literal | boolean_literal
blank_node_property_list: "[" predicate_object_list "]"
collection: "(" object* ")"
formula: "{" _formula_item* n3_statement? "}"
_formula_item: n3_statement "." | sparql_directive
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
quick_var: QUICK_VAR_NAME

QUICK_VAR_NAME: "?" PN_CHARS_U PN_CHARS*

%import terms (IRIREF, PNAME_NS, PNAME_LN, BLANK_NODE_LABEL, LANGTAG, INTEGER, DECIMAL, DOUBLE, BOOLEAN, STRING_LITERAL_QUOTE, STRING_LITERAL_SINGLE_QUOTE, STRING_LITERAL_LONG_SINGLE_QUOTE, STRING_LITERAL_LONG_QUOTE, ANON, WS, COMMENT, PN_CHARS_U, PN_CHARS)

%ignore WS
%ignore COMMENT
"""

n3_lark = compile_grammar(grammar, 'n3_doc', propagate_positions=True)

VARIABLE_NAME = re.compile(r'[A-Za-z_][A-Za-z0-9_]*$')

# Verbs that state the relation backwards: ``:a is :p of :b`` and
# ``:a <= :b`` put ``:b`` in subject position.
FIXED_VERBS = {
    'rdf_type': (RDF_TYPE, False),
    'same_as': (OWL_SAMEAS, False),
    'implies': (LOG_IMPLIES, False),
    'implied_by': (LOG_IMPLIES, True),
}


class N3Interpreter(TermFactory, Interpreter):
    """Top-down lowering of an N3 parse tree to triples.

    ``statements`` is the statement list of the innermost open formula (the
    document itself at top level). Entering a formula swaps in fresh copies
    of the prefixes, base and quantifier bindings.
    """

    def __init__(self, parser, sink, base=None):
        TermFactory.__init__(self, parser, sink, base)
        self.quantified = {}
        # Variable name -> the declared IRI it stands for (None for ?name).
        self.variable_owners = {}
        self.statements = []

    def lower(self, tree):
        self.visit(tree)
        return self.statements

    def emit(self, subject, predicate, object_, position=None):
        self.statements.append(
            self.make_triple(subject, predicate, object_, position))

    def term(self, tree):
        return self.visit(tree)

    def n3_doc(self, tree):
        for child in tree.children:
            self.visit(child)

    def prefix_id(self, tree):
        ns, iriref = tree.children[-2:]
        self.prefixes[ns[:-1]] = self.iri_from_token(iriref)

    sparql_prefix = prefix_id

    def base(self, tree):
        self.base_iri = self.iri_from_token(tree.children[-1])

    sparql_base = base

    def declared_iris(self, tree):
        iri_list, = tree.children
        return [self.iri_value(iri) for iri in iri_list.children]

    def universal(self, tree):
        for iri in self.declared_iris(tree):
            name = re.split('[#/:]', iri)[-1]
            if not VARIABLE_NAME.match(name):
                name = 'v'
            self.quantified[iri] = self.variable(name, iri)

    def variable(self, name, owner=None):
        """The variable standing for ``owner``, a declared IRI or None for
        a ``?name`` variable. Names stay unique within one parse, so a
        clash gets a numeric suffix."""
        candidate = name
        count = 1
        while self.variable_owners.setdefault(candidate, owner) != owner:
            count += 1
            candidate = '%s_%d' % (name, count)
        return self.env.createVariable(candidate)

    def existential(self, tree):
        for iri in self.declared_iris(tree):
            self.quantified[iri] = self.make_blank_node()

    def triples(self, tree):
        subject = self.term(tree.children[0])
        if len(tree.children) == 2:
            self.predicate_objects(subject, tree.children[1])

    def predicate_objects(self, subject, pol):
        for verb, object_list in grouper(pol.children, 2):
            predicate, backwards = self.verb(verb)
            for object_tree in object_list.children:
                object_ = self.term(object_tree)
                if backwards:
                    self.emit(object_, predicate, subject, verb.meta)
                else:
                    self.emit(subject, predicate, object_, verb.meta)

    def verb(self, tree):
        if tree.data in FIXED_VERBS:
            return FIXED_VERBS[tree.data]
        if tree.data == 'has':
            return self.term(tree.children[0]), False
        if tree.data in ('is_of', 'inverse'):
            return self.term(tree.children[0]), True
        return self.term(tree), False

    def iri_value(self, tree):
        iriref_or_pname, = tree.children
        if isinstance(iriref_or_pname, Token):
            return self.iri_from_token(iriref_or_pname)
        return self.expand_pname(iriref_or_pname.children[0])

    def iri(self, tree):
        node = self.iri_value(tree)
        return self.quantified.get(node, node)

    def blank_node(self, tree):
        bn, = tree.children
        if bn.type == 'ANON':
            return self.make_blank_node()
        return self.make_blank_node(bn[2:])

    def quick_var(self, tree):
        name, = tree.children
        return self.variable(name[1:])

    def blank_node_property_list(self, tree):
        node = self.make_blank_node()
        self.predicate_objects(node, tree.children[0])
        return node

    def collection(self, tree):
        items = [self.term(child) for child in tree.children]
        head = RDF_NIL
        for item in reversed(items):
            cell = self.make_blank_node()
            self.emit(cell, RDF_FIRST, item)
            self.emit(cell, RDF_REST, head)
            head = cell
        return head

    def formula(self, tree):
        outer = (self.statements, self.prefixes, self.base_iri,
                 self.quantified)
        self.statements = []
        self.prefixes = self.prefixes.copy()
        self.quantified = dict(self.quantified)
        for child in tree.children:
            self.visit(child)
        formula = self.env.createFormula(self.statements)
        (self.statements, self.prefixes, self.base_iri,
         self.quantified) = outer
        return formula

    def path(self, tree):
        # Paths nest to the right in the tree but read left to right:
        # :a!:b!:c is [ is :c of [ is :b of :a ] ].
        node = self.term(tree.children[0])
        while True:
            forward = tree.data == 'forward_path'
            rest = tree.children[1]
            if rest.data in ('forward_path', 'backward_path'):
                step, next_tree = rest.children[0], rest
            else:
                step, next_tree = rest, None
            predicate = self.term(step)
            hop = self.make_blank_node()
            if forward:
                self.emit(node, predicate, hop, tree.meta)
            else:
                self.emit(hop, predicate, node, tree.meta)
            node = hop
            if next_tree is None:
                return node
            tree = next_tree

    forward_path = backward_path = path

    def rdf_literal(self, tree):
        string = tree.children[0]
        value = self.decode_string(string.children[0])
        if len(tree.children) == 1:
            return self.make_literal(value)
        qualifier = tree.children[1]
        if isinstance(qualifier, Token):
            return self.make_literal(value, qualifier[1:], token=qualifier)
        return self.make_literal(value, datatype=self.term(qualifier))

    def numeric_literal(self, tree):
        numeric, = tree.children
        return self.make_literal(numeric.value,
                                 datatype=NUMERIC_DATATYPES[numeric.type],
                                 token=numeric)

    def boolean_literal(self, tree):
        boolean, = tree.children
        return self.make_literal(boolean.value, datatype=XSD_BOOLEAN)


class N3Parser(LarkParser):
    NAME = 'N3'
    FILE_EXTENSION = 'n3'
    MIME_TYPE = 'text/rdf+n3'
    lark = n3_lark
    start = 'n3_doc'
    lowering = N3Interpreter


n3_parser = N3Parser()


def parse(string_or_stream, graph=None, base=None):
    return n3_parser.parse(string_or_stream, graph, base)
