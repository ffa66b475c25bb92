"""Notation3 output: Turtle plus formulas, variables and the ``=>`` and
``=`` shorthands. Formulas are written on one line each."""
from rdfkit.exceptions import UnsupportedFeature
from rdfkit.primitives import (
    LOG_IMPLIES,
    OWL_SAMEAS,
    Formula,
    Triple,
    Variable,
)
from rdfkit.serializers.base import check_statement
from rdfkit.serializers.turtle import TurtleCursor, TurtleSerializer

SHORTHAND_VERBS = {
    LOG_IMPLIES: '=>',
    OWL_SAMEAS: '=',
}


class N3Cursor(TurtleCursor):

    def verb(self, predicate):
        if predicate in SHORTHAND_VERBS:
            return SHORTHAND_VERBS[predicate]
        return TurtleCursor.verb(self, predicate)

    def term(self, term, depth=0):
        if isinstance(term, Formula):
            return self.formula(term, depth)
        if isinstance(term, Variable):
            return '?%s' % (term.name,)
        if isinstance(term, Triple):
            raise UnsupportedFeature('N3 cannot express embedded triple %r'
                                     % (term,))
        return TurtleCursor.term(self, term, depth)

    def formula(self, formula, depth):
        self.check_depth(depth)
        if not len(formula):
            return '{}'
        statements = []
        for statement in formula:
            check_statement(statement)
            statements.append('%s %s %s' % (
                self.term(statement.subject, depth + 1),
                self.verb(statement.predicate),
                self.term(statement.object, depth + 1)))
        return '{ %s }' % ' . '.join(statements)


class N3Serializer(TurtleSerializer):
    NAME = 'N3'
    FILE_EXTENSION = 'n3'
    MIME_TYPE = 'text/rdf+n3'
    cursor_class = N3Cursor
