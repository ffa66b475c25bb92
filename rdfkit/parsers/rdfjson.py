"""RDF/JSON (https://www.w3.org/TR/rdf-json/).

{
  "http://example.org/s": {
    "http://example.org/p": [
      {"type": "uri", "value": "http://example.org/o"},
      {"type": "literal", "value": "chat", "lang": "fr"},
      {"type": "bnode", "value": "_:b1"}
    ]
  }
}
"""
import json

from rdfkit.exceptions import ParseError, StructuralError
from rdfkit.parsers.base import BaseParser, TermFactory


class RDFJSONParser(BaseParser):
    NAME = 'RDF/JSON'
    FILE_EXTENSION = 'rj'
    MIME_TYPE = 'application/rdf+json'

    def _parse_statements(self, text, sink, base):
        try:
            jobj = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError('Invalid JSON: %s' % exc.msg, exc.lineno,
                             exc.colno, found=repr(text[exc.pos:exc.pos + 1]))
        terms = TermFactory(self, sink, base)
        return list(self.process_jobj(jobj, terms)), None

    def process_jobj(self, jobj, terms):
        if not isinstance(jobj, dict):
            raise ParseError('RDF/JSON document must be a JSON object',
                             expected=['object'], found=type(jobj).__name__)
        for subject, predicates in jobj.items():
            subject_node = self.process_subject(subject, terms)
            if not isinstance(predicates, dict):
                raise ParseError('Predicates of %r must be a JSON object'
                                 % (subject,))
            for predicate, objects in predicates.items():
                predicate_node = self.process_iri(predicate, terms)
                if not isinstance(objects, list):
                    raise ParseError('Objects of %r %r must be a JSON array'
                                     % (subject, predicate))
                for object_ in objects:
                    yield terms.make_triple(
                        subject_node, predicate_node,
                        self.process_object(object_, terms))

    def process_iri(self, value, terms):
        if terms.base_iri:
            return terms.resolve_iri(value)
        return terms.absolute_iri(value)

    def process_subject(self, subject, terms):
        if subject.startswith('_:'):
            return terms.make_blank_node(subject[2:])
        return self.process_iri(subject, terms)

    def process_object(self, object_, terms):
        if not isinstance(object_, dict) or \
                not isinstance(object_.get('value'), str):
            raise ParseError('Object %r must be a JSON object with a string '
                             '"value"' % (object_,))
        type_ = object_.get('type')
        value = object_['value']
        if type_ == 'uri':
            return self.process_iri(value, terms)
        if type_ == 'bnode':
            return terms.make_blank_node(
                value[2:] if value.startswith('_:') else value)
        if type_ == 'literal':
            datatype = object_.get('datatype')
            if datatype is not None:
                datatype = self.process_iri(datatype, terms)
            return terms.make_literal(value, object_.get('lang'), datatype)
        raise StructuralError('Unknown RDF/JSON object type %r' % (type_,))


rdfjson_parser = RDFJSONParser()


def parse(string_or_stream, graph=None, base=None):
    return rdfjson_parser.parse(string_or_stream, graph, base)
