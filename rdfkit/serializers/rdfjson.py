import json
from collections import OrderedDict

from rdfkit.exceptions import StructuralError, UnsupportedFeature
from rdfkit.primitives import (
    BlankNode,
    Formula,
    Literal,
    NamedNode,
    Triple,
    Variable,
)
from rdfkit.serializers.base import (
    BaseSerializer,
    BlankNodeLabeler,
    check_statement,
    default_graph,
)


class RDFJSONSerializer(BaseSerializer):
    NAME = 'RDF/JSON'
    FILE_EXTENSION = 'rj'
    MIME_TYPE = 'application/rdf+json'

    def __init__(self, pretty=True):
        self.pretty = pretty

    def _write(self, graph, out, prefixes):
        label = BlankNodeLabeler()
        jobj = OrderedDict()
        for triple in default_graph(graph, self.NAME):
            check_statement(triple)
            subject = self.subject_key(triple.subject, label)
            objects = jobj.setdefault(subject, OrderedDict()).setdefault(
                triple.predicate.value, [])
            objects.append(self.object_value(triple.object, label))
        json.dump(jobj, out, ensure_ascii=False,
                  indent=2 if self.pretty else None)
        out.write('\n')

    def subject_key(self, subject, label):
        if isinstance(subject, NamedNode):
            return subject.value
        if isinstance(subject, BlankNode):
            return '_:' + label(subject)
        raise UnsupportedFeature('RDF/JSON cannot express subject %r'
                                 % (subject,))

    def object_value(self, object_, label):
        if isinstance(object_, NamedNode):
            return OrderedDict([('type', 'uri'), ('value', object_.value)])
        if isinstance(object_, BlankNode):
            return OrderedDict([('type', 'bnode'),
                                ('value', '_:' + label(object_))])
        if isinstance(object_, Literal):
            value = OrderedDict([('type', 'literal'),
                                 ('value', object_.value)])
            if object_.language:
                value['lang'] = object_.language
            elif object_.datatype is not None:
                value['datatype'] = object_.datatype.value
            return value
        if isinstance(object_, (Triple, Formula, Variable)):
            raise UnsupportedFeature('RDF/JSON cannot express object %r'
                                     % (object_,))
        raise StructuralError('%r is not an RDF term' % (object_,))
