"""The closed set of syntaxes rdfkit knows about.

    >>> Format.from_path('data/people.ttl')
    <Format.TURTLE: ...>
    >>> graph = Format.TURTLE.read(open('data/people.ttl', 'rb'))
    >>> Format.NTRIPLES.write(graph, sys.stdout)

RDF/XML and JSON-LD are listed so they can be named, but reading or writing
them raises ``UnsupportedFormat``.
"""
import logging
import os
from enum import Enum

from rdfkit.exceptions import UnsupportedFormat
from rdfkit.parsers import (
    n3_parser,
    nquads_parser,
    ntriples_parser,
    rdfjson_parser,
    trig_parser,
    turtle_parser,
)
from rdfkit.primitives import Graph
from rdfkit.serializers import (
    DotSerializer,
    N3Serializer,
    NQuadsSerializer,
    NTriplesSerializer,
    RDFJSONSerializer,
    TriGSerializer,
    TurtleSerializer,
)

log = logging.getLogger(__name__)


class Format(Enum):
    NTRIPLES = ('N-Triples', 'nt', 'application/n-triples',
                ('ntriples', 'n-triples'))
    NQUADS = ('N-Quads', 'nq', 'application/n-quads', ('nquads', 'n-quads'))
    TURTLE = ('Turtle', 'ttl', 'text/turtle', ('turtle',))
    TRIG = ('TriG', 'trig', 'application/trig', ())
    N3 = ('N3', 'n3', 'text/rdf+n3', ('notation3',))
    RDF_JSON = ('RDF/JSON', 'rj', 'application/rdf+json',
                ('rdfjson', 'rdf-json', 'json'))
    DOT = ('DOT', 'dot', 'text/vnd.graphviz', ('graphviz',))
    RDF_XML = ('RDF/XML', 'rdf', 'application/rdf+xml',
               ('rdfxml', 'rdf-xml', 'xml'))
    JSON_LD = ('JSON-LD', 'jsonld', 'application/ld+json', ('jsonld',))

    def __init__(self, label, extension, mime_type, aliases):
        self.label = label
        self.extension = extension
        self.mime_type = mime_type
        self.aliases = aliases

    @property
    def names(self):
        return (self.name.lower(), self.label.lower(), self.extension) + \
            self.aliases

    @property
    def readable(self):
        return self in _READERS

    @property
    def writable(self):
        return self in _WRITERS

    @classmethod
    def from_name(cls, name):
        """Look a format up by name, label or alias, ignoring case."""
        key = name.strip().lower()
        for format in cls:
            if key in format.names:
                log.debug('Format name %r is %s', name, format.label)
                return format
        raise UnsupportedFormat('Unknown format %r' % (name,))

    @classmethod
    def from_extension(cls, extension):
        key = extension.lstrip('.').lower()
        for format in cls:
            if key == format.extension:
                log.debug('Extension %r is %s', extension, format.label)
                return format
        raise UnsupportedFormat('No format uses the extension %r'
                                % (extension,))

    @classmethod
    def from_path(cls, path):
        extension = os.path.splitext(os.fspath(path))[1]
        if not extension:
            raise UnsupportedFormat('Cannot tell the format of %r from its '
                                    'name' % (os.fspath(path),))
        return cls.from_extension(extension)

    @classmethod
    def from_mime_type(cls, mime_type):
        key = mime_type.split(';')[0].strip().lower()
        for format in cls:
            if key == format.mime_type:
                log.debug('MIME type %r is %s', mime_type, format.label)
                return format
        raise UnsupportedFormat('No format has the MIME type %r'
                                % (mime_type,))

    def reader(self):
        try:
            return _READERS[self]
        except KeyError:
            raise UnsupportedFormat('Reading %s is not supported'
                                    % self.label) from None

    def writer(self, **options):
        try:
            serializer_class = _WRITERS[self]
        except KeyError:
            raise UnsupportedFormat('Writing %s is not supported'
                                    % self.label) from None
        return serializer_class(**options)

    def read(self, source, graph_factory=Graph, base=None):
        return self.reader().parse(source, base=base,
                                   graph_factory=graph_factory)

    def write(self, graph, stream, prefixes=None, **options):
        self.writer(**options).write(graph, stream, prefixes)


_READERS = {
    Format.NTRIPLES: ntriples_parser,
    Format.NQUADS: nquads_parser,
    Format.TURTLE: turtle_parser,
    Format.TRIG: trig_parser,
    Format.N3: n3_parser,
    Format.RDF_JSON: rdfjson_parser,
}

_WRITERS = {
    Format.NTRIPLES: NTriplesSerializer,
    Format.NQUADS: NQuadsSerializer,
    Format.TURTLE: TurtleSerializer,
    Format.TRIG: TriGSerializer,
    Format.N3: N3Serializer,
    Format.RDF_JSON: RDFJSONSerializer,
    Format.DOT: DotSerializer,
}
