"""Exceptions raised by rdfkit readers, writers and the data model."""


class RDFError(Exception):
    """Base class for every error raised by rdfkit.

    ``line`` and ``column`` are 1-based and only set when the error can be
    tied to a position in some input document.
    """

    def __init__(self, message, line=None, column=None):
        super(RDFError, self).__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def at(self, line, column):
        """Attach a source position unless one is already known."""
        if self.line is None:
            self.line = line
            self.column = column
        return self

    def __str__(self):
        if self.line is not None and self.column is not None:
            return '%d:%d: %s' % (self.line, self.column, self.message)
        return self.message


class ParseError(RDFError):
    """The input is not well-formed in the syntax being read."""

    def __init__(self, message, line=None, column=None, expected=None,
                 found=None):
        super(ParseError, self).__init__(message, line, column)
        self.expected = sorted(expected) if expected else []
        self.found = found


class StructuralError(RDFError, ValueError):
    """The input parses but does not describe valid RDF.

    Also raised when a term or statement is constructed in violation of the
    data model (a literal with both a language and a datatype, a non-IRI
    predicate, a literal graph name).
    """


class InvalidIRI(StructuralError):
    """A string is not a valid IRI reference."""


class UnresolvedReference(StructuralError):
    """A name could not be resolved to an absolute IRI."""


class UnknownPrefix(UnresolvedReference):

    def __init__(self, prefix, line=None, column=None):
        super(UnknownPrefix, self).__init__(
            'Unknown prefix %r' % (prefix,), line, column)
        self.prefix = prefix


class RelativeIRIError(UnresolvedReference):

    def __init__(self, iri, line=None, column=None):
        super(RelativeIRIError, self).__init__(
            'Relative IRI %r with no base IRI in scope' % (iri,), line, column)
        self.iri = iri


class ResourceExhausted(RDFError):
    """Nesting in the input or the graph exceeded the configured depth."""


class ReadWriteError(RDFError):
    """The underlying stream failed; the original error is the ``__cause__``."""


class UnsupportedFeature(RDFError):
    """The target syntax cannot express some part of the graph."""


class UnsupportedFormat(RDFError):
    """The requested format is unknown or only a placeholder."""
