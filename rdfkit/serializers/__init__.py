__all__ = ['NTriplesSerializer', 'NQuadsSerializer', 'TurtleSerializer',
           'TriGSerializer', 'N3Serializer', 'RDFJSONSerializer',
           'DotSerializer', 'DotOptions']

from .dot import DotOptions, DotSerializer
from .n3 import N3Serializer
from .nquads import NQuadsSerializer
from .ntriples import NTriplesSerializer
from .rdfjson import RDFJSONSerializer
from .trig import TriGSerializer
from .turtle import TurtleSerializer
