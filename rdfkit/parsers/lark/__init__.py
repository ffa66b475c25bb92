from .ntriples import ntriples_parser
from .nquads import nquads_parser
from .turtle import turtle_parser
from .trig import trig_parser
from .n3 import n3_parser
