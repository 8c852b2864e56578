from .mesh import Mesh
from .topology import Node, Face, Element
from .dofhandler import DofHandler
__all__=['Mesh','Node','Face','Element','DofHandler']
