from .topology import Node, Edge, Element
from .mesh import Mesh
from .dofhandler import DofHandler
from .settings import FACE, FaceSettings
__all__=['Node','Edge','Element','Mesh','DofHandler','FACE','FaceSettings']
