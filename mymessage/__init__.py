from .datastructures import HeaderBag as HeaderBag
from .datastructures import UploadedFile as UploadedFile
from .sansio import Message as Message
from .sansio import Request as Request
from .sansio import Response as Response
from .urls import Uri as Uri
from .wrappers import ServerRequest as ServerRequest
from .wsgi import from_globals as from_globals
from .wsgi import from_wsgi as from_wsgi
