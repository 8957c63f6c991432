from .request import ServerRequest as ServerRequest
