from .message import Message as Message
from .request import Request as Request
from .response import Response as Response
