from .user import User
from .job import Job
from .application import Application
from .message import Message
from .flag import Flag
from .evaluation import Evaluation
# base and mixins are imported by the above as needed
