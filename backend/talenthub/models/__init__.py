from talenthub.models.user import User
from talenthub.models.candidate import Candidate

__all__ = ["User", "Candidate"]
