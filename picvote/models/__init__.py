from .admin_model import Admin
from .candidate_model import Candidate
from .settings_model import Settings
from .vote_model import VoterRecord

__all__ = ["Admin", "Candidate", "Settings", "VoterRecord"]
