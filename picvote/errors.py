# picvote/errors.py
# Error kinds raised by the voting core. Routes turn them into HTTP responses
# using status_code, so the core never imports FastAPI.


class PollError(Exception):
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PollError):
    status_code = 400
    default_message = "Name, NIM, and image ID are required"


class VotingClosedError(PollError):
    status_code = 400
    default_message = "Voting deadline has passed"


class DuplicateVoterError(PollError):
    status_code = 400
    default_message = "You have already voted"

    def __init__(self, voter_id: str = None, message: str = None):
        self.voter_id = voter_id
        super().__init__(message)


class CandidateNotFoundError(PollError):
    status_code = 404
    default_message = "Image not found"

    def __init__(self, candidate_id: str = None, message: str = None):
        self.candidate_id = candidate_id
        super().__init__(message)


class AdminRequiredError(PollError):
    status_code = 401
    default_message = "Admin authorization required"


class StoreUnavailableError(PollError):
    status_code = 503
    default_message = "Storage is unavailable, please try again"
