# errors.py
#
# Purpose:
# One place for every error type the app raises.
# github_api.py, llm_utils.py and config.py raise these, and the two front-ends
# (app.py and main.py) catch them to show a readable message.


class CodeLensError(Exception):
    """Base class for all CodeLens errors."""


class ConfigurationError(CodeLensError):
    """A required setting (like the Groq API key) is missing or invalid."""


class InvalidArgument(CodeLensError):
    """Caller input is malformed (bad repo id, bad sha, empty code)."""


# ----------------------------
# GitHub fetch errors
# ----------------------------
class GitHubError(CodeLensError):
    """
    Base class for GitHub API failures.

    status is the HTTP status code (None when no response came back).
    message is GitHub's own error text when it sent one.
    """

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status


class Unauthorized(GitHubError):
    pass


class NotFound(GitHubError):
    pass


class UpstreamUnavailable(GitHubError):
    pass


class UpstreamError(GitHubError):
    pass


# ----------------------------
# LLM analysis errors
# ----------------------------
class ResponseShapeError(CodeLensError, ValueError):
    """
    The model replied with valid JSON that does not have the expected shape.
    The analyzer never retries this one.
    """


class AnalysisFailed(CodeLensError):
    """
    Raised after the analyzer gives up.

    str(err) is safe to show to users. The underlying error is kept in
    `cause` and the number of calls made is in `attempts`.
    """

    def __init__(self, message, cause=None, attempts=0):
        super().__init__(message)
        self.cause = cause
        self.attempts = attempts
