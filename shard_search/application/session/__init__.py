from .query_session import QuerySessionController, SessionState, ResultsHandler

__all__ = ["QuerySessionController", "SessionState", "ResultsHandler"]
