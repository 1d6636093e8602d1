from .logger_adapter import LoggerAdapter

__all__ = ["LoggerAdapter"]
