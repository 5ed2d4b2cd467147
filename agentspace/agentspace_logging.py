"""This provides logging functionality for agentspace.

It is built on the standard library logging package. All loggers live below the
``AGENTSPACE`` root logger, so you can configure the whole package in one place::

    from agentspace.agentspace_logging import DEBUG, log_to_stderr

    log_to_stderr(DEBUG)

Within the package, each module creates its logger with ``create_module_logger()``
and decorates constructors with ``method_logger(__name__)``.
"""

import inspect
import logging
from functools import wraps
from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING

__all__ = [
    "CRITICAL",
    "DEBUG",
    "DEFAULT_LOGFORMAT",
    "ERROR",
    "INFO",
    "LOGGER_NAME",
    "WARNING",
    "create_module_logger",
    "function_logger",
    "get_module_logger",
    "get_rootlogger",
    "log_to_stderr",
    "method_logger",
]

LOGGER_NAME = "AGENTSPACE"
DEFAULT_LOGFORMAT = "[%(levelname)s] %(name)s %(funcName)s(%(lineno)d): %(message)s"


def create_module_logger(name: str | None = None):
    """Create a module logger.

    Args:
        name: name of the module, derived from the calling module if None
    """
    if name is None:
        frame = inspect.currentframe().f_back
        module = inspect.getmodule(frame)
        name = module.__name__ if module is not None else "__main__"
    return get_module_logger(name)


def get_module_logger(name: str):
    """Return a logger named ``AGENTSPACE.<name>``."""
    # we don't want the package name twice in the logger hierarchy
    if name.startswith("agentspace."):
        name = name[len("agentspace.") :]
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


_logger = get_module_logger(__name__)


def method_logger(name: str):
    """Decorator for adding debug logging to a method.

    Args:
        name: name of the module in which the method resides
    """
    logger = get_module_logger(name)
    classname = inspect.getouterframes(inspect.currentframe())[1][3]

    def real_decorator(meth):
        @wraps(meth)
        def wrapper(*args, **kwargs):
            # hack, because we know this is a method, so args[0] is self
            logger.debug(
                f"calling {classname}.{meth.__name__} with {args[1:]} and {kwargs}"
            )
            return meth(*args, **kwargs)

        return wrapper

    return real_decorator


def function_logger(name: str):
    """Decorator for adding debug logging to a function.

    Args:
        name: name of the module in which the function resides
    """
    logger = get_module_logger(name)

    def real_decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger.debug(f"calling {func.__name__} with {args} and {kwargs}")
            return func(*args, **kwargs)

        return wrapper

    return real_decorator


def get_rootlogger():
    """Return the root logger of agentspace."""
    return logging.getLogger(LOGGER_NAME)


def log_to_stderr(level: int | None = None, pass_root_handlers: bool = False):
    """Configure the agentspace root logger to write to stderr.

    Args:
        level: the minimum level of the messages to log
        pass_root_handlers: whether to also pass records on to the handlers of the
            python root logger

    Returns:
        the configured root logger of agentspace
    """
    formatter = logging.Formatter(DEFAULT_LOGFORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = get_rootlogger()
    logger.handlers = [handler]
    logger.propagate = pass_root_handlers

    if level is not None:
        logger.setLevel(level)

    _logger.debug(f"agentspace logging configured at level {level}")
    return logger
