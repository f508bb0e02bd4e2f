import logging
from inspect import signature, Parameter


POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


def producer_arity(func):
    """Number of named positional parameters ``func`` accepts.

    Callables without an inspectable signature and ``*args`` producers
    count as taking ``(resolve, reject)``.
    """
    try:
        params = signature(func).parameters.values()
    except (TypeError, ValueError):
        return 2
    return sum(1 for param in params if param.kind in POSITIONAL)

def configure_logger(name,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    if isinstance(log_file, str):
        handler = logging.FileHandler(log_file, 'a')
    else:
        handler = logging.StreamHandler(log_file)

    formatter = logging.Formatter(log_format)
    logger = logging.getLogger(name)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger
