import io
import logging
from functools import partial
import pytest

from then.util import producer_arity, configure_logger


def two(resolve, reject):
    pass

def three(resolve, reject, progress):
    pass

def default(resolve, reject, progress=None):
    pass

def variadic(*args):
    pass

class Producer:
    def __call__(self, resolve, reject, progress):
        pass


@pytest.mark.parametrize('func,res', [
    (two, 2),
    (three, 3),
    (default, 3),
    (variadic, 0),
    (lambda resolve, reject: None, 2),
    (Producer(), 3),
    (partial(three, None), 2)
])
def test_producer_arity(func, res):
    assert producer_arity(func) == res


def test_configure_logger():
    stream = io.StringIO()
    logger = configure_logger(
        'then.test', stream, '%(levelname)s %(message)s', logging.DEBUG
    )
    try:
        assert logger.level == logging.DEBUG
        logger.debug('x %d', 1)
        assert stream.getvalue() == 'DEBUG x 1\n'
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
