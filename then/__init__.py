from .error import PromiseError, PromiseTimeout, PromiseRejected
from .promise import (
    Promise, PromiseState, PromiseType,
    ChainRoot, Deferred
)
