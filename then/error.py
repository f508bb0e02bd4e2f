class PromiseError(Exception):
    pass


class PromiseTimeout(PromiseError):
    pass


class PromiseRejected(PromiseError):
    """Raised by ``Promise.result`` for a promise rejected with
    something that is not an exception.
    """

    def __init__(self, error):
        super().__init__(error)
        self.error = error
