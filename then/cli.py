import sys
import logging
from argparse import ArgumentParser
from threading import Timer

from .promise import Promise
from .util import configure_logger


LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

LOGGER = logging.getLogger(__name__)


class FetchError(Exception):
    pass


def fetch_user_id(user_id, delay, steps=0, fail=False):
    def run(resolve, reject, progress):
        LOGGER.info('fetching user id ...')
        for step in range(1, steps + 1):
            Timer(delay * step / (steps + 1), progress, (step / steps,)).start()
        if fail:
            Timer(delay, reject, (FetchError('timeout'),)).start()
        else:
            Timer(delay, resolve, (user_id,)).start()
    return Promise(run)


def create_arg_parser():
    parser = ArgumentParser()
    parser.add_argument(
        '-D', '--delay',
        type=float, default=3.0,
        help='fetch delay in seconds (default: %(default)s)'
    )
    parser.add_argument(
        '-s', '--steps',
        type=int, default=0,
        help='progress reports before the fetch completes'
             ' (default: %(default)s)'
    )
    parser.add_argument(
        '-f', '--fail',
        action='store_true',
        help='make the fetch fail'
    )
    parser.add_argument(
        '-l', '--log-level',
        default='info',
        choices=('critical', 'error', 'warning', 'info', 'debug'),
        help='log level (default: %(default)s)'
    )
    parser.add_argument(
        '-o', '--log-file',
        default=None,
        help='log file (default: stderr)'
    )
    parser.add_argument(
        'user_id',
        metavar='USER_ID',
        type=int, nargs='?', default=1234,
        help='user id to fetch (default: %(default)s)'
    )
    return parser


def main(args=None):
    parser = create_arg_parser()
    args = parser.parse_args(args)

    args.log_level = getattr(logging, args.log_level.upper())
    configure_logger('then', args.log_file, LOG_FORMAT, args.log_level)

    errors = []

    def display_user_id(user_id):
        print('Got user id %d' % user_id)

    def show_error(ex):
        errors.append(ex)
        print('An error occurred: %r' % ex)

    def reload():
        print('reloading the view')

    user_id = fetch_user_id(args.user_id, args.delay, args.steps, args.fail)
    user_id.register_progress(
        lambda value: print('progress %d%%' % (value * 100))
    )
    done = (user_id
            .register_then(display_user_id)
            .register_on_error(show_error)
            .register_finally(reload))

    try:
        done.wait()
    finally:
        logging.shutdown()

    return 1 if errors else 0


if __name__ == '__main__':
    sys.exit(main())
