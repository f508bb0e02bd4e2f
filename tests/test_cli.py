from unittest.mock import ANY
import pytest

from then import cli


class ImmediateTimer:
    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()

    def start(self):
        self.function(*self.args)


@pytest.fixture
def no_logging(mocker):
    mocker.patch('then.cli.configure_logger')
    mocker.patch('then.cli.logging.shutdown')


@pytest.fixture
def timer(mocker, no_logging):
    return mocker.patch('then.cli.Timer', side_effect=ImmediateTimer)


def test_arg_parser():
    args = cli.create_arg_parser().parse_args([])
    assert args.delay == 3.0
    assert args.steps == 0
    assert not args.fail
    assert args.log_file is None
    assert args.user_id == 1234


def test_main_success(timer, capsys):
    assert cli.main(['-D', '0.5', '42']) == 0
    timer.assert_called_once_with(0.5, ANY, (42,))
    out = capsys.readouterr().out
    assert out.splitlines() == ['Got user id 42', 'reloading the view']


def test_main_fail(timer, capsys):
    assert cli.main(['--fail']) == 1
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "An error occurred: FetchError('timeout')"
    assert out[1] == 'reloading the view'


def test_main_progress(timer, capsys):
    assert cli.main(['-D', '0.3', '-s', '2']) == 0
    assert [c[0][0] for c in timer.call_args_list] == pytest.approx(
        [0.1, 0.2, 0.3]
    )
    out = capsys.readouterr().out.splitlines()
    assert out == [
        'progress 50%',
        'progress 100%',
        'Got user id 1234',
        'reloading the view'
    ]


def test_fetch_user_id_lazy(timer):
    promise = cli.fetch_user_id(1, 0.0)
    assert timer.call_count == 0
    assert promise.result() == 1
    assert timer.call_count == 1
