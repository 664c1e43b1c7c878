from unittest.mock import Mock

import pytest

from curlagent import ArgumentError, EngineOption, TransferOptions
from curlagent.options import RECOGNIZED_OPTIONS, ProgressRelay, RelayState


def test_from_mapping_splits_keys():
    options = TransferOptions.from_mapping({
        'proxy': 'http://proxy.example.com:8000',
        EngineOption.CONNECT_TIMEOUT: 2,
        'X-Trace': 'abc',
    })
    assert options.proxy == 'http://proxy.example.com:8000'
    assert options.engine_options == {EngineOption.CONNECT_TIMEOUT: 2}
    assert options.headers == {'X-Trace': 'abc'}


def test_from_mapping_accepts_none():
    options = TransferOptions.from_mapping(None)
    assert options.headers == {}
    assert options.engine_options == {}
    assert not options.wants_progress


def test_every_recognized_option_is_consumed():
    options = TransferOptions.from_mapping({key: None for key in RECOGNIZED_OPTIONS})
    assert options.headers == {}


def test_values_are_stringified():
    class Uri:
        def __str__(self):
            return 'http://proxy.example.com:8000'

    options = TransferOptions.from_mapping({'proxy': Uri(), 'X-Retry': 3})
    assert options.proxy == 'http://proxy.example.com:8000'
    assert options.headers == {'X-Retry': '3'}


def test_later_header_values_win():
    options = TransferOptions.from_mapping(dict([('Accept', 'text/html'), ('Accept', 'text/plain')]))
    assert options.headers == {'Accept': 'text/plain'}


def test_invalid_read_timeout_is_rejected():
    with pytest.raises(ArgumentError):
        TransferOptions.from_mapping({'read_timeout': 'soon'})


@pytest.mark.parametrize("mode, expected", [(None, None), (0, False), (1, True), (2, True)])
def test_verify_host(mode, expected):
    assert TransferOptions.from_mapping({'ssl_verify_mode': mode}).verify_host is expected


class TestProgressRelay:

    def test_fires_content_length_once(self):
        on_content_length = Mock()
        relay = ProgressRelay(lambda: 10, on_content_length=on_content_length)
        assert relay.state is RelayState.PENDING

        relay(10, 1, 0, 0)
        relay(10, 2, 0, 0)

        on_content_length.assert_called_once_with(10)
        assert relay.state is RelayState.FIRED

    def test_stays_pending_without_total(self):
        on_content_length = Mock()
        on_progress = Mock()
        relay = ProgressRelay(lambda: None, on_content_length, on_progress)

        relay(0, 1, 0, 0)
        relay(0, 2, 0, 0)

        on_content_length.assert_not_called()
        assert relay.state is RelayState.PENDING
        assert on_progress.call_count == 2

    def test_content_length_runs_before_progress(self):
        calls = []
        relay = ProgressRelay(lambda: 5,
                              on_content_length=lambda total: calls.append(('length', total)),
                              on_progress=lambda now: calls.append(('progress', now)))
        relay(5, 3, 0, 0)
        assert calls == [('length', 5), ('progress', 3)]

    def test_progress_only(self):
        on_progress = Mock()
        relay = ProgressRelay(Mock(), on_progress=on_progress)
        relay(0, 7, 0, 0)
        on_progress.assert_called_once_with(7)
        assert relay.state is RelayState.FIRED


def test_false_leaves_recognized_options_unset():
    options = TransferOptions.from_mapping({
        'proxy': False,
        'http_basic_authentication': False,
        'read_timeout': False,
        'ssl_verify_mode': False,
    })
    assert options.proxy is None
    assert options.http_basic_authentication is None
    assert options.read_timeout is None
    assert options.verify_host is None
    assert options.headers == {}
