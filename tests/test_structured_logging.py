import json

import pytest

from issuegraph.logging import StructuredLogger, configure_logging, get_logger


def test_structured_logger_json_format(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_operation('fetch_issues', project_id='proj', issue_count=3)

    captured = capsys.readouterr()
    assert captured.out == ''
    lines = [line for line in captured.err.strip().split('\n') if line]
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry['message'] == 'Operation: fetch_issues'
    assert entry['operation'] == 'fetch_issues'
    assert entry['project_id'] == 'proj'
    assert entry['issue_count'] == 3
    assert entry['level'] == 'INFO'


def test_structured_logger_plain_format(capsys):
    logger = StructuredLogger(name='plain', json_logging=False, level='INFO')
    logger.info('! fetching issues')
    captured = capsys.readouterr()
    assert captured.err.strip() == '! fetching issues'


def test_level_filters_debug(capsys):
    logger = StructuredLogger(name='levels', level='INFO')
    logger.debug('hidden')
    logger.warning('shown')
    err = capsys.readouterr().err
    assert 'hidden' not in err
    assert 'shown' in err


def test_timed_operation_logs_failure_and_reraises(capsys):
    logger = StructuredLogger(name='timed', json_logging=True, level='DEBUG')
    with pytest.raises(RuntimeError):
        with logger.timed_operation('normalize', issue_count=2):
            raise RuntimeError('boom')
    entries = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]
    assert entries[-1]['level'] == 'ERROR'
    assert entries[-1]['error'] == 'boom'


def test_configure_logging_replaces_global():
    first = configure_logging(level='WARNING')
    assert get_logger() is first
    second = configure_logging(json_logging=True, level='DEBUG')
    assert get_logger() is second
    assert second.level == 10
    configure_logging()
