import pytest

from shared.batch import process_partial_response
from shared.batch.processor import RecordParseError
from shared.errors import FullBatchFailureError
from shared.models import DeletionMessage
from shared.utils.logger import get_logger
from tests.fixtures.janitor_env import sqs_event, sqs_record


def _msg(name: str) -> dict:
    return {"logGroupName": name, "awsRegion": "us-east-1"}


def test_all_records_succeed_returns_empty_failures() -> None:
    seen = []

    def handler(message, record):
        seen.append((record.message_id, record.receive_count, message.log_group_name))

    event = sqs_event([sqs_record(_msg("/a"), "m1"), sqs_record(_msg("/b"), "m2", receive_count=3)])
    result = process_partial_response(event, handler, DeletionMessage, log=get_logger(__name__))

    assert result == {"batchItemFailures": []}
    assert seen == [("m1", 1, "/a"), ("m2", 3, "/b")]


def test_record_logger_carries_message_id_and_receive_count() -> None:
    """
    Given: 세 번째로 수신된 레코드
    When: 배치 처리
    Then: 레코드 로거에 message_id와 receive_count가 바인딩됨
    """
    extras = []

    def handler(message, record):
        extras.append(dict(record.log.extra))

    event = sqs_event([sqs_record(_msg("/a"), "m1", receive_count=3)])
    process_partial_response(event, handler, DeletionMessage, log=get_logger(__name__))

    assert extras[0]["message_id"] == "m1"
    assert extras[0]["receive_count"] == 3


def test_only_failing_record_is_reported() -> None:
    """
    Given: 2건 중 1건에서 핸들러 예외 발생
    When: 부분 배치 처리
    Then: 실패한 messageId 하나만 보고되고 나머지는 정상 처리
    """

    def handler(message, record):
        if message.log_group_name == "/bad":
            raise RuntimeError("boom")

    event = sqs_event([sqs_record(_msg("/good"), "ok-1"), sqs_record(_msg("/bad"), "bad-1")])
    result = process_partial_response(event, handler, DeletionMessage, log=get_logger(__name__))

    assert result == {"batchItemFailures": [{"itemIdentifier": "bad-1"}]}


def test_invalid_body_is_item_failure_without_calling_handler() -> None:
    calls = []
    event = sqs_event([sqs_record("not-json", "m-bad"), sqs_record(_msg("/ok"), "m-ok")])

    result = process_partial_response(
        event, lambda m, r: calls.append(r.message_id), DeletionMessage, log=get_logger(__name__)
    )

    assert result == {"batchItemFailures": [{"itemIdentifier": "m-bad"}]}
    assert calls == ["m-ok"]


def test_full_batch_failure_raises_with_child_errors() -> None:
    """
    Given: 모든 레코드가 실패 (파싱 실패 1건 + 핸들러 예외 1건)
    When: raise_on_full_batch_failure 기본값으로 처리
    Then: FullBatchFailureError가 개별 예외를 담아 발생
    """

    def handler(message, record):
        raise ValueError("downstream")

    event = sqs_event([sqs_record("{}", "m1"), sqs_record(_msg("/x"), "m2")])

    with pytest.raises(FullBatchFailureError) as exc_info:
        process_partial_response(event, handler, DeletionMessage, log=get_logger(__name__))

    errors = exc_info.value.child_exceptions
    assert len(errors) == 2
    assert isinstance(errors[0], RecordParseError)
    assert isinstance(errors[1], ValueError)


def test_full_batch_failure_reported_when_raise_disabled() -> None:
    def handler(message, record):
        raise ValueError("downstream")

    event = sqs_event([sqs_record(_msg("/x"), "m1"), sqs_record(_msg("/y"), "m2")])
    result = process_partial_response(
        event, handler, DeletionMessage, log=get_logger(__name__), raise_on_full_batch_failure=False
    )

    assert result == {"batchItemFailures": [{"itemIdentifier": "m1"}, {"itemIdentifier": "m2"}]}


def test_empty_batch_is_not_a_full_failure() -> None:
    result = process_partial_response({"Records": []}, lambda m, r: None, DeletionMessage, log=get_logger(__name__))
    assert result == {"batchItemFailures": []}
