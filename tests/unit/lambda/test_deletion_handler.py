import boto3
import pytest
from moto import mock_aws

from shared.clients import RegionalClientRegistry
from shared.errors import FullBatchFailureError
from tests.fixtures.clients import LogsStub
from tests.fixtures.janitor_env import sqs_event, sqs_record

HANDLER = "src/lambda/functions/deletion_handler/handler.py"


def _message(name: str, region: str = "us-east-1") -> dict:
    return {"logGroupName": name, "awsRegion": region}


def _load(handler_globals, logs):
    g = handler_globals(HANDLER)
    g["_LOGS_CLIENTS"] = RegionalClientRegistry(factory=lambda region: logs)
    return g["main"]


def test_one_success_one_failure_reports_only_the_failure(handler_globals) -> None:
    """
    Given: 삭제 메시지 2건 중 1건은 스로틀링 오류
    When: 삭제 핸들러 실행
    Then: 실패한 messageId 하나만 보고
    """
    logs = LogsStub(delete_errors={"/aws/lambda/Logger-2": "ThrottlingException"})
    main = _load(handler_globals, logs)

    event = sqs_event(
        [sqs_record(_message("/aws/lambda/Logger-1"), "m1"), sqs_record(_message("/aws/lambda/Logger-2"), "m2")]
    )
    resp = main(event, None)

    assert resp == {"batchItemFailures": [{"itemIdentifier": "m2"}]}
    assert logs.deleted == ["/aws/lambda/Logger-1"]


def test_already_deleted_group_counts_as_success(handler_globals) -> None:
    """
    Given: 이미 삭제된 로그 그룹 (ResourceNotFoundException)
    When: 삭제 핸들러 실행
    Then: 실패 없이 처리 완료
    """
    logs = LogsStub(delete_errors={"/aws/lambda/Gone": "ResourceNotFoundException"})
    main = _load(handler_globals, logs)

    resp = main(sqs_event([sqs_record(_message("/aws/lambda/Gone"), "m1")]), None)

    assert resp == {"batchItemFailures": []}


def test_all_records_failing_raises_full_batch_failure(handler_globals) -> None:
    """
    Given: 모든 삭제가 실패하는 배치
    When: 삭제 핸들러 실행
    Then: 부분 실패 응답 대신 FullBatchFailureError 발생
    """
    logs = LogsStub(delete_errors={"/a": "AccessDeniedException", "/b": "ThrottlingException"})
    main = _load(handler_globals, logs)

    with pytest.raises(FullBatchFailureError) as exc_info:
        main(sqs_event([sqs_record(_message("/a"), "m1"), sqs_record(_message("/b"), "m2")]), None)

    assert len(exc_info.value.child_exceptions) == 2


def test_single_invalid_message_raises_full_batch_failure(handler_globals) -> None:
    main = _load(handler_globals, LogsStub())

    with pytest.raises(FullBatchFailureError):
        main(sqs_event([sqs_record({"logGroupName": "/a"}, "m1")]), None)


def test_uses_client_for_message_region(handler_globals) -> None:
    regions = []
    logs = LogsStub()
    g = handler_globals(HANDLER)
    g["_LOGS_CLIENTS"] = RegionalClientRegistry(factory=lambda region: regions.append(region) or logs)

    g["main"](
        sqs_event(
            [
                sqs_record(_message("/x", "eu-west-1"), "m1"),
                sqs_record(_message("/y", "eu-west-1"), "m2"),
                sqs_record(_message("/z", "ap-northeast-2"), "m3"),
            ]
        ),
        None,
    )

    assert regions == ["eu-west-1", "ap-northeast-2"]


@mock_aws
def test_deletes_log_group_in_cloudwatch_logs(handler_globals) -> None:
    logs = boto3.client("logs", region_name="eu-west-1")
    logs.create_log_group(logGroupName="/aws/lambda/Parameters-1")

    g = handler_globals(HANDLER)
    g["_LOGS_CLIENTS"] = RegionalClientRegistry()

    resp = g["main"](
        sqs_event(
            [
                sqs_record(_message("/aws/lambda/Parameters-1", "eu-west-1"), "m1"),
                sqs_record(_message("/aws/lambda/Parameters-2", "eu-west-1"), "m2"),
            ]
        ),
        None,
    )

    assert resp == {"batchItemFailures": []}
    assert logs.describe_log_groups(logGroupNamePrefix="/aws/lambda/Parameters")["logGroups"] == []
