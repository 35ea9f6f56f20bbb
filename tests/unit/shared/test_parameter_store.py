import boto3
from moto import mock_aws

from shared.clients import ParameterStore
from tests.fixtures.clients import SsmStub


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@mock_aws
def test_get_decrypts_secure_string() -> None:
    """
    Given: SecureString으로 저장된 웹훅 URL
    When: decrypt=True로 조회
    Then: 평문 URL 반환
    """
    ssm = boto3.client("ssm", region_name="us-east-1")
    ssm.put_parameter(Name="/janitor/webhook", Value="https://hooks.slack.com/x", Type="SecureString")

    store = ParameterStore()

    assert store.get("/janitor/webhook", decrypt=True) == "https://hooks.slack.com/x"


def test_get_caches_within_max_age_and_refreshes_after() -> None:
    """
    Given: max_age=300초 캐시
    When: 캐시 창 안에서 두 번, 창이 지난 뒤 한 번 조회
    Then: SSM 호출은 총 2회
    """
    stub = SsmStub({"/p": "v1"})
    clock = _Clock()
    store = ParameterStore(client_factory=lambda: stub, clock=clock)

    assert store.get("/p", max_age=300) == "v1"
    clock.now += 299
    assert store.get("/p", max_age=300) == "v1"
    assert len(stub.calls) == 1

    stub.values["/p"] = "v2"
    clock.now += 2
    assert store.get("/p", max_age=300) == "v2"
    assert len(stub.calls) == 2
    assert stub.calls[0] == {"Name": "/p", "WithDecryption": True}


def test_zero_max_age_disables_cache() -> None:
    stub = SsmStub({"/p": "v"})
    store = ParameterStore(client_factory=lambda: stub, clock=_Clock())

    store.get("/p", max_age=0)
    store.get("/p", max_age=0)

    assert len(stub.calls) == 2


def test_clear_cache_forces_refetch() -> None:
    stub = SsmStub({"/p": "v"})
    store = ParameterStore(client_factory=lambda: stub, clock=_Clock())

    store.get("/p")
    store.clear_cache()
    store.get("/p")

    assert len(stub.calls) == 2
