"""Tests for composed resource readiness checks."""

import pytest

from xrcompose.composition.ready import check_readiness
from xrcompose.models.composition import (
    MatchConditionReadinessCheck,
    ReadinessCheck,
    ReadinessCheckType,
)
from xrcompose.models.resource import Unstructured
from xrcompose.utils.errors import ReadinessCheckError


@pytest.fixture
def obj() -> Unstructured:
    return Unstructured(
        {
            "status": {
                "state": "Available",
                "replicas": 3,
                "healthy": True,
                "degraded": False,
                "conditions": [
                    {"type": "Ready", "status": "True"},
                    {"type": "Synced", "status": "False"},
                ],
            }
        }
    )


class TestCheckReadiness:
    """Test check_readiness."""

    def test_default_uses_ready_condition(self, obj: Unstructured) -> None:
        """Test the Ready condition decides readiness when there are no checks."""
        assert check_readiness(obj)
        assert not check_readiness(Unstructured({"status": {}}))

    @pytest.mark.parametrize(
        ("check", "expected"),
        [
            (ReadinessCheck(type=ReadinessCheckType.NONE), True),
            (ReadinessCheck(type=ReadinessCheckType.NON_EMPTY, field_path="status.state"), True),
            (ReadinessCheck(type=ReadinessCheckType.NON_EMPTY, field_path="status.nope"), False),
            (
                ReadinessCheck(
                    type=ReadinessCheckType.MATCH_STRING,
                    field_path="status.state",
                    match_string="Available",
                ),
                True,
            ),
            (
                ReadinessCheck(
                    type=ReadinessCheckType.MATCH_STRING,
                    field_path="status.state",
                    match_string="Creating",
                ),
                False,
            ),
            (
                ReadinessCheck(
                    type=ReadinessCheckType.MATCH_INTEGER,
                    field_path="status.replicas",
                    match_integer=3,
                ),
                True,
            ),
            (ReadinessCheck(type=ReadinessCheckType.MATCH_TRUE, field_path="status.healthy"), True),
            (
                ReadinessCheck(type=ReadinessCheckType.MATCH_FALSE, field_path="status.degraded"),
                True,
            ),
            (
                ReadinessCheck(type=ReadinessCheckType.MATCH_TRUE, field_path="status.missing"),
                False,
            ),
            (
                ReadinessCheck(
                    type=ReadinessCheckType.MATCH_CONDITION,
                    match_condition=MatchConditionReadinessCheck(type="Synced", status="False"),
                ),
                True,
            ),
        ],
    )
    def test_single_check(self, obj: Unstructured, check: ReadinessCheck, expected: bool) -> None:
        """Test each readiness check type."""
        assert check_readiness(obj, check) is expected

    def test_all_checks_must_pass(self, obj: Unstructured) -> None:
        """Test a single failing check makes the object not ready."""
        checks = [
            ReadinessCheck(type=ReadinessCheckType.NON_EMPTY, field_path="status.state"),
            ReadinessCheck(type=ReadinessCheckType.MATCH_TRUE, field_path="status.degraded"),
        ]

        assert not check_readiness(obj, *checks)

    def test_misconfigured_check(self, obj: Unstructured) -> None:
        """Test a check without its match value is an error naming its index."""
        checks = [
            ReadinessCheck(type=ReadinessCheckType.NONE),
            ReadinessCheck(type=ReadinessCheckType.MATCH_STRING, field_path="status.state"),
        ]

        with pytest.raises(ReadinessCheckError, match="index 1"):
            check_readiness(obj, *checks)

    def test_type_mismatch(self, obj: Unstructured) -> None:
        """Test a field of the wrong type is an error."""
        check = ReadinessCheck(
            type=ReadinessCheckType.MATCH_INTEGER, field_path="status.state", match_integer=1
        )

        with pytest.raises(ReadinessCheckError):
            check_readiness(obj, check)

    def test_missing_field_path(self, obj: Unstructured) -> None:
        with pytest.raises(ReadinessCheckError):
            check_readiness(obj, ReadinessCheck(type=ReadinessCheckType.NON_EMPTY))
