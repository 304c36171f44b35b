import json

from pullmetrics.types import (
    Config,
    PRDetails,
    PRMetrics,
    PRSize,
    PRTimestamps,
    ReleaseInfo,
    Timestamps,
)


def _details(**overrides):
    base = dict(
        organization_name="org",
        repository_name="repo",
        pr_number=1,
        pr_title="Test PR",
        pr_web_url="https://github.com/org/repo/pull/1",
        pr_node_id="PR_node123",
        author_username="author",
    )
    base.update(overrides)
    return PRDetails(**base)


def test_metrics_to_dict_keeps_draft_time_and_drops_unset():
    metrics = PRMetrics(draft_time_hours=0.0, review_cycle_time_hours=3.5)
    assert metrics.to_dict() == {
        "draft_time_hours": 0.0,
        "review_cycle_time_hours": 3.5,
    }


def test_metrics_to_dict_with_all_values():
    metrics = PRMetrics(
        draft_time_hours=2.5,
        time_to_first_review_request_hours=2.5,
        time_to_first_review_hours=1.0,
        review_cycle_time_hours=4.0,
        blocking_non_blocking_ratio=0.5,
        reviewer_participation_ratio=1.0,
    )
    result = metrics.to_dict()
    assert set(result) == {
        "draft_time_hours",
        "time_to_first_review_request_hours",
        "time_to_first_review_hours",
        "review_cycle_time_hours",
        "blocking_non_blocking_ratio",
        "reviewer_participation_ratio",
    }
    assert result["blocking_non_blocking_ratio"] == 0.5


def test_timestamps_to_dict_omits_none_but_keeps_empty_string():
    stamps = PRTimestamps(created_at="2023-01-15T10:00:00Z", release_created_at="")
    assert stamps.to_dict() == {
        "created_at": "2023-01-15T10:00:00Z",
        "release_created_at": "",
    }


def test_empty_timestamps_to_dict_is_empty():
    assert PRTimestamps().to_dict() == {}


def test_internal_timestamps_default_to_none():
    stamps = Timestamps()
    assert [
        stamps.first_commit,
        stamps.created_at,
        stamps.first_review_request,
        stamps.first_comment,
        stamps.first_approval,
        stamps.second_approval,
        stamps.merged_at,
        stamps.closed_at,
    ] == [None] * 8


def test_details_to_dict_omits_optional_sections():
    result = _details().to_dict()
    assert "metrics" not in result
    assert "release_name" not in result
    assert "timestamps" not in result
    assert result["organization_name"] == "org"
    assert result["pr_node_id"] == "PR_node123"
    assert result["approver_usernames"] == []
    assert result["is_bot"] is False


def test_details_to_dict_key_order_ends_with_generated_at():
    details = _details(
        metrics=PRMetrics(),
        release_name="v1.0.0",
        timestamps=PRTimestamps(created_at="2023-01-15T10:00:00Z"),
        generated_at="2023-01-16T09:00:00Z",
    )
    keys = list(details.to_dict())
    assert keys[0] == "organization_name"
    assert keys[-4:] == ["metrics", "release_name", "timestamps", "generated_at"]


def test_details_nested_sections_are_plain_dicts():
    details = _details(
        metrics=PRMetrics(draft_time_hours=2.5),
        release_name="v1.0.0",
        timestamps=PRTimestamps(release_created_at="2023-01-16T09:00:00Z"),
    )
    result = details.to_dict()
    assert result["metrics"] == {"draft_time_hours": 2.5}
    assert result["release_name"] == "v1.0.0"
    assert result["timestamps"] == {"release_created_at": "2023-01-16T09:00:00Z"}


def test_details_to_dict_copies_lists():
    details = _details(approver_usernames=["user1"])
    result = details.to_dict()
    result["approver_usernames"].append("user2")
    assert details.approver_usernames == ["user1"]


def test_to_json_round_trips_to_dict():
    details = _details(
        approver_usernames=["user1", "user2"],
        commenter_usernames=["user3"],
        state="merged",
        num_comments=3,
        jira_issue="ABC-123",
        metrics=PRMetrics(draft_time_hours=2.5, reviewer_participation_ratio=1.0),
        timestamps=PRTimestamps(merged_at="2023-01-15T12:00:00Z"),
    )
    assert json.loads(details.to_json()) == details.to_dict()


def test_pr_size_defaults_and_equality():
    assert PRSize() == PRSize(lines_changed=0, files_changed=0)
    assert PRSize(38, 2).lines_changed == 38


def test_release_info_holds_values():
    info = ReleaseInfo(name="v1.0.0", created_at="2023-01-16T09:00:00Z")
    assert (info.name, info.created_at) == ("v1.0.0", "2023-01-16T09:00:00Z")
    assert ReleaseInfo(name="v1.0.0").created_at == ""


def test_config_repr_hides_token():
    config = Config(github_token="secret")
    assert config.github_token == "secret"
    assert "secret" not in repr(config)