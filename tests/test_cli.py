import json

import pytest
import responses

from pullmetrics.cli import main

API = "https://api.github.com/repos/acme/widgets"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for name in ("ORGANIZATION", "REPOSITORY", "PR_NUMBER", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _pr():
    return {
        "title": "ABC-123 Fix login",
        "body": "",
        "html_url": "https://github.com/acme/widgets/pull/7",
        "node_id": "PR_node123",
        "user": {"login": "author"},
        "state": "open",
        "draft": False,
        "merged": False,
        "created_at": "2023-01-15T10:00:00Z",
        "requested_reviewers": [],
        "head": {"ref": "feature"},
    }


def _register(rsps, number=7):
    rsps.add(responses.GET, f"{API}/pulls/{number}", json=_pr())
    for path in (
        f"pulls/{number}/reviews",
        f"issues/{number}/comments",
        f"pulls/{number}/comments",
        f"issues/{number}/timeline",
        f"pulls/{number}/files",
        f"pulls/{number}/commits",
    ):
        rsps.add(responses.GET, f"{API}/{path}", json=[])


def test_help_is_printed(capsys):
    assert main(["--help"]) == 0
    out = capsys.readouterr().out
    assert "GITHUB_TOKEN" in out
    assert "PR_NUMBER" in out


def test_missing_token_fails(capsys):
    assert main(["acme", "widgets", "7"]) == 1
    err = capsys.readouterr().err
    assert "GITHUB_TOKEN environment variable is required" in err


def test_invalid_pr_number_fails(monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    assert main(["acme", "widgets", "seven"]) == 1
    assert capsys.readouterr().err.startswith("Error parsing configuration")


def test_unknown_flag_fails(monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    assert main(["--bogus"]) == 1
    assert capsys.readouterr().err.startswith("Error parsing configuration")


def test_positional_arguments_produce_report(monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    with responses.RequestsMock() as rsps:
        _register(rsps)
        assert main(["acme", "widgets", "7"]) == 0
        assert rsps.calls[0].request.headers["Authorization"] == "Bearer token"
    report = json.loads(capsys.readouterr().out)
    assert report["organization_name"] == "acme"
    assert report["repository_name"] == "widgets"
    assert report["pr_number"] == 7
    assert report["pr_title"] == "ABC-123 Fix login"
    assert report["jira_issue"] == "ABC-123"
    assert report["state"] == "open"
    assert "release_name" not in report


def test_environment_supplies_arguments(monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    monkeypatch.setenv("ORGANIZATION", "acme")
    monkeypatch.setenv("REPOSITORY", "widgets")
    monkeypatch.setenv("PR_NUMBER", "7")
    with responses.RequestsMock() as rsps:
        _register(rsps)
        assert main([]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["organization_name"] == "acme"
    assert report["pr_number"] == 7


def test_dotenv_file_supplies_token(tmp_path, capsys):
    (tmp_path / ".env").write_text("GITHUB_TOKEN=token\n")
    with responses.RequestsMock() as rsps:
        _register(rsps)
        assert main(["acme", "widgets", "7"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["author_username"] == "author"


def test_api_failure_is_reported(monkeypatch, capsys):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            f"{API}/pulls/7",
            json={"message": "Not Found"},
            status=404,
        )
        assert main(["acme", "widgets", "7"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error analyzing PR: failed to fetch PR")