# pullmetrics

Analyze a single GitHub pull request and print a JSON report of its review
activity: who approved and commented, how many lines and files changed, the
linked Jira issue, key timestamps, the first release published after the
merge, and timing metrics such as time to first review and review cycle time.

## Installation

```
pip install .
```

## Command line

```
pull-metrics ORGANIZATION REPOSITORY PR_NUMBER
```

The same command can be run as `python -m pullmetrics.cli`.

Each positional argument may instead come from the environment variables
`ORGANIZATION`, `REPOSITORY` and `PR_NUMBER`; an argument given on the command
line wins. A GitHub personal access token is required. It is read from
`GITHUB_TOKEN`, or given with `--github-token`. A `.env` file in the current
directory is loaded first if it exists; variables already set in the
environment are not overridden by it. For example:

```
GITHUB_TOKEN=token
ORGANIZATION=my-org
REPOSITORY=my-repo
PR_NUMBER=42
```

`pull-metrics --help` (or `-h`) prints the options and exits.

The report is written to standard output as indented JSON. On failure a
message goes to standard error and the exit status is 1:

- `Error parsing configuration: ...` for bad arguments or a `PR_NUMBER` that
  is not an integer,
- `GITHUB_TOKEN environment variable is required` when no token is given,
- `Error analyzing PR: ...` when a GitHub request fails.

## Library use

```python
from pullmetrics.analyzer import Analyzer
from pullmetrics.types import Config

analyzer = Analyzer(Config(github_token="token"))
details = analyzer.analyze_pr("my-org", "my-repo", 42)

print(details.state, details.lines_changed, details.jira_issue)
if details.metrics.time_to_first_review_hours is not None:
    print(f"{details.metrics.time_to_first_review_hours:.2f} hours to first review")

print(details.to_json())
```

`Analyzer` raises `ValueError` when the token is empty. It accepts an optional
second argument, `client`, to use in place of the default
`pullmetrics.client.GitHubClient`; any object with the same `get_pull_request`
and `list_*` methods will do.

`GitHubClient(token, base_url="https://api.github.com", session=None)` talks
to the GitHub REST API, requests 100 items per page and follows `next` links
until every page is read. Failed requests raise
`pullmetrics.client.GitHubError`, whose `status_code` holds the HTTP status
when there was one.

`analyze_pr` returns a `pullmetrics.types.PRDetails`; `to_dict()` gives the
JSON-ready mapping and `to_json()` the indented JSON text.

The functions that compute each figure from the raw GitHub JSON objects live
in `pullmetrics.analysis` (`get_pr_state`, `get_approvers`,
`extract_jira_issue`, `calculate_pr_metrics` and so on) and can be called on
their own.

## What is reported

- `state`: `draft`, `merged`, otherwise the pull request's own state
  (`open` or `closed`)
- `approver_usernames` (distinct, in order of first approval) and
  `commenter_usernames` (the author excluded, sorted)
- `num_comments` (conversation plus inline review comments),
  `num_commenters`, `num_approvers`, `num_requested_reviewers` (reviewers who
  reviewed plus those still requested, counted once)
- `change_requests_count`, `lines_changed` (additions plus deletions),
  `files_changed`
- `commits_after_first_review`: commits authored after the first review
  request
- `jira_issue`: the first key like `ABC-123` found in the title, then the
  body, then the branch name, CVE identifiers ignored; `BOT` for bot authors,
  otherwise `UNKNOWN`
- `is_bot`: whether the author's login contains `[bot]`
- `release_name`: for merged pull requests, the earliest release published
  after the merge (its name, or its tag when it has no name)
- `timestamps`: first commit, creation, first review request, first comment,
  first and second approval, merge, close and release creation, all in UTC
- `metrics`: draft time, time to first review request, time to first review,
  review cycle time, blocking/non-blocking review ratio and reviewer
  participation ratio, in hours where they are durations
- `generated_at`: when the report was made, in UTC

`draft_time_hours` is always present and is 0 when it cannot be worked out.
Other fields without a value are left out of the JSON output.

## Limits

One pull request is analysed per run; nothing is stored between runs, and
there is no batch mode over many pull requests or repositories.

## Development

```
pip install -e ".[test]"
pytest
```