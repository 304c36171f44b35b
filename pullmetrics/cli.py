"""Command line entry point: analyse one pull request and print JSON."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

from pullmetrics.analyzer import Analyzer
from pullmetrics.client import GitHubError
from pullmetrics.types import Config


class _UsageError(Exception):
    """Raised when the command line or environment cannot be parsed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


@dataclass
class _Settings:
    organization: str
    repository: str
    pr_number: int
    github_token: str


def _build_parser() -> _Parser:
    parser = _Parser(
        prog="pull-metrics",
        add_help=False,
        description="Analyse a GitHub pull request and print its metrics as JSON.",
    )
    parser.add_argument(
        "organization",
        nargs="?",
        help="GitHub organization or username (env: ORGANIZATION)",
    )
    parser.add_argument(
        "repository", nargs="?", help="Repository name (env: REPOSITORY)"
    )
    parser.add_argument(
        "pr_number",
        nargs="?",
        metavar="pr-number",
        help="Pull Request number (env: PR_NUMBER)",
    )
    parser.add_argument(
        "--github-token",
        dest="github_token",
        help="GitHub Personal Access Token (env: GITHUB_TOKEN)",
    )
    parser.add_argument(
        "-h", "--help", action="store_true", help="show this help and exit"
    )
    return parser


def _pick(value: Optional[str], environ: Mapping[str, str], name: str) -> str:
    return value if value is not None else environ.get(name, "")


def _settings_from(args: argparse.Namespace, environ: Mapping[str, str]) -> _Settings:
    number_text = _pick(args.pr_number, environ, "PR_NUMBER").strip()
    if number_text:
        try:
            pr_number = int(number_text)
        except ValueError:
            raise _UsageError(
                f"parsing field pr_number: invalid integer {number_text!r}"
            ) from None
    else:
        pr_number = 0
    return _Settings(
        organization=_pick(args.organization, environ, "ORGANIZATION"),
        repository=_pick(args.repository, environ, "REPOSITORY"),
        pr_number=pr_number,
        github_token=_pick(args.github_token, environ, "GITHUB_TOKEN"),
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command; return the process exit status."""
    load_dotenv(".env")

    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
        if args.help:
            sys.stdout.write(parser.format_help())
            return 0
        settings = _settings_from(args, os.environ)
    except _UsageError as exc:
        print(f"Error parsing configuration: {exc}", file=sys.stderr)
        return 1

    if not settings.github_token:
        print("GITHUB_TOKEN environment variable is required", file=sys.stderr)
        return 1

    try:
        analyzer = Analyzer(Config(github_token=settings.github_token))
        details = analyzer.analyze_pr(
            settings.organization, settings.repository, settings.pr_number
        )
    except (GitHubError, ValueError) as exc:
        print(f"Error analyzing PR: {exc}", file=sys.stderr)
        return 1

    print(details.to_json())
    return 0


if __name__ == "__main__":
    sys.exit(main())