"""
CLI entrypoint for the Bitbucket Cloud pull request client.

Parses command-line arguments, loads configuration, resolves credentials and
the repository of the current checkout, runs one pull request command and
prints the result. Exits with code 1 on any error.

Authentication uses Bitbucket Cloud API tokens (email + token) via HTTP Basic Auth.
See: https://support.atlassian.com/bitbucket-cloud/docs/api-tokens/
"""

from __future__ import annotations

import argparse
import logging
import sys
import webbrowser

from bitbucket_pr import vcs
from bitbucket_pr.auth import resolve_credentials
from bitbucket_pr.config import Settings, load_settings
from bitbucket_pr.errors import BitbucketPrError, NotFoundError
from bitbucket_pr.models import Commits, PullRequest, PullRequestState
from bitbucket_pr.pull_requests import PullRequestService
from bitbucket_pr.transport import HttpxTransport
from bitbucket_pr.vcs import RepositoryRef

MERGE_STRATEGIES = ("merge_commit", "squash", "fast_forward")


def _add_id_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "id",
        type=int,
        nargs="?",
        default=None,
        help="Pull request ID. If omitted, uses the pull request of the current branch.",
    )


def _build_argument_parser() -> argparse.ArgumentParser:
    """
    Build the argparse parser with all CLI arguments.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="bb",
        description="Work with Bitbucket Cloud pull requests from the command line.",
    )
    parser.add_argument(
        "--email",
        type=str,
        default=None,
        help="Atlassian account email. Overrides BITBUCKET_EMAIL env var.",
    )
    parser.add_argument(
        "--api-token",
        type=str,
        default=None,
        help="Bitbucket API token. Overrides BITBUCKET_API_TOKEN env var.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file path (default: ~/.config/bb/configuration.toml).",
    )
    parser.add_argument(
        "--repository",
        "-R",
        type=str,
        default=None,
        help="Repository as 'workspace/slug'. If omitted, detected from the git remote.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log HTTP requests to stderr.",
    )

    commands = parser.add_subparsers(dest="group", required=True)
    pr_parser = commands.add_parser("pr", help="Manage pull requests.")
    pr_commands = pr_parser.add_subparsers(dest="command", required=True)

    list_parser = pr_commands.add_parser("list", help="List pull requests.")
    list_parser.add_argument(
        "--state",
        action="append",
        choices=[state.value for state in PullRequestState],
        default=None,
        help="Filter by state. Repeat for several states. Defaults to OPEN.",
    )
    list_parser.add_argument(
        "--all",
        action="store_true",
        help="Follow pagination and list every matching pull request.",
    )

    view_parser = pr_commands.add_parser("view", help="View a pull request.")
    _add_id_argument(view_parser)
    view_parser.add_argument(
        "--web",
        action="store_true",
        help="Open the pull request in your browser.",
    )

    create_parser = pr_commands.add_parser(
        "create",
        help="Create a pull request from the current branch.",
    )
    create_parser.add_argument(
        "--title",
        "-t",
        type=str,
        default=None,
        help="Title. If omitted, derived from the branch commits.",
    )
    create_parser.add_argument(
        "--body",
        "-b",
        type=str,
        default=None,
        help="Body. If omitted, derived from the branch commits.",
    )
    create_parser.add_argument(
        "--destination",
        "-d",
        type=str,
        default=None,
        help="Destination branch. Defaults to default_destination from the config file.",
    )
    create_parser.add_argument(
        "--reviewer",
        "-r",
        action="append",
        default=[],
        help="Reviewer account UUID. Repeat for several reviewers.",
    )
    create_parser.add_argument(
        "--close-source-branch",
        action="store_true",
        help="Delete the source branch once the pull request is merged.",
    )

    merge_parser = pr_commands.add_parser("merge", help="Merge a pull request.")
    _add_id_argument(merge_parser)
    merge_parser.add_argument(
        "--strategy",
        choices=MERGE_STRATEGIES,
        default="",
        help="Merge strategy. Defaults to the repository setting.",
    )
    merge_parser.add_argument(
        "--close-source-branch",
        action="store_true",
        default=None,
        help="Delete the source branch after merging.",
    )

    decline_parser = pr_commands.add_parser("decline", help="Decline a pull request.")
    _add_id_argument(decline_parser)

    statuses_parser = pr_commands.add_parser(
        "statuses",
        help="Show build statuses of a pull request.",
    )
    _add_id_argument(statuses_parser)

    commits_parser = pr_commands.add_parser(
        "commits",
        help="List the commits of a pull request.",
    )
    _add_id_argument(commits_parser)

    return parser


def format_pull_request_line(pull_request: PullRequest) -> str:
    return (
        f"#{pull_request.id}\t{pull_request.title}\t"
        f"[{pull_request.source.branch.name} -> {pull_request.destination.branch.name}]\t"
        f"{pull_request.state}"
    )


def format_summary(pull_request: PullRequest, commits: Commits) -> str:
    """
    Render a plain-text summary of a pull request.

    The commit count gets a "+" suffix when the API reported further commit
    pages that were not fetched.
    """
    commit_count = f"{len(commits.values)}{'+' if commits.next else ''}"
    author_name = pull_request.author.nickname or pull_request.author.display_name

    lines = [
        pull_request.title,
        f"{pull_request.state.capitalize()} • {author_name} wants to merge "
        f"{commit_count} commits into {pull_request.destination.branch.name} "
        f"from {pull_request.source.branch.name}",
    ]
    if pull_request.reviewers:
        reviewer_names = ", ".join(
            reviewer.nickname or reviewer.display_name for reviewer in pull_request.reviewers
        )
        lines.append(f"Reviewers: {reviewer_names}")
    if pull_request.description:
        lines.extend(["", pull_request.description, ""])
    lines.append(f"View this pull request on Bitbucket.org: {pull_request.html_url}")

    return "\n".join(lines)


def _resolve_target(
    service: PullRequestService,
    repo: RepositoryRef,
    explicit_id: int | None,
) -> PullRequest:
    # The current branch is only needed when no ID was given.
    if explicit_id is not None:
        return service.resolve(repo, explicit_id=explicit_id)
    return service.resolve(repo, source_branch=vcs.current_branch_name())


def _run_list(service: PullRequestService, repo: RepositoryRef, args: argparse.Namespace) -> None:
    states = args.state or ()
    if args.all:
        pull_requests = service.list_all(repo, states)
    else:
        pull_requests = service.list(repo, states).values

    if not pull_requests:
        print("No pull requests found.", file=sys.stderr)
        return

    for pull_request in pull_requests:
        print(format_pull_request_line(pull_request))


def _run_view(service: PullRequestService, repo: RepositoryRef, args: argparse.Namespace) -> None:
    pull_request = _resolve_target(service, repo, args.id)

    if args.web:
        webbrowser.open(pull_request.html_url)
        return

    commits = service.commits(repo, pull_request.id)
    print(format_summary(pull_request, commits))


def _run_create(
    service: PullRequestService,
    repo: RepositoryRef,
    args: argparse.Namespace,
    settings: Settings,
) -> None:
    source_branch = vcs.current_branch_name()
    destination_branch = args.destination or settings.default_destination

    print(
        f"Creating pull request for {source_branch} into {destination_branch} "
        f"in {repo.full_name}",
        file=sys.stderr,
    )

    title = args.title
    body = args.body
    if title is None or body is None:
        default_title, default_body = service.default_title_and_body(
            repo, source_branch, destination_branch
        )
        title = default_title if title is None else title
        body = default_body if body is None else body

    pull_request = service.create(
        repo,
        source_branch=source_branch,
        destination_branch=destination_branch,
        title=title,
        body=body,
        reviewers=args.reviewer,
        close_source_branch=args.close_source_branch,
    )
    print("Take a look at your pull request here:")
    print(pull_request.html_url)


def _run_merge(service: PullRequestService, repo: RepositoryRef, args: argparse.Namespace) -> None:
    target = _resolve_target(service, repo, args.id)
    merged = service.merge(
        repo,
        target.id,
        merge_strategy=args.strategy,
        close_source_branch=args.close_source_branch,
    )
    print(f"Merged pull request #{merged.id} ({merged.state}): {merged.title}")


def _run_decline(service: PullRequestService, repo: RepositoryRef, args: argparse.Namespace) -> None:
    target = _resolve_target(service, repo, args.id)
    declined = service.decline(repo, target.id)
    print(f"Declined pull request #{declined.id}: {declined.title}")


def _run_statuses(service: PullRequestService, repo: RepositoryRef, args: argparse.Namespace) -> None:
    target = _resolve_target(service, repo, args.id)
    statuses = service.statuses(repo, target.id)

    if not statuses.values:
        print(f"No statuses reported for pull request #{target.id}.", file=sys.stderr)
        return

    for status in statuses.values:
        print(f"{status.state}\t{status.name}\t{status.url}")


def _run_commits(service: PullRequestService, repo: RepositoryRef, args: argparse.Namespace) -> None:
    target = _resolve_target(service, repo, args.id)
    commits = service.commits(repo, target.id)

    for commit in commits.values:
        print(f"{commit.hash[:7]}\t{commit.summary}")


def _run_command(args: argparse.Namespace) -> None:
    settings = load_settings(args.config)
    credentials = resolve_credentials(
        cli_email=args.email,
        cli_api_token=args.api_token,
        settings=settings,
    )

    if args.repository is not None:
        repo = RepositoryRef.from_full_name(args.repository)
    else:
        repo = vcs.current_repository(settings.remote)

    with HttpxTransport(credentials) as transport:
        service = PullRequestService(transport)

        if args.command == "list":
            _run_list(service, repo, args)
        elif args.command == "view":
            _run_view(service, repo, args)
        elif args.command == "create":
            _run_create(service, repo, args, settings)
        elif args.command == "merge":
            _run_merge(service, repo, args)
        elif args.command == "decline":
            _run_decline(service, repo, args)
        elif args.command == "statuses":
            _run_statuses(service, repo, args)
        elif args.command == "commits":
            _run_commits(service, repo, args)


def main(argv: list[str] | None = None) -> None:
    """
    Main entrypoint: parse args -> load config -> resolve creds -> run command.

    Exits with code 1 on configuration, credential, git, API or decode errors.
    Errors and warnings go to stderr so they do not mix with command output.
    """
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        _run_command(args)
    except NotFoundError as not_found_error:
        print(f"Warning: {not_found_error}", file=sys.stderr)
        sys.exit(1)
    except BitbucketPrError as error:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
