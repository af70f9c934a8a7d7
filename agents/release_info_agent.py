#!/usr/bin/env python3
"""Release info agent for CI pipelines.

Reads a repository's tags, infers the current release, current prerelease and
the next two prereleases, resolves their release page URLs, and emits the
result as JSON (and as a GitHub Actions step output when run inside Actions).
"""

import json
import logging
import os
import sys
import uuid
from typing import Optional, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from utils.github_client import GithubClient  # noqa: E402
from utils.release_inference import infer  # noqa: E402
from utils.release_info_models import ReleaseInfo  # noqa: E402
from utils.release_source import ReleaseSource  # noqa: E402
from configs.config import Config  # noqa: E402

# Set up logging
logger = logging.getLogger(__name__)


class ReleaseInfoAgent:
	"""Agent combining tag listing, release inference and release URL lookup."""

	def __init__(self, source: Optional[ReleaseSource] = None, *, page_size: Optional[int] = None, max_tags: Optional[int] = None):
		"""Initialize the release info agent.

		Args:
			source: Optional ReleaseSource instance. If None, creates a new one.
			page_size: Tags requested per page (defaults to Config.TAGS_PAGE_SIZE)
			max_tags: Upper bound on tags read (defaults to Config.MAX_TAGS)
		"""
		self.source = source or ReleaseSource()
		self.page_size = page_size
		self.max_tags = max_tags
		logger.debug("Release info agent initialized")

	def get_release_info_without_urls(self, owner: str, repo: str) -> ReleaseInfo:
		"""Infer release info for ``owner/repo`` from its tags."""
		logger.info(f"Inferring release info for {owner}/{repo}")
		listing = self.source.list_tags(owner, repo, page_size=self.page_size, max_tags=self.max_tags)
		if listing.truncated:
			logger.warning(f"Tag listing for {owner}/{repo} was cut short; inferring from {len(listing.tags)} tags")
		return infer(listing.names)

	def get_release_info(self, owner: str, repo: str) -> ReleaseInfo:
		"""Infer release info and resolve the release page URL of every filled slot."""
		info = self.get_release_info_without_urls(owner, repo)
		release, prerelease, next_prerelease, next_next_prerelease = info.tags()
		return info.with_urls(
			release_url=self.source.get_release_url(owner, repo, release),
			prerelease_url=self.source.get_release_url(owner, repo, prerelease),
			next_prerelease_url=self.source.get_release_url(owner, repo, next_prerelease),
			next_next_prerelease_url=self.source.get_release_url(owner, repo, next_next_prerelease),
		)

	def close(self) -> None:
		"""Close the agent and cleanup resources."""
		self.source.close()
		logger.debug("Release info agent closed")


def render_release_info(info: ReleaseInfo, indent: Optional[int] = None) -> str:
	"""Serialize release info as JSON text."""
	return json.dumps(info.model_dump(mode="json"), indent=Config.JSON_INDENT if indent is None else indent)


def write_step_output(path: str, name: str, value: str) -> None:
	"""Append a (possibly multi-line) output to a GitHub Actions output file."""
	delimiter = f"ghadelimiter_{uuid.uuid4()}"
	with open(path, "a", encoding="utf-8") as f:
		f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def _escape_command_data(s: str) -> str:
	# workflow commands are line-based
	return s.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def resolve_repository(owner: Optional[str], repo: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
	"""Fill in owner/repo from action inputs, then from GITHUB_REPOSITORY."""
	owner = owner or os.getenv("INPUT_OWNER") or None
	repo = repo or os.getenv("INPUT_REPO") or None
	if not owner or not repo:
		full_name = os.getenv("GITHUB_REPOSITORY", "")
		if "/" in full_name:
			default_owner, default_repo = full_name.split("/", 1)
			owner = owner or default_owner
			repo = repo or default_repo
	return owner, repo


def main(argv=None) -> int:
	"""CLI entry point for the release info agent."""
	import argparse

	parser = argparse.ArgumentParser(
		description="Release Info Agent - Infer current and upcoming releases from semver tags",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  python -m agents.release_info_agent --owner kubernetes --repo kubernetes
  python -m agents.release_info_agent --owner konveyor --repo move2kube --no-urls
		"""
	)
	parser.add_argument("--owner", required=False, help="Repository owner (defaults to INPUT_OWNER or GITHUB_REPOSITORY)")
	parser.add_argument("--repo", required=False, help="Repository name (defaults to INPUT_REPO or GITHUB_REPOSITORY)")
	parser.add_argument("--token", required=False, help="GitHub token (defaults to INPUT_TOKEN or GITHUB_TOKEN)")
	parser.add_argument("--max-tags", type=int, default=None, help="Maximum number of tags to read")
	parser.add_argument("--page-size", type=int, default=None, help="Tags requested per API page")
	parser.add_argument("--no-urls", action="store_true", help="Skip release URL lookups")
	parser.add_argument("--output-file", default=None, help="Append the step output here (defaults to GITHUB_OUTPUT)")
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

	args = parser.parse_args(argv)

	# Set up logging; stdout is reserved for the JSON result
	log_level = logging.DEBUG if args.verbose else logging.INFO
	logging.basicConfig(
		level=log_level,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
		stream=sys.stderr,
	)

	# Suppress verbose logs from libraries unless in debug mode
	if not args.verbose:
		logging.getLogger("utils.github_client").setLevel(logging.WARNING)
		logging.getLogger("urllib3").setLevel(logging.WARNING)

	owner, repo = resolve_repository(args.owner, args.repo)
	if not owner or not repo:
		print("Error: repository owner and name are required (--owner/--repo or GITHUB_REPOSITORY)", file=sys.stderr)
		return 2

	token = args.token or os.getenv("INPUT_TOKEN") or None
	agent = None
	try:
		agent = ReleaseInfoAgent(
			ReleaseSource(GithubClient(token=token)),
			page_size=args.page_size,
			max_tags=args.max_tags,
		)
		if args.no_urls:
			info = agent.get_release_info_without_urls(owner, repo)
		else:
			info = agent.get_release_info(owner, repo)

		text = render_release_info(info)
		print(text)
		output_file = args.output_file or os.getenv("GITHUB_OUTPUT")
		if output_file:
			write_step_output(output_file, Config.OUTPUT_NAME, text)
			logger.debug(f"Wrote {Config.OUTPUT_NAME} to {output_file}")
		return 0

	except KeyboardInterrupt:
		print("\nOperation cancelled by user", file=sys.stderr)
		return 1

	except Exception as e:
		# Unexpected error; surface it as a failed step
		print(f"::error::{_escape_command_data(str(e))}")
		print(f"Error: {e}", file=sys.stderr)
		if args.verbose:
			logger.exception("Detailed error information:")
		else:
			print("Use --verbose for more details", file=sys.stderr)
		return 1

	finally:
		if agent:
			agent.close()


if __name__ == "__main__":
	sys.exit(main())
