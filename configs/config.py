import os
from typing import Dict, Any

class Config:
	"""Configuration for the release info agent."""

	# GitHub REST configuration
	GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip('/')
	GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or os.getenv("GITHUB_PAT")
	HTTP_TIMEOUT_S = int(os.getenv("HTTP_TIMEOUT_S", "30"))
	HTTP_RETRY_TOTAL = int(os.getenv("HTTP_RETRY_TOTAL", "3"))
	USER_AGENT = os.getenv("USER_AGENT", "release-info-agent/1.0")

	# Tag listing (GitHub returns at most 100 tags per page)
	TAGS_PAGE_SIZE = int(os.getenv("TAGS_PAGE_SIZE", "100"))
	MAX_TAGS = int(os.getenv("MAX_TAGS", "100"))

	# Output
	OUTPUT_NAME = os.getenv("OUTPUT_NAME", "release_info")
	JSON_INDENT = int(os.getenv("JSON_INDENT", "4"))

	# Observability
	METRICS_ROOT = os.getenv("METRICS_ROOT", ".cache/release_info/metrics")
	METRICS_ENABLED = bool(int(os.getenv("METRICS_ENABLED", "0")))

	@classmethod
	def get_github_config(cls) -> Dict[str, Any]:
		"""Get GitHub configuration for the REST client."""
		return {
			"base_url": cls.GITHUB_API_URL,
			"token": cls.GITHUB_TOKEN,
			"timeout_s": cls.HTTP_TIMEOUT_S,
			"retry_total": cls.HTTP_RETRY_TOTAL,
			"user_agent": cls.USER_AGENT,
		}

	@classmethod
	def get_tags_config(cls) -> Dict[str, int]:
		return {
			"page_size": cls.TAGS_PAGE_SIZE,
			"max_tags": cls.MAX_TAGS,
		}

	@classmethod
	def observability(cls) -> Dict[str, Any]:
		return {
			"metrics_root": cls.METRICS_ROOT,
			"metrics_enabled": cls.METRICS_ENABLED,
		}
