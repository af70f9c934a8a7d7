from __future__ import annotations

import json

import pytest

from agents import release_info_agent
from agents.release_info_agent import ReleaseInfoAgent, main, resolve_repository, write_step_output
from utils.release_info_models import TagInfo, TagListing

TAGS = ["v1.0.0", "v1.0.1-beta.0", "v1.1.0-alpha.0", "not-semver"]
URLS = {
    "v1.0.0": "https://github.com/o/r/releases/tag/v1.0.0",
    "v1.1.0-alpha.0": "https://github.com/o/r/releases/tag/v1.1.0-alpha.0",
}


class FakeSource:
    def __init__(self, tags=TAGS, urls=URLS, error=None, truncated=False):
        self.tags = tags
        self.urls = urls
        self.error = error
        self.truncated = truncated
        self.listed = []
        self.lookups = []
        self.closed = False

    def list_tags(self, owner, repo, page_size=None, max_tags=None):
        if self.error:
            raise self.error
        self.listed.append((owner, repo, page_size, max_tags))
        return TagListing(tags=[TagInfo(name=t) for t in self.tags], truncated=self.truncated)

    def get_release_url(self, owner, repo, tag):
        self.lookups.append(tag)
        return self.urls.get(tag) if tag else None

    def close(self):
        self.closed = True


@pytest.fixture
def clean_env(monkeypatch):
    for var in ("INPUT_OWNER", "INPUT_REPO", "INPUT_TOKEN", "GITHUB_REPOSITORY", "GITHUB_OUTPUT"):
        monkeypatch.delenv(var, raising=False)


def test_release_info_without_urls() -> None:
    source = FakeSource()
    info = ReleaseInfoAgent(source, page_size=50, max_tags=40).get_release_info_without_urls("o", "r")
    assert info.current.release == "v1.0.0"
    assert info.current.prerelease == "v1.0.1-beta.0"
    assert info.next.prerelease == "v1.1.0-alpha.0"
    assert info.next.release_is_minor is True
    assert info.current.release_url is None
    assert source.listed == [("o", "r", 50, 40)]
    assert source.lookups == []


def test_release_info_resolves_urls_in_slot_order() -> None:
    source = FakeSource()
    info = ReleaseInfoAgent(source).get_release_info("o", "r")
    assert source.lookups == ["v1.0.0", "v1.0.1-beta.0", "v1.1.0-alpha.0", None]
    assert info.current.release_url == URLS["v1.0.0"]
    assert info.current.prerelease_url is None
    assert info.next.prerelease_url == URLS["v1.1.0-alpha.0"]
    assert info.next_next.prerelease is None
    assert info.next_next.prerelease_url is None


def test_truncated_listing_still_infers() -> None:
    info = ReleaseInfoAgent(FakeSource(tags=["v1.0.0"], truncated=True)).get_release_info_without_urls("o", "r")
    assert info.current.release == "v1.0.0"


def test_resolve_repository_precedence(monkeypatch, clean_env) -> None:
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/widgets")
    assert resolve_repository(None, None) == ("acme", "widgets")
    monkeypatch.setenv("INPUT_REPO", "gadgets")
    assert resolve_repository(None, None) == ("acme", "gadgets")
    assert resolve_repository("me", "mine") == ("me", "mine")


def test_write_step_output_uses_multiline_syntax(tmp_path) -> None:
    out = tmp_path / "github_output"
    write_step_output(str(out), "release_info", '{\n    "a": 1\n}')
    lines = out.read_text().splitlines()
    assert lines[0].startswith("release_info<<ghadelimiter_")
    delimiter = lines[0].split("<<", 1)[1]
    assert lines[1:-1] == ["{", '    "a": 1', "}"]
    assert lines[-1] == delimiter


def _patch_source(monkeypatch, source):
    monkeypatch.setattr(release_info_agent, "GithubClient", lambda token=None: object())
    monkeypatch.setattr(release_info_agent, "ReleaseSource", lambda client: source)


def test_main_prints_json_and_writes_step_output(monkeypatch, tmp_path, capsys, clean_env) -> None:
    source = FakeSource()
    _patch_source(monkeypatch, source)
    out = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(out))

    assert main(["--owner", "o", "--repo", "r"]) == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed["current"]["release"] == "v1.0.0"
    assert printed["current"]["release_url"] == URLS["v1.0.0"]
    assert printed["next"] == {
        "prerelease": "v1.1.0-alpha.0",
        "prerelease_url": URLS["v1.1.0-alpha.0"],
        "release_is_minor": True,
    }
    assert "release_info<<" in out.read_text()
    assert source.closed


def test_main_no_urls_skips_lookups(monkeypatch, capsys, clean_env) -> None:
    source = FakeSource()
    _patch_source(monkeypatch, source)
    monkeypatch.setenv("GITHUB_REPOSITORY", "o/r")

    assert main(["--no-urls", "--max-tags", "10"]) == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed["current"]["release_url"] is None
    assert source.lookups == []
    assert source.listed == [("o", "r", None, 10)]


def test_main_requires_repository(monkeypatch, capsys, clean_env) -> None:
    _patch_source(monkeypatch, FakeSource())
    assert main([]) == 2
    assert "owner and name are required" in capsys.readouterr().err


def test_main_reports_unexpected_errors_as_step_failure(monkeypatch, capsys, clean_env) -> None:
    source = FakeSource(error=RuntimeError("boom\nsecond line"))
    _patch_source(monkeypatch, source)

    assert main(["--owner", "o", "--repo", "r"]) == 1

    captured = capsys.readouterr()
    assert "::error::boom%0Asecond line" in captured.out
    assert "Error: boom" in captured.err
    assert source.closed
