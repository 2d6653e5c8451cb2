# tests/unit/test_sources.py
"""Tests for artifact sources: path lists, discovery and pull requests."""

import httpx
import pytest

from checkpoint_review.errors import InputError
from checkpoint_review.pipeline.checkpoints import ReviewVariant
from checkpoint_review.sources import (
    GitHubPullRequestSource,
    discover,
    existing_paths,
    parse_pr_url,
    read_artifacts,
    read_required,
    resolve_paths,
    split_paths,
)

PR_URL = "https://github.com/acme/salesforce/pull/42"


def _variant(**kwargs) -> ReviewVariant:
    return ReviewVariant(
        name="apex",
        title="T",
        review_type="modular-checkpoint",
        checkpoints=(),
        template_subdir="t",
        artifact_label="Apex",
        **kwargs,
    )


@pytest.fixture
def project(tmp_path):
    classes = tmp_path / "force-app" / "main" / "default" / "classes"
    classes.mkdir(parents=True)
    (classes / "AccountService.cls").write_text("public class AccountService {}")
    (classes / "AccountServiceTest.cls").write_text("@isTest class AccountServiceTest {}")
    (classes / "AccountService.cls-meta.xml").write_text("<xml/>")
    tests = tmp_path / "force-app" / "main" / "default" / "lwc" / "card" / "__tests__"
    tests.mkdir(parents=True)
    (tests / "card.test.js").write_text("test()")
    (tests.parent / "card.js").write_text("export default class Card {}")
    return tmp_path


def _github(handler) -> GitHubPullRequestSource:
    return GitHubPullRequestSource(token="gh-test", transport=httpx.MockTransport(handler))


class TestLocalFiles:
    def test_split_paths(self):
        assert split_paths(" a.cls, ,b.cls ,") == ["a.cls", "b.cls"]

    def test_discover(self, project):
        found = discover(project, ["force-app/**/*.cls"])
        assert found == [
            "force-app/main/default/classes/AccountService.cls",
            "force-app/main/default/classes/AccountServiceTest.cls",
        ]

    def test_discover_exclude(self, project):
        found = discover(project, ["force-app/**/lwc/**/*.js"], exclude=["/__tests__/"])
        assert found == ["force-app/main/default/lwc/card/card.js"]

    def test_existing_paths_drops_missing(self, project):
        paths = ["force-app/main/default/classes/AccountService.cls", "missing/Gone.cls"]
        assert existing_paths(paths, project) == paths[:1]

    def test_existing_paths_none_left(self, project):
        with pytest.raises(InputError, match="No valid Apex files found to review"):
            existing_paths(["missing/Gone.cls"], project, "Apex")

    def test_read_artifacts(self, project):
        artifacts = read_artifacts(["force-app/main/default/classes/AccountService.cls"], project)
        assert artifacts[0].content == "public class AccountService {}"
        assert artifacts[0].role == "source"
        assert artifacts[0].readable is True

    def test_unreadable_artifact_placeholder(self, project):
        (project / "binary.cls").write_bytes(b"\xff\xfe\x00bad")
        artifact = read_artifacts(["binary.cls"], project)[0]
        assert artifact.readable is False
        assert artifact.content.startswith("// Error reading file:")

    def test_read_required_missing(self, project):
        with pytest.raises(InputError, match="Prompt template not found: prompts/x.md"):
            read_required("prompts/x.md", project, "prompt_template", "Prompt template")


class TestParsePrUrl:
    def test_valid(self):
        ref = parse_pr_url(PR_URL)
        assert (ref.owner, ref.repo, ref.number) == ("acme", "salesforce", 42)
        assert str(ref) == "acme/salesforce#42"

    def test_invalid(self):
        with pytest.raises(InputError, match="Invalid GitHub PR URL format"):
            parse_pr_url("https://gitlab.com/acme/repo/merge_requests/1")


class TestGitHubPullRequestSource:
    """Changed-file listing against a mocked GitHub API."""

    @pytest.mark.asyncio
    async def test_paginates(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            page = int(request.url.params["page"])
            count = 100 if page == 1 else 3
            return httpx.Response(200, json=[{"filename": f"p{page}/f{i}.cls"} for i in range(count)])

        files = await _github(handler).list_files(PR_URL)

        assert len(files) == 103
        assert files[-1] == "p2/f2.cls"
        assert len(requests) == 2
        assert requests[0].url.path == "/repos/acme/salesforce/pulls/42/files"
        assert requests[0].headers["Authorization"] == "Bearer gh-test"

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[])

        source = GitHubPullRequestSource(transport=httpx.MockTransport(handler))
        assert await source.list_files(PR_URL) == []
        assert seen["auth"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,message",
        [
            (401, "GitHub authentication failed"),
            (403, "GitHub API rate limit exceeded"),
            (404, "GitHub PR not found: acme/salesforce#42"),
            (500, "GitHub API error: HTTP 500"),
        ],
    )
    async def test_error_statuses(self, status, message):
        source = _github(lambda request: httpx.Response(status, json={"message": "x"}))
        with pytest.raises(InputError, match=message):
            await source.list_files(PR_URL)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(InputError, match="GitHub API error"):
            await _github(handler).list_files(PR_URL)


class TestResolvePaths:
    """Source precedence and filtering."""

    @pytest.mark.asyncio
    async def test_files_take_precedence(self, project):
        paths = await resolve_paths(
            _variant(), project,
            files="force-app/main/default/classes/AccountService.cls",
            pr_url=PR_URL, all_files=True,
        )
        assert paths == ["force-app/main/default/classes/AccountService.cls"]

    @pytest.mark.asyncio
    async def test_pr_filtered_by_variant(self, project):
        changed = [
            "force-app/main/default/classes/AccountService.cls",
            "force-app/main/default/classes/AccountService.cls-meta.xml",
            "README.md",
        ]
        github = _github(lambda request: httpx.Response(200, json=[{"filename": f} for f in changed]))
        variant = _variant(file_filter=lambda p: p.endswith(".cls"))

        paths = await resolve_paths(variant, project, pr_url=PR_URL, github=github)

        assert paths == ["force-app/main/default/classes/AccountService.cls"]

    @pytest.mark.asyncio
    async def test_all_uses_discovery(self, project):
        variant = _variant(discover_globs=("force-app/**/*.cls",))
        paths = await resolve_paths(variant, project, all_files=True)
        assert len(paths) == 2

    @pytest.mark.asyncio
    async def test_all_without_globs(self, project):
        with pytest.raises(InputError, match="--all is not supported"):
            await resolve_paths(_variant(), project, all_files=True)

    @pytest.mark.asyncio
    async def test_no_source(self, project):
        with pytest.raises(InputError, match="No file detection method specified"):
            await resolve_paths(_variant(), project)
