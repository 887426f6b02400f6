"""
Tests for the git client and repository handle.

Most tests run against real scratch repositories (see conftest.py);
failure paths that are hard to provoke use mocks instead.
"""

import subprocess
from unittest.mock import patch

import pytest

from gitversion.domain import Commit
from gitversion.errors import (
    GitCommandError,
    RepositoryNotFound,
    UnbornHistory,
)
from gitversion.infra import GitClient, Repository


class TestOpenRepository:

    def test_not_a_repository(self, no_parent_repo):
        plain = no_parent_repo / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryNotFound):
            GitClient().open_repository(plain)

    def test_missing_directory(self, no_parent_repo):
        with pytest.raises(RepositoryNotFound):
            GitClient().open_repository(no_parent_repo / "does-not-exist")

    def test_discovers_root_from_subdirectory(self, git_repo):
        git_repo.commit(path="app/src/main.txt")
        with GitClient().open_repository(git_repo.path / "app" / "src") as repo:
            assert repo.root.resolve() == git_repo.path.resolve()
            assert repo.relative_path() == "app/src"

    def test_other_failure_is_fatal(self, tmp_path):
        client = GitClient()
        with patch.object(client, '_run', return_value=("", "fatal: unable to access '.git': Permission denied", 128)):
            with pytest.raises(GitCommandError) as exc_info:
                client.open_repository(tmp_path)
        assert exc_info.value.returncode == 128

    def test_git_runs_in_c_locale(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LANGUAGE", "de")
        monkeypatch.setenv("LC_ALL", "de_DE.UTF-8")
        client = GitClient()
        with patch('subprocess.run', return_value=subprocess.CompletedProcess([], 0, str(tmp_path), "")) as run:
            client.open_repository(tmp_path)
        env = run.call_args.kwargs['env']
        assert env["LC_ALL"] == "C"
        assert env["LANGUAGE"] == ""

    def test_not_a_repository_with_translated_messages(self, no_parent_repo, monkeypatch):
        monkeypatch.setenv("LANGUAGE", "de")
        monkeypatch.setenv("LC_ALL", "de_DE.UTF-8")
        plain = no_parent_repo / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryNotFound):
            GitClient().open_repository(plain)

    def test_timeout_is_fatal(self, tmp_path):
        client = GitClient(timeout=1)
        with patch('subprocess.run', side_effect=subprocess.TimeoutExpired("git", 1)):
            with pytest.raises(GitCommandError):
                client.open_repository(tmp_path)


class TestHeadAndBranch:

    def test_unborn_head(self, git_repo):
        with GitClient().open_repository(git_repo.path) as repo:
            with pytest.raises(UnbornHistory):
                repo.head_commit()

    def test_head_commit(self, git_repo):
        commit_id = git_repo.commit()
        with GitClient().open_repository(git_repo.path) as repo:
            assert repo.head_commit() == commit_id

    def test_current_branch(self, git_repo):
        git_repo.commit()
        git_repo.checkout("-b", "feature-x")
        with GitClient().open_repository(git_repo.path) as repo:
            assert repo.current_branch() == "feature-x"

    def test_detached_head_has_no_branch(self, git_repo):
        git_repo.commit()
        git_repo.checkout("--detach", "HEAD")
        with GitClient().open_repository(git_repo.path) as repo:
            assert repo.current_branch() is None

    def test_unborn_branch_name(self, git_repo):
        with GitClient().open_repository(git_repo.path) as repo:
            assert repo.current_branch() == "master"


class TestListTags:

    def test_no_tags(self, git_repo):
        git_repo.commit()
        with GitClient().open_repository(git_repo.path) as repo:
            assert repo.list_tags() == []

    def test_lightweight_and_annotated_tags_point_at_commits(self, git_repo):
        first = git_repo.commit("one")
        git_repo.tag("1.0")
        second = git_repo.commit("two")
        git_repo.tag("v2.0", annotated=True)

        with GitClient().open_repository(git_repo.path) as repo:
            targets = {tag.name: tag.target for tag in repo.list_tags()}

        assert targets == {"1.0": first, "v2.0": second}

    def test_several_tags_on_one_commit(self, git_repo):
        commit_id = git_repo.commit()
        git_repo.tag("1.0")
        git_repo.tag("1.0.1", annotated=True)
        with GitClient().open_repository(git_repo.path) as repo:
            tags = repo.list_tags()
        assert sorted(t.name for t in tags) == ["1.0", "1.0.1"]
        assert {t.target for t in tags} == {commit_id}


class TestWalkCommits:

    def test_linear_newest_first(self, git_repo):
        ids = [git_repo.commit(f"c{i}") for i in range(4)]
        with GitClient().open_repository(git_repo.path) as repo:
            walked = [c.id for c in repo.walk_commits(repo.head_commit())]
        assert walked == list(reversed(ids))

    def test_parents_reported(self, git_repo):
        first = git_repo.commit("one")
        second = git_repo.commit("two")
        with GitClient().open_repository(git_repo.path) as repo:
            walked = list(repo.walk_commits(second))
        assert walked == [Commit(second, (first,)), Commit(first, ())]

    def test_merge_walks_each_commit_once(self, git_repo):
        base = git_repo.commit("base")
        git_repo.checkout("-b", "side")
        git_repo.commit("side 1", path="side.txt")
        git_repo.commit("side 2", path="side.txt")
        git_repo.checkout("master")
        git_repo.commit("main 1")
        merge = git_repo.merge("side")

        with GitClient().open_repository(git_repo.path) as repo:
            walked = list(repo.walk_commits(merge))

        ids = [c.id for c in walked]
        assert len(ids) == len(set(ids)) == 5
        assert ids[0] == merge
        assert ids[-1] == base
        assert walked[0].is_merge

    def test_walk_is_restartable(self, git_repo):
        git_repo.commit("one")
        head = git_repo.commit("two")
        with GitClient().open_repository(git_repo.path) as repo:
            first = list(repo.walk_commits(head))
            second = list(repo.walk_commits(head))
        assert first == second

    def test_path_filter(self, git_repo):
        git_repo.commit("root", path="README.md")
        in_app = git_repo.commit("app", path="app/a.txt")
        git_repo.commit("other", path="lib/b.txt")
        with GitClient().open_repository(git_repo.path) as repo:
            walked = [c.id for c in repo.walk_commits(repo.head_commit(), path_filter="app")]
        assert walked == [in_app]

    def test_unresolvable_start(self, git_repo):
        with GitClient().open_repository(git_repo.path) as repo:
            with pytest.raises(UnbornHistory):
                list(repo.walk_commits("HEAD"))

    def test_unresolvable_start_with_translated_messages(self, git_repo, monkeypatch):
        monkeypatch.setenv("LANGUAGE", "de")
        monkeypatch.setenv("LC_ALL", "de_DE.UTF-8")
        with GitClient().open_repository(git_repo.path) as repo:
            with pytest.raises(UnbornHistory):
                list(repo.walk_commits("HEAD"))

    def test_closing_repository_stops_walk(self, git_repo):
        for i in range(3):
            git_repo.commit(f"c{i}")
        repo = GitClient().open_repository(git_repo.path)
        walk = repo.walk_commits(repo.head_commit())
        next(walk)
        repo.close()
        assert repo.closed
        with pytest.raises(StopIteration):
            next(walk)

    def test_closed_handle_refuses_queries(self, git_repo):
        git_repo.commit()
        repo = GitClient().open_repository(git_repo.path)
        repo.close()
        with pytest.raises(ValueError):
            repo.head_commit()


class TestShortId:

    def test_default_length(self):
        repo = Repository("/tmp", GitClient())
        assert repo.short_id(Commit("0123456789abcdef")) == "0123456"
        assert repo.short_id("fedcba9876543210") == "fedcba9"

    def test_configured_length(self):
        repo = Repository("/tmp", GitClient(abbrev=10))
        assert repo.short_id("0123456789abcdef") == "0123456789"
