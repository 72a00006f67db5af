"""
Unit tests for ArtifactNode.

Covers the staleness test, the rebuild contract, fingerprint bookkeeping
and weak dependency references.
"""

import gc
from unittest.mock import MagicMock

import pytest

from kiln.core.models.build import BuildOutcome
from kiln.graph.fingerprint import MISSING, fingerprint, touch
from kiln.graph.node import ArtifactNode


class TestNeedUpdate:
    """Tests for ArtifactNode.need_update()."""

    def test_missing_file_needs_update(self, tmp_path):
        """A node whose file does not exist is always stale."""
        node = ArtifactNode(tmp_path / "out")
        assert node.need_update()

    def test_missing_file_needs_update_regardless_of_dependencies(self, tmp_path, make_file):
        """Even with older, existing dependencies a missing target is stale."""
        dep = ArtifactNode(make_file("in.txt"))
        node = ArtifactNode(tmp_path / "out", [dep])
        assert node.need_update()

    def test_existing_file_without_dependencies_is_fresh(self, make_file):
        """A plain existing file never needs rebuilding."""
        node = ArtifactNode(make_file("a.txt"))
        assert not node.need_update()

    def test_newer_dependency_makes_node_stale(self, make_file):
        target = make_file("out")
        dep = ArtifactNode(make_file("in.txt"))  # later tick
        node = ArtifactNode(target, [dep])
        assert node.need_update()

    def test_equal_timestamp_makes_node_stale(self, make_file):
        """Dependency and target written in the same tick counts as stale."""
        dep = ArtifactNode(make_file("in.txt", mtime_ns=1_800_000_000 * 10**9))
        node = ArtifactNode(make_file("out", mtime_ns=1_800_000_000 * 10**9), [dep])
        assert node.need_update()

    def test_older_dependency_keeps_node_fresh(self, make_file):
        dep = ArtifactNode(make_file("in.txt"))
        node = ArtifactNode(make_file("out"), [dep])  # later tick
        assert not node.need_update()

    def test_dependency_touched_after_construction_is_seen(self, make_file, clock):
        """need_update() reads current timestamps, not the construction snapshot."""
        dep = ArtifactNode(make_file("in.txt"))
        node = ArtifactNode(make_file("out"), [dep])
        assert not node.need_update()

        touch(dep.path, clock.tick())
        assert node.need_update()

    def test_missing_dependency_file_makes_node_stale(self, tmp_path, make_file):
        dep = ArtifactNode(tmp_path / "gone.txt")
        node = ArtifactNode(make_file("out"), [dep])
        assert node.need_update()

    def test_any_stale_dependency_is_enough(self, make_file):
        old = ArtifactNode(make_file("old.txt"))
        target = make_file("out")
        new = ArtifactNode(make_file("new.txt"))
        node = ArtifactNode(target, [old, new])
        assert node.need_update()


class TestUpdate:
    """Tests for ArtifactNode.update()."""

    def test_update_passes_node_to_action(self, tmp_path, make_file):
        """The action receives the node and can read its dependency list."""
        seen = {}

        def action(node):
            seen["deps"] = [d.path for d in node.dependencies]
            seen["path"] = node.path
            return True

        dep = ArtifactNode(make_file("in.txt"))
        node = ArtifactNode(tmp_path / "out", [dep], action)

        assert node.update() is BuildOutcome.SUCCESS
        assert seen == {"deps": [dep.path], "path": tmp_path / "out"}

    @pytest.mark.parametrize(
        "result, expected",
        [
            (BuildOutcome.SUCCESS, BuildOutcome.SUCCESS),
            (BuildOutcome.FAILURE, BuildOutcome.FAILURE),
            (True, BuildOutcome.SUCCESS),
            (False, BuildOutcome.FAILURE),
            (None, BuildOutcome.SUCCESS),
        ],
    )
    def test_update_returns_action_outcome(self, tmp_path, result, expected):
        node = ArtifactNode(tmp_path / "out", action=lambda n: result)
        assert node.update() is expected

    def test_action_exception_is_failure(self, tmp_path):
        """An exception from the action is logged and reported as FAILURE."""
        logger = MagicMock()

        def explode(node):
            raise RuntimeError("compiler crashed")

        node = ArtifactNode(tmp_path / "out", action=explode, logger=logger)

        assert node.update() is BuildOutcome.FAILURE
        logger.error.assert_called_once()
        assert "compiler crashed" in str(logger.error.call_args)

    def test_unsupported_return_value_is_failure(self, tmp_path):
        node = ArtifactNode(tmp_path / "out", action=lambda n: "done")
        assert node.update() is BuildOutcome.FAILURE

    def test_update_does_not_retry(self, tmp_path):
        action = MagicMock(return_value=False)
        node = ArtifactNode(tmp_path / "out", action=action)

        node.update()
        action.assert_called_once_with(node)

    def test_source_without_action_succeeds_if_present(self, make_file):
        node = ArtifactNode(make_file("main.c"))
        assert node.is_source
        assert node.update() is BuildOutcome.SUCCESS

    def test_source_without_action_fails_if_missing(self, tmp_path):
        """There is no rule to make a missing source."""
        node = ArtifactNode(tmp_path / "main.c")
        assert node.update() is BuildOutcome.FAILURE


class TestFingerprints:
    """Tests for fingerprint and snapshot bookkeeping."""

    def test_fingerprint_captured_at_construction(self, tmp_path, make_file):
        present = ArtifactNode(make_file("a.txt", mtime_ns=1_750_000_000 * 10**9))
        absent = ArtifactNode(tmp_path / "b.txt")

        assert present.fingerprint == 1_750_000_000 * 10**9
        assert absent.fingerprint == MISSING

    def test_fingerprint_only_refreshed_by_update(self, make_file, clock):
        node = ArtifactNode(make_file("a.txt"), action=lambda n: True)
        before = node.fingerprint

        touch(node.path, clock.tick())
        assert node.fingerprint == before

        node.update()
        assert node.fingerprint == fingerprint(node.path)
        assert node.fingerprint > before

    def test_snapshot_initialised_from_dependencies(self, tmp_path, make_file):
        a = ArtifactNode(make_file("a.txt"))
        b = ArtifactNode(tmp_path / "b.txt")
        node = ArtifactNode(tmp_path / "out", [a, b])

        assert node.dependency_fingerprints == (a.fingerprint, MISSING)

    def test_add_dependency_grows_snapshot_with_unobserved_entry(self, tmp_path, make_file):
        a = ArtifactNode(make_file("a.txt"))
        node = ArtifactNode(tmp_path / "out", [a])

        b, c, d = (ArtifactNode(make_file(name)) for name in ("b.txt", "c.txt", "d.txt"))

        node.add_dependency(b)
        node.add_dependency([c, d])

        assert len(node.dependencies) == 4
        assert len(node.dependency_fingerprints) == 4
        assert node.dependency_fingerprints[1:] == (MISSING, MISSING, MISSING)

    def test_update_refreshes_snapshot_from_reported_fingerprint(self, tmp_path, make_file, clock):
        """The snapshot takes what the dependency last recorded, not a fresh stat."""
        dep = ArtifactNode(make_file("in.txt"))
        node = ArtifactNode(tmp_path / "out", action=lambda n: bool(touch(n.path, clock.tick())))
        node.add_dependency(dep)
        reported = dep.fingerprint

        touch(dep.path, clock.tick())
        node.update()

        assert node.dependency_fingerprints == (reported,)
        assert fingerprint(dep.path) != reported

    def test_snapshot_refreshed_even_on_failure(self, tmp_path, make_file):
        dep = ArtifactNode(make_file("in.txt"))
        node = ArtifactNode(tmp_path / "out", action=lambda n: False)
        node.add_dependency(dep)

        node.update()
        assert node.dependency_fingerprints == (dep.fingerprint,)


class TestWeakDependencies:
    """Dependencies are non-owning references."""

    def test_collected_dependency_is_ignored(self, make_file):
        """A dependency that no longer exists contributes no staleness."""
        node = ArtifactNode(make_file("out"))
        dep = ArtifactNode(make_file("in.txt"))  # newer than out
        node.add_dependency(dep)
        assert node.need_update()

        del dep
        gc.collect()

        assert node.dependencies == ()
        assert node.dangling_dependencies == 1
        assert len(node.dependency_fingerprints) == 1
        assert not node.need_update()

    def test_repr(self, tmp_path):
        assert repr(ArtifactNode(tmp_path / "x")) == f"ArtifactNode({str(tmp_path / 'x')!r})"
