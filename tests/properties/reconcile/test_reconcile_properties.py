"""Property-based tests for reconciliation invariants.

Random branch layouts are built on FakeRepository: each branch is local-only,
remote-only, synced, behind, ahead or diverged, with a random checked-out
branch, dirty flag, lock set and option mix.
"""

from dataclasses import dataclass

from hypothesis import given, settings, strategies as st

from branchsync.reconcile import (
    ActionStatus,
    ActiveBranchPolicy,
    BranchState,
    ReconcileOptions,
    reconcile,
)
from branchsync.repository import FakeRepository, HeadState

BRANCH_NAMES = ("main", "develop", "feature/a", "feature/b", "release", "docs")

# How a branch's local and remote sides relate
KINDS = ("local-only", "remote-only", "synced", "behind", "ahead", "diverged")


@dataclass(frozen=True, slots=True)
class Scenario:
    repo: FakeRepository
    options: ReconcileOptions
    kinds: dict[str, str]


@st.composite
def scenarios(draw: st.DrawFn) -> Scenario:
    repo = FakeRepository()
    base = repo.add_commit()
    names = draw(
        st.lists(st.sampled_from(BRANCH_NAMES), min_size=1, max_size=6, unique=True)
    )
    kinds: dict[str, str] = {}
    remote: dict[str, str] = {}

    for name in names:
        kind = draw(st.sampled_from(KINDS))
        kinds[name] = kind
        start = repo.add_chain(base, draw(st.integers(min_value=0, max_value=2)))
        if kind == "local-only":
            repo.local[name] = start
        elif kind == "remote-only":
            remote[name] = start
        elif kind == "synced":
            repo.local[name] = remote[name] = start
        elif kind == "behind":
            repo.local[name] = start
            remote[name] = repo.add_chain(start, draw(st.integers(1, 3)))
        elif kind == "ahead":
            remote[name] = start
            repo.local[name] = repo.add_chain(start, draw(st.integers(1, 3)))
        else:
            repo.local[name] = repo.add_chain(start, draw(st.integers(1, 3)))
            remote[name] = repo.add_chain(start, draw(st.integers(1, 3)))

    repo.set_remote("origin", remote)

    local_names = sorted(repo.local)
    head = draw(st.sampled_from([*local_names, None]))
    repo.head_branch = head
    if head is None:
        repo.detached_sha = base
    repo.dirty = draw(st.booleans())
    repo.locked_refs = set(draw(st.lists(st.sampled_from(BRANCH_NAMES), max_size=2)))

    options = ReconcileOptions(
        fetch=draw(st.booleans()),
        dry_run=draw(st.booleans()),
        active_branch=draw(st.sampled_from(list(ActiveBranchPolicy))),
        protected_branches=frozenset(
            draw(st.lists(st.sampled_from(BRANCH_NAMES), max_size=2))
        ),
    )
    return Scenario(repo=repo, options=options, kinds=kinds)


@given(scenario=scenarios())
def test_every_branch_gets_exactly_one_outcome(scenario: Scenario) -> None:
    repo = scenario.repo
    expected = set(repo.local) | set(repo.tracking["origin"])

    report = reconcile(repo, scenario.options)

    names = [o.name for o in report.outcomes]
    assert len(names) == len(set(names))
    assert set(names) == expected


@given(scenario=scenarios())
def test_ahead_and_diverged_branches_are_never_changed(scenario: Scenario) -> None:
    repo = scenario.repo
    before = dict(repo.local)

    report = reconcile(repo, scenario.options)

    for name, kind in scenario.kinds.items():
        if kind in {"ahead", "diverged"}:
            assert repo.local[name] == before[name]
            outcome = report.get(name)
            assert outcome is not None
            assert outcome.status is ActionStatus.NOT_REQUIRED


@given(scenario=scenarios())
def test_active_and_protected_branches_survive(scenario: Scenario) -> None:
    repo = scenario.repo
    head = repo.read_head()
    survivors = {
        name
        for name in repo.local
        if name == head.branch or name in scenario.options.protected_branches
    }

    _ = reconcile(repo, scenario.options)

    assert survivors <= set(repo.local)


@given(scenario=scenarios())
def test_head_is_preserved(scenario: Scenario) -> None:
    repo = scenario.repo
    before = repo.read_head()

    _ = reconcile(repo, scenario.options)

    after = repo.read_head()
    assert after.branch == before.branch
    if before.is_detached:
        assert after == HeadState(branch=None, sha=before.sha)


@given(scenario=scenarios())
def test_moves_only_go_forward(scenario: Scenario) -> None:
    repo = scenario.repo
    before = dict(repo.local)

    report = reconcile(repo, scenario.options)

    for outcome in report.by_state(BranchState.FAST_FORWARDABLE):
        new_sha = repo.local[outcome.name]
        assert repo.divergence(before[outcome.name], new_sha).ahead == 0
        if outcome.status is ActionStatus.APPLIED:
            assert new_sha == outcome.remote_sha
        else:
            assert new_sha == before[outcome.name]


@given(scenario=scenarios())
def test_dry_run_mutates_nothing(scenario: Scenario) -> None:
    repo = scenario.repo
    before = dict(repo.local)
    options = ReconcileOptions(
        fetch=scenario.options.fetch,
        dry_run=True,
        active_branch=scenario.options.active_branch,
        protected_branches=scenario.options.protected_branches,
    )

    report = reconcile(repo, options)

    assert repo.mutations() == []
    assert repo.local == before
    assert report.mutations == ()


@given(scenario=scenarios())
@settings(max_examples=50)
def test_second_pass_is_a_no_op(scenario: Scenario) -> None:
    repo = scenario.repo
    _ = reconcile(repo, scenario.options)
    after_first = dict(repo.local)
    mutation_count = len(repo.mutations())

    second = reconcile(repo, scenario.options)

    assert second.mutations == ()
    assert len(repo.mutations()) == mutation_count
    assert repo.local == after_first
