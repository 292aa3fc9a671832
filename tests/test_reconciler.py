from multitaskos.migrator import migrate
from multitaskos.reconciler import KEEP_LOCAL, Decision, is_newer, reconcile
from multitaskos.types import DecisionKind, TiePolicy

JOB = {"threadName": "From old client", "journal": ["did a thing"]}


def test_absent_remote_keeps_local():
    assert reconcile({"jobQueue": [], "timestamp": 5}, None) == KEEP_LOCAL
    assert reconcile(None, None) == KEEP_LOCAL


def test_absent_local_adopts_migrated_remote():
    remote = {"thread": JOB}
    decision = reconcile(None, remote)
    assert decision.adopted
    assert decision.state == migrate(remote)


def test_equal_timestamps_keep_local():
    local = {"jobQueue": [], "timestamp": 100}
    remote = {"jobQueue": [{"title": "X", "worklog": []}], "timestamp": 100}
    assert reconcile(local, remote) == KEEP_LOCAL


def test_equal_timestamps_adopt_remote_when_policy_says_so():
    local = {"jobQueue": [], "timestamp": 100}
    remote = {"jobQueue": [{"title": "X", "worklog": []}], "timestamp": 100}
    decision = reconcile(local, remote, tie_policy=TiePolicy.REMOTE)
    assert decision == Decision.adopt(migrate(remote))


def test_newer_remote_is_adopted_fully_migrated():
    remote = {"timestamp": 200, "thread": JOB}
    decision = reconcile({"timestamp": 100}, remote)
    assert decision == Decision(DecisionKind.ADOPT_REMOTE, migrate(remote))
    assert decision.state["jobQueue"][0]["data"]["title"] == "From old client"
    assert "thread" not in decision.state


def test_older_remote_keeps_local():
    assert reconcile({"timestamp": 300}, {"timestamp": 200}) == KEEP_LOCAL


def test_missing_timestamps_count_as_oldest():
    assert reconcile({"jobQueue": []}, {"timestamp": 0}).adopted
    assert reconcile({"timestamp": 0}, {"jobQueue": []}) == KEEP_LOCAL
    assert reconcile({"jobQueue": []}, {"jobQueue": []}) == KEEP_LOCAL


def test_is_newer_uses_coerced_timestamps():
    assert is_newer({"timestamp": "200"}, {"timestamp": 100})
    assert not is_newer({"timestamp": "garbage"}, {"timestamp": 100})
    assert not is_newer({"timestamp": "²"}, {"timestamp": 100})
    assert not is_newer({"timestamp": "١٢³"}, {"timestamp": 100})
    assert is_newer({"timestamp": 1}, None)
    assert not is_newer(None, {"timestamp": 1})


def test_unusable_remote_timestamp_counts_as_oldest():
    local = {"jobQueue": [], "timestamp": 100}
    assert reconcile(local, {"jobQueue": [], "timestamp": "١٢³"}) == KEEP_LOCAL
    decision = reconcile(None, {"jobQueue": [], "timestamp": "²"})
    assert decision.adopted
    assert "timestamp" not in decision.state
