"""
Tests for the execution driver.
"""

from desktop_provisioner.actions import PackageInstallAction, ServiceToggleAction
from desktop_provisioner.errors import BuildFailed, NoPackageManager, SourceUnavailable
from desktop_provisioner.pipeline import run_plan
from desktop_provisioner.plan import build_plan
from desktop_provisioner.report import Outcome

from stubs import StubAction


def _outcomes(report):
    return [(r.action_id, r.outcome) for r in report.results]


class TestRunPlan:
    def test_satisfied_actions_are_skipped(self, ctx):
        actions = [StubAction("a", satisfied=True), StubAction("b", satisfied=True, requires=("a",))]
        report = run_plan(build_plan(actions), ctx)

        assert _outcomes(report) == [("a", Outcome.SKIPPED), ("b", Outcome.SKIPPED)]
        assert all(a.applied == 0 for a in actions)
        assert report.status == "ok"

    def test_unsatisfied_actions_are_applied(self, ctx):
        actions = [StubAction("a"), StubAction("b", requires=("a",))]
        report = run_plan(build_plan(actions), ctx)

        assert _outcomes(report) == [("a", Outcome.APPLIED), ("b", Outcome.APPLIED)]
        assert [a.applied for a in actions] == [1, 1]

    def test_second_run_skips_everything(self, ctx):
        actions = [StubAction("a"), StubAction("b", requires=("a",))]
        run_plan(build_plan(actions), ctx)
        report = run_plan(build_plan(actions), ctx)

        assert {r.outcome for r in report.results} == {Outcome.SKIPPED}
        assert [a.applied for a in actions] == [1, 1]

    def test_recoverable_failure_does_not_stop_independent_actions(self, ctx):
        actions = [
            StubAction("repo", error=SourceUnavailable("offline")),
            StubAction("service"),
        ]
        report = run_plan(build_plan(actions), ctx)

        assert _outcomes(report) == [("repo", Outcome.FAILED_RECOVERABLE), ("service", Outcome.APPLIED)]
        assert report.results[0].error == "offline"
        assert report.status == "degraded"
        assert report.exit_code == 0

    def test_dependents_of_failed_action_are_not_applied(self, ctx):
        build = StubAction("build", requires=("repo",))
        actions = [StubAction("repo", error=SourceUnavailable("offline")), build, StubAction("other")]
        report = run_plan(build_plan(actions), ctx)

        assert report.outcome_of("build") == Outcome.FAILED_RECOVERABLE
        assert "prerequisite failed" in report.results[1].error
        assert build.checked == 0 and build.applied == 0
        assert report.outcome_of("other") == Outcome.APPLIED

    def test_blocking_is_transitive(self, ctx):
        actions = [
            StubAction("a", error=BuildFailed("compile", "boom")),
            StubAction("b", requires=("a",)),
            StubAction("c", requires=("b",)),
        ]
        report = run_plan(build_plan(actions), ctx)
        assert [r.outcome for r in report.results] == [Outcome.FAILED_RECOVERABLE] * 3

    def test_satisfied_prerequisite_does_not_block(self, ctx):
        actions = [StubAction("a", satisfied=True), StubAction("b", requires=("a",))]
        report = run_plan(build_plan(actions), ctx)
        assert report.outcome_of("b") == Outcome.APPLIED

    def test_unexpected_exception_is_recoverable(self, ctx):
        actions = [StubAction("a", error=OSError("disk full")), StubAction("b")]
        report = run_plan(build_plan(actions), ctx)
        assert _outcomes(report) == [("a", Outcome.FAILED_RECOVERABLE), ("b", Outcome.APPLIED)]

    def test_fatal_failure_halts_the_run(self, ctx):
        later = StubAction("later")
        actions = [StubAction("first"), StubAction("pm", error=NoPackageManager(["apt"])), later]
        report = run_plan(build_plan(actions), ctx)

        assert _outcomes(report) == [("first", Outcome.APPLIED), ("pm", Outcome.FAILED_FATAL)]
        assert report.halted
        assert later.checked == 0
        assert report.status == "failed"
        assert report.exit_code == 1

    def test_on_result_sees_every_result(self, ctx):
        seen = []
        run_plan(build_plan([StubAction("a"), StubAction("b")]), ctx, on_result=seen.append)
        assert [r.action_id for r in seen] == ["a", "b"]


class TestPartialInstallScenario:
    def test_failed_install_then_service_still_applied(self, ctx, fake):
        fake.installed = {"pkg-b"}
        fake.installable = {"pkg-b"}
        fake.units["x"] = [False, False]

        actions = [
            PackageInstallAction("packages", ("pkg-a", "pkg-b")),
            ServiceToggleAction("service:x", "x", enabled=True),
        ]
        report = run_plan(build_plan(actions), ctx)

        assert _outcomes(report) == [
            ("packages", Outcome.FAILED_RECOVERABLE),
            ("service:x", Outcome.APPLIED),
        ]
        assert "pkg-a" in report.results[0].error
        assert "pkg-b" not in report.results[0].error
        assert fake.units["x"] == [True, True]
        assert report.exit_code == 0

    def test_fully_satisfied_system_has_no_side_effects(self, ctx, fake):
        fake.installed = {"pkg-a", "pkg-b"}
        fake.units["x"] = [True, True]
        fake.units["old"] = [False, False]

        actions = [
            PackageInstallAction("packages", ("pkg-a", "pkg-b")),
            ServiceToggleAction("service:x", "x", enabled=True),
            ServiceToggleAction("service:old", "old", enabled=False),
        ]
        report = run_plan(build_plan(actions), ctx)

        assert {r.outcome for r in report.results} == {Outcome.SKIPPED}
        assert fake.mutations == []

    def test_dry_run_changes_nothing(self, ctx, fake):
        ctx.dry_run = True
        fake.units["x"] = [False, False]
        actions = [
            PackageInstallAction("packages", ("pkg-a",)),
            ServiceToggleAction("service:x", "x", enabled=True),
        ]
        report = run_plan(build_plan(actions), ctx)

        assert [r.outcome for r in report.results] == [Outcome.APPLIED, Outcome.APPLIED]
        assert fake.installed == set()
        assert fake.units["x"] == [False, False]
