"""Unit tests for CLI exit codes."""

from transcode_planner.cli.exit_codes import ExitCode


class TestExitCode:
    """Tests for the ExitCode ranges."""

    def test_values(self) -> None:
        assert ExitCode.SUCCESS == 0
        assert ExitCode.POLICY_VALIDATION_ERROR == 10
        assert ExitCode.CONFIG_ERROR == 11
        assert ExitCode.TARGET_NOT_FOUND == 20
        assert ExitCode.PARSE_ERROR == 21
        assert ExitCode.SOURCE_REJECTED == 22
        assert ExitCode.INCOMPATIBLE_CODEC == 43
        assert ExitCode.RESIZE_SKIPPED == 44
        assert ExitCode.THUMBNAIL_ERROR == 45

    def test_values_are_unique(self) -> None:
        values = [code.value for code in ExitCode]

        assert len(values) == len(set(values))

    def test_planning_errors_in_range(self) -> None:
        for code in (
            ExitCode.INCOMPATIBLE_CODEC,
            ExitCode.RESIZE_SKIPPED,
            ExitCode.THUMBNAIL_ERROR,
        ):
            assert 40 <= code <= 49
