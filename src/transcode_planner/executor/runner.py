"""Two-phase execution of transcode plans.

Planning is synchronous and pure. Execution is delegated to an
EncoderExecutor. Afterwards every keep-if-smaller comparison is settled in
one step, so a cancelled or failed run never applies a partial comparison.
"""

import logging

from transcode_planner.executor.interface import (
    EncoderExecutor,
    ExecutionCancelledError,
    ExecutionReport,
    StreamExecutionError,
)
from transcode_planner.policy.reencode import DeferredComparison
from transcode_planner.policy.types.plan import FinalizedPlan, TranscodePlan

logger = logging.getLogger(__name__)


def propose_comparisons(plan: TranscodePlan) -> tuple[DeferredComparison, ...]:
    """Create a PROPOSED comparison for every deferred stream of a plan."""
    return tuple(
        DeferredComparison(stream_index=s.index, original_size=s.original_size)
        for s in plan.deferred_streams
    )


def abort_plan(plan: TranscodePlan) -> FinalizedPlan:
    """Return the aborted state of a plan: no output and no comparison applied."""
    comparisons = tuple(c.abort() for c in propose_comparisons(plan))
    return FinalizedPlan(plan=plan, comparisons=comparisons, aborted=True)


def finalize_plan(plan: TranscodePlan, report: ExecutionReport) -> FinalizedPlan:
    """Settle a plan from an executor report.

    Args:
        plan: The executed plan.
        report: Per-stream outcomes from the executor.

    Returns:
        FinalizedPlan where each compared stream keeps the smaller version,
        preferring the original on a tie. A cancelled report gives an
        aborted plan.

    Raises:
        StreamExecutionError: If any encoded stream failed or has no outcome.
        SizeComparisonError: If a compared stream is missing a size.
    """
    if report.cancelled:
        logger.info("Execution cancelled, no output produced")
        return abort_plan(plan)

    # Check every stream before settling any comparison
    for stream_plan in plan.streams:
        if not stream_plan.requires_encoding:
            continue
        outcome = report.outcome(stream_plan.index)
        if outcome is None:
            raise StreamExecutionError(
                stream_plan.index, stream_plan.action, "executor reported no outcome"
            )
        if not outcome.success:
            raise StreamExecutionError(
                stream_plan.index, stream_plan.action, outcome.error
            )

    comparisons = []
    for comparison in propose_comparisons(plan):
        outcome = report.outcome(comparison.stream_index)
        encoded_size = outcome.encoded_size if outcome is not None else None
        comparisons.append(comparison.start().finalize(encoded_size))

    return FinalizedPlan(plan=plan, comparisons=tuple(comparisons))


def execute_plan(plan: TranscodePlan, executor: EncoderExecutor) -> FinalizedPlan:
    """Run a plan through an executor and finalize it.

    Cancellation, whether raised by the executor or flagged in its report,
    gives an aborted plan. Any other executor exception propagates unchanged.
    """
    deferred = propose_comparisons(plan)
    logger.info(
        "Executing plan for %s (%d streams, %d size comparisons)",
        plan.source_path,
        len(plan.streams),
        len(deferred),
    )
    try:
        report = executor.execute(plan)
    except ExecutionCancelledError:
        logger.info("Execution cancelled for %s", plan.source_path)
        return abort_plan(plan)
    return finalize_plan(plan, report)
