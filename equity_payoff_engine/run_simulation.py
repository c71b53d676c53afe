#!/usr/bin/env python3
import argparse
import json
import logging
from pathlib import Path

from equity_payoff_engine.diagnostics import first_exhaustion, first_trigger, payoff_breakdown
from equity_payoff_engine.engine.aggregation import build_results
from equity_payoff_engine.engine.config import DEFAULT_POLICY, load_engine_config, load_inputs
from equity_payoff_engine.engine.errors import ConfigError

logger = logging.getLogger("equity_payoff_engine")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Simulate an equity-funded asset position against the new loan.")
    parser.add_argument("--inputs", type=Path, required=True, help="CalculatorInputs request JSON")
    parser.add_argument("--engine", type=Path, default=None, help="Optional policy JSON overriding model constants")
    parser.add_argument("--horizon-months", type=int, default=None)
    parser.add_argument("--out-prefix", type=str, default="out/EQUITY_PAYOFF")
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        inputs = load_inputs(args.inputs)
        policy = load_engine_config(args.engine) if args.engine else DEFAULT_POLICY
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    results = build_results(inputs, policy=policy, horizon_months=args.horizon_months)
    monthly_df = results.monthly_frame()

    breakdown = None
    trigger = first_trigger(monthly_df)
    if trigger is None:
        logger.info("Payoff trigger never met within %d months", len(monthly_df))
    else:
        logger.info("Payoff in month %d (%s), asset value %.2f", *trigger)
        breakdown = payoff_breakdown(monthly_df.loc[trigger[0]])
        logger.info(
            "Payoff breakdown: %.2f before = %.2f retired + %.2f kept",
            breakdown["asset_before"], breakdown["debt_retired"], breakdown["asset_after"],
        )
    exhaustion = first_exhaustion(monthly_df)
    if exhaustion is not None:
        logger.warning("Holdings exhausted in month %d (%s), unfunded %.2f", *exhaustion)

    out = Path(args.out_prefix)
    out.parent.mkdir(parents=True, exist_ok=True)
    monthly_df.to_csv(out.with_name(out.name + "_Monthly.csv"), index=False)
    results.chart_frame().to_csv(out.with_name(out.name + "_Chart.csv"), index=False)
    summary = {
        "payoffAnalysis": results.payoff_analysis.to_payload(),
        "performanceSummary": results.performance_summary.to_payload(),
    }
    if breakdown is not None:
        summary["payoffBreakdown"] = breakdown
    out.with_name(out.name + "_Summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
    logger.info("Done - wrote %s_*", out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
