"""
Integration test for the full CashPlan workflow.

Tests the pipeline from a camelCase scenario file through projection,
debt analysis and result export.
"""

import json
from datetime import date

import pytest
from click.testing import CliRunner

from cashplan.cli import main
from cashplan.projection import project_scenario
from cashplan.serialization import load_scenario, save_result


SCENARIO = {
    "name": "household",
    "asOf": "2025-08-01",
    "predictionMonths": 6,
    "income": {
        "amount": 60000,
        "bonuses": [
            {"name": "Year-end bonus", "amount": 120000, "month": 1,
             "allocation": {"savings": 50, "investment": 30, "consumption": 20}},
        ],
    },
    "expenses": [
        {"id": 1, "name": "Rent", "amount": 18000, "type": "monthly"},
        {"id": 2, "name": "Phone", "amount": 1500, "type": "annual-recurring",
         "totalInstallments": 24, "paidInstallments": 6, "earlyPayoff": True, "payoffMonth": 3},
        {"id": 3, "name": "", "amount": 999},
    ],
    "investment": {"monthlySavings": 0, "monthlyInvestment": 0},
}


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "household.json"
    with open(path, "w") as f:
        json.dump(SCENARIO, f)
    return path


@pytest.mark.integration
class TestFullWorkflow:
    """Integration tests for the complete projection workflow."""

    def test_load_project_export(self, scenario_file, tmp_path):
        """
        Scenario file to projection to JSON export.

        Cash per month: 40,500 twice, then 42,000 less the 24,000 payoff,
        42,000 twice, and January keeps 162,000 less the 96,000 of bonus
        routed to savings and investment.
        """
        # 1. Load
        scenario = load_scenario(scenario_file)
        assert scenario.as_of == date(2025, 8, 1)
        assert len(scenario.expenses) == 3

        # 2. Project
        result = project_scenario(scenario)
        records = result.monthly_data
        assert [r.month for r in records][0] == date(2025, 8, 1)
        assert len(records) == 6
        assert [r.early_payoffs for r in records] == pytest.approx([0, 0, 24_000, 0, 0, 0])
        assert [r.expenses for r in records] == pytest.approx([19_500, 19_500, 18_000, 18_000, 18_000, 18_000])
        assert records[5].bonus_income == pytest.approx(120_000)
        assert records[5].bonus_savings == pytest.approx(60_000)
        assert records[5].bonus_investment == pytest.approx(36_000)

        # 3. Balances
        final = result.final_amounts
        assert final.cash == pytest.approx(249_000)
        assert final.investment == pytest.approx(36_000, rel=0.01)
        assert final.savings >= 60_000
        assert final.total == pytest.approx(final.cash + final.savings + final.investment)
        assert records[-1].total_assets == pytest.approx(final.total)

        # 4. Debt figures
        assert result.debt_analysis.debt.card_installments > 0
        assert result.debt_analysis_with_strategy.has_strategy
        assert result.debt_analysis_with_strategy.schedule[0].name == "Phone"

        # 5. Export
        out = tmp_path / "result.json"
        save_result(result, out)
        with open(out) as f:
            data = json.load(f)
        assert data["final_amounts"]["cash"] == pytest.approx(249_000)
        assert len(data["monthly_data"]) == 6

    def test_horizon_override(self, scenario_file):
        """A shorter horizon ends before the bonus month."""
        result = project_scenario(load_scenario(scenario_file), prediction_months=3)
        assert len(result.monthly_data) == 3
        assert sum(r.bonus_income for r in result.monthly_data) == 0

    def test_cli_round_trip(self, scenario_file, tmp_path):
        """CLI validation, projection and debt analysis on the same file."""
        runner = CliRunner()
        assert runner.invoke(main, ["-q", "config", "validate", str(scenario_file)]).exit_code == 0

        out = tmp_path / "cli_result.json"
        result = runner.invoke(main, ["-q", "project", "-c", str(scenario_file), "-o", str(out)])
        assert result.exit_code == 0
        assert "Total assets:" in result.output
        with open(out) as f:
            assert json.load(f)["horizon"]["months"] == 6

        result = runner.invoke(main, ["-q", "debt", "-c", str(scenario_file)])
        assert result.exit_code == 0
        assert "Debt-to-income" in result.output
