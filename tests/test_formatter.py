from bolan_calc.data_models import PayoffResult
from bolan_calc.engine import evaluate_mortgage
from bolan_calc.formatter import format_payoff, format_sek, format_time, print_evaluation


def test_format_sek_groups_thousands():
    assert format_sek(7_500.0) == "7 500"
    assert format_sek(1_666.6667) == "1 667"
    assert format_sek(2_000_000) == "2 000 000"
    assert format_sek(12.4) == "12"


def test_format_time():
    assert format_time(38) == "3y 2m"
    assert format_time(-38) == "-3y 2m"


def test_format_payoff_marks_sentinel():
    assert format_payoff(PayoffResult(years=99, months=0, final_balance=1_000.0)) == "never"
    assert format_payoff(PayoffResult(years=12, months=3, final_balance=0.0)) == "12y 3m"


def test_print_evaluation(reference_scenario, capsys):
    print_evaluation(evaluate_mortgage(reference_scenario))
    out = capsys.readouterr().out
    assert "7 500 SEK" in out
    assert "12 500 SEK" in out
    assert "Warning" not in out
