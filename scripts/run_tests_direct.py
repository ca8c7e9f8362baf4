"""Run the pure scoring, odds and stats checks without the pytest runner.

Useful for a quick look at the game rules. None of these touch the
database. Exits non-zero if any check fails.
"""
import sys
import traceback
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from tests.test_odds import test_known_odds_values, test_rounding_boundary_is_inclusive_of_floor, test_format_points_label  # noqa: E402
from tests.test_scoring import (  # noqa: E402
    test_end_to_end_scenario,
    test_everyone_zero_means_everyone_wins,
    test_no_winners_without_answer_key,
    test_ties_at_the_top_all_win,
    test_winners_follow_points_not_correct_count,
)
from tests.test_stats import test_ungraded_coupon_is_excluded_from_average, test_leaderboards_filter_zero_and_truncate  # noqa: E402
from tests.test_validation import test_first_failure_wins, test_parse_option_points_falls_back  # noqa: E402

CHECKS = [
    test_known_odds_values,
    test_rounding_boundary_is_inclusive_of_floor,
    test_format_points_label,
    test_first_failure_wins,
    test_parse_option_points_falls_back,
    test_end_to_end_scenario,
    test_ties_at_the_top_all_win,
    test_everyone_zero_means_everyone_wins,
    test_winners_follow_points_not_correct_count,
    test_no_winners_without_answer_key,
    test_ungraded_coupon_is_excluded_from_average,
    test_leaderboards_filter_zero_and_truncate,
]


def run_test(func) -> bool:
    try:
        func()
        print(f"{func.__name__}: PASS")
        return True
    except AssertionError as e:
        print(f"{func.__name__}: FAIL - AssertionError: {e}")
        traceback.print_exc()
    except Exception as e:
        print(f"{func.__name__}: ERROR - {e}")
        traceback.print_exc()
    return False


if __name__ == '__main__':
    failed = [f.__name__ for f in CHECKS if not run_test(f)]
    print(f"{len(CHECKS) - len(failed)}/{len(CHECKS)} checks passed")
    sys.exit(1 if failed else 0)
