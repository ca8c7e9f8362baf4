import argparse
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from kupong.coupons import add_odds_question, add_question, create_coupon, list_coupons, list_questions
from kupong.db import init_db
from kupong.logging_config import setup_logging
from kupong.odds import MatchOdds
from kupong.results import save_correct_answer
from kupong.submissions import submit_answers


SEED_COUPON_PREFIX = "[DEMO]"
SEED_DEVICE_PREFIX = "demo-device"

MATCHES = [
    ("Rosenborg", "Molde", MatchOdds(2.10, 3.40, 3.20)),
    ("Bodø/Glimt", "Sarpsborg 08", MatchOdds(1.25, 6.00, 9.50)),
    ("Brann", "Viking", MatchOdds(2.30, 3.50, 2.80)),
    ("Lillestrøm", "Tromsø", MatchOdds(2.60, 3.30, 2.55)),
]

PLAYERS = ["Kari", "Ola", "Ingrid", "Lars", "Nora", "Sindre", "Thea", "Jonas"]


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def main():
    parser = argparse.ArgumentParser(description="Seed demo coupons, submissions and answer keys.")
    parser.add_argument("--coupons", type=int, default=3)
    parser.add_argument("--players", type=int, default=6)
    args = parser.parse_args()

    setup_logging()
    init_db()
    random.seed(42)

    if any(c.title.startswith(SEED_COUPON_PREFIX) for c in list_coupons()):
        raise SystemExit(
            "Demo coupons already exist. "
            "Run scripts/seed_demo_cleanup.py first."
        )

    players = PLAYERS[: max(1, min(args.players, len(PLAYERS)))]
    for n in range(1, args.coupons + 1):
        # the last coupon stays open and ungraded
        graded = n < args.coupons
        coupon = create_coupon(f"{SEED_COUPON_PREFIX} Runde {n}", _now_utc() + timedelta(days=7 * (n - args.coupons + 1)))
        for home, away, odds in random.sample(MATCHES, k=3):
            add_odds_question(coupon.id, home, away, odds)
        add_question(coupon.id, "Blir det over 2.5 mål totalt?", ["Ja", "Nei"])

        questions = list_questions(coupon.id)
        for i, name in enumerate(players):
            answers = {q.id: random.choice(q.options) for q in questions}
            # backdated coupons are past their deadline, so insert with an earlier clock
            submit_answers(coupon.id, f"{SEED_DEVICE_PREFIX}-{i}", answers, player_name=name, now=coupon.deadline - timedelta(days=1))

        if graded:
            for q in questions:
                save_correct_answer(coupon.id, q.id, random.choice(q.options))
        print(f"Seeded {coupon.title} with {len(questions)} questions and {len(players)} submissions")


if __name__ == "__main__":
    main()
