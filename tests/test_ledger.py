import unittest
from datetime import datetime, timezone
from fractions import Fraction

from wager_sim.core.exceptions import InsufficientFunds, InvalidBet
from wager_sim.core.ledger import Ledger
from wager_sim.core.models import GameId, HistoryEntry, Outcome


def make_outcome(bet=100, multiplier=2, game=GameId.DICE):
    return Outcome(game=game, bet_amount=bet, multiplier=Fraction(multiplier))


class TestLedgerValidation(unittest.TestCase):

    def setUp(self):
        self.ledger = Ledger(balance=500)

    def test_can_afford(self):
        self.assertTrue(self.ledger.can_afford(10))
        self.assertTrue(self.ledger.can_afford(500))
        self.assertFalse(self.ledger.can_afford(9))
        self.assertFalse(self.ledger.can_afford(0))
        self.assertFalse(self.ledger.can_afford(-50))
        self.assertFalse(self.ledger.can_afford(501))

    def test_non_numeric_bets_are_invalid(self):
        for amount in ("100", 10.5, None, True):
            with self.assertRaises(InvalidBet):
                self.ledger.validate_wager(amount)

    def test_debit_rechecks_balance(self):
        with self.assertRaises(InsufficientFunds):
            self.ledger.debit(501)
        self.assertEqual(self.ledger.balance, 500)

        self.ledger.debit(200)
        self.assertEqual(self.ledger.balance, 300)

    def test_credit_rejects_negative(self):
        self.ledger.credit(0)
        self.assertEqual(self.ledger.balance, 500)
        with self.assertRaises(ValueError):
            self.ledger.credit(-1)

    def test_rejected_round_leaves_everything_unchanged(self):
        for amount in (5, 1000):
            with self.assertRaises((InvalidBet, InsufficientFunds)):
                self.ledger.open_round(amount)
        self.assertEqual(self.ledger.balance, 500)
        self.assertEqual(self.ledger.games_played, 0)
        self.assertEqual(self.ledger.total_wagered, 0)
        self.assertEqual(len(self.ledger.history), 0)


class TestLedgerRounds(unittest.TestCase):

    def setUp(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.ledger = Ledger(clock=lambda: self.now)

    def test_settle_winning_round(self):
        self.ledger.open_round(100)
        self.assertEqual(self.ledger.balance, 9900)

        entry = self.ledger.settle(make_outcome(100, 2))

        self.assertEqual(self.ledger.balance, 10100)
        self.assertEqual(entry.profit, 100)
        self.assertEqual(entry.game, "Dice")
        self.assertEqual(entry.timestamp, self.now.isoformat())
        self.assertEqual(self.ledger.totals(), {
            "total_wagered": 100,
            "total_won": 200,
            "games_played": 1,
            "net_profit": 100,
        })
        self.assertEqual(self.ledger.profit_series, [100])

    def test_losing_round_credits_zero(self):
        self.ledger.open_round(100)
        self.ledger.settle(make_outcome(100, 0))
        self.assertEqual(self.ledger.balance, 9900)
        self.assertEqual(self.ledger.total_won, 0)
        self.assertEqual(self.ledger.profit_series, [-100])

    def test_payout_is_floored(self):
        self.ledger.open_round(15)
        entry = self.ledger.settle(make_outcome(15, Fraction(5, 2)))
        # floor(15 * 2.5) = 37
        self.assertEqual(entry.profit, 22)
        self.assertEqual(self.ledger.balance, 10022)

    def test_additional_stake_counts_as_wagered(self):
        self.ledger.open_round(100)
        self.ledger.add_stake(100)
        self.assertEqual(self.ledger.balance, 9800)
        self.assertEqual(self.ledger.total_wagered, 200)
        self.assertEqual(self.ledger.games_played, 1)

    def test_history_is_capped_and_evicts_oldest(self):
        for i in range(51):
            self.ledger.open_round(10 + i)
            self.ledger.settle(make_outcome(10 + i, 0))

        self.assertEqual(len(self.ledger.history), 50)
        # Newest first; the very first round (bet 10) is gone
        self.assertEqual(self.ledger.history[0].bet_amount, 60)
        self.assertEqual(self.ledger.history[-1].bet_amount, 11)
        self.assertNotIn(10, [entry.bet_amount for entry in self.ledger.history])
        # Profit series is never truncated
        self.assertEqual(len(self.ledger.profit_series), 51)

    def test_balance_equals_start_plus_total_profit(self):
        plays = [(100, 0), (50, 2), (30, Fraction(5, 2)), (200, 1), (10, 36), (75, Fraction(123, 100))]
        for bet, multiplier in plays:
            self.ledger.open_round(bet)
            self.ledger.settle(make_outcome(bet, multiplier))

        self.assertEqual(self.ledger.balance, 10000 + sum(self.ledger.profit_series))
        totals = self.ledger.totals()
        self.assertEqual(self.ledger.balance, 10000 - totals["total_wagered"] + totals["total_won"])

    def test_reset(self):
        self.ledger.open_round(100)
        self.ledger.settle(make_outcome(100, 0))
        self.ledger.reset()
        self.assertEqual(self.ledger.balance, 10000)
        self.assertEqual(self.ledger.games_played, 0)
        self.assertEqual(list(self.ledger.history), [])
        self.assertEqual(self.ledger.profit_series, [])


class TestLedgerState(unittest.TestCase):

    def test_state_round_trip(self):
        ledger = Ledger()
        ledger.open_round(100)
        ledger.settle(make_outcome(100, 2))
        ledger.open_round(40)
        ledger.settle(make_outcome(40, 0, game=GameId.SLOTS))

        state = ledger.to_state()
        restored = Ledger()
        restored.load_state(state["balance"], state["history"], state["stats"])

        self.assertEqual(restored.balance, ledger.balance)
        self.assertEqual(restored.totals(), ledger.totals())
        self.assertEqual(list(restored.history), list(ledger.history))
        self.assertEqual(restored.profit_series, [100, -40])
        self.assertEqual(restored.history[0].game, "Slots")

    def test_history_entry_serialized_field_names(self):
        entry = HistoryEntry("Crash", "2024-01-01T00:00:00+00:00", 100, 1.5, 50)
        self.assertEqual(entry.to_dict(), {
            "game": "Crash",
            "time": "2024-01-01T00:00:00+00:00",
            "betAmount": 100,
            "multiplier": 1.5,
            "profit": 50,
        })
        self.assertEqual(HistoryEntry.from_dict(entry.to_dict()), entry)

    def test_absent_pieces_keep_defaults(self):
        ledger = Ledger()
        ledger.load_state(None, None, None)
        self.assertEqual(ledger.balance, 10000)
        self.assertEqual(ledger.totals()["games_played"], 0)


class TestOutcome(unittest.TestCase):

    def test_negative_multiplier_rejected(self):
        with self.assertRaises(ValueError):
            make_outcome(100, -1)

    def test_detail_is_read_only_copy(self):
        detail = {"dice": [3, 4], "total": 7}
        outcome = Outcome(GameId.DICE, 100, Fraction(5), detail)
        detail["total"] = 12

        self.assertEqual(outcome.detail["total"], 7)
        with self.assertRaises(TypeError):
            outcome.detail["total"] = 2
        self.assertEqual(outcome.to_dict()["detail"], {"dice": [3, 4], "total": 7})
        self.assertIsInstance(outcome.to_dict()["detail"], dict)

    def test_severity(self):
        self.assertEqual(make_outcome(100, 2).severity, "success")
        self.assertEqual(make_outcome(100, 1).severity, "info")
        self.assertEqual(make_outcome(100, 0).severity, "error")


if __name__ == "__main__":
    unittest.main()
