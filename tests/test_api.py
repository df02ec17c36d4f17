import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from wager_sim.core.models import GameId
from wager_sim.core.persistence import MemoryStore
from wager_sim.core.session import SessionCoordinator
from wager_sim.main import create_app
from tests.helpers import ScriptedRNG, stacked_deck


class TestGameApi(unittest.TestCase):
    def setUp(self):
        self.rng = ScriptedRNG()
        self.store = MemoryStore()
        self.coordinator = SessionCoordinator.from_store(self.store, rng=self.rng)
        # Crash rounds are ticked by hand here, never by the scheduler
        self.app = create_app(coordinator=self.coordinator, start_scheduler=False)
        self.client = TestClient(self.app)

    def test_state(self):
        response = self.client.get("/api/state")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["balance"], 10000)
        self.assertIsNone(data["active_game"])
        self.assertEqual(data["sessions"]["crash"]["phase"], "idle")

    def test_dice_roll(self):
        self.rng.ints.extend([3, 4])
        response = self.client.post("/api/dice/roll", json={"bet": 100, "bet_type": "seven"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["ok"])
        self.assertEqual(data["balance"], 10400)
        self.assertEqual(data["outcome"]["detail"]["dice"], [3, 4])
        self.assertEqual(data["outcome"]["multiplier"], 5.0)
        self.assertEqual(self.store.data["balance"], "10400")

    def test_below_minimum_is_400(self):
        response = self.client.post("/api/slots/spin", json={"bet": 5})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], {
            "kind": "InvalidBet",
            "message": "Minimum bet is $10",
            "severity": "error",
        })
        self.assertEqual(self.coordinator.ledger.balance, 10000)

    def test_slots_paytable(self):
        data = self.client.get("/api/slots/paytable").json()
        self.assertEqual(data["pair"], 2)
        self.assertEqual(data["three_of_a_kind"]["7️⃣"], 100)

    def test_malformed_body_is_422(self):
        response = self.client.post("/api/dice/roll", json={"bet": 100})
        self.assertEqual(response.status_code, 422)

    def test_roulette_spin(self):
        self.rng.ints.append(0)  # the green zero
        response = self.client.post("/api/roulette/spin", json={
            "bet": 100,
            "selections": [{"type": "color", "value": "green"}, {"type": "number", "value": 0}],
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        # 50 on green at 14x plus 50 on zero at 36x
        self.assertEqual(data["outcome"]["win_amount"], 700 + 1800)
        self.assertEqual(data["message"], "Number 0 green! Won $2,500")

    def test_crash_start_and_cashout(self):
        crash = self.coordinator.engines[GameId.CRASH]
        with patch.object(crash, "_draw_crash_point", return_value=4.0):
            response = self.client.post("/api/crash/start", json={"bet": 200})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["session"]["phase"], "running")

        for _ in range(100):
            self.coordinator.tick()

        response = self.client.post("/api/crash/cashout")
        data = response.json()
        self.assertEqual(data["message"], "Cashed out at 2.00x! Won $400")
        self.assertEqual(data["balance"], 10200)

        response = self.client.post("/api/crash/cashout")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["severity"], "info")

    def test_crash_start_with_bad_threshold_is_400(self):
        for body in ('{"bet": 100, "auto_cashout": NaN}', '{"bet": 100, "auto_cashout": Infinity}'):
            response = self.client.post(
                "/api/crash/start", content=body, headers={"Content-Type": "application/json"}
            )
            self.assertEqual(response.status_code, 400, body)
            self.assertEqual(response.json()["detail"]["kind"], "InvalidBet")

        response = self.client.post("/api/crash/start", json={"bet": 100, "auto_cashout": 0.9})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.coordinator.ledger.balance, 10000)
        self.assertIsNone(self.client.get("/api/state").json()["active_game"])

    def test_blackjack_blocked_while_crash_runs(self):
        crash = self.coordinator.engines[GameId.CRASH]
        with patch.object(crash, "_draw_crash_point", return_value=4.0):
            self.client.post("/api/crash/start", json={"bet": 100})

        response = self.client.post("/api/blackjack/deal", json={"bet": 100})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["kind"], "RoundInProgress")
        self.assertEqual(self.client.get("/api/state").json()["active_game"], "crash")

    def test_blackjack_hand(self):
        self.rng.decks.append(stacked_deck("10", "7", "10", "9"))
        response = self.client.post("/api/blackjack/deal", json={"bet": 100})
        session = response.json()["session"]
        self.assertEqual(session["dealer_value"], "?")
        self.assertEqual(session["player_value"], 17)

        response = self.client.post("/api/blackjack/stand")
        data = response.json()
        self.assertEqual(data["outcome"]["detail"]["result"], "lose")
        self.assertEqual(data["balance"], 9900)

        response = self.client.post("/api/blackjack/split")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["kind"], "InvalidAction")

    def test_history_and_reset(self):
        self.rng.ints.extend([6, 6])
        self.client.post("/api/dice/roll", json={"bet": 100, "bet_type": "under"})

        data = self.client.get("/api/history").json()
        self.assertEqual(data["games_played"], 1)
        self.assertEqual(data["history"][0]["game"], "Dice")
        self.assertEqual(data["history"][0]["profit"], -100)
        self.assertEqual(data["profit_series"], [-100])

        response = self.client.post("/api/stats/reset")
        self.assertEqual(response.json()["balance"], 10000)
        self.assertEqual(self.client.get("/api/history").json()["history"], [])


if __name__ == "__main__":
    unittest.main()
