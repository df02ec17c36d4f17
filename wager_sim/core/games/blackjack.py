from enum import Enum
from fractions import Fraction
from typing import Dict, List, Optional

from wager_sim.core.exceptions import InvalidAction
from wager_sim.core.games.base import BaseGame
from wager_sim.core.logger import get_logger
from wager_sim.core.models import GameId, Outcome

logger = get_logger("games.blackjack")


class Card:
    """Represents a playing card."""

    SUITS = ["hearts", "diamonds", "clubs", "spades"]
    RANKS = ["2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A"]
    SUIT_SYMBOLS = {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}

    __slots__ = ("rank", "suit")

    def __init__(self, rank: str, suit: str):
        self.rank = rank
        self.suit = suit

    @property
    def value(self) -> int:
        """Get the blackjack value of the card."""
        if self.rank in ["J", "Q", "K"]:
            return 10
        elif self.rank == "A":
            return 11  # Ace is 11 by default, adjusted in hand calculation
        else:
            return int(self.rank)

    @property
    def color(self) -> str:
        return "red" if self.suit in ("hearts", "diamonds") else "black"

    def to_dict(self) -> Dict:
        return {
            "rank": self.rank,
            "suit": self.suit,
            "color": self.color,
            "display": f"{self.rank}{self.SUIT_SYMBOLS[self.suit]}",
        }

    def __eq__(self, other):
        return isinstance(other, Card) and (self.rank, self.suit) == (other.rank, other.suit)

    def __hash__(self):
        return hash((self.rank, self.suit))

    def __repr__(self):
        return f"{self.rank}{self.SUIT_SYMBOLS[self.suit]}"


def score_hand(cards: List[Card]) -> int:
    """Best total for a hand: aces count 11, dropping to 1 one at a time while over 21."""
    total = sum(card.value for card in cards)
    aces = sum(1 for card in cards if card.rank == "A")

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total


class BlackjackHand:
    """Represents a blackjack hand."""

    def __init__(self, cards: Optional[List[Card]] = None):
        self.cards: List[Card] = list(cards or [])

    def add_card(self, card: Card):
        self.cards.append(card)

    @property
    def value(self) -> int:
        return score_hand(self.cards)

    @property
    def is_bust(self) -> bool:
        return self.value > 21

    def to_list(self) -> List[Dict]:
        return [card.to_dict() for card in self.cards]


class BlackjackPhase(str, Enum):
    IDLE = "idle"
    PLAYER_TURN = "player_turn"
    DEALER_TURN = "dealer_turn"
    SETTLED = "settled"


class BlackjackGame(BaseGame):
    """
    Single-deck blackjack against a dealer who stands on 17.
    House rules: a natural pays 2.5x, and double is only offered before the
    first hit; it draws exactly one card and then stands.
    """

    game_id = GameId.BLACKJACK

    DEALER_STANDS_ON = 17
    PAYOUTS = {
        "blackjack": Fraction(5, 2),
        "win": Fraction(2),
        "dealer_bust": Fraction(2),
        "push": Fraction(1),
        "lose": Fraction(0),
        "bust": Fraction(0),
    }

    def __init__(self, ledger, rng=None):
        super().__init__(ledger, rng)
        self._reset()

    def _reset(self):
        self.phase = BlackjackPhase.IDLE
        self.deck: List[Card] = []
        self.player_hand = BlackjackHand()
        self.dealer_hand = BlackjackHand()
        self.bet = 0
        self.hits = 0
        self.doubled = False

    @property
    def is_active(self) -> bool:
        return self.phase in (BlackjackPhase.PLAYER_TURN, BlackjackPhase.DEALER_TURN)

    def _create_deck(self) -> List[Card]:
        """Create and shuffle a standard 52-card deck."""
        deck = [Card(rank, suit) for suit in Card.SUITS for rank in Card.RANKS]
        return self.rng.shuffle(deck)

    def _draw(self) -> Card:
        return self.deck.pop()

    def _require_player_turn(self, action: str):
        if self.phase != BlackjackPhase.PLAYER_TURN:
            raise InvalidAction(f"Cannot {action}: no hand waiting on the player")

    # ==================== Player actions ====================

    def deal(self, bet: int) -> Optional[Outcome]:
        """
        Start a new hand. Deals 2 cards to the player, then 2 to the dealer.

        Returns:
            The Outcome if the player was dealt 21, otherwise None (the hand
            waits for hit / stand / double)
        """
        if self.is_active:
            raise InvalidAction("A hand is already in play")

        self.ledger.open_round(bet)

        self._reset()
        self.bet = bet
        self.deck = self._create_deck()

        self.player_hand.add_card(self._draw())
        self.player_hand.add_card(self._draw())
        self.dealer_hand.add_card(self._draw())
        self.dealer_hand.add_card(self._draw())

        self.phase = BlackjackPhase.PLAYER_TURN

        if self.player_hand.value == 21:
            if self.dealer_hand.value == 21:
                return self._settle("push")
            return self._settle("blackjack")

        return None

    def hit(self) -> Optional[Outcome]:
        """Draw another card. Settles on bust; 21 stands automatically."""
        self._require_player_turn("hit")

        self.player_hand.add_card(self._draw())
        self.hits += 1

        if self.player_hand.is_bust:
            return self._settle("bust")

        if self.player_hand.value == 21:
            return self.stand()

        return None

    def stand(self) -> Outcome:
        """Player stands. Dealer plays out their hand."""
        self._require_player_turn("stand")
        self.phase = BlackjackPhase.DEALER_TURN
        return self._play_dealer()

    def double(self) -> Outcome:
        """Double the stake, take exactly one card, then stand."""
        self._require_player_turn("double")
        if self.hits:
            raise InvalidAction("Double is only allowed before hitting")

        self.ledger.add_stake(self.bet)
        self.bet *= 2
        self.doubled = True

        self.player_hand.add_card(self._draw())

        if self.player_hand.is_bust:
            return self._settle("bust")

        return self.stand()

    # ==================== Dealer & settlement ====================

    def _play_dealer(self) -> Outcome:
        while self.dealer_hand.value < self.DEALER_STANDS_ON and self.deck:
            self.dealer_hand.add_card(self._draw())

        player_val = self.player_hand.value
        dealer_val = self.dealer_hand.value

        if self.dealer_hand.is_bust:
            result = "dealer_bust"
        elif player_val > dealer_val:
            result = "win"
        elif player_val < dealer_val:
            result = "lose"
        else:
            result = "push"

        return self._settle(result)

    def _settle(self, result: str) -> Outcome:
        self.phase = BlackjackPhase.SETTLED
        outcome = self._outcome(
            self.bet,
            self.PAYOUTS[result],
            result=result,
            player_hand=self.player_hand.to_list(),
            player_value=self.player_hand.value,
            dealer_hand=self.dealer_hand.to_list(),
            dealer_value=self.dealer_hand.value,
            doubled=self.doubled,
        )
        logger.debug(
            f"Blackjack hand settled: {result}",
            extra={"player": self.player_hand.value, "dealer": self.dealer_hand.value},
        )
        self._reset()
        return outcome

    def describe(self, outcome: Outcome) -> str:
        result = outcome.detail["result"]
        if result == "blackjack":
            return f"Blackjack! Won ${outcome.win_amount:,}"
        if result in ("win", "dealer_bust"):
            return f"You won! Won ${outcome.win_amount:,}"
        if result == "push":
            return "Push! Bet returned"
        return f"You lost! Lost ${outcome.bet_amount:,}"

    def view(self) -> Dict:
        """Table state for rendering; the hole card stays hidden on the player's turn."""
        hidden = self.phase == BlackjackPhase.PLAYER_TURN
        dealer_cards = self.dealer_hand.to_list()
        if hidden and len(dealer_cards) > 1:
            dealer_cards = dealer_cards[:1] + [{"hidden": True}]

        return {
            "game": self.game_id.value,
            "active": self.is_active,
            "phase": self.phase.value,
            "bet": self.bet,
            "player_hand": self.player_hand.to_list(),
            "player_value": self.player_hand.value,
            "dealer_hand": dealer_cards,
            "dealer_value": "?" if hidden else self.dealer_hand.value,
            "dealer_hidden": hidden,
            "can_double": self.phase == BlackjackPhase.PLAYER_TURN and not self.hits,
        }
