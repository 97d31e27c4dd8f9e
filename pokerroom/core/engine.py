"""
Texas Hold'em Engine - Betting State Machine.

One PokerEngine runs exactly one hand. It handles:
- Blind posting and hole card dealing
- Player actions (fold, check, call, raise, all-in) with validation
- Turn order, betting round completion and street advancement
- Board run-out when no further betting is possible
- Winner determination and pot distribution

Every operation is synchronous and either fully applies or fully rejects.
The engine does no locking: callers must submit one action at a time per
engine.
"""

from __future__ import annotations
import logging
import random
from functools import cmp_to_key
from typing import List, Dict, Optional, Any, Sequence
from dataclasses import dataclass, field

from pokerroom.core.card import Card, Deck
from pokerroom.core.errors import (
    ValidationError, StateError, RuleViolation,
    HandNotInProgressError, PlayerNotFoundError, NotYourTurnError,
    PlayerCannotActError, InvalidActionError, InvalidCheckError,
    MissingRaiseAmountError, InvalidAmountError, RaiseTooSmallError,
    InsufficientChipsError, NotEnoughPlayersError,
)
from pokerroom.core.hand import HandResult, evaluate, compare_hands
from pokerroom.core.player import Player
from pokerroom.core.rules import (
    GamePhase, ActionType, get_blind_positions, small_blind_for,
    MIN_PLAYERS, MAX_PLAYERS, HOLE_CARDS, FLOP_CARDS, STREET_CARDS,
    TOTAL_COMMUNITY_CARDS,
)


logger = logging.getLogger(__name__)


@dataclass
class GameState:
    """Snapshot of one hand. The deck is never part of it."""
    community_cards: List[Card]
    pot: int
    current_bet: int
    current_player_index: int
    dealer_index: int
    small_blind_index: int
    big_blind_index: int
    phase: GamePhase
    players: List[Player]
    min_raise: int
    last_raise_amount: int
    hand_number: int = 0

    @property
    def current_player(self) -> Optional[Player]:
        if self.current_player_index < 0:
            return None
        return self.players[self.current_player_index]

    def copy(self, visible_to: Optional[str] = None, reveal_all: bool = True) -> GameState:
        """
        Deep value copy.

        Args:
            visible_to: Player whose hole cards stay visible
            reveal_all: Keep every player's hole cards (ignores visible_to)
        """
        players = []
        for p in self.players:
            clone = p.copy()
            if not reveal_all and p.player_id != visible_to:
                clone.cards = []
            players.append(clone)

        return GameState(
            community_cards=list(self.community_cards),
            pot=self.pot,
            current_bet=self.current_bet,
            current_player_index=self.current_player_index,
            dealer_index=self.dealer_index,
            small_blind_index=self.small_blind_index,
            big_blind_index=self.big_blind_index,
            phase=self.phase,
            players=players,
            min_raise=self.min_raise,
            last_raise_amount=self.last_raise_amount,
            hand_number=self.hand_number,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        current = self.current_player
        return {
            "hand_number": self.hand_number,
            "phase": self.phase.value,
            "community_cards": [c.to_dict() for c in self.community_cards],
            "pot": self.pot,
            "current_bet": self.current_bet,
            "current_player_index": self.current_player_index,
            "current_player_id": current.player_id if current else None,
            "dealer_index": self.dealer_index,
            "small_blind_index": self.small_blind_index,
            "big_blind_index": self.big_blind_index,
            "players": [p.to_dict(hide_cards=False) for p in self.players],
            "min_raise": self.min_raise,
            "last_raise_amount": self.last_raise_amount,
        }


@dataclass
class ActionResult:
    """Result of a player action."""
    success: bool
    error: Optional[str]
    state: GameState
    action_type: Optional[ActionType] = None
    amount: int = 0  # Chips moved into the pot by the action


@dataclass
class WinnerResult:
    """A share of the pot awarded to one player."""
    player_id: str
    player_name: str
    hand_result: HandResult
    win_amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "hand_result": self.hand_result.to_dict(),
            "win_amount": self.win_amount,
        }


class PokerEngine:
    """
    Betting state machine for a single hand.

    Usage:
        engine = PokerEngine(players, dealer_index=0, small_blind=10, big_blind=20)
        engine.start_hand()

        while not engine.is_hand_over():
            result = engine.apply_action(player_id, "call")

        winners = engine.determine_winners()
        engine.distribute_winnings(winners)
    """

    def __init__(
        self,
        players: Sequence[Player],
        dealer_index: int,
        small_blind: Optional[int] = None,
        big_blind: int = 20,
        rng: Optional[random.Random] = None,
        hand_number: int = 0,
    ):
        """
        Seat a hand.

        Args:
            players: Seated players; those without chips sit the hand out.
                The engine works on copies.
            dealer_index: Dealer seat, taken modulo the number dealt in
            small_blind: Small blind amount (defaults to half the big blind)
            big_blind: Big blind amount
            rng: Random source for the shuffle
            hand_number: Sequence number reported in state snapshots
        """
        if big_blind <= 0:
            raise ValueError("Big blind must be positive")
        if small_blind is None:
            small_blind = small_blind_for(big_blind)
        if small_blind < 0 or small_blind > big_blind:
            raise ValueError("Small blind must be between 0 and the big blind")

        dealt_in = sorted((p for p in players if p.chips > 0), key=lambda p: p.position)
        if len(dealt_in) < MIN_PLAYERS:
            raise NotEnoughPlayersError(MIN_PLAYERS)
        if len(dealt_in) > MAX_PLAYERS:
            raise ValueError(f"At most {MAX_PLAYERS} players per hand")
        if len({p.position for p in dealt_in}) != len(dealt_in):
            raise ValueError("Seat positions must be unique")
        if len({p.player_id for p in dealt_in}) != len(dealt_in):
            raise ValueError("Player ids must be unique")

        self.small_blind = small_blind
        self.big_blind = big_blind
        self._deck = Deck(rng)
        self._settled = False

        seats = [p.copy() for p in dealt_in]
        for p in seats:
            p.reset_for_new_hand()

        dealer = dealer_index % len(seats)
        sb_index, bb_index = get_blind_positions(len(seats), dealer)

        self._state = GameState(
            community_cards=[],
            pot=0,
            current_bet=big_blind,
            current_player_index=-1,
            dealer_index=dealer,
            small_blind_index=sb_index,
            big_blind_index=bb_index,
            phase=GamePhase.WAITING,
            players=seats,
            min_raise=big_blind,
            last_raise_amount=big_blind,
            hand_number=hand_number,
        )

    # ------------------------------------------------------------------
    # Accessors

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def hand_number(self) -> int:
        return self._state.hand_number

    @property
    def pot(self) -> int:
        return self._state.pot

    def is_hand_over(self) -> bool:
        return self._state.phase is GamePhase.SHOWDOWN

    def get_state(self) -> GameState:
        """Full authoritative state. Never hand this to a client."""
        return self._state.copy()

    def get_state_for_player(self, player_id: str) -> GameState:
        """State with every other player's hole cards removed."""
        return self._state.copy(visible_to=player_id, reveal_all=False)

    # ------------------------------------------------------------------
    # Hand start

    def start_hand(self) -> GameState:
        """
        Post blinds, deal hole cards and open preflop betting.

        Raises:
            StateError: If the hand was already started
        """
        state = self._state
        if state.phase is not GamePhase.WAITING:
            raise StateError("Hand already started")

        self._deck.reset()
        state.community_cards = []
        state.pot = 0
        for player in state.players:
            player.reset_for_new_hand()

        self._post_blinds()
        self._deal_hole_cards()

        state.phase = GamePhase.PREFLOP
        state.current_bet = self.big_blind
        state.min_raise = self.big_blind
        state.last_raise_amount = self.big_blind
        state.current_player_index = self._next_active_index(state.big_blind_index)

        logger.info(
            f"Hand #{state.hand_number} started: {len(state.players)} players, "
            f"dealer={state.dealer_index} sb={state.small_blind_index} "
            f"bb={state.big_blind_index}"
        )

        # Blinds can put everyone all-in before anyone acts
        if self._is_betting_round_complete():
            self._advance_phase()

        return self.get_state()

    def _post_blinds(self) -> None:
        """Post small and big blinds, capped at each stack."""
        state = self._state
        sb_player = state.players[state.small_blind_index]
        bb_player = state.players[state.big_blind_index]

        sb_amount = self._place_bet(sb_player, self.small_blind)
        bb_amount = self._place_bet(bb_player, self.big_blind)

        logger.debug(f"Blinds posted: SB={sb_amount} BB={bb_amount}")

    def _deal_hole_cards(self) -> None:
        for player in self._state.players:
            player.cards = self._deck.deal(HOLE_CARDS)

    def _place_bet(self, player: Player, amount: int) -> int:
        actual = player.bet(amount)
        self._state.pot += actual
        return actual

    # ------------------------------------------------------------------
    # Actions

    def apply_action(
        self,
        player_id: str,
        action: Any,
        amount: Optional[int] = None,
    ) -> ActionResult:
        """
        Validate and apply one action.

        Args:
            player_id: Acting player
            action: ActionType or its wire name ("fold", "call", "all-in", ...)
            amount: For raises, the player's new total bet this round

        Returns:
            ActionResult; on rejection the state is unchanged and
            error holds a short message for the client
        """
        try:
            player = self._validate_actor(player_id)
            action_type = ActionType.parse(action)
            if action_type is None:
                raise InvalidActionError(action)
            committed = self._execute_action(player, action_type, amount)
        except (ValidationError, StateError, RuleViolation) as e:
            logger.debug(f"Rejected {action} from {player_id}: {e}")
            return ActionResult(False, str(e), self.get_state())

        logger.debug(f"{player_id} {action_type.value} {committed}")
        self._after_action(player)
        return ActionResult(True, None, self.get_state(), action_type, committed)

    def _validate_actor(self, player_id: str) -> Player:
        state = self._state
        if not state.phase.is_betting:
            raise HandNotInProgressError()

        player = self._find_player(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)

        current = state.current_player
        if current is None or current.player_id != player_id:
            raise NotYourTurnError()

        if not player.can_act:
            raise PlayerCannotActError()

        return player

    def _execute_action(self, player: Player, action_type: ActionType, amount: Optional[int]) -> int:
        """Run one action; validation precedes every mutation."""
        if action_type is ActionType.FOLD:
            player.fold()
            return 0

        if action_type is ActionType.CHECK:
            to_call = self._state.current_bet - player.current_bet
            if to_call > 0:
                raise InvalidCheckError(to_call)
            return 0

        if action_type is ActionType.CALL:
            return self._call(player)

        if action_type is ActionType.RAISE:
            return self._raise(player, amount)

        return self._all_in(player)

    def _call(self, player: Player) -> int:
        to_call = max(0, self._state.current_bet - player.current_bet)
        if to_call > player.chips:
            raise InsufficientChipsError("Not enough chips to call, go all-in instead")
        return self._place_bet(player, to_call)

    def _raise(self, player: Player, amount: Optional[int]) -> int:
        state = self._state
        if amount is None:
            raise MissingRaiseAmountError()
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(amount)

        raise_size = amount - state.current_bet
        to_commit = amount - player.current_bet

        if raise_size <= 0:
            raise RaiseTooSmallError(
                state.min_raise,
                f"Raise must be above the current bet of {state.current_bet}",
            )
        # A short raise is fine when it puts the whole stack in
        if raise_size < state.min_raise and to_commit < player.chips:
            raise RaiseTooSmallError(state.min_raise)
        if to_commit > player.chips:
            raise InsufficientChipsError()

        committed = self._place_bet(player, to_commit)
        self._register_raise(player, amount)
        state.min_raise = raise_size
        state.last_raise_amount = raise_size
        return committed

    def _all_in(self, player: Player) -> int:
        state = self._state
        total = player.current_bet + player.chips
        raise_size = total - state.current_bet

        committed = self._place_bet(player, player.chips)
        if raise_size > 0:
            self._register_raise(player, total)
            # A short all-in changes what others must call, not the raise size
            if raise_size >= state.min_raise:
                state.min_raise = raise_size
                state.last_raise_amount = raise_size
        return committed

    def _register_raise(self, raiser: Player, new_total: int) -> None:
        """Raise the table bet and reopen action for everyone else."""
        state = self._state
        state.current_bet = new_total

        for p in state.players:
            if p is not raiser and p.can_act:
                p.has_acted_this_round = False

    def _after_action(self, player: Player) -> None:
        player.has_acted_this_round = True

        if self._count_in_hand() == 1:
            self._finish_uncontested()
            return

        self._move_to_next_player()
        if self._is_betting_round_complete():
            self._advance_phase()

    # ------------------------------------------------------------------
    # Turn and round management

    def _find_player(self, player_id: str) -> Optional[Player]:
        for player in self._state.players:
            if player.player_id == player_id:
                return player
        return None

    def _index_of(self, player: Player) -> int:
        return next(i for i, p in enumerate(self._state.players) if p is player)

    def _count_in_hand(self) -> int:
        return sum(1 for p in self._state.players if not p.is_folded)

    def _next_active_index(self, after: int) -> int:
        """First seat after 'after' (wrapping, itself last) that can act, or -1."""
        players = self._state.players
        n = len(players)
        for step in range(1, n + 1):
            index = (after + step) % n
            if players[index].can_act:
                return index
        return -1

    def _move_to_next_player(self) -> None:
        state = self._state
        state.current_player_index = self._next_active_index(state.current_player_index)

    def _is_betting_round_complete(self) -> bool:
        """Every active player has acted and matched the bet (or nobody can act)."""
        active = [p for p in self._state.players if p.can_act]
        if not active:
            return True
        return all(
            p.current_bet == self._state.current_bet and p.has_acted_this_round
            for p in active
        )

    def _advance_phase(self) -> None:
        """Close the betting round and move to the next street or showdown."""
        state = self._state
        for player in state.players:
            player.reset_for_new_round()
        state.current_bet = 0

        active = sum(1 for p in state.players if p.can_act)
        all_in = sum(1 for p in state.players if p.is_in_hand and p.is_all_in)

        if (active == 0 and all_in >= 2) or (active == 1 and all_in >= 1):
            self._run_out_board()
            return

        next_phase = state.phase.next()
        if next_phase is GamePhase.SHOWDOWN:
            self._enter_showdown()
            return

        state.current_player_index = self._next_active_index(state.dealer_index)
        state.community_cards.extend(self._deck.deal(STREET_CARDS[next_phase]))
        state.phase = next_phase

        logger.debug(
            f"{next_phase.value}: {' '.join(str(c) for c in state.community_cards)}"
        )

    def _run_out_board(self) -> None:
        """Deal every remaining community card at once and go to showdown."""
        cards = self._state.community_cards
        while len(cards) < TOTAL_COMMUNITY_CARDS:
            cards.extend(self._deck.deal(FLOP_CARDS if not cards else 1))

        logger.debug(f"Board run out: {' '.join(str(c) for c in cards)}")
        self._enter_showdown()

    def _finish_uncontested(self) -> None:
        winner = next(p for p in self._state.players if not p.is_folded)
        logger.info(f"Hand #{self._state.hand_number}: {winner.player_id} wins uncontested")
        self._enter_showdown()

    def _enter_showdown(self) -> None:
        self._state.phase = GamePhase.SHOWDOWN
        self._state.current_player_index = -1

    def forfeit(self, player_id: str) -> bool:
        """
        Fold a player out of turn, e.g. after they left the table.

        Returns:
            True if the player was folded
        """
        state = self._state
        player = self._find_player(player_id)
        if player is None or player.is_folded or not state.phase.is_betting:
            return False

        was_their_turn = state.current_player is player
        player.fold()
        logger.info(f"{player_id} forfeits hand #{state.hand_number}")

        if self._count_in_hand() == 1:
            self._finish_uncontested()
            return True

        if was_their_turn:
            self._move_to_next_player()
        if self._is_betting_round_complete():
            self._advance_phase()
        return True

    # ------------------------------------------------------------------
    # Legal actions

    def legal_actions(self, player_id: str) -> List[Dict[str, Any]]:
        """
        Legal actions for a player; empty unless it is their turn.

        Raise bounds are totals for the round, as accepted by apply_action.
        """
        state = self._state
        player = self._find_player(player_id)
        if player is None or not state.phase.is_betting or state.current_player is not player:
            return []

        to_call = max(0, state.current_bet - player.current_bet)
        max_total = player.current_bet + player.chips

        actions: List[Dict[str, Any]] = [{"type": ActionType.FOLD.value}]
        if to_call == 0:
            actions.append({"type": ActionType.CHECK.value})
        elif to_call <= player.chips:
            actions.append({"type": ActionType.CALL.value, "amount": to_call})

        if max_total > state.current_bet:
            min_total = state.current_bet + state.min_raise
            actions.append({
                "type": ActionType.RAISE.value,
                "min": min(min_total, max_total),
                "max": max_total,
            })

        if player.chips > 0:
            actions.append({"type": ActionType.ALL_IN.value, "amount": max_total})

        return actions

    # ------------------------------------------------------------------
    # Showdown

    def determine_winners(self) -> List[WinnerResult]:
        """
        Rank the remaining hands and split the pot among the best.

        Odd chips go one at a time to the tied winners nearest the
        dealer's left, which is also the order of the returned list.

        Raises:
            StateError: If the hand has not reached showdown
        """
        state = self._state
        if state.phase is not GamePhase.SHOWDOWN:
            raise StateError("Hand has not reached showdown")

        contenders = [p for p in state.players if not p.is_folded]
        if len(contenders) == 1:
            winner = contenders[0]
            return [WinnerResult(
                player_id=winner.player_id,
                player_name=winner.name,
                hand_result=HandResult.winner_by_fold(),
                win_amount=state.pot,
            )]

        ranked = [(p, evaluate(p.cards, state.community_cards)) for p in contenders]
        ranked.sort(key=cmp_to_key(lambda a, b: compare_hands(a[1], b[1])), reverse=True)

        best = ranked[0][1]
        tied = [(p, hand) for p, hand in ranked if compare_hands(hand, best) == 0]
        tied.sort(key=lambda ph: self._seats_left_of_dealer(ph[0]))

        share, remainder = divmod(state.pot, len(tied))
        winners = []
        for i, (player, hand) in enumerate(tied):
            winners.append(WinnerResult(
                player_id=player.player_id,
                player_name=player.name,
                hand_result=hand,
                win_amount=share + (1 if i < remainder else 0),
            ))

        logger.info(
            f"Hand #{state.hand_number} showdown: "
            + ", ".join(f"{w.player_id} wins {w.win_amount} with {w.hand_result.description}"
                        for w in winners)
        )
        return winners

    def _seats_left_of_dealer(self, player: Player) -> int:
        n = len(self._state.players)
        return (self._index_of(player) - self._state.dealer_index - 1) % n

    def distribute_winnings(self, winners: Sequence[WinnerResult]) -> None:
        """
        Credit winners and empty the pot. Call exactly once per hand.

        Raises:
            StateError: Before showdown, or if winnings were already paid
            PlayerNotFoundError: If a winner is not in this hand
        """
        state = self._state
        if state.phase is not GamePhase.SHOWDOWN:
            raise StateError("Hand has not reached showdown")
        if self._settled:
            raise StateError("Winnings already distributed")

        credits = []
        for winner in winners:
            player = self._find_player(winner.player_id)
            if player is None:
                raise PlayerNotFoundError(winner.player_id)
            credits.append((player, winner.win_amount))

        if sum(amount for _, amount in credits) > state.pot:
            raise ValueError("Winnings exceed the pot")

        for player, amount in credits:
            player.chips += amount
        state.pot = 0
        self._settled = True

    def reveal_hands(self) -> List[Dict[str, Any]]:
        """
        Hole cards and best hand of every player left at showdown.

        Empty when the hand ended without a showdown.
        """
        state = self._state
        if state.phase is not GamePhase.SHOWDOWN:
            return []
        if len(state.community_cards) < TOTAL_COMMUNITY_CARDS or self._count_in_hand() < 2:
            return []

        return [
            {
                "player_id": p.player_id,
                "cards": [c.to_dict() for c in p.cards],
                "hand": evaluate(p.cards, state.community_cards).to_dict(),
            }
            for p in state.players if not p.is_folded
        ]
