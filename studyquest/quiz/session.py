"""
Flashcard quiz session

One QuizSession drives one traversal of one deck for one user:

    IDLE -> LOADING -> READY -> (select / reveal / advance per card)
         -> COMPLETING -> COMPLETED

Store calls (deck load, result submit) are awaited; their effects are only
applied if no newer load or submit was started in the meantime. Each card
has one status for the traversal, and the card on screen has one visit
state that is reset on every index change.
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional
from uuid import uuid4

from studyquest.exceptions import (
    AccessDeniedError,
    InvalidSessionStateError,
    LoadFailedError,
    PersistenceError,
    RecordNotFoundError,
    StudyQuestError,
    ValidationError,
)
from studyquest.models import (
    CardItem,
    CardStatus,
    CardVisit,
    Revealed,
    Selected,
    SessionState,
    StudyDeck,
    StudySessionResult,
    Unanswered,
    XP_PER_CORRECT_ANSWER,
)
from studyquest.quiz.choices import generate_choices, is_correct_answer

logger = logging.getLogger(__name__)

# States in which a deck is loaded
_DECK_STATES = (SessionState.READY, SessionState.COMPLETING, SessionState.COMPLETED)
# States in which answers may be recorded
_ANSWER_STATES = (SessionState.READY, SessionState.COMPLETED)


def _describe(error: Exception) -> str:
    return error.message if isinstance(error, StudyQuestError) else str(error)


class QuizSession:
    """Quiz state machine for one deck and one user"""

    def __init__(self, store, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng
        self.state = SessionState.IDLE
        self.user_id: Optional[str] = None
        self.deck: Optional[StudyDeck] = None
        self.cards: List[CardItem] = []
        self.index = 0
        self.statuses: Dict[str, CardStatus] = {}
        self.visit: CardVisit = Unanswered()
        self.choices: List[str] = []
        self.session_id: Optional[str] = None
        self.submitted = False
        self.last_result: Optional[StudySessionResult] = None
        self._request_token = 0

    # ==========================================
    # Read-only views
    # ==========================================

    @property
    def current_card(self) -> Optional[CardItem]:
        if self.state not in _DECK_STATES or not self.cards:
            return None
        return self.cards[self.index]

    @property
    def answered_count(self) -> int:
        return sum(1 for status in self.statuses.values() if status.is_answered)

    @property
    def correct_count(self) -> int:
        return sum(1 for status in self.statuses.values() if status is CardStatus.CORRECT_ANSWER)

    @property
    def session_xp(self) -> int:
        return self.correct_count * XP_PER_CORRECT_ANSWER

    @property
    def is_complete(self) -> bool:
        return bool(self.cards) and self.answered_count == len(self.cards)

    @property
    def progress(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "total": len(self.cards),
            "answered": self.answered_count,
            "correct": self.correct_count,
            "session_xp": self.session_xp,
        }

    # ==========================================
    # Loading
    # ==========================================

    async def load(self, deck_id: str, user_id: str) -> bool:
        """
        Load a deck and start a fresh traversal at card 0

        Returns False when a newer load or submit superseded this one; the
        result is then discarded.

        Raises:
            AccessDeniedError: deck is not owned by, public to, or shared with the user
            RecordNotFoundError: deck does not exist
            LoadFailedError: the store failed while reading
        """
        token = self._next_token()
        snapshot = self._snapshot()
        self.state = SessionState.LOADING
        logger.debug(f"Loading deck {deck_id} for user {user_id} (request {token})")

        try:
            deck = await self.store.get_deck(deck_id)
            if deck is None:
                raise RecordNotFoundError(
                    message=f"Deck {deck_id} not found",
                    record_type="Deck",
                    record_id=deck_id,
                    user_id=user_id,
                )

            shared = False
            if not deck.is_accessible_by(user_id):
                shared = await self.store.check_shared_access(deck_id, user_id)

            if self._is_stale(token):
                return False

            if not deck.is_accessible_by(user_id, shared):
                raise AccessDeniedError(deck_id=deck_id, user_id=user_id, operation="load")

            cards = await self.store.list_card_items(deck_id)
        except (RecordNotFoundError, AccessDeniedError):
            if self._is_stale(token):
                return False
            self._restore(snapshot)
            raise
        except asyncio.CancelledError:
            if not self._is_stale(token):
                self._restore(snapshot)
            raise
        except Exception as e:
            if self._is_stale(token):
                return False
            self._restore(snapshot)
            raise LoadFailedError(
                message=f"Failed to load deck {deck_id}: {_describe(e)}",
                deck_id=deck_id,
                user_id=user_id,
                operation="load",
                cause=e,
            ) from e

        if self._is_stale(token):
            logger.debug(f"Discarding stale load of deck {deck_id} (request {token})")
            return False

        self.user_id = user_id
        self.deck = deck
        self.cards = sorted(cards, key=lambda c: c.order_index)
        self._start_traversal()
        logger.info(f"User {user_id} started deck {deck_id} with {len(self.cards)} cards")
        return True

    # ==========================================
    # Answering
    # ==========================================

    def select_answer(self, card_id: str, option: str) -> CardStatus:
        """
        Record the user's choice for a card

        Only the first selection of a traversal counts; later calls for an
        answered or revealed card leave it unchanged.
        """
        self._require_state("select_answer", _ANSWER_STATES)
        card = self._card(card_id)

        status = self.statuses[card.id]
        if status.is_answered:
            logger.debug(f"Ignoring selection for card {card.id}: already {status.value}")
            return status

        correct = is_correct_answer(option, card.back)
        status = CardStatus.CORRECT_ANSWER if correct else CardStatus.WRONG_ANSWER
        self.statuses[card.id] = status

        if self._is_current(card):
            self.visit = Selected(option=option, correct=correct)
        return status

    def reveal(self, card_id: str) -> str:
        """
        Show the stored answer

        A card revealed without a selection counts as answered, not
        correct, and earns no XP.
        """
        self._require_state("reveal", _ANSWER_STATES)
        card = self._card(card_id)

        if not self.statuses[card.id].is_answered:
            self.statuses[card.id] = CardStatus.REVEALED_NO_ANSWER

        if self._is_current(card):
            option = self.visit.option if isinstance(self.visit, (Selected, Revealed)) else None
            self.visit = Revealed(answer=card.back, option=option)
        return card.back

    # ==========================================
    # Navigation
    # ==========================================

    def advance(self) -> int:
        return self._move_to(self.index + 1)

    def retreat(self) -> int:
        return self._move_to(self.index - 1)

    def reset_session(self) -> None:
        """Start over at card 0 with no answers; the deck stays loaded"""
        self._require_state("reset_session", _ANSWER_STATES)
        self._start_traversal()
        logger.debug(f"Session reset for deck {self.deck.id}")

    # ==========================================
    # Completion
    # ==========================================

    async def complete_if_done(self) -> Optional[StudySessionResult]:
        """
        Submit the traversal result once every card is answered

        Returns the submitted result, or None when nothing was submitted
        (not done yet, already submitted, submit in flight, or superseded).

        Raises:
            PersistenceError: the store rejected the submit. Session state
                is kept so the call can be retried with the same session id.
        """
        if self.state is not SessionState.READY or self.submitted or not self.is_complete:
            return None

        result = StudySessionResult(
            session_id=self.session_id,
            user_id=self.user_id,
            deck_id=self.deck.id,
            questions_answered=self.answered_count,
            correct_answers=self.correct_count,
            xp_earned=self.correct_count * XP_PER_CORRECT_ANSWER,
        )

        token = self._next_token()
        self.state = SessionState.COMPLETING
        try:
            inserted = await self.store.insert_session_result(result)
        except asyncio.CancelledError:
            if not self._is_stale(token):
                self.state = SessionState.READY
            raise
        except Exception as e:
            if self._is_stale(token):
                return None
            self.state = SessionState.READY
            raise PersistenceError(
                message=f"Failed to save study session {result.session_id}: {_describe(e)}",
                user_id=self.user_id,
                operation="insert_session_result",
                context={"deck_id": self.deck.id, "session_id": result.session_id},
                cause=e,
            ) from e

        if self._is_stale(token):
            return None

        if not inserted:
            logger.info(f"Study session {result.session_id} was already stored")

        self.submitted = True
        self.last_result = result
        self.state = SessionState.COMPLETED
        logger.info(
            f"User {self.user_id} completed deck {self.deck.id}: "
            f"{result.correct_answers}/{result.questions_answered} correct, {result.xp_earned} XP"
        )
        return result

    # ==========================================
    # Internals
    # ==========================================

    def _next_token(self) -> int:
        self._request_token += 1
        return self._request_token

    def _is_stale(self, token: int) -> bool:
        return token != self._request_token

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "deck": self.deck,
            "cards": self.cards,
            "index": self.index,
            "statuses": dict(self.statuses),
            "visit": self.visit,
            "choices": self.choices,
            "session_id": self.session_id,
            "submitted": self.submitted,
            "last_result": self.last_result,
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)
        if self.deck is None:
            self.state = SessionState.IDLE
        elif self.submitted:
            self.state = SessionState.COMPLETED
        else:
            self.state = SessionState.READY

    def _start_traversal(self) -> None:
        self.index = 0
        self.statuses = {card.id: CardStatus.UNANSWERED for card in self.cards}
        self.session_id = str(uuid4())
        self.submitted = False
        self.last_result = None
        self.state = SessionState.READY
        self._enter_visit()

    def _enter_visit(self) -> None:
        self.visit = Unanswered()
        card = self.current_card
        self.choices = generate_choices(card.back, self.rng) if card else []

    def _move_to(self, index: int) -> int:
        self._require_state("navigate", _DECK_STATES)
        if not self.cards:
            return self.index
        index = max(0, min(index, len(self.cards) - 1))
        if index != self.index:
            self.index = index
            self._enter_visit()
        return self.index

    def _require_state(self, operation: str, allowed) -> None:
        if self.state not in allowed:
            raise InvalidSessionStateError(operation=operation, state=self.state.value, user_id=self.user_id)

    def _card(self, card_id: str) -> CardItem:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise ValidationError(
            message=f"Card {card_id} is not part of deck {self.deck.id}",
            field="card_id",
            value=card_id,
            user_id=self.user_id,
        )

    def _is_current(self, card: CardItem) -> bool:
        current = self.current_card
        return current is not None and current.id == card.id
