"""Enumerations for domain models."""

from enum import Enum


class TransactionType(str, Enum):
    """Types of portfolio transactions returned by the suggestions backend."""

    MONTHLY_CONTRIBUTION = "MONTHLY_CONTRIBUTION"
    CASH_CREDIT = "CASH_CREDIT"
    CASH_DEBIT = "CASH_DEBIT"
    BUY = "BUY"
    SELL_WITHDRAWAL = "SELL_WITHDRAWAL"
    DIVIDEND = "DIVIDEND"
    SELL_REBALANCE = "SELL_REBALANCE"
    BUY_REBALANCE = "BUY_REBALANCE"


REBALANCING_TYPES = frozenset({TransactionType.SELL_REBALANCE, TransactionType.BUY_REBALANCE})


class TransactionStatus(str, Enum):
    """Lifecycle status of a portfolio transaction."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    EXECUTED = "EXECUTED"


class UIStateKind(str, Enum):
    """States the presentation shell can render."""

    NOT_STARTED = "NOT_STARTED"
    UP_TO_DATE = "UP_TO_DATE"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    GENERATING = "GENERATING"


class LifecyclePhase(str, Enum):
    """Phases of the per-portfolio lifecycle state machine."""

    IDLE = "IDLE"
    FETCHING = "FETCHING"
    GENERATING = "GENERATING"
    COOLDOWN = "COOLDOWN"


class EventType(str, Enum):
    """Events published on the suggestion event bus."""

    STATUS_LOADED = "STATUS_LOADED"
    PENDING_LOADED = "PENDING_LOADED"
    STATE_CHANGED = "STATE_CHANGED"
    GENERATION_STARTED = "GENERATION_STARTED"
    GENERATION_FINISHED = "GENERATION_FINISHED"
    GENERATION_FAILED = "GENERATION_FAILED"
    GENERATION_SUPPRESSED = "GENERATION_SUPPRESSED"
    PENDING_BUY_MISMATCH = "PENDING_BUY_MISMATCH"
    TRANSACTIONS_UPDATED = "TRANSACTIONS_UPDATED"
    CACHE_INVALIDATED = "CACHE_INVALIDATED"
