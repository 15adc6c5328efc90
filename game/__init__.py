"""Matcha Mother game package.

Public API:
    from game import RoundController, RoundMode, OrderSignal, Customer
"""
from game.entities import Customer, Mood, Rect
from game.order_session import OrderSignal, OrderState
from game.round_controller import RoundController
from game.state import RoundMode, RoundSnapshot

__all__ = [
    "Customer",
    "Mood",
    "OrderSignal",
    "OrderState",
    "Rect",
    "RoundController",
    "RoundMode",
    "RoundSnapshot",
]
