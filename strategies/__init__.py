"""Bot strategies for National Economy."""

from strategies.base import SelectionStrategy, Strategy
from strategies.driver import BotDriver, Difficulty, create_strategy, decide_move
from strategies.heuristic import HeuristicStrategy
from strategies.lookahead import LookaheadStrategy
from strategies.random_strategy import RandomStrategy

__all__ = [
    "Strategy",
    "SelectionStrategy",
    "RandomStrategy",
    "HeuristicStrategy",
    "LookaheadStrategy",
    "Difficulty",
    "BotDriver",
    "create_strategy",
    "decide_move",
]
