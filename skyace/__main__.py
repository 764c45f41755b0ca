from .game import run_game

run_game()
