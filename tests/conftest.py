import esper
import pytest

from skyace.ecs_components import Health, PlayerShip, Position
from skyace.simulation import Simulation


@pytest.fixture
def sim():
    """A fresh simulation in the menu, bound to its own esper world."""
    s = Simulation(seed=1234)
    yield s
    s.close()


@pytest.fixture
def playing(sim):
    """A simulation with wave 1 started and the player at the origin."""
    sim.start_game()
    return sim


@pytest.fixture
def player_parts(playing):
    """(position, ship, health) of the player in ``playing``."""
    pid = playing.player
    return (
        esper.component_for_entity(pid, Position),
        esper.component_for_entity(pid, PlayerShip),
        esper.component_for_entity(pid, Health),
    )
