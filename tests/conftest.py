"""
Pytest configuration and shared fixtures for the dagscope test suite.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def _structure(nodes, edges):
    """Build a plain structure dict from (id, data) pairs and (from, to) pairs."""
    return {
        "nodes": [{"id": nid, "data": data} for nid, data in nodes],
        "edges": [{"from": src, "to": dst} for src, dst in edges],
    }


# Sample graphs shared by the unit and integration suites
GALLERY = {
    "diamond_tail": _structure(
        [("a", "Task A"), ("b", "Task B"), ("c", "Task C"), ("d", "Task D"), ("e", "Task E")],
        [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("d", "e")],
    ),
    "path_3": _structure(
        [("x", "X"), ("y", "Y"), ("z", "Z")],
        [("x", "y"), ("y", "z")],
    ),
    "path_abd": _structure(
        [("p", "Task A"), ("q", "Task B"), ("r", "Task D")],
        [("p", "q"), ("q", "r")],
    ),
    "diamond_bcd": _structure(
        [("x", "Task B"), ("y", "Task C"), ("z", "Task D")],
        [("x", "z"), ("y", "z")],
    ),
    "fork": _structure(
        [("r", "Task A"), ("s", "Task B"), ("t", "Task C")],
        [("r", "s"), ("r", "t")],
    ),
    "chain_4": _structure(
        [("n1", "N1"), ("n2", "N2"), ("n3", "N3"), ("n4", "N4")],
        [("n1", "n2"), ("n2", "n3"), ("n3", "n4")],
    ),
    "edge_2": _structure([("u", "U"), ("v", "V")], [("u", "v")]),
    "single": _structure([("solo", "Solo")], []),
    "empty": _structure([], []),
    "deep_7": _structure(
        [(str(i), str(i)) for i in range(1, 8)],
        [("1", "2"), ("1", "3"), ("2", "4"), ("3", "5"), ("4", "6"), ("5", "6"), ("6", "7")],
    ),
    "cycle_xyz": _structure(
        [("x", None), ("y", None), ("z", None)],
        [("x", "y"), ("y", "z"), ("z", "x")],
    ),
}


@pytest.fixture(autouse=True)
def reset_global_config():
    """Restore default configuration and logging state around each test."""
    from daginfra.config import reset_config

    reset_config()
    yield
    reset_config()
    _detach_logging()


def _detach_logging():
    """Undo configure_logging(): drop the dagscope handler, reset levels."""
    import logging
    from daginfra.log_setup import LOGGER_NAMES

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if handler.get_name() == "dagscope":
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def fresh_store():
    """Provide an empty GraphStore."""
    from dagcore.graph_store import GraphStore
    return GraphStore()


@pytest.fixture
def gallery():
    """Provide the sample graph gallery (fresh copies of plain dicts)."""
    import copy
    return copy.deepcopy(GALLERY)


@pytest.fixture
def diamond():
    """The 4-node diamond a -> b, a -> c, b -> d, c -> d (no payloads)."""
    return _structure(
        [("a", None), ("b", None), ("c", None), ("d", None)],
        [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")],
    )
