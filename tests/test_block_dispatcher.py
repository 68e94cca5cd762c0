"""Tests for the cooldown-gated BlockDispatcher."""
import random

import pytest

from block_dispatcher import BlockDispatcher, DispatchOutcome
from config import BlockAction, Config


@pytest.fixture
def dispatcher(clock, performed):
    return BlockDispatcher(performed.append, clock=clock)


class TestCooldown:
    def test_first_attempt_performs(self, dispatcher, performed):
        assert dispatcher.attempt() == DispatchOutcome.PERFORMED
        assert performed == [BlockAction.BACK]

    def test_burst_collapses_to_one(self, dispatcher, clock, performed):
        """Three attempts within 400ms: one performed, two suppressed."""
        outcomes = [dispatcher.attempt(BlockAction.BACK)]
        clock.advance(200)
        outcomes.append(dispatcher.attempt(BlockAction.BACK))
        clock.advance(200)
        outcomes.append(dispatcher.attempt(BlockAction.BACK))

        assert outcomes.count(DispatchOutcome.PERFORMED) == 1
        assert outcomes.count(DispatchOutcome.SUPPRESSED) == 2
        assert performed == [BlockAction.BACK]
        assert dispatcher.suppressed_count == 2

    def test_performs_again_at_cooldown(self, dispatcher, clock, performed):
        dispatcher.attempt()
        clock.advance(Config.COOLDOWN_MS - 1)
        assert dispatcher.attempt() == DispatchOutcome.SUPPRESSED
        clock.advance(1)
        assert dispatcher.attempt() == DispatchOutcome.PERFORMED
        assert len(performed) == 2

    def test_suppressed_attempt_does_not_extend_cooldown(self, dispatcher, clock):
        dispatcher.attempt()
        clock.advance(900)
        dispatcher.attempt()
        clock.advance(100)
        assert dispatcher.attempt() == DispatchOutcome.PERFORMED

    def test_random_sequence_respects_cooldown(self, clock):
        """No two performed actions are ever closer than the cooldown."""
        times = []
        dispatcher = BlockDispatcher(lambda action: times.append(clock.now), clock=clock)
        rng = random.Random(7)
        for _ in range(500):
            clock.advance(rng.randint(0, 600))
            dispatcher.attempt()

        assert len(times) > 1
        gaps = [b - a for a, b in zip(times, times[1:])]
        assert min(gaps) >= Config.COOLDOWN_MS


class TestConfiguredAction:
    def test_uses_action_provider(self, clock, performed):
        dispatcher = BlockDispatcher(performed.append, action_provider=lambda: BlockAction.HOME, clock=clock)
        dispatcher.attempt()
        assert performed == [BlockAction.HOME]

    def test_provider_read_on_each_attempt(self, clock, performed):
        current = [BlockAction.RECENTS]
        dispatcher = BlockDispatcher(performed.append, action_provider=lambda: current[0], clock=clock)
        dispatcher.attempt()
        current[0] = BlockAction.BACK
        clock.advance(Config.COOLDOWN_MS)
        dispatcher.attempt()
        assert performed == [BlockAction.RECENTS, BlockAction.BACK]

    def test_explicit_action_wins(self, clock, performed):
        dispatcher = BlockDispatcher(performed.append, action_provider=lambda: BlockAction.HOME, clock=clock)
        dispatcher.attempt(BlockAction.BACK)
        assert performed == [BlockAction.BACK]
