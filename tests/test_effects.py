"""Tests for effects and the effect ledger."""

import math

import pytest

from skirmish.engine import CombatLogger, Effect, EffectKind, EffectLedger, LogEventType, SpellComponent


class Counter:
    """Callable recording how often (and with what) it was called."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    @property
    def count(self):
        return len(self.calls)


class TestEffect:
    """Tests for the Effect definition."""

    def test_duration_must_be_positive(self):
        """Test zero and negative durations are rejected."""
        with pytest.raises(ValueError):
            Effect(kind=EffectKind.BURNING, duration=0)
        with pytest.raises(ValueError):
            Effect(kind=EffectKind.BURNING, duration=-2)

    def test_rate(self):
        """Test rate is magnitude per round."""
        effect = Effect(kind=EffectKind.BURNING, duration=3, magnitude=9)
        assert effect.rate == 3

    def test_rate_without_magnitude(self):
        """Test effects without magnitude have no rate."""
        assert Effect(kind=EffectKind.BLOCKING, duration=1).rate is None

    def test_permanent(self):
        """Test infinite durations are permanent."""
        assert Effect(kind=EffectKind.BURNING, duration=math.inf).is_permanent
        assert not Effect(kind=EffectKind.BURNING, duration=2).is_permanent

    def test_interrupts(self):
        """Test an effect interrupts another when it blocks a required component."""
        casting = Effect(kind=EffectKind.CASTING, duration=2, components=frozenset({SpellComponent.VERBAL}))
        gag = Effect(kind=EffectKind.STAGGERED, duration=1, blocks_verbal=True)
        shove = Effect(kind=EffectKind.STAGGERED, duration=1, blocks_somatic=True)

        assert gag.interrupts(casting)
        assert not shove.interrupts(casting)
        assert not gag.interrupts(shove)


class TestEffectLedgerApply:
    """Tests for applying and merging effects."""

    def test_new_record_ticks(self, ledger):
        """Test a new record starts at duration x participant count."""
        record = ledger.apply(Effect(kind=EffectKind.BURNING, duration=2), "b")

        assert record.remaining_ticks == 4
        assert record.target_id == "b"
        assert ledger.active == (record,)

    def test_same_kind_same_target_merges(self, ledger):
        """Test two applications of a kind on a target yield one record."""
        ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=1), "a")
        ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=2), "a")

        records = ledger.for_target("a")
        assert len(records) == 1
        assert records[0].remaining_ticks == 6  # 2 + 4, ticks accumulate

    def test_same_kind_different_targets(self, ledger):
        """Test the same kind on different targets keeps separate records."""
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=1), "a")
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=1), "b")

        assert len(ledger.active) == 2

    def test_stronger_effect_takes_over(self, ledger):
        """Test a higher rate replaces magnitude, duration and tick callback."""
        weak_tick, strong_tick = Counter(), Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=3, magnitude=6, on_tick=weak_tick), "b")
        record = ledger.apply(Effect(kind=EffectKind.BURNING, duration=2, magnitude=10, on_tick=strong_tick), "b")

        assert record.effect.magnitude == 10
        assert record.effect.duration == 2
        assert record.effect.on_tick is strong_tick
        assert record.remaining_ticks == 10  # 6 + 4

    def test_weaker_effect_only_extends(self, ledger):
        """Test a lower rate keeps the existing behaviour but adds ticks."""
        strong_tick, weak_tick = Counter(), Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=2, magnitude=10, on_tick=strong_tick), "b")
        record = ledger.apply(Effect(kind=EffectKind.BURNING, duration=2, magnitude=2, on_tick=weak_tick), "b")

        assert record.effect.magnitude == 10
        assert record.effect.on_tick is strong_tick
        assert record.remaining_ticks == 8

    def test_equal_rate_does_not_replace(self, ledger):
        """Test only a strictly greater rate replaces."""
        first, second = Counter(), Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=2, magnitude=4, on_tick=first), "b")
        record = ledger.apply(Effect(kind=EffectKind.BURNING, duration=1, magnitude=2, on_tick=second), "b")

        assert record.effect.on_tick is first
        assert record.remaining_ticks == 6

    def test_finite_takeover_of_permanent_record_keeps_ticking(self, ledger, turn_state, lookup):
        """Test a permanent record taken over by a stronger finite effect still fires every tick."""
        aura, burn = Counter(), Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=math.inf, magnitude=5, on_tick=aura), "b")
        record = ledger.apply(Effect(kind=EffectKind.BURNING, duration=1, magnitude=4, on_tick=burn), "b")

        assert record.effect.on_tick is burn
        assert record.is_permanent

        for _ in range(6):
            ledger.tick_all(turn_state, lookup)

        assert aura.count == 0
        assert burn.count == 6
        assert ledger.active == (record,)

    def test_unknown_target_rejected(self, ledger):
        """Test applying to someone outside the encounter fails."""
        with pytest.raises(ValueError):
            ledger.apply(Effect(kind=EffectKind.BURNING, duration=1), "nobody")

    def test_ledger_needs_participants(self):
        """Test an empty ledger can't be created."""
        with pytest.raises(ValueError):
            EffectLedger([])


class TestInterruption:
    """Tests for effects interrupting casting."""

    def casting(self):
        return Effect(
            kind=EffectKind.CASTING,
            duration=3,
            components=frozenset({SpellComponent.SOMATIC, SpellComponent.VERBAL}),
        )

    def test_blocking_component_interrupts(self, ledger):
        """Test a stagger that blocks somatic components ends casting."""
        ledger.apply(self.casting(), "a")
        ledger.apply(Effect(kind=EffectKind.STAGGERED, duration=1, blocks_somatic=True), "a")

        assert ledger.get(EffectKind.CASTING, "a") is None
        assert ledger.get(EffectKind.STAGGERED, "a") is not None

    def test_other_target_not_interrupted(self, ledger):
        """Test interruption only affects the target of the incoming effect."""
        ledger.apply(self.casting(), "a")
        ledger.apply(Effect(kind=EffectKind.STAGGERED, duration=1, blocks_verbal=True), "b")

        assert ledger.get(EffectKind.CASTING, "a") is not None

    def test_non_blocking_effect_keeps_casting(self, ledger):
        """Test effects that block nothing leave casting alone."""
        ledger.apply(self.casting(), "a")
        ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=1), "a")

        assert ledger.get(EffectKind.CASTING, "a") is not None

    def test_interruption_logged(self, duo):
        """Test interruptions show up in the combat log."""
        logger = CombatLogger()
        ledger = EffectLedger([c.id for c in duo], logger=logger)
        ledger.apply(self.casting(), "a")
        ledger.apply(Effect(kind=EffectKind.STAGGERED, duration=1, blocks_verbal=True), "a")

        entries = logger.get_log().get_entries_by_type(LogEventType.EFFECT_INTERRUPTED)
        assert len(entries) == 1
        assert entries[0].effect_kind == "casting"
        assert entries[0].reason == "staggered"


class TestRemove:
    """Tests for removing effects."""

    def test_remove_existing(self, ledger):
        """Test removing returns and deletes the record."""
        record = ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=1), "a")

        assert ledger.remove(EffectKind.BLOCKING, "a") is record
        assert ledger.active == ()

    def test_remove_missing_is_noop(self, ledger):
        """Test removing something absent does nothing."""
        ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=1), "a")

        assert ledger.remove(EffectKind.BURNING, "a") is None
        assert ledger.remove(EffectKind.BLOCKING, "b") is None
        assert len(ledger.active) == 1


class TestTickAll:
    """Tests for ticking the ledger."""

    def test_dot_fires_at_round_boundaries(self, ledger, turn_state, lookup):
        """Test a 2-round effect in a 2-participant encounter fires twice over 4 ticks."""
        burn = Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=2, magnitude=4, on_tick=burn), "b")

        for _ in range(3):
            ledger.tick_all(turn_state, lookup)
        assert burn.count == 2
        assert ledger.get(EffectKind.BURNING, "b").remaining_ticks == 1

        ledger.tick_all(turn_state, lookup)
        assert burn.count == 2
        assert ledger.active == ()

    def test_tick_callback_receives_target(self, ledger, turn_state, lookup, duo):
        """Test on_tick gets the effect's target and the current turn state."""
        burn = Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=1, on_tick=burn), "b")

        ledger.tick_all(turn_state, lookup)

        target, state = burn.calls[0]
        assert target is duo[1]
        assert state is turn_state

    def test_ticks_decrease_by_one(self, ledger, turn_state, lookup):
        """Test every tick removes exactly one from the countdown."""
        record = ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=3), "a")
        seen = []
        while ledger.active:
            seen.append(record.remaining_ticks)
            ledger.tick_all(turn_state, lookup)

        assert seen == [6, 5, 4, 3, 2, 1]

    def test_every_tick_effect(self, ledger, turn_state, lookup):
        """Test every_tick effects fire on each tick."""
        regen = Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=2, on_tick=regen, every_tick=True), "a")

        for _ in range(4):
            ledger.tick_all(turn_state, lookup)

        assert regen.count == 4
        assert ledger.active == ()

    def test_permanent_effect(self, ledger, turn_state, lookup):
        """Test permanent effects fire every tick and never expire."""
        aura = Counter()
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=math.inf, on_tick=aura), "a")

        for _ in range(5):
            ledger.tick_all(turn_state, lookup)

        assert aura.count == 5
        assert ledger.get(EffectKind.BURNING, "a") is not None

    def test_on_expire_gets_target_as_agent(self, ledger, turn_state, lookup, duo):
        """Test on_expire sees the effect's target as the turn's agent."""
        release = Counter()
        ledger.apply(Effect(kind=EffectKind.CASTING, duration=1, on_expire=release), "b")

        ledger.tick_all(turn_state, lookup)
        assert release.count == 0

        ledger.tick_all(turn_state, lookup)
        assert release.count == 1
        (state,) = release.calls[0]
        assert state.agent is duo[1]
        assert state.enemies == turn_state.enemies

    def test_reapply_in_on_expire_starts_fresh(self, ledger, turn_state, lookup):
        """Test an effect re-applied when it expires gets a new full record."""

        def renew(state):
            state.apply_effect(Effect(kind=EffectKind.BLOCKING, duration=1), state.agent.id)

        ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=1, on_expire=renew), "a")
        ledger.tick_all(turn_state, lookup)
        ledger.tick_all(turn_state, lookup)

        record = ledger.get(EffectKind.BLOCKING, "a")
        assert record is not None
        assert record.remaining_ticks == 2

    def test_record_removed_mid_tick_is_skipped(self, ledger, turn_state, lookup):
        """Test a record removed by another effect's callback doesn't tick."""
        burn = Counter()

        def douse(target, state):
            state.remove_effect(EffectKind.BURNING, "b")

        ledger.apply(Effect(kind=EffectKind.STAGGERED, duration=1, on_tick=douse), "a")
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=1, on_tick=burn), "b")

        ledger.tick_all(turn_state, lookup)

        assert burn.count == 0
        assert ledger.get(EffectKind.BURNING, "b") is None


class TestQueries:
    """Tests for ledger queries."""

    def test_for_target(self, ledger):
        """Test filtering records by target."""
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=1), "a")
        ledger.apply(Effect(kind=EffectKind.BLOCKING, duration=1), "a")
        ledger.apply(Effect(kind=EffectKind.BURNING, duration=1), "b")

        assert {r.kind for r in ledger.for_target("a")} == {EffectKind.BURNING, EffectKind.BLOCKING}
        assert len(ledger.for_target("b")) == 1

    def test_blocks_action(self, ledger):
        """Test action blocking is per target."""
        ledger.apply(Effect(kind=EffectKind.STAGGERED, duration=1, blocks_action=True), "b")

        assert ledger.blocks_action("b")
        assert not ledger.blocks_action("a")

    def test_remaining_rounds(self, ledger):
        """Test remaining ticks convert back to whole rounds."""
        record = ledger.apply(Effect(kind=EffectKind.BURNING, duration=2), "a")
        record.remaining_ticks = 3

        assert record.remaining_rounds(ledger.participant_count) == 2
