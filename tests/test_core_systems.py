from __future__ import annotations

import math

import pytest

import factory
from components import PositionComponent, WantsToMoveComponent
from core_systems import (
    CameraSystem,
    InputSystem,
    MovementSystem,
    PerFrameHeldKeys,
    TimeoutHeldKeys,
    compute_displacement,
    viewport_origin,
)


def test_walk_right_for_one_second() -> None:
    assert compute_displacement(False, False, False, True, False, 1.0, 1.5, 3.5) == (1.5, 0.0)


def test_run_uses_run_speed() -> None:
    assert compute_displacement(True, False, False, False, True, 0.5, 1.5, 3.5) == (0.0, -1.75)


def test_diagonal_is_not_normalized() -> None:
    dx, dy = compute_displacement(False, True, True, False, False, 2.0, 1.5, 3.5)
    assert (dx, dy) == (-3.0, 3.0)
    assert math.hypot(dx, dy) == pytest.approx(1.5 * 2.0 * math.sqrt(2))


def test_opposite_keys_cancel_and_zero_dt_does_not_move() -> None:
    assert compute_displacement(True, True, True, True, False, 1.0, 1.5, 3.5) == (0.0, 0.0)
    assert compute_displacement(False, False, False, True, True, 0.0, 1.5, 3.5) == (0.0, 0.0)


def test_timeout_policy_holds_then_decays() -> None:
    keys = TimeoutHeldKeys(hold_window=0.16)
    keys.press("right", False, now=0.0)
    assert keys.held(0.0) == ({"right"}, False)
    assert keys.held(0.15) == ({"right"}, False)
    keys.end_tick()
    assert keys.held(0.15) == ({"right"}, False)
    assert keys.held(0.16) == (set(), False)
    assert keys.held(1.17) == (set(), False)


def test_timeout_policy_repeat_extends_hold_and_run_decays_too() -> None:
    keys = TimeoutHeldKeys(hold_window=0.16)
    keys.press("up", True, now=0.0)
    keys.press("up", False, now=0.1)
    assert keys.held(0.2) == ({"up"}, False)
    assert keys.held(0.15) == ({"up"}, True)


def test_per_frame_policy_clears_every_tick() -> None:
    keys = PerFrameHeldKeys()
    keys.press("left", True, now=0.0)
    keys.press("down", False, now=0.0)
    assert keys.held(0.0) == ({"left", "down"}, True)
    keys.end_tick()
    assert keys.held(0.0) == (set(), False)


def test_handle_keys_maps_letters_and_detects_quit(world) -> None:
    held = PerFrameHeldKeys()
    system = InputSystem(world, held, walk_speed=1.5, run_speed=3.5)
    assert system.handle_keys(["d", "W", "x", "?"], now=0.0) is False
    assert held.held(0.0) == ({"right", "up"}, True)
    assert system.handle_keys(["a", "q"], now=0.0) is True


@pytest.mark.parametrize(
    "batches",
    [
        [["\x1b", "[", "A"]],
        [["\x1b", "[", "D", "\x1b", "[", "C"]],
        [["\x1b", "[", "1", ";", "2", "A"]],
        [["\x1b", "O", "D"]],
        [["\x1b"], ["[", "A"]],
    ],
)
def test_arrow_key_sequences_are_not_read_as_letters(world, batches) -> None:
    held = PerFrameHeldKeys()
    system = InputSystem(world, held, walk_speed=1.5, run_speed=3.5)
    for batch in batches:
        assert system.handle_keys(batch, now=0.0) is False
    assert held.held(0.0) == (set(), False)

    system.handle_keys(["d"], now=0.0)
    assert held.held(0.0) == ({"right"}, False)


def test_input_system_queues_player_movement(world) -> None:
    player_id = factory.create_player(world)
    system = InputSystem(world, PerFrameHeldKeys(), walk_speed=1.5, run_speed=3.5)
    system.handle_keys(["d"], now=0.0)
    system.update(dt=1.0, now=0.0)

    intent = world.get_component(player_id, WantsToMoveComponent)
    assert (intent.dx, intent.dy) == (1.5, 0.0)

    world.remove_component(player_id, WantsToMoveComponent)
    system.update(dt=1.0, now=0.0)
    assert world.get_component(player_id, WantsToMoveComponent) is None


def test_timeout_policy_keeps_moving_between_repeats(world) -> None:
    player_id = factory.create_player(world)
    system = InputSystem(world, TimeoutHeldKeys(0.16), walk_speed=1.5, run_speed=3.5)
    system.handle_keys(["s"], now=0.0)
    system.update(dt=0.05, now=0.05)
    assert world.get_component(player_id, WantsToMoveComponent) is not None
    world.remove_component(player_id, WantsToMoveComponent)
    system.update(dt=0.05, now=0.1)
    assert world.get_component(player_id, WantsToMoveComponent) is not None
    world.remove_component(player_id, WantsToMoveComponent)
    system.update(dt=0.1, now=0.2)
    assert world.get_component(player_id, WantsToMoveComponent) is None


def test_movement_is_unbounded_in_continuous_world(world) -> None:
    player_id = factory.create_player(world, (0.0, 0.0))
    world.add_component(player_id, WantsToMoveComponent(-500.0, 250.0))
    MovementSystem(world).update()
    pos = world.get_component(player_id, PositionComponent)
    assert (pos.x, pos.y) == (-500.0, 250.0)
    assert world.get_component(player_id, WantsToMoveComponent) is None


def test_movement_clamps_in_bounded_world(world) -> None:
    player_id = factory.create_player(world, (1.0, 1.0))
    world.add_component(player_id, WantsToMoveComponent(-5.0, 100.0))
    MovementSystem(world, bounds=(80, 25)).update()
    pos = world.get_component(player_id, PositionComponent)
    assert (pos.x, pos.y) == (0.0, 24.0)


class _State:
    camera = None


def test_camera_follows_player(world) -> None:
    factory.create_player(world, (-12.5, 7.25))
    state = _State()
    CameraSystem(world, 80, 25).update(game_state=state)
    assert state.camera == (-12.5, 7.25)
    assert viewport_origin(state.camera, 80, 25) == (-53, -5)


def test_camera_is_fixed_in_bounded_world(world) -> None:
    factory.create_player(world, (3.0, 3.0))
    state = _State()
    CameraSystem(world, 80, 25, bounded=True).update(game_state=state)
    assert viewport_origin(state.camera, 80, 25) == (0, 0)
